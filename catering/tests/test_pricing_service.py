import asyncio
import tempfile
import unittest
from pathlib import Path

from catering.domain.CurrentConfig import CurrentConfig
from catering.infra.Catalog_Repository import CatalogCache, DictCatalogSource, JsonCatalogSource
from catering.infra.State_Store import StateStore
from catering.logic.pricing.scheduler import Debouncer
from catering.logic.pricing.service import PricingService
from catering.tests.sample_data import CATALOG, game_day_package
from catering.utilities.errors import CatalogError


class TestDebouncer(unittest.TestCase):

    def test_rapid_triggers_collapse_into_one_run(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), delay=0.05)

        async def scenario():
            for _ in range(5):
                debouncer.trigger()
                await asyncio.sleep(0)
            await asyncio.sleep(0.2)

        asyncio.run(scenario())
        self.assertEqual(len(calls), 1)
        self.assertFalse(debouncer.pending)

    def test_without_loop_flush_runs_pending_work(self):
        calls = []
        debouncer = Debouncer(lambda: calls.append(1), delay=10)
        debouncer.trigger()
        debouncer.trigger()
        self.assertTrue(debouncer.pending)
        self.assertEqual(calls, [])
        self.assertTrue(debouncer.flush())
        self.assertFalse(debouncer.flush())
        self.assertEqual(calls, [1])


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestCatalogCache(unittest.TestCase):

    def test_ttl_and_invalidate(self):
        source = DictCatalogSource(CATALOG)
        clock = FakeClock()
        cache = CatalogCache(source, ttl=60, clock=clock)
        cache.get_items_by_category("sauces")
        cache.get_items_by_category("sauces")
        self.assertEqual(source.reads, 1)
        clock.now = 61
        cache.get_items_by_category("sauces")
        self.assertEqual(source.reads, 2)
        cache.invalidate()
        cache.get_items_by_category("sauces")
        self.assertEqual(source.reads, 3)

    def test_inactive_items_are_filtered(self):
        cache = CatalogCache(DictCatalogSource(CATALOG))
        ids = [i["id"] for i in cache.get_items_by_category("sides")]
        self.assertEqual(ids, ["coleslaw"])

    def test_missing_json_file_raises_catalog_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            source = JsonCatalogSource(Path(tmp) / "missing.json")
            with self.assertRaises(CatalogError):
                source.get_items_by_category("dips")


class FailingSource:
    def get_items_by_category(self, category, tier=None):
        raise CatalogError("catalog offline")


class BrokenSource:
    def get_items_by_category(self, category, tier=None):
        raise RuntimeError("connection reset")


class TestPricingService(unittest.TestCase):

    def setUp(self):
        self.package = game_day_package()
        config = CurrentConfig.from_package(self.package)
        config.guest_count = 10
        self.store = StateStore({"package_id": self.package.id, "config": config.to_dict()})
        self.catalog = CatalogCache(DictCatalogSource(CATALOG))
        self.service = PricingService(self.package, self.store, self.catalog, delay=0.01)
        self.events = []
        self.service.on_pricing_change("*", lambda name, payload: self.events.append(name))
        self.service.start()

    def test_writes_are_coalesced_until_flush(self):
        self.store.update_state("config.distribution.boneless", 35)
        self.store.update_state("config.distribution.bone_in", 25)
        self.store.update_state("config.guest_count", 12)
        self.assertEqual(self.events, [])
        result = self.service.flush()
        self.assertEqual(self.events, ["updated"])
        self.assertEqual(self.service.debouncer.runs, 1)
        self.assertEqual(result.totals.guest_count, 12)
        self.assertIs(self.service.get_current_pricing(), result)

    def test_recompute_reads_latest_state(self):
        self.store.update_state("config.pack_selections", {"dips": [{"id": "ranch", "count": 25}]})
        result = self.service.flush()
        self.assertEqual(result.totals.to_dict()["total"], 143.1)

    def test_bad_state_publishes_error(self):
        self.store.update_state("config.skip", {"appetizers": True})
        self.service.flush()
        self.assertIn("error", self.events)
        self.assertIsNone(self.service.get_current_pricing())

    def test_clear_pricing_cache(self):
        self.service.flush()
        self.service.clear_pricing_cache()
        self.assertIsNone(self.service.get_current_pricing())
        self.assertIn("cache_cleared", self.events)
        self.assertIsNotNone(self.service.flush())

    def test_stop_unsubscribes(self):
        self.service.flush()
        self.service.stop()
        self.store.update_state("config.guest_count", 30)
        self.assertFalse(self.service.debouncer.pending)

    def test_catalog_failure_degrades_to_no_items(self):
        service = PricingService(self.package, self.store, CatalogCache(FailingSource()))
        with self.assertLogs("catering.logic.pricing.service", level="WARNING"):
            result = service.recompute()
        self.assertFalse(any(i.startswith("sauce-") for i in result.items))
        self.assertEqual(result.totals.to_dict()["subtotal"], 125.0)

    def test_unexpected_source_error_degrades_to_no_items(self):
        service = PricingService(self.package, self.store, CatalogCache(BrokenSource()))
        with self.assertLogs("catering.logic.pricing.service", level="ERROR"):
            result = service.recompute()
        self.assertFalse(any(i.startswith("sauce-") for i in result.items))
        self.assertEqual(result.totals.to_dict()["subtotal"], 125.0)

    def test_unreadable_catalog_file_degrades_to_no_items(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "catalog.json"
            path.write_bytes(b'{"sauces": [{"id": "\xff\xfe"}]}')
            service = PricingService(self.package, self.store, CatalogCache(JsonCatalogSource(path)))
            with self.assertLogs("catering.logic.pricing.service", level="WARNING"):
                result = service.recompute()
        self.assertEqual(result.totals.to_dict()["subtotal"], 125.0)

    def test_unreadable_catalog_file_raises_catalog_error(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(CatalogError):
                JsonCatalogSource(Path(tmp)).get_items_by_category("dips")


if __name__ == "__main__":
    unittest.main()
