import tempfile
import unittest
from pathlib import Path

from catering.domain.Category import Category
from catering.infra.Catalog_Repository import CatalogCache, DictCatalogSource
from catering.infra.Session_Repository import SessionRepository
from catering.logic.session import CateringSession
from catering.tests.sample_data import CATALOG, game_day_package
from catering.utilities.constants import REMOVAL_CREDIT


class TestCateringSession(unittest.TestCase):

    def setUp(self):
        self.package = game_day_package()
        self.session = CateringSession(self.package, catalog=CatalogCache(DictCatalogSource(CATALOG)))
        self.session.set_guest_count(10)

    def tearDown(self):
        self.session.close()

    def test_skip_clears_selections_in_one_write(self):
        seen = []
        self.session.store.on_state_change("config.*", lambda path, change: seen.append(change["value"]))
        self.assertTrue(self.session.toggle_skip("dips"))
        self.assertEqual(len(seen), 1)
        self.assertTrue(seen[0]["skip"]["dips"])
        self.assertEqual(seen[0]["pack_selections"]["dips"], [])
        config = self.session.config
        self.assertTrue(config.is_skipped(Category.DIPS))
        self.assertEqual(config.pack_selections[Category.DIPS], [])

    def test_skip_credit_in_modifications_and_pricing(self):
        self.session.toggle_skip("dips")
        record = self.session.modifications()[Category.DIPS]
        self.assertAlmostEqual(record.credit, 11.25)
        credits = self.session.pricing().modifiers_of(REMOVAL_CREDIT)
        self.assertAlmostEqual(credits[0].amount, 11.25)

    def test_unskip_restores_defaults(self):
        self.session.toggle_skip("dips")
        self.assertFalse(self.session.toggle_skip("dips"))
        self.assertEqual(self.session.config.selections_for(Category.DIPS, self.package),
                         self.package.included_pack("dips").default_selections)

    def test_smart_defaults_lock_baseline(self):
        distribution = self.session.apply_smart_defaults({"traditional": 100})
        self.assertEqual(distribution, {"boneless": 36, "bone_in": 24, "cauliflower": 0})
        self.assertFalse(self.session.modifications()[Category.WINGS].is_modified)
        self.session.adjust_split("boneless", 40)
        config = self.session.config
        self.assertEqual(config.distribution["bone_in"], 20)
        self.assertEqual(config.locked_distribution["boneless"], 36)
        self.assertTrue(self.session.modifications()[Category.WINGS].is_modified)

    def test_pricing_reflects_latest_edit(self):
        self.session.set_pack_selections("dips", [{"id": "ranch", "count": 25}])
        totals = self.session.pricing().totals.to_dict()
        self.assertEqual(totals["total"], 143.1)
        self.assertEqual(totals["per_person_cost"], 14.31)

    def test_invalid_unit_style(self):
        with self.assertRaises(ValueError):
            self.session.set_unit_style("wingettes")

    def test_unknown_category(self):
        with self.assertRaises(ValueError):
            self.session.toggle_skip("appetizers")

    def test_json_round_trip(self):
        self.session.set_distribution({"boneless": 40, "bone_in": 20})
        self.session.toggle_skip("dips")
        restored = CateringSession.from_json(self.package, self.session.to_json(),
                                             catalog=CatalogCache(DictCatalogSource(CATALOG)))
        self.assertEqual(restored.pricing().totals, self.session.pricing().totals)
        restored.close()

    def test_breakdown_containers_use_catalog_sauce(self):
        self.session.set_assignments([
            {"unit_type": "boneless", "variant_id": "garlic-parm", "count": 47, "application_method": "on_the_side"},
        ])
        kitchen = self.session.breakdown()["wings"]["changes"]["sauces"][0]["containers"]["count"]
        priced = self.session.pricing().items["sauce-boneless-garlic-parm"].metadata["containers"]
        self.assertEqual(kitchen, 5)
        self.assertEqual(kitchen, priced)

    def test_switch_package_resets_config_and_catalog(self):
        self.session.set_distribution({"boneless": 40, "bone_in": 20})
        self.session.pricing()
        source = self.session.pricing_service.catalog.source
        reads = source.reads
        bigger = game_day_package(id="big-game", tier=2, base_price=180.0, total_units=100,
                                  default_distribution={"boneless": 50, "bone_in": 50})
        self.session.switch_package(bigger)
        config = self.session.config
        self.assertEqual(config.distribution, {"boneless": 50, "bone_in": 50})
        self.assertEqual(config.guest_count, 10)
        self.assertEqual(self.session.store.get_state("package_id"), "big-game")
        totals = self.session.pricing().totals.to_dict()
        self.assertEqual(totals["subtotal"], 180.0)
        self.assertGreater(source.reads, reads)

    def test_close_stops_repricing(self):
        self.session.pricing()
        self.session.close()
        self.session.set_guest_count(40)
        self.assertFalse(self.session.pricing_service.debouncer.pending)


class TestSessionRepository(unittest.TestCase):

    def test_save_load_delete(self):
        with tempfile.TemporaryDirectory() as tmp:
            repo = SessionRepository(Path(tmp) / "sessions.json")
            self.assertIsNone(repo.load("game-day"))
            repo.save("game-day", {"guest_count": 12})
            self.assertEqual(repo.load("game-day"), {"guest_count": 12})
            self.assertTrue(repo.delete("game-day"))
            self.assertFalse(repo.delete("game-day"))

    def test_corrupt_file_reads_as_empty(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "sessions.json"
            path.write_text("{not json", encoding="utf-8")
            self.assertIsNone(SessionRepository(path).load("game-day"))


if __name__ == "__main__":
    unittest.main()
