import json
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient
from catering.api.api_run import create_app
from catering.api.registry import SessionRegistry
from catering.infra.Catalog_Repository import CatalogCache, DictCatalogSource
from catering.infra.Session_Repository import SessionRepository
from catering.tests.sample_data import CATALOG, GAME_DAY

BIG_GAME = dict(GAME_DAY, id="big-game", name="Big Game", tier=2, base_price=180.0)


class TestCateringAPI(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        data_dir = Path(cls.tmp.name)
        (data_dir / "packages.json").write_text(json.dumps([GAME_DAY, BIG_GAME]), encoding="utf-8")
        (data_dir / "catalog.json").write_text(json.dumps(CATALOG), encoding="utf-8")
        cls.sessions_path = data_dir / "sessions.json"
        app = create_app(data_dir / "packages.json", data_dir / "catalog.json", cls.sessions_path)
        cls.client = TestClient(app)

    @classmethod
    def tearDownClass(cls):
        cls.tmp.cleanup()

    def _new_session(self, **extra):
        body = {"package_id": "game-day", "guest_count": 10}
        body.update(extra)
        resp = self.client.post('/api/sessions', json=body)
        self.assertEqual(resp.status_code, 200)
        return resp.json()["session_id"]

    def test_list_packages(self):
        resp = self.client.get('/api/packages')
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["count"], 2)
        self.assertEqual([p["id"] for p in data["packages"]], ["game-day", "big-game"])

    def test_unknown_package_and_session(self):
        resp = self.client.post('/api/sessions', json={"package_id": "nope"})
        self.assertEqual(resp.status_code, 404)
        resp = self.client.get('/api/sessions/does-not-exist/pricing')
        self.assertEqual(resp.status_code, 404)

    def test_pricing_happy_path(self):
        sid = self._new_session()
        resp = self.client.put(f'/api/sessions/{sid}/selections/dips',
                               json={"selections": [{"id": "ranch", "count": 15}, {"id": "blue-cheese", "count": 10}]})
        self.assertEqual(resp.status_code, 200)
        pricing = self.client.get(f'/api/sessions/{sid}/pricing').json()
        self.assertEqual(pricing["totals"]["subtotal"], 132.5)
        self.assertEqual(pricing["totals"]["total"], 143.1)
        self.assertEqual(pricing["totals"]["per_person_cost"], 14.31)
        summary = self.client.get(f'/api/sessions/{sid}/pricing/summary').json()
        self.assertEqual(summary["upcharge_count"], 1)

    def test_skip_and_modifications(self):
        sid = self._new_session()
        resp = self.client.post(f'/api/sessions/{sid}/skip/dips')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["skipped"])
        mods = self.client.get(f'/api/sessions/{sid}/modifications').json()
        self.assertTrue(mods["dips"]["skipped"])
        self.assertEqual(mods["dips"]["credit"], 11.25)
        resp = self.client.post(f'/api/sessions/{sid}/skip/dips', json={"skip": False})
        self.assertFalse(resp.json()["skipped"])

    def test_unknown_category_is_bad_request(self):
        sid = self._new_session()
        resp = self.client.post(f'/api/sessions/{sid}/skip/appetizers')
        self.assertEqual(resp.status_code, 400)

    def test_smart_defaults_split_and_breakdown(self):
        sid = self._new_session()
        resp = self.client.post(f'/api/sessions/{sid}/smart-defaults', json={"percentages": {"traditional": 100}})
        self.assertEqual(resp.json()["distribution"], {"boneless": 36, "bone_in": 24, "cauliflower": 0})
        resp = self.client.post(f'/api/sessions/{sid}/split', json={"unit_type": "boneless", "value": 40})
        self.assertEqual(resp.json()["distribution"]["bone_in"], 20)
        breakdown = self.client.get(f'/api/sessions/{sid}/breakdown').json()
        self.assertEqual(breakdown["wings"]["base"]["source"], "locked_baseline")
        self.assertIn("changes", breakdown["wings"])

    def test_negative_quantities_are_clamped(self):
        sid = self._new_session()
        resp = self.client.put(f'/api/sessions/{sid}/distribution',
                               json={"distribution": {"boneless": -5, "bone_in": 60}})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["config"]["distribution"]["boneless"], 0)

    def test_patch_state_and_add_ons(self):
        sid = self._new_session()
        resp = self.client.patch(f'/api/sessions/{sid}/state', json={"unit_style": "flats", "guest_count": 20})
        self.assertEqual(resp.json()["config"]["unit_style"], "flats")
        resp = self.client.put(f'/api/sessions/{sid}/add-ons/sides', json={"add_ons": [{"id": "coleslaw", "count": 1}]})
        self.assertEqual(resp.status_code, 200)
        pricing = self.client.get(f'/api/sessions/{sid}/pricing').json()
        self.assertIn("addon-sides-coleslaw", pricing["items"])
        self.assertEqual(pricing["totals"]["guest_count"], 20)

    def test_breakdown_pdf(self):
        sid = self._new_session()
        resp = self.client.get(f'/api/sessions/{sid}/breakdown.pdf')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["content-type"], "application/pdf")
        self.assertTrue(resp.content.startswith(b"%PDF"))

    def test_save_and_restore(self):
        sid = self._new_session()
        self.client.put(f'/api/sessions/{sid}/distribution', json={"distribution": {"boneless": 40, "bone_in": 20}})
        self.assertEqual(self.client.post(f'/api/sessions/{sid}/save').status_code, 200)
        saved = json.loads(self.sessions_path.read_text(encoding="utf-8"))
        self.assertEqual(saved["game-day"]["distribution"]["boneless"], 40)
        restored = self.client.post('/api/sessions', json={"package_id": "game-day", "restore": True}).json()
        self.assertEqual(restored["config"]["distribution"]["boneless"], 40)

    def test_events_feed_and_catalog_invalidate(self):
        sid = self._new_session()
        self.client.get(f'/api/sessions/{sid}/pricing')
        feed = self.client.get('/api/events').json()
        updated = [e for e in feed["events"] if e.get("source") == sid and e["type"] == "updated"]
        self.assertTrue(updated)
        cursor = feed["next_cursor"]
        resp = self.client.post('/api/catalog/invalidate')
        self.assertEqual(resp.status_code, 200)
        newer = self.client.get('/api/events', params={"since": cursor}).json()
        self.assertTrue(all(e["id"] > cursor for e in newer["events"]))
        self.assertIn("cache_cleared", [e["type"] for e in newer["events"]])

    def test_delete_session(self):
        sid = self._new_session()
        resp = self.client.delete(f'/api/sessions/{sid}')
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get(f'/api/sessions/{sid}').status_code, 404)
        self.assertEqual(self.client.delete(f'/api/sessions/{sid}').status_code, 404)

    def test_switch_package(self):
        sid = self._new_session()
        self.client.put(f'/api/sessions/{sid}/distribution', json={"distribution": {"boneless": 40, "bone_in": 20}})
        resp = self.client.put(f'/api/sessions/{sid}/package', json={"package_id": "big-game"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(body["package_id"], "big-game")
        self.assertEqual(body["config"]["distribution"]["boneless"], 30)
        self.assertEqual(body["config"]["guest_count"], 10)
        pricing = self.client.get(f'/api/sessions/{sid}/pricing').json()
        self.assertEqual(pricing["totals"]["subtotal"], 180.0)
        resp = self.client.put(f'/api/sessions/{sid}/package', json={"package_id": "nope"})
        self.assertEqual(resp.status_code, 404)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestSessionRegistry(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        data_dir = Path(self.tmp.name)
        (data_dir / "packages.json").write_text(json.dumps([GAME_DAY]), encoding="utf-8")
        self.clock = FakeClock()
        self.registry = SessionRegistry(
            data_dir / "packages.json", CatalogCache(DictCatalogSource(CATALOG)),
            SessionRepository(data_dir / "sessions.json"), debug=True, idle_seconds=60, clock=self.clock,
        )

    def tearDown(self):
        self.tmp.cleanup()

    def test_close_releases_subscriptions(self):
        sid, session = self.registry.create("game-day")
        bus = session.pricing_service.bus
        self.assertGreater(bus.subscriber_count(), 0)
        self.registry.close(sid)
        self.assertEqual(bus.subscriber_count(), 0)
        self.assertEqual(len(self.registry), 0)
        self.assertEqual(session.store.subscriber_count(), 0)
        with self.assertRaises(KeyError):
            self.registry.get(sid)

    def test_idle_sessions_are_evicted(self):
        stale, _ = self.registry.create("game-day")
        self.clock.now = 50
        fresh, _ = self.registry.create("game-day")
        self.clock.now = 90
        self.registry.get(fresh)
        self.assertEqual(self.registry.evict_idle(), [stale])
        self.assertEqual(len(self.registry), 1)
        self.clock.now = 200
        self.registry.create("game-day")
        self.assertEqual(len(self.registry), 1)


if __name__ == "__main__":
    unittest.main()
