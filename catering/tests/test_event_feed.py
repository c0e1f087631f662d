import unittest
from catering.domain.CurrentConfig import CurrentConfig
from catering.events.Event_Bus import EventBus
from catering.events.event_helpers import attach_debug_listener, describe_event
from catering.events.web_observers import EventFeed
from catering.logic.pricing.aggregator import recalculate
from catering.tests.sample_data import CATALOG, game_day_package


class TestEventFeed(unittest.TestCase):

    def setUp(self):
        self.bus = EventBus()
        self.feed = EventFeed(max_events=3)
        self.detach = self.feed.attach(self.bus, source="s1")

    def test_records_pricing_events_with_cursor(self):
        self.bus.publish("error", {"error": "boom"})
        self.bus.publish("config.distribution", {"path": "config.distribution"})
        snapshot = self.feed.get_events()
        self.assertEqual(len(snapshot["events"]), 1)
        event = snapshot["events"][0]
        self.assertEqual((event["type"], event["source"], event["error"]), ("error", "s1", "boom"))
        self.assertEqual(snapshot["next_cursor"], event["id"])
        self.assertEqual(self.feed.get_events(since=event["id"])["events"], [])

    def test_ring_buffer_is_capped(self):
        for _ in range(5):
            self.bus.publish("cache_cleared", None)
        events = self.feed.get_events()["events"]
        self.assertEqual([e["id"] for e in events], [3, 4, 5])

    def test_detach(self):
        self.detach()
        self.bus.publish("cache_cleared", None)
        self.assertEqual(self.feed.get_events(), {"events": [], "next_cursor": 0})

    def test_describe_pricing_result(self):
        package = game_day_package()
        config = CurrentConfig.from_package(package)
        config.guest_count = 10
        described = describe_event("updated", recalculate(package, config, CATALOG))
        self.assertEqual(described["total"], 135.0)
        self.assertEqual(described["per_person_cost"], 13.5)
        self.assertEqual(described["warnings"], [])


if __name__ == "__main__":
    unittest.main()


class TestDebugListener(unittest.TestCase):

    def test_logs_every_event_until_detached(self):
        bus = EventBus()
        detach = attach_debug_listener(bus)
        with self.assertLogs("catering.events.event_helpers", level="DEBUG") as logs:
            bus.publish("error", {"error": "boom"})
        self.assertIn("[EVENT DEBUG] error: {'error': 'boom'}", logs.output[0])
        detach()
        with self.assertNoLogs("catering.events.event_helpers", level="DEBUG"):
            bus.publish("error", {"error": "again"})
