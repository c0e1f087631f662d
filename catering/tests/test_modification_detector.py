import copy
import unittest
from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.logic.modifications.detector import detect_modifications, modifications_to_dict
from catering.tests.sample_data import game_day_package


class TestModificationDetector(unittest.TestCase):

    def setUp(self):
        self.package = game_day_package()
        self.config = CurrentConfig.from_package(self.package)

    def test_defaults_are_unmodified(self):
        records = detect_modifications(self.package, self.config)
        self.assertEqual(set(records), set(Category))
        for record in records.values():
            self.assertFalse(record.is_modified)
            self.assertEqual(record.details, "Package default")

    def test_wing_distribution_change(self):
        self.config.distribution = {"boneless": 40, "bone_in": 20}
        record = detect_modifications(self.package, self.config)[Category.WINGS]
        self.assertTrue(record.is_modified)
        self.assertEqual(record.changes, [
            {"type": "boneless", "from": 30, "to": 40, "delta": 10, "is_new": False},
            {"type": "bone_in", "from": 30, "to": 20, "delta": -10, "is_new": False},
        ])

    def test_new_unit_type_is_flagged(self):
        self.config.distribution = {"boneless": 30, "bone_in": 20, "cauliflower": 10}
        record = detect_modifications(self.package, self.config)[Category.WINGS]
        cauliflower = [c for c in record.changes if c["type"] == "cauliflower"][0]
        self.assertTrue(cauliflower["is_new"])

    def test_style_change(self):
        self.config.unit_style = "flats"
        record = detect_modifications(self.package, self.config)[Category.WINGS]
        self.assertEqual(record.changes[0]["type"], "style")

    def test_skip_short_circuits_with_credit(self):
        self.config.skip = {Category.DIPS: True}
        record = detect_modifications(self.package, self.config)[Category.DIPS]
        self.assertTrue(record.is_modified)
        self.assertTrue(record.skipped)
        self.assertAlmostEqual(record.credit, 11.25)
        self.assertEqual(record.changes, [])
        self.assertEqual(record.details, "Dips skipped by customer request (credit $11.25)")

    def test_sauce_method_change(self):
        self.config.assignments[0]["application_method"] = "on_the_side"
        record = detect_modifications(self.package, self.config)[Category.SAUCES]
        self.assertTrue(record.is_modified)
        self.assertEqual(record.changes[0]["type"], "boneless:buffalo:method")

    def test_add_ons_are_reported(self):
        self.config.add_ons = {Category.SIDES: [{"id": "coleslaw", "count": 2}]}
        record = detect_modifications(self.package, self.config)[Category.SIDES]
        self.assertTrue(record.is_modified)
        self.assertEqual(record.changes[0]["type"], "add_on:coleslaw")
        self.assertTrue(record.changes[0]["is_new"])

    def test_detection_is_pure(self):
        self.config.distribution = {"boneless": 45, "bone_in": 15}
        self.config.pack_selections[Category.DIPS] = [{"id": "ranch", "count": 20}]
        package_before = copy.deepcopy(self.package.to_dict())
        config_before = copy.deepcopy(self.config.to_dict())
        first = modifications_to_dict(detect_modifications(self.package, self.config))
        second = modifications_to_dict(detect_modifications(self.package, self.config))
        self.assertEqual(first, second)
        self.assertEqual(self.package.to_dict(), package_before)
        self.assertEqual(self.config.to_dict(), config_before)


if __name__ == "__main__":
    unittest.main()
