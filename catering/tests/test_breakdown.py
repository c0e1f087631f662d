import unittest
from catering.domain.Category import Category
from catering.domain.CurrentConfig import CurrentConfig
from catering.logic.breakdown.assembler import build_breakdown
from catering.logic.defaults.smart_defaults import lock_baseline, rebalance_split
from catering.logic.modifications.detector import detect_modifications
from catering.logic.pricing.aggregator import recalculate
from catering.tests.sample_data import CATALOG, game_day_package


def _breakdown(package, config):
    baseline = package.with_baseline(config.locked_distribution)
    return build_breakdown(baseline, config, detect_modifications(baseline, config))


class TestBreakdownAssembler(unittest.TestCase):

    def setUp(self):
        self.package = game_day_package()
        self.config = CurrentConfig.from_package(self.package)

    def test_unmodified_categories_have_no_changes_block(self):
        breakdown = _breakdown(self.package, self.config)
        self.assertEqual(list(breakdown), ["wings", "dips"])
        self.assertNotIn("changes", breakdown["wings"])
        self.assertNotIn("changes", breakdown["dips"])
        self.assertEqual(breakdown["wings"]["base"]["source"], "package_default")
        self.assertEqual(breakdown["dips"]["base"]["bundle"]["packs_needed"], 3)

    def test_locked_baseline_drives_base_and_shares(self):
        self.config.locked_baseline = lock_baseline(60, {"traditional": 80, "plant_based": 20})
        self.assertEqual(self.config.locked_distribution, {"boneless": 29, "bone_in": 19, "cauliflower": 12})
        self.config.distribution = rebalance_split(self.config.locked_distribution, self.config.locked_baseline,
                                                   "boneless", 30)
        breakdown = _breakdown(self.package, self.config)
        wings = breakdown["wings"]
        self.assertEqual(wings["base"]["source"], "locked_baseline")
        self.assertEqual(wings["base"]["units"], {"boneless": 29, "bone_in": 19, "cauliflower": 12})
        groups = wings["changes"]["groups"]["traditional"]
        self.assertEqual(groups["locked_total"], 48)
        self.assertEqual(groups["allocated"], 48)
        self.assertEqual(groups["unallocated"], 0)
        self.assertEqual(groups["shares"], {"boneless": 0.625, "bone_in": 0.375})

    def test_locked_baseline_without_edits_is_unmodified(self):
        locked = lock_baseline(60, {"traditional": 100})
        self.config.locked_baseline = locked
        self.config.distribution = dict(locked["distribution"])
        breakdown = _breakdown(self.package, self.config)
        self.assertNotIn("changes", breakdown["wings"])

    def test_skipped_category(self):
        self.config.skip[Category.DIPS] = True
        self.config.pack_selections[Category.DIPS] = []
        changes = _breakdown(self.package, self.config)["dips"]["changes"]
        self.assertTrue(changes["skipped"])
        self.assertEqual(changes["selections"], [])
        self.assertEqual(changes["credit"], 11.25)

    def test_changed_dips_are_rebundled(self):
        self.config.pack_selections[Category.DIPS] = [{"id": "ranch", "count": 12}]
        changes = _breakdown(self.package, self.config)["dips"]["changes"]
        self.assertEqual(changes["bundle"]["packs_needed"], 3)
        self.assertEqual(changes["bundle"]["extras"], 3)

    def test_on_the_side_sauce_containers(self):
        self.config.assignments = [
            {"unit_type": "boneless", "variant_id": "ranch-drizzle", "count": 47,
             "application_method": "on_the_side", "variant_info": {"category": "creamy"}},
        ]
        wings = _breakdown(self.package, self.config)["wings"]
        sauces = wings["changes"]["sauces"]
        self.assertEqual(sauces[0]["containers"]["count"], 5)
        self.assertIn("sauce_changes", wings["changes"])

    def test_container_size_comes_from_catalog(self):
        self.config.assignments = [
            {"unit_type": "boneless", "variant_id": "garlic-parm", "count": 47, "application_method": "on_the_side"},
        ]
        baseline = self.package.with_baseline(self.config.locked_distribution)
        breakdown = build_breakdown(baseline, self.config, detect_modifications(baseline, self.config), CATALOG)
        containers = breakdown["wings"]["changes"]["sauces"][0]["containers"]
        self.assertEqual(containers["units_per_container"], 10)
        self.assertEqual(containers["count"], 5)

    def test_kitchen_containers_match_pricing(self):
        self.config.assignments = [
            {"unit_type": "boneless", "variant_id": "garlic-parm", "count": 47, "application_method": "on_the_side"},
            {"unit_type": "bone_in", "variant_id": "bbq", "count": 30, "application_method": "on_the_side"},
        ]
        baseline = self.package.with_baseline(self.config.locked_distribution)
        breakdown = build_breakdown(baseline, self.config, detect_modifications(baseline, self.config), CATALOG)
        kitchen = {s["variant_id"]: s["containers"]["count"] for s in breakdown["wings"]["changes"]["sauces"]}
        priced = recalculate(self.package, self.config, CATALOG).items
        self.assertEqual(kitchen["garlic-parm"], priced["sauce-boneless-garlic-parm"].metadata["containers"])
        self.assertEqual(kitchen["bbq"], priced["sauce-bone_in-bbq"].metadata["containers"])

    def test_add_ons_surface_in_their_category(self):
        self.config.add_ons = {Category.SIDES: [{"id": "coleslaw", "count": 2}]}
        sides = _breakdown(self.package, self.config)["sides"]
        self.assertEqual(sides["changes"]["add_ons"], [{"id": "coleslaw", "count": 2}])


if __name__ == "__main__":
    unittest.main()
