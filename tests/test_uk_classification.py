import unittest

from gpakit.services.uk_classification import NOTTINGHAM_PROFILE, UkClassificationService


class UkClassificationTests(unittest.TestCase):
    def setUp(self):
        self.service = UkClassificationService()
        self.rows = [
            {"label": "Foundations", "credits": 20, "percentage": 65, "year": 1},
            {"label": "Methods", "credits": 20, "percentage": 72, "year": 2},
            {"label": "Dissertation", "credits": 40, "percentage": 68, "year": 3},
        ]

    def test_year_weighted_percentage(self):
        report = self.service.evaluate_rows(self.rows)
        self.assertAlmostEqual(report.weighted_percentage.gpa, 2052 / 30)
        self.assertEqual(report.classification.label, "Upper Second Class (2:1)")
        self.assertFalse(report.borderline)

    def test_us_gpa_converts_each_module_before_aggregating(self):
        report = self.service.evaluate_rows(self.rows)
        self.assertAlmostEqual(report.us_gpa, (3.4 * 4 + 3.7 * 6 + 3.6 * 20) / 30)

    def test_year_averages_and_credits(self):
        report = self.service.evaluate_rows(self.rows)
        self.assertEqual({year: r.gpa for year, r in report.year_averages.items()}, {1: 65, 2: 72, 3: 68})
        self.assertEqual(report.total_credits, 80)

    def test_borderline(self):
        rows = self.rows[:2] + [{"credits": 40, "percentage": 69.4, "year": 3}]
        report = self.service.evaluate_rows(rows)
        self.assertEqual(report.classification.label, "Upper Second Class (2:1)")
        self.assertTrue(report.borderline)

    def test_nottingham_ignores_first_year(self):
        service = UkClassificationService(NOTTINGHAM_PROFILE)
        rows = [
            {"credits": 60, "percentage": 20, "year": 1},
            {"credits": 30, "percentage": 60, "year": 2},
            {"credits": 30, "percentage": 76, "year": 3},
        ]
        report = service.evaluate_rows(rows)
        self.assertAlmostEqual(report.weighted_percentage.gpa, (60 * 10 + 76 * 20) / 30)
        self.assertEqual(report.classification.label, "First Class Honours")

    def test_nottingham_weights_year_averages_not_credits(self):
        service = UkClassificationService(NOTTINGHAM_PROFILE)
        rows = [
            {"credits": 60, "percentage": 60, "year": 2},
            {"credits": 30, "percentage": 76, "year": 3},
        ]
        report = service.evaluate_rows(rows)
        self.assertAlmostEqual(report.weighted_percentage.gpa, 60 / 3 + 76 * 2 / 3)
        self.assertEqual(report.classification.label, "First Class Honours")
        self.assertEqual(report.us_gpa, 3.85)
        self.assertEqual(report.to_dict()["gpa_range"], [3.7, 4.0])

    def test_nottingham_us_gpa_from_combined_percentage(self):
        service = UkClassificationService.from_settings("nottingham")
        rows = [
            {"credits": 20, "percentage": 80, "year": 3},
            {"credits": 20, "percentage": 55, "year": 3},
            {"credits": 20, "percentage": 60, "year": 2},
        ]
        report = service.evaluate_rows(rows)
        # one band point for the degree, not an average of per-module points
        self.assertAlmostEqual(report.weighted_percentage.gpa, 20 + 67.5 * 2 / 3)
        self.assertEqual(report.us_gpa, 3.35)

    def test_nottingham_below_pass(self):
        service = UkClassificationService(NOTTINGHAM_PROFILE)
        rows = [{"credits": 30, "percentage": 30, "year": 2}, {"credits": 30, "percentage": 36, "year": 3}]
        report = service.evaluate_rows(rows)
        self.assertEqual(report.classification.label, "Fail")
        self.assertEqual(report.us_gpa, 0.5)
        self.assertEqual(report.to_dict()["gpa_range"], [0.0, 1.0])

    def test_nottingham_borderline(self):
        service = UkClassificationService(NOTTINGHAM_PROFILE)
        report = service.evaluate_rows([{"credits": 30, "percentage": 69.5, "year": 3}])
        self.assertEqual(report.classification.label, "Upper Second Class Honours (2:1)")
        self.assertTrue(report.borderline)

    def test_no_modules_has_no_us_gpa(self):
        service = UkClassificationService(NOTTINGHAM_PROFILE)
        report = service.evaluate_rows([{"credits": 20, "percentage": "", "year": 3}])
        self.assertIsNone(report.us_gpa)
        self.assertIsNone(report.to_dict()["us_gpa"])

    def test_percentage_clamped_with_warning(self):
        report = self.service.evaluate_rows([{"credits": 20, "percentage": 105, "year": 3}])
        self.assertEqual(report.weighted_percentage.gpa, 100)
        self.assertEqual(report.warnings, ["entries[0].percentage clamped to 100"])

    def test_no_modules_is_undefined(self):
        report = self.service.evaluate_rows([{"credits": 20, "percentage": "", "year": 3}])
        self.assertFalse(report.weighted_percentage.is_defined)
        self.assertIsNone(report.classification)
        self.assertFalse(report.borderline)
        self.assertIsNone(report.to_dict()["weighted_percentage"])

    def test_unknown_profile(self):
        with self.assertRaises(ValueError):
            UkClassificationService.from_settings("oxford")


if __name__ == "__main__":
    unittest.main()
