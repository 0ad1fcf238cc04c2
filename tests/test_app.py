import unittest

from fastapi.testclient import TestClient

from gpakit.app import app


class AppTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(app)

    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_engineering(self):
        response = self.client.post(
            "/gpa/engineering",
            json={
                "courses": [
                    {"label": "Circuits", "credits": 3, "grade": "A-", "categories": ["Engineering Core"], "sequence": 1},
                    {"label": "Writing", "credits": 4, "grade": "B+", "categories": ["Electives"], "sequence": 2},
                ],
                "credit_cap": 5,
            },
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["cumulative_gpa"], 3.47)
        self.assertEqual(body["major_gpa"], 3.7)
        self.assertEqual(body["trailing_credits"], 5)
        self.assertEqual(body["trailing_gpa"], round((4 * 3.3 + 1 * 3.7) / 5, 2))
        self.assertEqual(
            body["standings"],
            {"major": "Highly Competitive", "technical": None, "cumulative": "Competitive", "trailing": "Competitive"},
        )
        self.assertEqual(body["credits_remaining"], 113)

    def test_aggregate_with_filters(self):
        response = self.client.post(
            "/gpa/aggregate",
            json={
                "entries": [
                    {"credits": "3", "grade": "B", "categories": ["Technical", "Science"]},
                    {"credits": "", "grade": "A", "categories": ["Technical"]},
                    {"credits": 3, "grade": "A", "categories": ["Arts"]},
                ],
                "filters": {"technical": ["Technical"], "science": ["Science"], "music": ["Music"]},
                "scheme": "letter",
            },
        )
        body = response.json()
        self.assertEqual(body["categories"]["technical"], {"gpa": 3.0, "credits": 3.0})
        self.assertIsNone(body["categories"]["music"]["gpa"])
        self.assertEqual(body["cumulative"]["gpa"], 3.5)

    def test_uk(self):
        response = self.client.post(
            "/classification/uk",
            json={"modules": [{"credits": 20, "percentage": 71, "year": 3}], "profile": "manchester"},
        )
        body = response.json()
        self.assertEqual(body["classification"], "First Class Honours")
        self.assertEqual(body["us_gpa"], 3.7)

    def test_uk_nottingham(self):
        modules = [
            {"credits": 60, "percentage": 60, "year": 2},
            {"credits": 30, "percentage": 76, "year": 3},
        ]
        body = self.client.post("/classification/uk", json={"modules": modules, "profile": "nottingham"}).json()
        self.assertEqual(body["weighted_percentage"], 70.67)
        self.assertEqual(body["classification"], "First Class Honours")
        self.assertEqual(body["us_gpa"], 3.85)
        self.assertEqual(body["gpa_range"], [3.7, 4.0])

    def test_classify(self):
        body = self.client.post("/classify", json={"percentage": 69.5, "scale": "uk"}).json()
        self.assertEqual(body["label"], "Upper Second Class (2:1)")
        self.assertTrue(body["borderline"])
        self.assertFalse(body["clamped"])

    def test_classify_clamps(self):
        body = self.client.post("/classify", json={"percentage": 120}).json()
        self.assertTrue(body["clamped"])
        self.assertEqual(body["label"], "First Class Honours")

    def test_classify_requires_number(self):
        response = self.client.post("/classify", json={"percentage": "n/a"})
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()
