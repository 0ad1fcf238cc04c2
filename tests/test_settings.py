import os
import unittest
from unittest.mock import patch

from gpakit.config.settings import SettingsError, _env_float, _env_int


class SettingsTests(unittest.TestCase):
    def test_defaults_used_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(_env_float("GPAKIT_TRAILING_CREDIT_CAP", "60"), 60.0)
            self.assertEqual(_env_int("GPAKIT_ROUND_TO", "2"), 2)

    def test_reads_environment(self):
        with patch.dict(os.environ, {"GPAKIT_TRAILING_CREDIT_CAP": "45.5"}):
            self.assertEqual(_env_float("GPAKIT_TRAILING_CREDIT_CAP", "60"), 45.5)

    def test_malformed_value_names_the_variable(self):
        with patch.dict(os.environ, {"GPAKIT_ROUND_TO": "two"}):
            with self.assertRaisesRegex(SettingsError, "GPAKIT_ROUND_TO"):
                _env_int("GPAKIT_ROUND_TO", "2")
        with patch.dict(os.environ, {"GPAKIT_BORDERLINE_MARGIN": "1,5"}):
            with self.assertRaisesRegex(SettingsError, "GPAKIT_BORDERLINE_MARGIN"):
                _env_float("GPAKIT_BORDERLINE_MARGIN", "1.0")


if __name__ == "__main__":
    unittest.main()
