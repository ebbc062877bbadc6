import unittest

from core.exceptions import ConfigurationError
from core.scorer.policy import validate_policy, MAX_ROUNDING_DECIMALS


class TestValidatePolicy(unittest.TestCase):

    def test_defaults_are_valid(self):
        validate_policy(5, 1, 1, 2)

    def test_trimming_disabled_allows_any_threshold(self):
        validate_policy(0, 0, 0, 0)

    def test_negative_values_rejected(self):
        for args in [(-1, 1, 1, 2), (5, -1, 1, 2), (5, 1, -1, 2), (5, 1, 1, -1)]:
            with self.subTest(args=args):
                with self.assertRaises(ConfigurationError):
                    validate_policy(*args)

    def test_rounding_beyond_storage_precision_rejected(self):
        validate_policy(5, 1, 1, MAX_ROUNDING_DECIMALS)
        with self.assertRaises(ConfigurationError):
            validate_policy(5, 1, 1, MAX_ROUNDING_DECIMALS + 1)

    def test_trim_overflow_rejected(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_policy(3, 2, 1, 2)
        self.assertIn("trimming starts at 3", ctx.exception.message)

    def test_trim_just_fits(self):
        validate_policy(4, 2, 1, 2)
