import unittest

from log_governance.core.exceptions import ConfigurationError, InvariantViolation
from log_governance.entities.enums import SeverityLevel
from log_governance.services.performance_classifier import classify, is_slow
from log_governance.services.performance_thresholds import (
    DEFAULT_PERFORMANCE_THRESHOLDS,
    PerformanceThresholdTable,
)


class TestPerformanceThresholds(unittest.TestCase):
    def test_canonical_thresholds(self):
        table = DEFAULT_PERFORMANCE_THRESHOLDS
        self.assertEqual(table.threshold("database"), 100)
        self.assertEqual(table.threshold("api"), 1000)
        self.assertEqual(table.threshold("operation"), 500)

    def test_unknown_class_strict_lookup_fails(self):
        with self.assertRaises(ConfigurationError):
            DEFAULT_PERFORMANCE_THRESHOLDS.threshold("queue")
        self.assertIsNone(DEFAULT_PERFORMANCE_THRESHOLDS.get("queue"))

    def test_non_positive_thresholds_rejected(self):
        with self.assertRaises(InvariantViolation) as ctx:
            PerformanceThresholdTable.from_mapping({"api": 0, "database": -5})
        self.assertEqual(len(ctx.exception.violations), 2)


class TestClassify(unittest.TestCase):
    def test_slow_api_call_escalated(self):
        self.assertGreaterEqual(classify("api", 1500, SeverityLevel.INFO), SeverityLevel.WARNING)
        self.assertEqual(classify("api", 1200, "info"), SeverityLevel.WARNING)

    def test_fast_call_unchanged(self):
        self.assertEqual(classify("api", 500, SeverityLevel.INFO), SeverityLevel.INFO)

    def test_threshold_is_exclusive(self):
        self.assertEqual(classify("database", 100, SeverityLevel.DEBUG), SeverityLevel.DEBUG)
        self.assertEqual(classify("database", 100.5, SeverityLevel.DEBUG), SeverityLevel.WARNING)

    def test_never_downgrades(self):
        self.assertEqual(classify("database", 50, SeverityLevel.ERROR), SeverityLevel.ERROR)
        self.assertEqual(classify("database", 5000, SeverityLevel.CRITICAL), SeverityLevel.CRITICAL)

    def test_missing_or_unknown_class_passes_through(self):
        self.assertEqual(classify(None, 99999, SeverityLevel.INFO), SeverityLevel.INFO)
        self.assertEqual(classify("queue", 99999, SeverityLevel.INFO), SeverityLevel.INFO)
        self.assertEqual(classify("api", None, SeverityLevel.DEBUG), SeverityLevel.DEBUG)

    def test_custom_table(self):
        table = PerformanceThresholdTable.from_mapping({"queue": 10})
        self.assertTrue(is_slow("queue", 11, table))
        self.assertEqual(classify("queue", 11, "info", table), SeverityLevel.WARNING)


if __name__ == "__main__":
    unittest.main()
