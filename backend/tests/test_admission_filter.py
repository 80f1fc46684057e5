import unittest

from log_governance.entities.enums import EventCategory, SeverityLevel
from log_governance.services.admission_filter import should_admit

ALL_CATEGORIES = [category.value for category in EventCategory] + ["inventory_sync"]
AUDIT_CATEGORIES = ["security", "system_action", "critical_operation"]


class TestAdmissionFilter(unittest.TestCase):
    def test_development_admits_everything(self):
        for level in SeverityLevel:
            for category in ALL_CATEGORIES:
                self.assertTrue(should_admit("development", level, category), (level, category))

    def test_non_production_environments_admit_everything(self):
        self.assertTrue(should_admit("staging", SeverityLevel.DEBUG, "user_action"))

    def test_audit_categories_always_admitted(self):
        for environment in ("production", "development"):
            for level in SeverityLevel:
                for category in AUDIT_CATEGORIES:
                    self.assertTrue(should_admit(environment, level, category))

    def test_production_drops_info_user_actions(self):
        self.assertFalse(should_admit("production", SeverityLevel.INFO, "user_action"))
        self.assertFalse(should_admit("production", SeverityLevel.DEBUG, "user_action"))
        self.assertFalse(should_admit("production", "info", "performance"))

    def test_production_keeps_warning_and_above(self):
        for level in (SeverityLevel.WARNING, SeverityLevel.ERROR, SeverityLevel.CRITICAL):
            self.assertTrue(should_admit("production", level, "user_action"))

    def test_accepts_plain_strings(self):
        self.assertTrue(should_admit("PRODUCTION", "error", "user_action"))
        self.assertFalse(should_admit("production", "info", "user_action"))


if __name__ == "__main__":
    unittest.main()
