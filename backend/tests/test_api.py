import unittest
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from helpers import ImmediateExecutor, make_store
from log_governance.api.dependencies import get_service
from log_governance.core.exceptions import StoreUnavailable
from log_governance.main import app
from log_governance.services import governance_service
from log_governance.services.governance_service import LogGovernanceService


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.store = make_store()
        self.service = LogGovernanceService(
            self.store, executor=ImmediateExecutor(), default_environment="development"
        )
        # The request middleware submits through the process-wide service
        self._previous_service = governance_service._service
        governance_service._service = self.service
        app.dependency_overrides[get_service] = lambda: self.service
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()
        governance_service._service = self._previous_service


class TestLogsApi(ApiTestCase):
    def test_health(self):
        response = self.client.get("/api/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")

    def test_submit_event_is_accepted_without_decision(self):
        response = self.client.post(
            "/api/logs/events",
            json={
                "level": "error",
                "category": "user_action",
                "message": "checkout failed",
                "environment": "development",
            },
        )
        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json(), {"accepted": True})

        [entry] = list(self.store.query(category="user_action"))
        self.assertEqual(entry.message, "checkout failed")

    def test_dropped_event_is_still_accepted(self):
        response = self.client.post(
            "/api/logs/events",
            json={
                "level": "info",
                "category": "user_action",
                "message": "browsed catalogue",
                "environment": "production",
            },
        )
        self.assertEqual(response.status_code, 202)
        self.assertEqual(list(self.store.query(category="user_action")), [])

    def test_submit_rejects_unknown_level(self):
        response = self.client.post(
            "/api/logs/events", json={"level": "loud", "message": "x"}
        )
        self.assertEqual(response.status_code, 422)

    def test_list_logs_filters_and_paginates(self):
        for i in range(3):
            self.service.record("error", "security", f"denied {i}")
        self.service.record("info", "user_action", "routine")

        response = self.client.get(
            "/api/logs/", params={"level_min": "error", "limit": 2}
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["pagination"]["total"], 3)
        self.assertEqual(len(body["logs"]), 2)
        self.assertEqual(body["logs"][0]["message"], "denied 2")

    def test_errors_and_critical_endpoints(self):
        self.service.record("error", "user_action", "broken")
        self.service.record("critical", "security", "breach")

        errors = self.client.get("/api/logs/errors").json()
        self.assertEqual({e["message"] for e in errors}, {"broken", "breach"})

        critical = self.client.get("/api/logs/critical").json()
        self.assertEqual([e["message"] for e in critical], ["breach"])

    def test_stats_endpoint(self):
        self.service.record("warning", "user_action", "slowish")
        rows = self.client.get("/api/logs/stats").json()
        self.assertIn(
            ("warning", "user_action", 1),
            {(r["level"], r["category"], r["count"]) for r in rows},
        )

    def test_performance_endpoint(self):
        self.service.record(
            "info", "performance", "load customers", operation_class="database", duration_ms=150
        )
        [row] = self.client.get("/api/logs/performance").json()
        self.assertEqual(row["operation_class"], "database")
        self.assertEqual(row["slow_operations"], 1)
        self.assertEqual(row["total_operations"], 1)

    def test_audit_summary_endpoint(self):
        self.service.submit_audit(action="update", resource="customers", actor="ana")
        self.service.submit_audit(action="update", resource="customers", actor="luis")

        rows = self.client.get("/api/logs/audit-summary", params={"actor": "ana"}).json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["resource"], "customers")
        self.assertEqual(rows[0]["operation"], "UPDATE")
        self.assertEqual(rows[0]["count"], 1)

    def test_manual_purge(self):
        response = self.client.post("/api/logs/purge")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "success")

    def test_request_is_recorded_as_api_event(self):
        response = self.client.get(
            "/api/health", headers={"X-Correlation-ID": "req-42"}
        )
        self.assertEqual(response.headers["X-Correlation-ID"], "req-42")

        [entry] = list(self.store.query(category="performance", operation_class="api"))
        self.assertEqual(entry.metadata["request"]["path"], "/api/health")
        self.assertEqual(entry.metadata["correlation_id"], "req-42")

    def test_store_outage_maps_to_503(self):
        failing = MagicMock()
        failing.query.side_effect = StoreUnavailable("query")
        app.dependency_overrides[get_service] = lambda: failing

        response = self.client.get("/api/logs/")
        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["error"]["code"], "SERVICE_UNAVAILABLE")

    def test_unknown_route_uses_standard_error_payload(self):
        response = self.client.get("/api/nowhere")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")


class TestLifespan(unittest.TestCase):
    @patch("log_governance.main.setup_governance_logging")
    @patch("log_governance.main.shutdown_governance_service")
    @patch("log_governance.main.get_governance_service")
    def test_service_is_built_at_startup_and_drained_at_shutdown(
        self, mock_get_service, mock_shutdown, mock_capture
    ):
        with TestClient(app):
            mock_get_service.assert_called_once()
            mock_shutdown.assert_not_called()
        mock_shutdown.assert_called_once()


class TestGovernanceApi(ApiTestCase):
    def test_retention_policy(self):
        body = self.client.get("/api/governance/retention-policy").json()
        self.assertEqual(body["retention_days"]["production"]["critical"], 180)
        self.assertEqual(body["retention_days"]["development"]["info"], 3)

    def test_performance_thresholds(self):
        body = self.client.get("/api/governance/performance-thresholds").json()
        self.assertEqual(
            body["thresholds_ms"], {"database": 100, "api": 1000, "operation": 500}
        )


if __name__ == "__main__":
    unittest.main()
