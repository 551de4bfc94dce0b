"""
Audit Trail Unit Tests
======================

Tests for the in-memory audit trail including:
- Recording and querying
- Bounded capacity
- Retention cleanup
- Summary aggregation
- Alerts, user activity and role usage windows
- JSON and CSV export
"""

import csv
import io
import json
from datetime import datetime, timedelta, timezone

import pytest

from rbacguard.core.enums import AuditResult, SecurityLevel
from rbacguard.schemas.audit import AuditQuery
from rbacguard.services.audit_service import AuditTrail, get_audit_trail


pytestmark = pytest.mark.rbac


@pytest.fixture
def trail() -> AuditTrail:
    return AuditTrail(max_events=10, retention_hours=24)


def record(trail: AuditTrail, user_id: str = "u-1", **kwargs) -> str:
    defaults = {
        "role": "user",
        "action": "GET /admin",
        "resource": "/admin",
        "result": AuditResult.BLOCKED,
    }
    defaults.update(kwargs)
    return trail.record(user_id=user_id, **defaults)


class TestRecord:
    """Tests for AuditTrail.record."""

    def test_record_returns_id(self, trail):
        """Test recording returns a unique event id."""
        # Act
        first = record(trail)
        second = record(trail)

        # Assert
        assert first.startswith("audit_")
        assert first != second
        assert len(trail) == 2

    def test_request_details_promoted(self, trail):
        """Test ip address and user agent are lifted out of details."""
        # Act
        record(trail, details={"ip_address": "10.0.0.1", "user_agent": "pytest"})

        # Assert
        event = trail.query()[0]
        assert event.ip_address == "10.0.0.1"
        assert event.user_agent == "pytest"

    def test_capacity_drops_oldest(self, trail):
        """Test only the newest max_events are kept."""
        # Act
        for i in range(15):
            record(trail, user_id=f"u-{i}")

        # Assert
        assert len(trail) == 10
        assert trail.query()[-1].user_id == "u-5"

    def test_defaults_from_settings(self, monkeypatch):
        """Test capacity and retention default to settings."""
        # Arrange
        from rbacguard.core.config import reset_settings

        monkeypatch.setenv("RBACGUARD_AUDIT_MAX_EVENTS", "3")
        reset_settings()

        # Act
        trail = AuditTrail()

        # Assert
        assert trail.max_events == 3
        assert trail.retention == timedelta(hours=168)


class TestQuery:
    """Tests for AuditTrail.query."""

    def test_newest_first_with_limit(self, trail):
        """Test ordering and limit."""
        # Arrange
        for i in range(5):
            record(trail, user_id=f"u-{i}")

        # Act
        events = trail.query(AuditQuery(limit=2))

        # Assert
        assert [e.user_id for e in events] == ["u-4", "u-3"]

    def test_filters(self, trail):
        """Test filters combine."""
        # Arrange
        record(trail, user_id="a", result=AuditResult.SUCCESS)
        record(trail, user_id="a", result=AuditResult.BLOCKED)
        record(trail, user_id="b", result=AuditResult.BLOCKED)

        # Act
        events = trail.query(AuditQuery(user_id="a", result=AuditResult.BLOCKED))

        # Assert
        assert len(events) == 1
        assert events[0].user_id == "a"

    def test_time_window(self, trail):
        """Test start and end time bounds."""
        # Arrange
        now = datetime.now(timezone.utc)
        record(trail, user_id="old", timestamp=now - timedelta(hours=2))
        record(trail, user_id="new", timestamp=now)

        # Act
        events = trail.query(AuditQuery(start_time=now - timedelta(hours=1)))

        # Assert
        assert [e.user_id for e in events] == ["new"]


class TestCleanupAndSummary:
    """Tests for cleanup and summary."""

    def test_cleanup_removes_expired(self, trail):
        """Test events older than the retention window are removed."""
        # Arrange
        now = datetime.now(timezone.utc)
        record(trail, user_id="old", timestamp=now - timedelta(hours=48))
        record(trail, user_id="new", timestamp=now)

        # Act
        removed = trail.cleanup(now)

        # Assert
        assert removed == 1
        assert [e.user_id for e in trail.query()] == ["new"]

    def test_summary(self, trail):
        """Test counts, users and critical events."""
        # Arrange
        record(trail, user_id="a", result=AuditResult.SUCCESS, action="login")
        record(trail, user_id="a", action="login", security_level=SecurityLevel.CRITICAL)
        record(trail, user_id="b", result=AuditResult.FAILURE, action="delete")

        # Act
        summary = trail.summary()

        # Assert
        assert summary.total_events == 3
        assert summary.success_count == 1
        assert summary.blocked_count == 1
        assert summary.failure_count == 1
        assert summary.critical_events == 1
        assert summary.unique_users == 2
        assert summary.top_actions[0].action == "login"
        assert summary.top_actions[0].count == 2
        assert summary.time_range is not None

    def test_empty_summary(self, trail):
        """Test the summary of an empty trail."""
        # Act
        summary = trail.summary()

        # Assert
        assert summary.total_events == 0
        assert summary.time_range is None

    def test_clear(self, trail):
        """Test clear empties the trail."""
        # Arrange
        record(trail)

        # Act
        trail.clear()

        # Assert
        assert len(trail) == 0

    def test_singleton(self):
        """Test the shared trail is a singleton."""
        # Act & Assert
        assert get_audit_trail() is get_audit_trail()


NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestReporting:
    """Tests for the windowed reports."""

    def test_summary_time_window(self, trail):
        """Test a windowed summary counts only recent events."""
        # Arrange
        record(trail, user_id="old", timestamp=NOW - timedelta(hours=30))
        record(trail, user_id="a", result=AuditResult.SUCCESS, timestamp=NOW - timedelta(hours=2))
        record(trail, user_id="b", timestamp=NOW - timedelta(hours=1))

        # Act
        summary = trail.summary(time_range_hours=24, now=NOW)

        # Assert
        assert summary.total_events == 2
        assert summary.success_count == 1
        assert summary.blocked_count == 1
        assert summary.unique_users == 2
        assert summary.time_range == (NOW - timedelta(hours=24), NOW)

    def test_security_alerts(self, trail):
        """Test alerts pick critical, blocked and high-level failures."""
        # Arrange
        record(trail, user_id="blocked", timestamp=NOW - timedelta(minutes=30))
        record(
            trail,
            user_id="critical",
            result=AuditResult.SUCCESS,
            security_level=SecurityLevel.CRITICAL,
            timestamp=NOW - timedelta(minutes=10),
        )
        record(
            trail,
            user_id="high-failure",
            result=AuditResult.FAILURE,
            security_level=SecurityLevel.HIGH,
            timestamp=NOW - timedelta(minutes=20),
        )
        record(
            trail,
            user_id="low-failure",
            result=AuditResult.FAILURE,
            security_level=SecurityLevel.LOW,
            timestamp=NOW - timedelta(minutes=5),
        )
        record(trail, user_id="stale", timestamp=NOW - timedelta(hours=3))

        # Act
        alerts = trail.security_alerts(hours_back=1, now=NOW)

        # Assert
        assert [e.user_id for e in alerts] == ["critical", "high-failure", "blocked"]

    def test_user_activity(self, trail):
        """Test one user's recent events, newest first."""
        # Arrange
        record(trail, user_id="u-1", action="GET /a", timestamp=NOW - timedelta(hours=2))
        record(trail, user_id="u-1", action="GET /b", timestamp=NOW - timedelta(hours=1))
        record(trail, user_id="u-2", action="GET /c", timestamp=NOW - timedelta(hours=1))
        record(trail, user_id="u-1", action="GET /old", timestamp=NOW - timedelta(hours=25))

        # Act
        activity = trail.user_activity("u-1", now=NOW)

        # Assert
        assert [e.action for e in activity] == ["GET /b", "GET /a"]

    def test_role_usage_stats(self, trail):
        """Test per-role counts, distinct users and success rate."""
        # Arrange
        record(trail, user_id="m-1", role="manager", result=AuditResult.SUCCESS, timestamp=NOW - timedelta(hours=3))
        record(trail, user_id="m-2", role="manager", result=AuditResult.BLOCKED, timestamp=NOW - timedelta(hours=1))
        record(trail, user_id="u-1", role="user", timestamp=NOW - timedelta(hours=2))

        # Act
        usage = {u.role: u for u in trail.role_usage_stats(now=NOW)}

        # Assert
        assert set(usage) == {"manager", "user"}
        assert usage["manager"].event_count == 2
        assert usage["manager"].unique_users == 2
        assert usage["manager"].success_rate == 50.0
        assert usage["manager"].last_activity == NOW - timedelta(hours=1)
        assert usage["user"].success_rate == 0.0

    def test_role_usage_empty_window(self, trail):
        """Test no events yields no usage rows."""
        # Act & Assert
        assert trail.role_usage_stats(now=NOW) == []


class TestExport:
    """Tests for AuditTrail.export."""

    def test_json_export(self, trail):
        """Test JSON export lists matching events newest first."""
        # Arrange
        record(trail, user_id="a", timestamp=NOW - timedelta(minutes=2))
        record(trail, user_id="b", timestamp=NOW - timedelta(minutes=1))

        # Act
        exported = json.loads(trail.export("json"))

        # Assert
        assert [e["user_id"] for e in exported] == ["b", "a"]
        assert exported[0]["result"] == "blocked"

    def test_csv_export(self, trail):
        """Test CSV export has a header row and one row per event."""
        # Arrange
        record(trail, user_id="a", details={"ip_address": "10.0.0.9"}, timestamp=NOW)
        record(trail, user_id="b", timestamp=NOW)

        # Act
        rows = list(csv.reader(io.StringIO(trail.export("csv", AuditQuery(user_id="a")))))

        # Assert
        assert rows[0][:3] == ["ID", "Timestamp", "User ID"]
        assert len(rows) == 2
        assert rows[1][2] == "a"
        assert rows[1][1] == NOW.isoformat()
        assert rows[1][-1] == "10.0.0.9"

    def test_unknown_format_rejected(self, trail):
        """Test an unsupported format raises."""
        # Act & Assert
        with pytest.raises(ValueError):
            trail.export("xml")
