"""
Audit Trail Service
===================

Bounded in-memory record of access decisions taken by the route guards.

- Oldest events are dropped once ``max_events`` is reached
- ``cleanup()`` drops events older than the retention window
- ``query()`` and ``summary()`` serve dashboards and tests
- Alerts, per-user activity and per-role usage cover recent windows
- ``export()`` writes matching events as JSON or CSV
"""

from __future__ import annotations

import csv
import io
import uuid
from collections import Counter, defaultdict, deque
from datetime import datetime, timedelta, timezone
from typing import Any, Literal, Optional

from pydantic import TypeAdapter

from rbacguard.core.config import get_settings
from rbacguard.core.enums import AuditResult, SecurityLevel
from rbacguard.core.logging import get_logger
from rbacguard.schemas.audit import (
    ActionCount,
    AuditEvent,
    AuditQuery,
    AuditSummary,
    RoleUsage,
)

logger = get_logger(__name__)

CSV_HEADERS = (
    "ID",
    "Timestamp",
    "User ID",
    "Role",
    "Action",
    "Resource",
    "Result",
    "Security Level",
    "Session ID",
    "IP Address",
)

_EVENT_LIST = TypeAdapter(list[AuditEvent])


class AuditTrail:
    """In-memory audit log of access decisions."""

    def __init__(
        self,
        max_events: Optional[int] = None,
        retention_hours: Optional[int] = None,
    ):
        settings = get_settings()
        self.max_events = max_events or settings.audit_max_events
        self.retention = timedelta(hours=retention_hours or settings.audit_retention_hours)
        self._events: deque[AuditEvent] = deque(maxlen=self.max_events)

    def __len__(self) -> int:
        return len(self._events)

    def record(
        self,
        user_id: str,
        role: str,
        action: str,
        resource: str,
        result: AuditResult,
        details: Optional[dict[str, Any]] = None,
        security_level: SecurityLevel = SecurityLevel.MEDIUM,
        timestamp: Optional[datetime] = None,
    ) -> str:
        """
        Record one decision.

        Returns:
            Identifier of the stored event.
        """
        details = dict(details or {})
        event = AuditEvent(
            id=f"audit_{uuid.uuid4().hex}",
            timestamp=timestamp or datetime.now(timezone.utc),
            user_id=user_id,
            role=role,
            action=action,
            resource=resource,
            result=result,
            details=details,
            security_level=security_level,
            session_id=details.get("session_id"),
            ip_address=details.get("ip_address"),
            user_agent=details.get("user_agent"),
        )
        self._events.append(event)

        if security_level == SecurityLevel.CRITICAL:
            logger.warning(
                "critical_audit_event",
                event_id=event.id,
                action=action,
                resource=resource,
                result=result.value,
            )
        return event.id

    def query(self, query: Optional[AuditQuery] = None) -> list[AuditEvent]:
        """Events matching ``query``, newest first."""
        query = query or AuditQuery()
        matched = [e for e in reversed(self._events) if self._matches(e, query)]
        if query.limit is not None:
            matched = matched[: query.limit]
        return matched

    @staticmethod
    def _matches(event: AuditEvent, query: AuditQuery) -> bool:
        if query.user_id is not None and event.user_id != query.user_id:
            return False
        if query.role is not None and event.role != query.role:
            return False
        if query.action is not None and event.action != query.action:
            return False
        if query.result is not None and event.result != query.result:
            return False
        if query.security_level is not None and event.security_level != query.security_level:
            return False
        if query.start_time is not None and event.timestamp < query.start_time:
            return False
        if query.end_time is not None and event.timestamp > query.end_time:
            return False
        return True

    def _since(
        self, hours: float, now: Optional[datetime]
    ) -> tuple[datetime, datetime, list[AuditEvent]]:
        end = now or datetime.now(timezone.utc)
        start = end - timedelta(hours=hours)
        return start, end, [e for e in self._events if start <= e.timestamp <= end]

    def summary(
        self,
        time_range_hours: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> AuditSummary:
        """
        Aggregate counts over the trail.

        Args:
            time_range_hours: Only count events of the last N hours; the
                whole trail when None
            now: End of the window; defaults to the current time

        Returns:
            AuditSummary. ``time_range`` is the requested window, or the
            span of the stored events when no window is given.
        """
        if time_range_hours is None:
            events = list(self._events)
            time_range = None
            if events:
                timestamps = [e.timestamp for e in events]
                time_range = (min(timestamps), max(timestamps))
        else:
            start, end, events = self._since(time_range_hours, now)
            time_range = (start, end)

        results = Counter(e.result for e in events)
        levels = Counter(e.security_level.value for e in events)
        actions = Counter(e.action for e in events)

        return AuditSummary(
            total_events=len(events),
            success_count=results[AuditResult.SUCCESS],
            failure_count=results[AuditResult.FAILURE],
            blocked_count=results[AuditResult.BLOCKED],
            critical_events=levels[SecurityLevel.CRITICAL.value],
            unique_users=len({e.user_id for e in events}),
            top_actions=[ActionCount(action=a, count=c) for a, c in actions.most_common(10)],
            security_level_distribution=dict(levels),
            time_range=time_range,
        )

    def security_alerts(
        self,
        hours_back: float = 1,
        now: Optional[datetime] = None,
    ) -> list[AuditEvent]:
        """
        Recent events that need attention, newest first.

        An alert is a critical event, a blocked event, or a failure at
        high security level.
        """
        _, _, events = self._since(hours_back, now)
        alerts = [
            e
            for e in events
            if e.security_level == SecurityLevel.CRITICAL
            or e.result == AuditResult.BLOCKED
            or (e.result == AuditResult.FAILURE and e.security_level == SecurityLevel.HIGH)
        ]
        return sorted(alerts, key=lambda e: e.timestamp, reverse=True)

    def user_activity(
        self,
        user_id: str,
        hours_back: float = 24,
        now: Optional[datetime] = None,
    ) -> list[AuditEvent]:
        """Events of one user in the last ``hours_back`` hours, newest first."""
        _, _, events = self._since(hours_back, now)
        return sorted(
            (e for e in events if e.user_id == user_id),
            key=lambda e: e.timestamp,
            reverse=True,
        )

    def role_usage_stats(
        self,
        hours_back: float = 24,
        now: Optional[datetime] = None,
    ) -> list[RoleUsage]:
        """Per-role event counts, distinct users and success rate."""
        _, _, events = self._since(hours_back, now)
        by_role: dict[str, list[AuditEvent]] = defaultdict(list)
        for event in events:
            by_role[event.role].append(event)

        usage = []
        for role, role_events in by_role.items():
            successes = sum(1 for e in role_events if e.result == AuditResult.SUCCESS)
            usage.append(
                RoleUsage(
                    role=role,
                    event_count=len(role_events),
                    unique_users=len({e.user_id for e in role_events}),
                    success_rate=successes * 100 / len(role_events),
                    last_activity=max(e.timestamp for e in role_events),
                )
            )
        return usage

    def export(
        self,
        format: Literal["json", "csv"] = "json",
        query: Optional[AuditQuery] = None,
    ) -> str:
        """
        Serialize the events matching ``query``, newest first.

        Raises:
            ValueError: If ``format`` is neither ``json`` nor ``csv``
        """
        events = self.query(query)
        if format == "json":
            return _EVENT_LIST.dump_json(events, indent=2).decode()
        if format != "csv":
            raise ValueError(f"Unsupported export format {format!r}")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for e in events:
            writer.writerow(
                [
                    e.id,
                    e.timestamp.isoformat(),
                    e.user_id,
                    e.role,
                    e.action,
                    e.resource,
                    e.result.value,
                    e.security_level.value,
                    e.session_id or "",
                    e.ip_address or "",
                ]
            )
        return buffer.getvalue()

    def cleanup(self, now: Optional[datetime] = None) -> int:
        """
        Drop events older than the retention window.

        Returns:
            Number of events removed.
        """
        cutoff = (now or datetime.now(timezone.utc)) - self.retention
        kept = [e for e in self._events if e.timestamp >= cutoff]
        removed = len(self._events) - len(kept)
        if removed:
            self._events = deque(kept, maxlen=self.max_events)
            logger.info("audit_events_expired", removed=removed)
        return removed

    def clear(self) -> None:
        self._events.clear()


# Global audit trail instance
_audit_trail: Optional[AuditTrail] = None


def get_audit_trail() -> AuditTrail:
    """Get the audit trail singleton used by the route guards."""
    global _audit_trail
    if _audit_trail is None:
        _audit_trail = AuditTrail()
    return _audit_trail
