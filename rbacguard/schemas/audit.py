"""
Audit Schemas Module
====================

Pydantic models for audited access decisions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from rbacguard.core.enums import AuditResult, SecurityLevel


class AuditEvent(BaseModel):
    """One recorded access decision."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    user_id: str
    role: str
    action: str
    resource: str
    result: AuditResult
    details: dict[str, Any] = Field(default_factory=dict)
    security_level: SecurityLevel = SecurityLevel.MEDIUM
    session_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class AuditQuery(BaseModel):
    """Filter over recorded events; unset fields match everything."""

    user_id: Optional[str] = None
    role: Optional[str] = None
    action: Optional[str] = None
    result: Optional[AuditResult] = None
    security_level: Optional[SecurityLevel] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    limit: Optional[int] = Field(default=None, ge=1)


class ActionCount(BaseModel):
    action: str
    count: int


class AuditSummary(BaseModel):
    """Aggregate view of the audit trail."""

    total_events: int
    success_count: int
    failure_count: int
    blocked_count: int
    critical_events: int
    unique_users: int
    top_actions: list[ActionCount]
    security_level_distribution: dict[str, int]
    time_range: Optional[tuple[datetime, datetime]] = None


class RoleUsage(BaseModel):
    """Activity of one role over a time window."""

    role: str
    event_count: int
    unique_users: int
    success_rate: float = Field(..., ge=0, le=100, description="Percentage of successful events")
    last_activity: datetime
