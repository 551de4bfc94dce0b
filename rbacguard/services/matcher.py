"""
Permission Matcher
==================

Decides whether a held permission set satisfies a required permission.

Rules:
- an exact match always satisfies
- a held ``X:*`` satisfies any required permission whose resource is ``X``
- a held ``*:*`` satisfies everything

No other pattern acts as a wildcard: a held ``users*`` or a bare ``*``
only ever matches itself. ``None`` held sets are treated as empty.
"""

from __future__ import annotations

from typing import Iterable, Optional

from rbacguard.models.permission import GLOBAL_WILDCARD, WILDCARD, split_permission


def permission_covers(held: str, required: str) -> bool:
    """Return True when a single held permission implies ``required``."""
    if held == required:
        return True
    if held == GLOBAL_WILDCARD:
        return True

    held_parts = split_permission(held)
    if held_parts is None:
        return False
    held_resource, held_action = held_parts
    if held_action != WILDCARD or held_resource == WILDCARD:
        return False

    required_parts = split_permission(required)
    if required_parts is None:
        return False
    return required_parts[0] == held_resource


def matches(held: Optional[Iterable[str]], required: str) -> bool:
    """Return True when any held permission satisfies ``required``."""
    if held is None:
        return False
    return any(permission_covers(h, required) for h in held)


def matches_all(held: Optional[Iterable[str]], required: Iterable[str]) -> bool:
    """Every required permission is held. Empty ``required`` is vacuously True."""
    held_list = list(held or ())
    return all(matches(held_list, r) for r in required)


def matches_any(held: Optional[Iterable[str]], required: Iterable[str]) -> bool:
    """At least one required permission is held. Empty ``required`` is True."""
    required_list = list(required)
    if not required_list:
        return True
    held_list = list(held or ())
    return any(matches(held_list, r) for r in required_list)


def uncovered_permissions(
    held: Optional[Iterable[str]], granted: Iterable[str]
) -> list[str]:
    """
    Return the permissions of ``granted`` that ``held`` does not imply.

    A wildcard in ``granted`` is only implied by an equal or broader
    wildcard, never by a collection of concrete permissions.
    """
    held_list = list(held or ())
    return [g for g in granted if not matches(held_list, g)]


def covers(held: Optional[Iterable[str]], granted: Iterable[str]) -> bool:
    """Return True when ``held`` implies every permission in ``granted``."""
    return not uncovered_permissions(held, granted)
