"""
Permission Token Module
=======================

A permission is a case-sensitive ``resource:action`` token.

Accepted forms:
- ``users:delete``  concrete permission
- ``users:*``       every action on one resource
- ``*:*``           every permission

Anything else (``*:delete``, ``users:view*``, a bare ``*``) is rejected
at construction rather than guessed at during matching.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from rbacguard.core.exceptions import InvalidPermissionError

WILDCARD = "*"
SEPARATOR = ":"
GLOBAL_WILDCARD = "*:*"

_SEGMENT = re.compile(r"^[A-Za-z0-9_.\-]+$")


def split_permission(value: str) -> tuple[str, str] | None:
    """
    Split a token into ``(resource, action)``.

    Returns None when the token is not exactly two non-empty segments.
    """
    if not isinstance(value, str) or value.count(SEPARATOR) != 1:
        return None
    resource, action = value.split(SEPARATOR)
    if not resource or not action:
        return None
    return resource, action


def _validate(value: Any) -> tuple[str, str]:
    if not isinstance(value, str):
        raise InvalidPermissionError(value, "permission must be a string")

    parts = split_permission(value)
    if parts is None:
        raise InvalidPermissionError(value)

    resource, action = parts
    if resource == WILDCARD:
        if action != WILDCARD:
            raise InvalidPermissionError(value, "a wildcard resource requires a wildcard action")
        return parts

    if not _SEGMENT.match(resource):
        raise InvalidPermissionError(value, f"invalid resource segment {resource!r}")
    if action != WILDCARD and not _SEGMENT.match(action):
        raise InvalidPermissionError(value, f"invalid action segment {action!r}")
    return parts


def is_valid_permission(value: Any) -> bool:
    """Return True when ``value`` would construct a Permission."""
    try:
        _validate(value)
    except InvalidPermissionError:
        return False
    return True


class Permission(str):
    """
    Validated permission token.

    Behaves as a plain ``str`` everywhere (hashing, equality, JSON), so
    validated and raw tokens can be mixed in permission sets.
    """

    __slots__ = ()

    def __new__(cls, value: Any) -> "Permission":
        if isinstance(value, Permission):
            return value
        _validate(value)
        return super().__new__(cls, value)

    @property
    def resource(self) -> str:
        return self.split(SEPARATOR)[0]

    @property
    def action(self) -> str:
        return self.split(SEPARATOR)[1]

    @property
    def is_wildcard(self) -> bool:
        return self.action == WILDCARD

    @property
    def is_global(self) -> bool:
        return self == GLOBAL_WILDCARD

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_after_validator_function(
            cls,
            core_schema.str_schema(),
            serialization=core_schema.plain_serializer_function_ser_schema(str),
        )
