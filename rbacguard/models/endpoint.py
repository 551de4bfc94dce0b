"""
Endpoint Models
===============

Static descriptions of the HTTP surface that roles may reach.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EndpointDescriptor:
    """
    A path pattern and the HTTP methods a role may use on it.

    The pattern supports a single trailing ``/*``; anything else is an
    exact literal.
    """

    path: str
    methods: tuple[str, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "methods", tuple(m.upper() for m in self.methods))


@dataclass(frozen=True)
class ApiEndpoint:
    """A declared backend API endpoint and its access requirements."""

    path: str  # e.g. "/users/:userId"
    method: str
    required_roles: tuple[str, ...] = ()
    required_permissions: tuple[str, ...] = ()
    public: bool = False
    description: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
