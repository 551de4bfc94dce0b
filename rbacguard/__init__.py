"""
rbacguard
=========

Role-based access control engine: role registry, wildcard permission
matching, access decisions, endpoint gating, FastAPI route guards and a
validation harness.
"""

__version__ = "1.0.0"
