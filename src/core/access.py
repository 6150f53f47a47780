"""Role-based access to roster operations.

Authentication happens elsewhere; callers arrive with an already-validated
role string. This module only decides whether that role may run a given
operation.
"""

from __future__ import annotations

import logging

from src.core.errors import UnauthorizedError

logger = logging.getLogger(__name__)

ROLES = frozenset({"inspetoria", "ccp", "turma"})

_ALL = ROLES
_OPERATORS = frozenset({"inspetoria", "ccp"})

OPERATION_ROLES: dict[str, frozenset[str]] = {
    "get_roster": _ALL,
    "get_roster_raw": _ALL,
    "count_people": _ALL,
    "get_history_for_date": _ALL,
    "get_history_since": _ALL,
    "report_for_date": _ALL,
    "update_field": _ALL,
    "add_person": _OPERATORS,
    "delete_person": _OPERATORS,
    "start_person": _OPERATORS,
    "edit_schedule": _OPERATORS,
    "reset_person": _OPERATORS,
    "reset_all": _OPERATORS,
}


def is_allowed(role: str | None, operation: str) -> bool:
    allowed = OPERATION_ROLES.get(operation)
    if allowed is None:
        raise KeyError(f"Unknown operation: {operation!r}")
    return role in allowed


def require_role(role: str | None, operation: str) -> None:
    """Raise UnauthorizedError unless `role` may run `operation`."""
    if not is_allowed(role, operation):
        logger.warning("Unauthorized %s attempt with role=%s", operation, role or "none")
        raise UnauthorizedError(f"Role {role!r} may not run {operation}")
