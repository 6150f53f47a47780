"""Exceptions raised by the roster service layer."""

from __future__ import annotations


class RosterError(Exception):
    """Base class for every roster operation failure."""


class InvalidInputError(RosterError):
    """Rejected operator input. Raised before anything is written."""


class StorageError(RosterError):
    """The database could not be read or written."""


class UnauthorizedError(RosterError):
    """The caller's role may not perform the requested operation."""
