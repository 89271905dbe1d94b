"""
bacefook.errors — Typed failure outcomes
=========================================

Services raise these; :mod:`bacefook.api.main` maps each kind to an HTTP
status (404 / 409 / 400).  Persistence errors are not wrapped.
"""

from __future__ import annotations


class BacefookError(Exception):
    """Base class for all domain-level failures."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(BacefookError):
    """A referenced user (or friend) does not exist."""

    status_code = 404


class ConflictError(BacefookError):
    """Duplicate email/username, or an attempt to friend oneself."""

    status_code = 409


class ValidationError(BacefookError):
    """Malformed query input the request model could not catch (e.g. date windows)."""

    status_code = 400
