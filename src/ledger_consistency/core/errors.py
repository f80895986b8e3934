"""Exceptions raised across package boundaries.

Data anomalies are never raised; checks report them as issues. Only the
conditions below travel as exceptions.
"""

from __future__ import annotations

from typing import Iterable, Optional


class DataAccessError(RuntimeError):
    """The data store could not be reached or answered with a failure."""

    def __init__(self, message: str, operation: Optional[str] = None) -> None:
        super().__init__(message)
        self.operation = operation


class UnknownCheckError(ValueError):
    """One or more requested check names do not match any registered check."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = list(names)
        super().__init__(f"Unknown check name(s): {', '.join(self.names)}")


class RemediationError(RuntimeError):
    """A single fix could not be committed or audited."""


__all__ = ["DataAccessError", "UnknownCheckError", "RemediationError"]
