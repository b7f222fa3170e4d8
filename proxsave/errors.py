"""
errors.py
Exceptions raised across the preflight pipeline.
"""
from __future__ import annotations


class ConfigError(ValueError):
    """Checker configuration rejected before any check runs."""


class LockError(OSError):
    """Lock file could not be released."""


class PreflightError(RuntimeError):
    """
    A critical check failed. Carries the ordered results produced so far
    (including the failing one) so callers can report every finding.
    """

    def __init__(self, message: str, results=None, failed=None):
        super().__init__(message)
        self.results = list(results or [])
        self.failed = failed

    @property
    def code(self) -> str:
        return self.failed.code if self.failed is not None else ""


class PreflightCancelled(PreflightError):
    """Caller asked to stop between checks."""

    @property
    def code(self) -> str:
        return "CANCELLED"
