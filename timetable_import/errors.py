"""
Exception taxonomy for an import run.

Field-level defects never raise; they are resolved by default substitution or
by skipping the record. Only the errors below abort an import or get reported.
"""
from __future__ import annotations


class ScheduleImportError(Exception):
    pass


class StructuralError(ScheduleImportError, ValueError):
    """Payload is missing a required part or container element."""


class TransportError(ScheduleImportError, RuntimeError):
    """Non-success response, failed API status or missing login session."""


class PersistenceError(ScheduleImportError):
    """A gateway accept call failed. Earlier successful calls are kept."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"{operation}: {message}")
        self.operation = operation
