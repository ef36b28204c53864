# Error kinds raised by the catalog core.

from __future__ import annotations
from typing import List, Optional


class CatalogError(Exception):
    """Base class for every error the catalog raises on purpose."""


class EventValidationError(CatalogError):
    """A draft or record failed admission.

    kind: "future_date_required" | "invalid_event"
    errors: field-level details (pydantic error dicts) when available.
    """

    FUTURE_DATE_REQUIRED = "future_date_required"
    INVALID_EVENT = "invalid_event"

    def __init__(self, kind: str, message: str, errors: Optional[List[dict]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = errors or []


class FormatError(CatalogError):
    """Structured import text could not be used.

    kind: "malformed" (not JSON) | "not_a_sequence" (top level is not an array)
    """

    MALFORMED = "malformed"
    NOT_A_SEQUENCE = "not_a_sequence"

    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class PersistenceError(CatalogError):
    """The persistence backend failed to read or write."""
