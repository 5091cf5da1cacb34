# backend/woundcrm/core/errors.py
from __future__ import annotations


class EngineError(ValueError):
    """Base class for failures the UI should render as a message."""


class InvalidTransitionError(EngineError):
    def __init__(self, message: str, *, current_status: str | None = None, requested_status: str | None = None):
        super().__init__(message)
        self.current_status = current_status
        self.requested_status = requested_status


class UnknownProductError(EngineError):
    """
    A treatment points at a graft product that is not in the pricing table.

    Unlike blank numeric input (coerced to 0), this is a data-integrity problem
    and is never defaulted.
    """

    def __init__(self, reference: object):
        super().__init__(f"Unknown graft product: {reference}")
        self.reference = reference
