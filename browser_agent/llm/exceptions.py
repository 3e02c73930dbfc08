"""Completion-service failures."""
from __future__ import annotations


class TransportError(Exception):
    """The completion call failed or returned nothing usable.

    Fatal to the current run; retry policy belongs to the caller.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None):
        self.cause = cause
        super().__init__(message)
