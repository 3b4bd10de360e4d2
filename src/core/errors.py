"""Domain errors raised by the core services and translated by the API layer."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Missing credentials or sheet IDs. Fatal at first use, never retried.

    ``hint`` tells the operator how to fix it.
    """

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.hint = hint


class NotFoundError(Exception):
    """A document, roster row or checkbox row could not be found.

    ``context`` carries identifying details (animal name/type) for the
    response body.
    """

    def __init__(self, message: str, **context: str) -> None:
        super().__init__(message)
        self.context = context


class SheetLayoutError(Exception):
    """A sheet is missing a header the code relies on."""
