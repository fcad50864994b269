"""Error hierarchy for the fetal-health imbalance toolkit.

Every rebalancing and evaluation failure is raised synchronously as one of the
types below. None of them are retried: all operations are deterministic, so a
retry with unchanged inputs would fail the same way.
"""
from __future__ import annotations

import textwrap


class ImbalanceError(Exception):
    """Base error for rebalancing and evaluation failures."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        final_message = message
        if hint:
            final_message = f"{message}\n{self._format_hint(hint)}"
        super().__init__(final_message)
        self.message = message
        self.hint = hint

    @staticmethod
    def _format_hint(hint: str) -> str:
        return textwrap.indent(f"Hint: {hint}", prefix="  ")


class InvalidPolicy(ImbalanceError, ValueError):
    """Raised for a non-positive ratio, an unknown strategy or a bad neighbour count."""


class InsufficientNeighbors(ImbalanceError):
    """Raised when a class has too few records for synthetic oversampling."""


class EmptyInput(ImbalanceError):
    """Raised when metrics are requested on empty label sequences."""


class ClassMismatch(ImbalanceError, ValueError):
    """Raised when a label is outside the declared class set."""
