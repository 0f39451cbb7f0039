"""Recursion budget shared by nested directory thumbnailing."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_RECURSION_BUDGET = 5
RECURSION_BUDGET_ENVVAR = "GENERATE_DIRECTORY_THUMBNAIL_RECURSION_BUDGET"


@dataclass(frozen=True)
class RecursionBudget:
    """How many more levels of directory-inside-directory generation are allowed.

    The budget is passed explicitly down the resolution chain. When generation
    crosses into a new process it is serialised as ``--recursion-budget``.
    """

    remaining: int = DEFAULT_RECURSION_BUDGET

    def __post_init__(self) -> None:
        if self.remaining < 0:
            raise ValueError(f"Recursion budget must be non-negative, got {self.remaining}")

    @property
    def exhausted(self) -> bool:
        return self.remaining == 0

    def spent(self) -> RecursionBudget:
        """Return the budget left after descending one level."""
        return RecursionBudget(self.remaining - 1)

    @classmethod
    def parse(cls, raw: str | None) -> RecursionBudget:
        """Parse a user-supplied budget, falling back to the default.

        An absent value silently yields the default. A value which is not a
        non-negative integer logs a warning and also yields the default.
        """
        if raw is None or raw == "":
            return cls()

        try:
            remaining = int(raw.strip(), 10)
        except ValueError:
            remaining = -1

        if remaining < 0:
            logger.warning(
                "Invalid recursion budget ‘%s’; using default of %d.",
                raw,
                DEFAULT_RECURSION_BUDGET,
            )
            return cls()

        return cls(remaining)
