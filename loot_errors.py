"""Errors raised by the loot summary modules.

Two tiers:
- hard failures (bad arguments, unknown option reads, empty or broken summaries)
  raise immediately;
- writes to unknown option keys are ignored by the registry and never reach here.
"""


class LootSummaryError(Exception):
    pass


class InvalidArgument(LootSummaryError, ValueError):
    """A key was missing or a quantity was not an acceptable number."""


class InvalidOption(LootSummaryError, KeyError):
    """An option outside the schema was read."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class EmptySummary(LootSummaryError, RuntimeError):
    """Print was called but no summary lines were generated."""


class InconsistentState(EmptySummary):
    """An entry listed in key order has lost its quantities."""
