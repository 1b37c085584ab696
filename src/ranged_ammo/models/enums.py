"""Enumeration types for the ranged ammunition system.

These enums discriminate the persisted records and the staged
operations, and name the actions and their outcomes.
"""

from __future__ import annotations

from enum import StrEnum


class MarkerKind(StrEnum):
    """Kinds of marker a weapon can carry.

    A weapon holds at most one marker of each kind at a time.
    """

    SIMPLE = "simple"
    """Loaded, without chamber tracking."""

    CAPACITY = "capacity"
    """Loaded, tracking each chamber of a capacity weapon."""

    MAGAZINE = "magazine"
    """A magazine loaded into a repeating weapon."""

    CONJURED_ROUND = "conjured_round"
    """An ephemeral round conjured out of nothing."""

    CHAMBER = "chamber"
    """Which ammunition of a capacity weapon fires next."""

    @property
    def is_load_marker(self) -> bool:
        """Whether this kind records loaded rounds on its own.

        Returns:
            True for the simple and capacity kinds.
        """
        return self in (MarkerKind.SIMPLE, MarkerKind.CAPACITY)


class RecordType(StrEnum):
    """Types of record a template can produce."""

    CONSUMABLE = "consumable"
    WEAPON = "weapon"
    EFFECT = "effect"


class OperationType(StrEnum):
    """Types of staged ledger operation."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOTIFY = "notify"


class ActionName(StrEnum):
    """Player actions exposed by the system."""

    CONJURE = "conjure"
    UNLOAD = "unload"
    CONSOLIDATE = "consolidate"


class ActionStatus(StrEnum):
    """Outcome of running an action."""

    COMPLETED = "completed"
    """The ledger was staged and applied."""

    ABORTED = "aborted"
    """A precondition failed; a warning was shown and nothing was staged."""

    CANCELLED = "cancelled"
    """The user cancelled a selection; nothing was staged."""

    NOTHING_TO_DO = "nothing_to_do"
    """The action found nothing to change."""
