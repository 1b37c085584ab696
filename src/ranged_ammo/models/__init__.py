"""Pydantic V2 records for the ranged ammunition system.

Submodules:
    enums: Marker kinds, operation types, action names and outcomes.
    items: Weapons, ammunition stacks and record templates.
    markers: The tagged union of loaded-state markers.
    actor: The actor owning weapons, inventory and markers.
"""

from __future__ import annotations

from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import (
    ActionName,
    ActionStatus,
    MarkerKind,
    OperationType,
    RecordType,
)
from ranged_ammo.models.items import (
    AmmunitionStack,
    RecordTemplate,
    Uses,
    Weapon,
    new_uid,
)
from ranged_ammo.models.markers import (
    AmmunitionEntry,
    CapacityLoadMarker,
    ChamberMarker,
    ConjuredRoundMarker,
    LoadMarker,
    MagazineLoadMarker,
    Marker,
    SimpleLoadMarker,
    parse_marker,
)


__all__ = [
    # Enums
    "ActionName",
    "ActionStatus",
    "MarkerKind",
    "OperationType",
    "RecordType",
    # Items
    "AmmunitionStack",
    "RecordTemplate",
    "Uses",
    "Weapon",
    "new_uid",
    # Markers
    "AmmunitionEntry",
    "CapacityLoadMarker",
    "ChamberMarker",
    "ConjuredRoundMarker",
    "LoadMarker",
    "MagazineLoadMarker",
    "Marker",
    "SimpleLoadMarker",
    "parse_marker",
    # Actor
    "Actor",
]
