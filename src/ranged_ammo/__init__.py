"""Ranged Ammo - ammunition tracking for tabletop ranged weapons.

Tracks which rounds are loaded into which weapon, returns unloaded
rounds and magazines to inventory, conjures ephemeral rounds and
consolidates partly used magazines.

ARCHITECTURE:
- Actions read an Actor and stage their changes on an UpdateLedger
- The ledger is applied once, by a host-supplied persistence gateway
- Nothing mutates the Actor except that gateway

Example:
    >>> from ranged_ammo import ActionServices, InMemoryPersistence, unload
    >>>
    >>> persistence = InMemoryPersistence([actor])
    >>> services = ActionServices(
    ...     templates=templates,
    ...     persistence=persistence,
    ...     notifier=notifier,
    ...     selector=selector,
    ... )
    >>> result = unload(actor, services)
    >>> result.status
    <ActionStatus.COMPLETED: 'completed'>

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 records (actors, stacks, weapons, markers).
    engine: Ledger, loading state, transfer, consolidation and events.
    actions: Conjure Bullet, Unload and Consolidate Ammunition.
    storage: In-memory template source and persistence gateway.
"""

from __future__ import annotations

# Core
from ranged_ammo.core.config import Settings, get_settings
from ranged_ammo.core.exceptions import RangedAmmoError
from ranged_ammo.core.logging import configure_logging, get_logger

# Models
from ranged_ammo.models import (
    Actor,
    AmmunitionEntry,
    AmmunitionStack,
    CapacityLoadMarker,
    ChamberMarker,
    ConjuredRoundMarker,
    MagazineLoadMarker,
    Marker,
    RecordTemplate,
    SimpleLoadMarker,
    Uses,
    Weapon,
)

# Engine
from ranged_ammo.engine import ActionEvent, EventBus, UpdateLedger

# Actions
from ranged_ammo.actions import (
    ActionResult,
    ActionServices,
    BaseNotifier,
    BaseSelector,
    BaseTemplateSource,
    conjure_bullet,
    consolidate_ammunition,
    perform_conjure_bullet,
    perform_unload,
    unload,
)

# Storage
from ranged_ammo.storage import InMemoryPersistence, InMemoryTemplateStore


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "RangedAmmoError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Actor",
    "AmmunitionEntry",
    "AmmunitionStack",
    "CapacityLoadMarker",
    "ChamberMarker",
    "ConjuredRoundMarker",
    "MagazineLoadMarker",
    "Marker",
    "RecordTemplate",
    "SimpleLoadMarker",
    "Uses",
    "Weapon",
    # Engine
    "ActionEvent",
    "EventBus",
    "UpdateLedger",
    # Actions
    "ActionResult",
    "ActionServices",
    "BaseNotifier",
    "BaseSelector",
    "BaseTemplateSource",
    "conjure_bullet",
    "consolidate_ammunition",
    "perform_conjure_bullet",
    "perform_unload",
    "unload",
    # Storage
    "InMemoryPersistence",
    "InMemoryTemplateStore",
]
