"""Player actions for the ranged ammunition system.

Each action reads the actor, stages its changes on an UpdateLedger,
applies the ledger once and broadcasts an ActionEvent.

Submodules:
    services: Collaborator interfaces, ActionServices and ActionResult
    conjure: Conjure Bullet
    unload: Unload
    consolidate: Consolidate Ammunition
"""

from __future__ import annotations

from ranged_ammo.actions.services import (
    ActionResult,
    ActionServices,
    BaseNotifier,
    BaseSelector,
    BaseTemplateSource,
    aborted,
    apply_and_broadcast,
    choose_weapon,
    select_loaded_ammunition,
)
from ranged_ammo.actions.conjure import conjure_bullet, perform_conjure_bullet
from ranged_ammo.actions.unload import perform_unload, unload
from ranged_ammo.actions.consolidate import consolidate_ammunition


__all__ = [
    # Services
    "ActionResult",
    "ActionServices",
    "BaseNotifier",
    "BaseSelector",
    "BaseTemplateSource",
    "aborted",
    "apply_and_broadcast",
    "choose_weapon",
    "select_loaded_ammunition",
    # Actions
    "conjure_bullet",
    "consolidate_ammunition",
    "perform_conjure_bullet",
    "perform_unload",
    "unload",
]
