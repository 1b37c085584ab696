"""Ammunition engine for the ranged ammunition system.

Submodules:
    ledger: UpdateLedger staging the operations of one action
    loading: Loading state model (is loaded, fully loaded, loaded ammunition)
    transfer: Loading, firing and unloading rounds
    consolidation: Merging partly used multi-charge stacks
    events: Hooks and action-completion events

Example:
    >>> from ranged_ammo.engine import UpdateLedger, remove_rounds
    >>> ledger = UpdateLedger(actor.id)
    >>> remove_rounds(actor, weapon, ledger)
    >>> ledger.apply(persistence)
"""

from __future__ import annotations

# =============================================================================
# Ledger
# =============================================================================
from ranged_ammo.engine.ledger import (
    BasePersistence,
    CreateOperation,
    DeleteOperation,
    NotifyOperation,
    Operation,
    Record,
    UpdateLedger,
    UpdateOperation,
    merge_patch,
)

# =============================================================================
# Loading State Model
# =============================================================================
from ranged_ammo.engine.loading import (
    check_fully_loaded,
    conjured_round_entry,
    is_fully_loaded,
    is_loaded,
    is_weapon_loaded,
    list_loaded_ammunition,
    rounds_loaded,
)

# =============================================================================
# Transfer Engine
# =============================================================================
from ranged_ammo.engine.transfer import (
    build_loaded_description,
    build_loaded_name,
    clear_loaded_chamber,
    load_round,
    move_ammunition_to_inventory,
    remove_named_ammunition,
    remove_rounds,
    remove_rounds_from_marker,
    set_loaded_chamber,
    unload_magazine,
    update_ammunition_quantity,
)

# =============================================================================
# Consolidation Engine
# =============================================================================
from ranged_ammo.engine.consolidation import (
    ConsolidationPlan,
    consolidate_stacks,
    group_ammunition_stacks,
    is_consolidated,
    plan_consolidation,
    stage_consolidation,
)

# =============================================================================
# Events
# =============================================================================
from ranged_ammo.engine.events import (
    ACTION_COMPLETED_HOOK,
    RELOAD_HOOK,
    ActionEvent,
    EventBus,
)


__all__ = [
    # Ledger
    "BasePersistence",
    "CreateOperation",
    "DeleteOperation",
    "NotifyOperation",
    "Operation",
    "Record",
    "UpdateLedger",
    "UpdateOperation",
    "merge_patch",
    # Loading
    "check_fully_loaded",
    "conjured_round_entry",
    "is_fully_loaded",
    "is_loaded",
    "is_weapon_loaded",
    "list_loaded_ammunition",
    "rounds_loaded",
    # Transfer
    "build_loaded_description",
    "build_loaded_name",
    "clear_loaded_chamber",
    "load_round",
    "move_ammunition_to_inventory",
    "remove_named_ammunition",
    "remove_rounds",
    "remove_rounds_from_marker",
    "set_loaded_chamber",
    "unload_magazine",
    "update_ammunition_quantity",
    # Consolidation
    "ConsolidationPlan",
    "consolidate_stacks",
    "group_ammunition_stacks",
    "is_consolidated",
    "plan_consolidation",
    "stage_consolidation",
    # Events
    "ACTION_COMPLETED_HOOK",
    "RELOAD_HOOK",
    "ActionEvent",
    "EventBus",
]
