"""Ammunition transfer engine.

Computes what changes when rounds are loaded into, fired from or
unloaded out of a weapon, and stages those changes on an UpdateLedger.
Functions read the actor's current records and never mutate them.

Each function assumes the actor reflects every ledger applied so far:
stage one logical load or removal per marker per ledger.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ranged_ammo.core.constants import (
    CHAMBER_MARKER_IMG,
    CHAMBER_MARKER_NAME,
    CONJURED_ROUND_ITEM_ID,
    LOADED_MARKER_IMG,
    LOADED_MARKER_NAME,
)
from ranged_ammo.core.exceptions import InvalidMarkerStateError
from ranged_ammo.core.logging import get_logger
from ranged_ammo.models.enums import MarkerKind, RecordType
from ranged_ammo.models.items import Uses
from ranged_ammo.models.markers import (
    AmmunitionEntry,
    CapacityLoadMarker,
    ChamberMarker,
    ConjuredRoundMarker,
    MagazineLoadMarker,
    SimpleLoadMarker,
)


if TYPE_CHECKING:
    from ranged_ammo.actions.services import BaseTemplateSource
    from ranged_ammo.engine.ledger import UpdateLedger
    from ranged_ammo.models.actor import Actor
    from ranged_ammo.models.items import AmmunitionStack, Weapon
    from ranged_ammo.models.markers import Marker


logger = get_logger(__name__)


# =============================================================================
# Capacity Marker Presentation
# =============================================================================


def build_loaded_name(
    marker: CapacityLoadMarker,
    ammunition: list[AmmunitionEntry] | None = None,
) -> str:
    """Build the display name of a capacity marker.

    Args:
        marker: The capacity marker.
        ammunition: Entries to describe instead of the marker's own.

    Returns:
        ``"<original name> (<loaded>/<capacity>)"``. Untracked markers
        keep their current name.
    """
    entries = marker.ammunition if ammunition is None else ammunition
    if not entries:
        return marker.name
    loaded = sum(entry.quantity for entry in entries)
    return f"{marker.original_name} ({loaded}/{marker.capacity})"


def build_loaded_description(
    marker: CapacityLoadMarker,
    ammunition: list[AmmunitionEntry] | None = None,
) -> str:
    """Build the description of a capacity marker.

    The original description is followed by one line per entry, in
    entry order: ``"<ammunition name> x<quantity>"``.
    """
    entries = marker.ammunition if ammunition is None else ammunition
    if not entries:
        return marker.description
    lines = [f"{entry.name} x{entry.quantity}" for entry in entries]
    if marker.original_description:
        lines.insert(0, marker.original_description)
    return "\n".join(lines)


def _capacity_patch(marker: CapacityLoadMarker, entries: list[AmmunitionEntry], loaded: int) -> dict[str, Any]:
    patch: dict[str, Any] = {
        "loaded_chambers": loaded,
        "ammunition": [entry.model_dump() for entry in entries],
    }
    if entries:
        patch["name"] = build_loaded_name(marker, entries)
        patch["description"] = build_loaded_description(marker, entries)
    else:
        patch["name"] = f"{marker.original_name} ({loaded}/{marker.capacity})"
    return patch


# =============================================================================
# Inventory Quantities
# =============================================================================


def update_ammunition_quantity(ledger: UpdateLedger, stack: AmmunitionStack, delta: int) -> None:
    """Stage a quantity change on an ammunition stack.

    Multi-charge consumables that destroy themselves when empty move
    through ``uses.value`` first: spending the last charge of the open
    item discards it and opens the next one; returning charges past the
    maximum opens a new item. Everything else changes ``quantity``.

    Args:
        ledger: Ledger to stage the change on.
        stack: The stack to change.
        delta: Rounds added (positive) or removed (negative).
    """
    uses = stack.uses
    if stack.record_type == RecordType.CONSUMABLE and uses.auto_destroy and uses.max > 1:
        new_value = uses.value + delta
        if new_value > uses.max:
            extra_items, remainder = divmod(new_value - 1, uses.max)
            ledger.update(
                stack,
                {"quantity": stack.quantity + extra_items, "uses": {"value": remainder + 1}},
            )
        elif new_value > 0:
            ledger.update(stack, {"uses": {"value": new_value}})
        else:
            # The open item is spent, move on to the next one
            ledger.update(
                stack,
                {"quantity": max(stack.quantity - 1, 0), "uses": {"value": uses.max}},
            )
    else:
        ledger.update(stack, {"quantity": max(stack.quantity + delta, 0)})


def move_ammunition_to_inventory(
    actor: Actor,
    ammunition: AmmunitionEntry,
    ledger: UpdateLedger,
    templates: BaseTemplateSource,
) -> None:
    """Return one unloaded round to the actor's inventory.

    The round goes back to the stack it came from, else to another
    stack of the same ammunition, else into a new stack of one.

    Raises:
        TemplateNotFoundError: If a new stack is needed and the
            ammunition template is unknown.
    """
    stacks = actor.ammunition_stacks()
    stack = next((item for item in stacks if item.uid == ammunition.id), None)
    if stack is None:
        stack = next((item for item in stacks if item.source_id == ammunition.source_id), None)

    if stack is not None:
        update_ammunition_quantity(ledger, stack, +1)
        return

    template = templates.fetch_template(ammunition.source_id)
    template.quantity = 1
    ledger.create(template.to_stack())
    logger.debug("Returned round to a new stack", source_id=ammunition.source_id)


# =============================================================================
# Chamber Marker
# =============================================================================


def set_loaded_chamber(
    actor: Actor,
    weapon: Weapon,
    ammunition: AmmunitionEntry,
    ledger: UpdateLedger,
) -> None:
    """Mark which ammunition a capacity weapon fires next."""
    entry = ammunition.model_copy(update={"quantity": 1})
    name = f"{CHAMBER_MARKER_NAME} ({ammunition.name})"

    chamber = actor.find_marker(MarkerKind.CHAMBER, weapon.id)
    if chamber is not None:
        ledger.update(chamber, {"ammunition": entry.model_dump(), "name": name})
    else:
        ledger.create(
            ChamberMarker(
                weapon_id=weapon.id,
                name=name,
                img=CHAMBER_MARKER_IMG,
                ammunition=entry,
            )
        )


def clear_loaded_chamber(
    actor: Actor,
    weapon: Weapon,
    ledger: UpdateLedger,
    ammunition: AmmunitionEntry | None = None,
) -> None:
    """Remove the chamber marker of a weapon.

    Args:
        actor: The weapon's owner.
        weapon: The weapon.
        ledger: Ledger to stage the deletion on.
        ammunition: Only clear the chamber if it holds this ammunition.
            None clears it unconditionally.
    """
    chamber = actor.find_marker(MarkerKind.CHAMBER, weapon.id)
    if chamber is None:
        return
    if ammunition is None or chamber.ammunition.source_id == ammunition.source_id:
        ledger.delete(chamber)


# =============================================================================
# Loading
# =============================================================================


def load_round(
    actor: Actor,
    weapon: Weapon,
    ledger: UpdateLedger,
    ammunition: AmmunitionEntry | None = None,
    *,
    source_stack: AmmunitionStack | None = None,
) -> None:
    """Load one physical round into a weapon.

    Capacity weapons gain a chamber, merging the round into the entry
    with the same ammunition or appending a new entry. Other weapons
    get their simple load marker set or replaced.

    The weapon must not be fully loaded; callers check that first.

    Args:
        actor: The weapon's owner.
        weapon: The weapon to load.
        ledger: Ledger to stage the changes on.
        ammunition: The round being loaded. None loads an untracked round.
        source_stack: Inventory stack the round is taken from, if any.
    """
    entry = ammunition.model_copy(update={"quantity": 1}) if ammunition is not None else None

    if weapon.is_capacity:
        _load_capacity_round(actor, weapon, ledger, entry)
    else:
        marker = actor.find_load_marker(weapon.id)
        if marker is not None:
            ledger.update(marker, {"ammunition": entry.model_dump() if entry else None})
        else:
            ledger.create(
                SimpleLoadMarker(
                    weapon_id=weapon.id,
                    name=f"{LOADED_MARKER_NAME} ({weapon.name})",
                    img=LOADED_MARKER_IMG,
                    ammunition=entry,
                )
            )

    if source_stack is not None:
        update_ammunition_quantity(ledger, source_stack, -1)


def _load_capacity_round(
    actor: Actor,
    weapon: Weapon,
    ledger: UpdateLedger,
    entry: AmmunitionEntry | None,
) -> None:
    marker = actor.find_load_marker(weapon.id)
    original_name = f"{LOADED_MARKER_NAME} ({weapon.name})"

    if marker is None:
        new_marker = CapacityLoadMarker(
            weapon_id=weapon.id,
            name=f"{original_name} (1/{weapon.capacity})",
            img=LOADED_MARKER_IMG,
            capacity=weapon.capacity,
            loaded_chambers=1,
            ammunition=[entry] if entry else [],
            original_name=original_name,
        )
        ledger.create(
            new_marker.model_copy(update={"description": build_loaded_description(new_marker)})
        )
        return

    if not isinstance(marker, CapacityLoadMarker):
        raise InvalidMarkerStateError(
            "Capacity weapon carries a simple load marker",
            actor_id=actor.id,
            weapon_id=weapon.id,
        )

    loaded = marker.loaded_chambers + 1
    if not marker.is_tracked:
        # Chambers loaded without tracking stay untracked
        ledger.update(marker, _capacity_patch(marker, [], loaded))
        return
    if entry is None:
        raise InvalidMarkerStateError(
            "Cannot load an untracked round into tracked chambers",
            actor_id=actor.id,
            weapon_id=weapon.id,
        )

    entries = list(marker.ammunition)
    for index, existing in enumerate(entries):
        if existing.source_id == entry.source_id:
            entries[index] = existing.model_copy(update={"quantity": existing.quantity + 1})
            break
    else:
        entries.append(entry)

    ledger.update(marker, _capacity_patch(marker, entries, loaded))


# =============================================================================
# Removal
# =============================================================================


def remove_rounds(
    actor: Actor,
    weapon: Weapon,
    ledger: UpdateLedger,
    count: int = 1,
) -> None:
    """Remove rounds from a weapon's load marker, as when firing.

    Does nothing when the weapon has no simple or capacity load marker.

    Args:
        actor: The weapon's owner.
        weapon: The weapon.
        ledger: Ledger to stage the changes on.
        count: Number of rounds to remove.
    """
    marker = actor.find_load_marker(weapon.id)
    if marker is None:
        return
    remove_rounds_from_marker(actor, weapon, marker, ledger, count)


def remove_rounds_from_marker(
    actor: Actor,
    weapon: Weapon,
    marker: Marker,
    ledger: UpdateLedger,
    count: int = 1,
    templates: BaseTemplateSource | None = None,
) -> None:
    """Remove rounds from one marker of a weapon.

    A magazine that lost any round is never put back on its source
    stack; it becomes a new item holding what is left.

    Args:
        actor: The weapon's owner.
        weapon: The weapon.
        marker: The marker losing rounds.
        ledger: Ledger to stage the changes on.
        count: Number of rounds to remove. Simple and conjured markers
            always hold exactly one.
        templates: Template source, required for magazine markers that
            may recreate their ammunition stack.

    Raises:
        InvalidMarkerStateError: For chamber markers, which hold no
            rounds, or magazines without a template source.
    """
    if isinstance(marker, CapacityLoadMarker):
        _remove_capacity_rounds(actor, weapon, marker, ledger, count)
    elif isinstance(marker, SimpleLoadMarker):
        ledger.delete(marker)
    elif isinstance(marker, MagazineLoadMarker):
        if templates is None:
            raise InvalidMarkerStateError(
                "Removing rounds from a magazine needs a template source",
                actor_id=actor.id,
                weapon_id=weapon.id,
            )
        _remove_magazine_rounds(actor, marker, ledger, count, templates)
    elif isinstance(marker, ConjuredRoundMarker):
        ledger.delete(marker)
        if weapon.is_capacity:
            clear_loaded_chamber(
                actor,
                weapon,
                ledger,
                AmmunitionEntry(id=CONJURED_ROUND_ITEM_ID, source_id=CONJURED_ROUND_ITEM_ID, name=marker.name),
            )
    else:
        raise InvalidMarkerStateError(
            f"Cannot remove rounds from a {marker.kind} marker",
            actor_id=actor.id,
            weapon_id=weapon.id,
        )


def _remove_capacity_rounds(
    actor: Actor,
    weapon: Weapon,
    marker: CapacityLoadMarker,
    ledger: UpdateLedger,
    count: int,
) -> None:
    loaded = marker.loaded_chambers - count
    if loaded <= 0:
        ledger.delete(marker)
        clear_loaded_chamber(actor, weapon, ledger)
        return

    # Tracked rounds leave in storage order
    entries: list[AmmunitionEntry] = []
    to_remove = count if marker.is_tracked else 0
    for entry in marker.ammunition:
        taken = min(entry.quantity, to_remove)
        to_remove -= taken
        if taken == entry.quantity:
            clear_loaded_chamber(actor, weapon, ledger, entry)
        else:
            entries.append(entry.model_copy(update={"quantity": entry.quantity - taken}))

    patch = _capacity_patch(marker, entries, loaded)
    ledger.update(marker, patch)
    ledger.notify(patch["name"])


def _remove_magazine_rounds(
    actor: Actor,
    marker: MagazineLoadMarker,
    ledger: UpdateLedger,
    count: int,
    templates: BaseTemplateSource,
) -> None:
    remaining = marker.remaining - count
    source_stack = actor.get_item(marker.ammunition_item_id)
    if source_stack is not None and source_stack.is_stowed:
        source_stack = None

    if remaining == marker.capacity and source_stack is not None:
        # The magazine was never used: put it back on the stack it came from
        ledger.update(source_stack, {"quantity": source_stack.quantity + 1})
    elif remaining > 0:
        template = templates.fetch_template(marker.ammunition_source_id)
        template.quantity = 1
        template.uses = Uses(
            value=remaining,
            max=max(template.uses.max, remaining),
            auto_destroy=template.uses.auto_destroy,
        )
        ledger.create(template.to_stack())

    ledger.delete(marker)
    logger.debug(
        "Removed magazine",
        weapon_id=marker.weapon_id,
        remaining=max(remaining, 0),
        restored=remaining == marker.capacity and source_stack is not None,
    )


def unload_magazine(
    actor: Actor,
    weapon: Weapon,
    marker: MagazineLoadMarker,
    ledger: UpdateLedger,
    templates: BaseTemplateSource,
) -> None:
    """Take the magazine out of a repeating weapon.

    Remaining rounds return to inventory: an untouched magazine goes
    back onto its original stack, a partly used one becomes a new
    stack. The weapon's load marker is removed as well.

    Raises:
        TemplateNotFoundError: If a new stack is needed and the magazine
            template is unknown.
    """
    _remove_magazine_rounds(actor, marker, ledger, 0, templates)

    load_marker = actor.find_load_marker(weapon.id)
    if load_marker is not None:
        ledger.delete(load_marker)


def remove_named_ammunition(
    actor: Actor,
    weapon: Weapon,
    ammunition: AmmunitionEntry,
    ledger: UpdateLedger,
) -> None:
    """Remove one round of a specific ammunition from a capacity weapon.

    Used when several kinds of ammunition are loaded and the user chose
    which one to unload.

    Raises:
        InvalidMarkerStateError: If the weapon has no tracked capacity
            marker holding that ammunition.
    """
    marker = actor.find_load_marker(weapon.id)
    if not isinstance(marker, CapacityLoadMarker):
        raise InvalidMarkerStateError(
            "Weapon has no capacity marker to remove ammunition from",
            actor_id=actor.id,
            weapon_id=weapon.id,
        )

    entries = list(marker.ammunition)
    for index, entry in enumerate(entries):
        if entry.source_id == ammunition.source_id:
            break
    else:
        raise InvalidMarkerStateError(
            f"{ammunition.name} is not loaded",
            actor_id=actor.id,
            weapon_id=weapon.id,
            details={"source_id": ammunition.source_id},
        )

    if entry.quantity > 1:
        entries[index] = entry.model_copy(update={"quantity": entry.quantity - 1})
    else:
        del entries[index]
        clear_loaded_chamber(actor, weapon, ledger, entry)

    loaded = sum(remaining.quantity for remaining in entries)
    ledger.notify(f"{marker.original_name} ({loaded}/{marker.capacity})")

    if entries:
        ledger.update(marker, _capacity_patch(marker, entries, loaded))
    else:
        ledger.delete(marker)


__all__ = [
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
]
