"""Loading state model.

Pure reads over a weapon's markers answering whether it is loaded,
whether it is fully loaded and which ammunition it holds. Nothing here
stages operations except check_fully_loaded, which only warns.

Callers must gate on ``weapon.requires_loading`` before offering load
or unload actions: a weapon that needs no loading never carries load
markers and is reported as not loaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ranged_ammo.core.constants import (
    CONJURE_BULLET_IMG,
    CONJURED_ROUND_ITEM_ID,
    format_message,
)
from ranged_ammo.models.enums import MarkerKind
from ranged_ammo.models.markers import AmmunitionEntry, CapacityLoadMarker


if TYPE_CHECKING:
    from ranged_ammo.actions.services import BaseNotifier
    from ranged_ammo.models.actor import Actor
    from ranged_ammo.models.items import Weapon


def is_loaded(actor: Actor, weapon: Weapon) -> bool:
    """Check whether a weapon holds a loaded or conjured round.

    Args:
        actor: The weapon's owner.
        weapon: The weapon to inspect.

    Returns:
        True if a simple/capacity load marker or a conjured round exists.
    """
    load_marker = actor.find_load_marker(weapon.id)
    conjured_round = actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id)
    return load_marker is not None or conjured_round is not None


def rounds_loaded(actor: Actor, weapon: Weapon) -> int:
    """Count the rounds currently loaded into a weapon.

    A capacity marker contributes its loaded chambers, a simple marker
    one round, and a conjured round always exactly one more.
    """
    count = 0

    load_marker = actor.find_load_marker(weapon.id)
    if isinstance(load_marker, CapacityLoadMarker):
        count += load_marker.loaded_chambers
    elif load_marker is not None:
        count += 1

    if actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id) is not None:
        count += 1

    return count


def is_fully_loaded(actor: Actor, weapon: Weapon) -> bool:
    """Check whether a weapon can take no more rounds.

    Capacity weapons are full once the loaded rounds reach capacity;
    any other weapon is full as soon as it holds a round.
    """
    loaded = rounds_loaded(actor, weapon)
    if weapon.is_capacity:
        return loaded >= weapon.capacity
    return loaded > 0


def check_fully_loaded(actor: Actor, weapon: Weapon, notifier: BaseNotifier) -> bool:
    """Warn the user when a weapon is already fully loaded.

    Args:
        actor: The weapon's owner.
        weapon: The weapon about to be loaded.
        notifier: Where the warning is shown.

    Returns:
        True if the weapon is fully loaded and the caller must abort.
    """
    fully_loaded = is_fully_loaded(actor, weapon)
    if fully_loaded:
        if weapon.is_capacity:
            notifier.show_warning(format_message("utils.warningFullyLoaded", weapon=weapon.name))
        else:
            notifier.show_warning(format_message("utils.warningLoaded", weapon=weapon.name))
    return fully_loaded


def conjured_round_entry(name: str | None = None, img: str | None = None) -> AmmunitionEntry:
    """Build the synthetic entry standing for a conjured round."""
    return AmmunitionEntry(
        id=CONJURED_ROUND_ITEM_ID,
        source_id=CONJURED_ROUND_ITEM_ID,
        name=name or format_message("conjureBullet.conjuredRound"),
        img=img or CONJURE_BULLET_IMG,
        quantity=1,
    )


def list_loaded_ammunition(actor: Actor, weapon: Weapon) -> list[AmmunitionEntry]:
    """List the ammunition loaded into a weapon.

    Capacity entries come first, in storage order, followed by a
    conjured round entry when the weapon holds one.

    Args:
        actor: The weapon's owner.
        weapon: The weapon to inspect.

    Returns:
        The loaded ammunition entries.
    """
    ammunition: list[AmmunitionEntry] = []

    load_marker = actor.find_load_marker(weapon.id)
    if isinstance(load_marker, CapacityLoadMarker):
        ammunition.extend(load_marker.ammunition)
    elif load_marker is not None and load_marker.ammunition is not None:
        ammunition.append(load_marker.ammunition)

    conjured_round = actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id)
    if conjured_round is not None:
        ammunition.append(conjured_round_entry(img=conjured_round.img))

    return ammunition


def is_weapon_loaded(actor: Actor, weapon: Weapon, *, advanced: bool) -> bool:
    """Check whether a weapon has anything that can be unloaded.

    Under the advanced system a repeating weapon is loaded exactly when
    it holds a magazine. Other weapons must require loading and hold a
    loaded or conjured round.

    Args:
        actor: The weapon's owner.
        weapon: The weapon to inspect.
        advanced: Whether the advanced ammunition system is in use.
    """
    if advanced and weapon.is_repeating:
        return actor.find_marker(MarkerKind.MAGAZINE, weapon.id) is not None
    if weapon.requires_loading:
        return is_loaded(actor, weapon)
    return False


__all__ = [
    "check_fully_loaded",
    "conjured_round_entry",
    "is_fully_loaded",
    "is_loaded",
    "is_weapon_loaded",
    "list_loaded_ammunition",
    "rounds_loaded",
]
