"""Unload action.

Under the simple ammunition system unloading only removes the loaded
state. Under the advanced system physical rounds and magazines go back
to the actor's inventory, while conjured rounds simply vanish.
"""

from __future__ import annotations

from ranged_ammo.actions.services import (
    ActionResult,
    ActionServices,
    aborted,
    apply_and_broadcast,
    choose_weapon,
    select_loaded_ammunition,
)
from ranged_ammo.core.constants import CONJURED_ROUND_ITEM_ID, format_message
from ranged_ammo.core.logging import bind_context, clear_context, get_logger
from ranged_ammo.engine.ledger import UpdateLedger
from ranged_ammo.engine.loading import is_weapon_loaded, list_loaded_ammunition
from ranged_ammo.engine.transfer import (
    move_ammunition_to_inventory,
    remove_named_ammunition,
    remove_rounds,
    remove_rounds_from_marker,
    unload_magazine,
)
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import ActionName, ActionStatus, MarkerKind
from ranged_ammo.models.items import Weapon
from ranged_ammo.models.markers import AmmunitionEntry


logger = get_logger(__name__)


def unload(actor: Actor, services: ActionServices) -> ActionResult:
    """Unload one of the actor's loaded weapons.

    Args:
        actor: The acting actor.
        services: Action collaborators.

    Returns:
        The action outcome.
    """
    advanced = services.use_advanced_system(actor)
    no_weapons = format_message("unload.noLoadedWeapons")

    def can_unload(weapon: Weapon) -> bool:
        return is_weapon_loaded(actor, weapon, advanced=advanced)

    weapon = choose_weapon(actor, services, can_unload, no_weapons)
    if weapon is None:
        if any(can_unload(weapon) for weapon in actor.weapons):
            return ActionResult(action=ActionName.UNLOAD, status=ActionStatus.CANCELLED, actor_id=actor.id)
        return aborted(ActionName.UNLOAD, actor, no_weapons)

    return perform_unload(actor, weapon, services)


def perform_unload(actor: Actor, weapon: Weapon, services: ActionServices) -> ActionResult:
    """Unload a specific weapon.

    Raises:
        TemplateNotFoundError: If a returned round needs a new stack and
            its template is unknown.
        PersistenceError: If the changes cannot be applied.
    """
    load_marker = actor.find_load_marker(weapon.id)
    conjured_round = actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id)
    magazine = actor.find_marker(MarkerKind.MAGAZINE, weapon.id)
    advanced = services.use_advanced_system(actor)

    has_magazine = magazine is not None and advanced and weapon.is_repeating
    if load_marker is None and conjured_round is None and not has_magazine:
        message = format_message("unload.warningNotLoaded", weapon=weapon.name)
        services.warn(message)
        return aborted(ActionName.UNLOAD, actor, message, weapon)

    bind_context(actor_id=actor.id, weapon_id=weapon.id, action=ActionName.UNLOAD.value)
    try:
        ledger = services.new_ledger(actor)

        if not advanced:
            remove_rounds_from_marker(actor, weapon, load_marker or conjured_round, ledger)
            img = (load_marker or conjured_round).img
            services.post_message(
                actor,
                img,
                format_message("unload.tokenUnloadsWeapon", actor=actor.name, weapon=weapon.name),
                num_actions=1,
            )
        elif weapon.is_repeating:
            _unload_repeating(actor, weapon, ledger, services)
        elif weapon.is_capacity:
            ammunition = select_loaded_ammunition(actor, weapon, services, "unload")
            if ammunition is None and list_loaded_ammunition(actor, weapon):
                logger.debug("Ammunition selection cancelled")
                return ActionResult(
                    action=ActionName.UNLOAD,
                    status=ActionStatus.CANCELLED,
                    actor_id=actor.id,
                    weapon_id=weapon.id,
                )
            _unload_capacity(actor, weapon, ammunition, ledger, services)
        else:
            _unload_single(actor, weapon, ledger, services)

        return apply_and_broadcast(ActionName.UNLOAD, actor, ledger, services, weapon)
    finally:
        clear_context()


def _unload_repeating(actor: Actor, weapon: Weapon, ledger: UpdateLedger, services: ActionServices) -> None:
    load_marker = actor.find_load_marker(weapon.id)
    if load_marker is not None:
        ledger.delete(load_marker)

    magazine = actor.find_marker(MarkerKind.MAGAZINE, weapon.id)
    if magazine is None:
        return

    unload_magazine(actor, weapon, magazine, ledger, services.templates)
    services.post_message(
        actor,
        magazine.img,
        format_message(
            "unload.tokenUnloadsAmmunitionFromWeapon",
            actor=actor.name,
            ammunition=magazine.ammunition_name,
            weapon=weapon.name,
        ),
        num_actions=1,
    )


def _unload_capacity(
    actor: Actor,
    weapon: Weapon,
    ammunition: AmmunitionEntry | None,
    ledger: UpdateLedger,
    services: ActionServices,
) -> None:
    if ammunition is None:
        # Untracked chambers: nothing to return to inventory
        remove_rounds(actor, weapon, ledger)
        services.post_message(
            actor,
            actor.find_load_marker(weapon.id).img,
            format_message("unload.tokenUnloadsWeapon", actor=actor.name, weapon=weapon.name),
            num_actions=1,
        )
        return

    if ammunition.source_id == CONJURED_ROUND_ITEM_ID:
        conjured_round = actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id)
        remove_rounds_from_marker(actor, weapon, conjured_round, ledger)
    else:
        move_ammunition_to_inventory(actor, ammunition, ledger, services.templates)
        remove_named_ammunition(actor, weapon, ammunition, ledger)

    services.post_message(
        actor,
        ammunition.img,
        format_message(
            "unload.tokenUnloadsAmmunitionFromWeapon",
            actor=actor.name,
            ammunition=ammunition.name,
            weapon=weapon.name,
        ),
        num_actions=1,
    )


def _unload_single(actor: Actor, weapon: Weapon, ledger: UpdateLedger, services: ActionServices) -> None:
    conjured_round = actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id)
    if conjured_round is not None:
        remove_rounds_from_marker(actor, weapon, conjured_round, ledger)
        img = conjured_round.img
        text = format_message(
            "unload.tokenUnloadsAmmunitionFromWeapon",
            actor=actor.name,
            ammunition=format_message("conjureBullet.conjuredRound"),
            weapon=weapon.name,
        )
    else:
        load_marker = actor.find_load_marker(weapon.id)
        if load_marker.ammunition is not None:
            move_ammunition_to_inventory(actor, load_marker.ammunition, ledger, services.templates)
            text = format_message(
                "unload.tokenUnloadsAmmunitionFromWeapon",
                actor=actor.name,
                ammunition=load_marker.ammunition.name,
                weapon=weapon.name,
            )
        else:
            text = format_message("unload.tokenUnloadsWeapon", actor=actor.name, weapon=weapon.name)
        remove_rounds(actor, weapon, ledger)
        img = load_marker.img

    services.post_message(actor, img, text, num_actions=1)


__all__ = [
    "perform_unload",
    "unload",
]
