"""Conjure Bullet action.

Conjures a single ephemeral round into a weapon that needs loading. The
round lives in its own marker, never comes from inventory and never
returns to it.
"""

from __future__ import annotations

from ranged_ammo.actions.services import (
    ActionResult,
    ActionServices,
    aborted,
    apply_and_broadcast,
    choose_weapon,
)
from ranged_ammo.core.constants import (
    CONJURE_BULLET_ACTION_ID,
    CONJURE_BULLET_IMG,
    CONJURED_ROUND_EFFECT_ID,
    format_message,
)
from ranged_ammo.core.logging import bind_context, clear_context, get_logger
from ranged_ammo.engine.events import RELOAD_HOOK
from ranged_ammo.engine.loading import check_fully_loaded, conjured_round_entry, is_fully_loaded
from ranged_ammo.engine.transfer import set_loaded_chamber
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import ActionName, ActionStatus, MarkerKind
from ranged_ammo.models.items import Weapon
from ranged_ammo.models.markers import ConjuredRoundMarker


logger = get_logger(__name__)


def _can_conjure_into(weapon: Weapon) -> bool:
    return weapon.requires_loading and not weapon.is_repeating


def conjure_bullet(actor: Actor, services: ActionServices) -> ActionResult:
    """Conjure a round into one of the actor's weapons.

    Checks the preconditions, asks which weapon when several qualify and
    then runs perform_conjure_bullet().

    Args:
        actor: The acting actor.
        services: Action collaborators.

    Returns:
        The action outcome. Failed preconditions abort with a warning.
    """
    action = ActionName.CONJURE

    if not actor.has_action(CONJURE_BULLET_ACTION_ID):
        message = format_message("conjureBullet.warningNoAction", actor=actor.name)
        services.warn(message)
        return aborted(action, actor, message)

    no_weapons = format_message("conjureBullet.noReloadableWeapons")
    weapon = choose_weapon(
        actor,
        services,
        _can_conjure_into,
        no_weapons,
        priority=lambda weapon: not is_fully_loaded(actor, weapon),
    )
    if weapon is None:
        if any(_can_conjure_into(weapon) for weapon in actor.weapons):
            return ActionResult(action=action, status=ActionStatus.CANCELLED, actor_id=actor.id)
        return aborted(action, actor, no_weapons)

    if actor.find_marker(MarkerKind.CONJURED_ROUND, weapon.id) is not None:
        message = format_message("conjureBullet.warningSingleRound", weapon=weapon.name)
        services.warn(message)
        return aborted(action, actor, message, weapon)

    if check_fully_loaded(actor, weapon, services.notifier):
        key = "utils.warningFullyLoaded" if weapon.is_capacity else "utils.warningLoaded"
        return aborted(action, actor, format_message(key, weapon=weapon.name), weapon)

    return perform_conjure_bullet(actor, weapon, services)


def perform_conjure_bullet(actor: Actor, weapon: Weapon, services: ActionServices) -> ActionResult:
    """Conjure a round into a specific weapon without checking preconditions.

    Raises:
        TemplateNotFoundError: If the conjured round template is unknown.
        PersistenceError: If the changes cannot be applied.
    """
    bind_context(actor_id=actor.id, weapon_id=weapon.id, action=ActionName.CONJURE.value)
    try:
        ledger = services.new_ledger(actor)

        template = services.templates.fetch_template(CONJURED_ROUND_EFFECT_ID)
        duration = template.duration_rounds
        if not actor.in_combat:
            # Outside combat the round would expire immediately
            duration = services.settings.ammunition.conjured_round_duration_rounds

        ledger.create(
            ConjuredRoundMarker(
                weapon_id=weapon.id,
                name=template.name,
                img=template.img or CONJURE_BULLET_IMG,
                description=template.description,
                duration_rounds=duration,
            )
        )

        if weapon.is_capacity:
            set_loaded_chamber(
                actor,
                weapon,
                conjured_round_entry(name=template.name, img=CONJURE_BULLET_IMG),
                ledger,
            )

        services.post_message(
            actor,
            CONJURE_BULLET_IMG,
            format_message("conjureBullet.chatMessage", actor=actor.name, weapon=weapon.name),
            action_name=format_message("conjureBullet.chatActionName"),
            num_actions=1,
            traits=("magical", "manipulate"),
        )

        services.events.call(RELOAD_HOOK, weapon=weapon, ledger=ledger)

        logger.info("Conjured round", duration_rounds=duration, in_combat=actor.in_combat)
        return apply_and_broadcast(ActionName.CONJURE, actor, ledger, services, weapon)
    finally:
        clear_context()


__all__ = [
    "conjure_bullet",
    "perform_conjure_bullet",
]
