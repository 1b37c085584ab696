"""Consolidate Ammunition action."""

from __future__ import annotations

from ranged_ammo.actions.services import ActionResult, ActionServices, apply_and_broadcast
from ranged_ammo.core.constants import format_message
from ranged_ammo.core.logging import bind_context, clear_context, get_logger
from ranged_ammo.engine.consolidation import consolidate_stacks, group_ammunition_stacks
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import ActionName, ActionStatus


logger = get_logger(__name__)


def consolidate_ammunition(actor: Actor, services: ActionServices) -> ActionResult:
    """Merge the actor's partly used magazines into canonical stacks.

    Args:
        actor: The acting actor.
        services: Action collaborators.

    Returns:
        The action outcome; NOTHING_TO_DO when every kind is already
        consolidated.

    Raises:
        InvalidMarkerStateError: If a kind mixes charges per item.
        TemplateNotFoundError: If a new partial stack cannot be created.
        PersistenceError: If the changes cannot be applied.
    """
    bind_context(actor_id=actor.id, action=ActionName.CONSOLIDATE.value)
    try:
        groups = group_ammunition_stacks(actor)
        ledger = services.new_ledger(actor)
        plans = consolidate_stacks(actor, ledger, services.templates)

        if not ledger.has_changes():
            message = format_message("consolidate.infoAlreadyConsolidated")
            services.notifier.show_info(message)
            return ActionResult(
                action=ActionName.CONSOLIDATE,
                status=ActionStatus.NOTHING_TO_DO,
                actor_id=actor.id,
                message=message,
            )

        first_stack = next(iter(groups.values()))[0]
        services.post_message(
            actor,
            first_stack.img,
            format_message("consolidate.chatMessage", actor=actor.name),
            num_actions=1,
        )

        logger.info("Consolidating ammunition", kinds=[plan.source_id for plan in plans])
        return apply_and_broadcast(ActionName.CONSOLIDATE, actor, ledger, services)
    finally:
        clear_context()


__all__ = ["consolidate_ammunition"]
