"""Stack consolidation engine.

Repeating weapons leave partly used magazines behind. Consolidation
merges the multi-charge ammunition stacks of each kind into a canonical
form: one stack of fully charged items and at most one single item
holding the remaining charges. Total charges never change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ranged_ammo.core.exceptions import InvalidMarkerStateError
from ranged_ammo.core.logging import get_logger
from ranged_ammo.models.items import Uses


if TYPE_CHECKING:
    from ranged_ammo.actions.services import BaseTemplateSource
    from ranged_ammo.engine.ledger import UpdateLedger
    from ranged_ammo.models.actor import Actor
    from ranged_ammo.models.items import AmmunitionStack


logger = get_logger(__name__)


@dataclass
class ConsolidationPlan:
    """Target shape of one ammunition kind.

    Attributes:
        source_id: Template identity of the ammunition kind.
        total_charges: Charges across every stack of the kind.
        charges_per_item: Charges of one full item.
        full_items: Quantity of the fully charged stack.
        remainder: Charges of the single partial item, 0 for none.
    """

    source_id: str
    total_charges: int
    charges_per_item: int
    full_items: int
    remainder: int


def group_ammunition_stacks(actor: Actor) -> dict[str, list[AmmunitionStack]]:
    """Group an actor's multi-charge ammunition by kind.

    Returns:
        Stacks keyed by template identity, in inventory order.
    """
    groups: dict[str, list[AmmunitionStack]] = {}
    for stack in actor.ammunition_stacks(include_stowed=True):
        if stack.is_multi_charge:
            groups.setdefault(stack.source_id, []).append(stack)
    return groups


def is_consolidated(stacks: list[AmmunitionStack]) -> bool:
    """Check whether the stacks of one kind are already canonical.

    Canonical means either a single empty stack, or at most one full
    stack plus at most one partial single item and nothing else.
    """
    if len(stacks) == 1 and stacks[0].quantity == 0:
        return True
    full = sum(1 for stack in stacks if stack.is_full)
    partial = sum(1 for stack in stacks if stack.is_partial)
    return full <= 1 and partial <= 1 and full + partial == len(stacks)


def plan_consolidation(source_id: str, stacks: list[AmmunitionStack]) -> ConsolidationPlan:
    """Compute the canonical shape of one ammunition kind.

    Raises:
        InvalidMarkerStateError: If the stacks disagree on charges per item.
    """
    charges_per_item = stacks[0].uses.max
    if any(stack.uses.max != charges_per_item for stack in stacks):
        raise InvalidMarkerStateError(
            "Stacks of one ammunition kind hold different charges per item",
            details={"source_id": source_id},
        )

    total = sum(stack.total_charges for stack in stacks)
    full_items, remainder = divmod(total, charges_per_item)
    return ConsolidationPlan(
        source_id=source_id,
        total_charges=total,
        charges_per_item=charges_per_item,
        full_items=full_items,
        remainder=remainder,
    )


def stage_consolidation(
    plan: ConsolidationPlan,
    stacks: list[AmmunitionStack],
    ledger: UpdateLedger,
    templates: BaseTemplateSource,
) -> None:
    """Stage the edits turning ``stacks`` into the planned shape.

    The first stack becomes the full stack, the next the partial item
    (created from the template when no stack is left), and every other
    stack is deleted.
    """
    index = 0

    if plan.full_items:
        ledger.update(
            stacks[index],
            {"quantity": plan.full_items, "uses": {"value": plan.charges_per_item}},
        )
        index += 1

    if plan.remainder:
        if index >= len(stacks):
            template = templates.fetch_template(plan.source_id)
            template.quantity = 1
            template.uses = Uses(
                value=plan.remainder,
                max=plan.charges_per_item,
                auto_destroy=template.uses.auto_destroy,
            )
            ledger.create(template.to_stack())
        else:
            ledger.update(stacks[index], {"quantity": 1, "uses": {"value": plan.remainder}})
            index += 1

    for stack in stacks[index:]:
        ledger.delete(stack)


def consolidate_stacks(
    actor: Actor,
    ledger: UpdateLedger,
    templates: BaseTemplateSource,
) -> list[ConsolidationPlan]:
    """Stage consolidation of every ammunition kind that needs it.

    Every kind is planned before anything is staged, so an invalid
    group leaves the ledger untouched.

    Args:
        actor: The actor whose inventory is consolidated.
        ledger: Ledger to stage the edits on.
        templates: Source of templates for new partial stacks.

    Returns:
        The plans that were staged. Empty when nothing needed changing.

    Raises:
        InvalidMarkerStateError: If a kind mixes charges per item.
        TemplateNotFoundError: If a new partial stack cannot be created.
    """
    pending = [
        (plan_consolidation(source_id, stacks), stacks)
        for source_id, stacks in group_ammunition_stacks(actor).items()
        if not is_consolidated(stacks)
    ]

    for plan, stacks in pending:
        stage_consolidation(plan, stacks, ledger, templates)
        logger.debug(
            "Staged consolidation",
            source_id=plan.source_id,
            stacks=len(stacks),
            full_items=plan.full_items,
            remainder=plan.remainder,
        )

    return [plan for plan, _ in pending]


__all__ = [
    "ConsolidationPlan",
    "consolidate_stacks",
    "group_ammunition_stacks",
    "is_consolidated",
    "plan_consolidation",
    "stage_consolidation",
]
