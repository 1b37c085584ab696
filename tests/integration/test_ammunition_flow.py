"""Integration tests for loading, firing, unloading and consolidating.

Every step runs against the in-memory persistence so each ledger sees
the records left behind by the previous one.
"""

from __future__ import annotations

from collections.abc import Callable

from ranged_ammo.actions import ActionServices, conjure_bullet, consolidate_ammunition, perform_unload, unload
from ranged_ammo.engine.ledger import UpdateLedger
from ranged_ammo.engine.loading import is_fully_loaded, list_loaded_ammunition, rounds_loaded
from ranged_ammo.engine.transfer import load_round, remove_rounds
from ranged_ammo.models import (
    Actor,
    ActionStatus,
    AmmunitionEntry,
    MagazineLoadMarker,
    MarkerKind,
    Weapon,
)
from ranged_ammo.storage import InMemoryPersistence


EntryFactory = Callable[..., AmmunitionEntry]


def load_from_stack(
    actor: Actor,
    weapon: Weapon,
    stack_uid: str,
    persistence: InMemoryPersistence,
    make_entry: EntryFactory,
) -> None:
    """Take one round from a stack and load it, in its own ledger."""
    stack = actor.get_item(stack_uid)
    ledger = UpdateLedger(actor.id)
    load_round(actor, weapon, ledger, make_entry(stack), source_stack=stack)
    ledger.apply(persistence)


def insert_magazine(actor: Actor, weapon: Weapon, remaining: int, persistence: InMemoryPersistence) -> None:
    stack = actor.get_item("stack-magazines")
    ledger = UpdateLedger(actor.id)
    ledger.create(
        MagazineLoadMarker(
            weapon_id=weapon.id,
            name="Magazine Loaded",
            capacity=6,
            remaining=remaining,
            ammunition_item_id=stack.uid,
            ammunition_source_id=stack.source_id,
            ammunition_name=stack.name,
        )
    )
    ledger.update(stack, {"quantity": stack.quantity - 1})
    ledger.apply(persistence)


class TestCapacityWeaponFlow:
    """Load several kinds into a capacity weapon and take one back out."""

    def test_load_mixed_then_unload_one(
        self,
        actor: Actor,
        triple_crossbow: Weapon,
        services: ActionServices,
        selector,
        persistence: InMemoryPersistence,
        make_entry: EntryFactory,
    ) -> None:
        """Loading A, A, B then unloading A leaves A x1 and B x1."""
        for stack_uid in ("stack-arrows", "stack-arrows", "stack-bolts"):
            load_from_stack(actor, triple_crossbow, stack_uid, persistence, make_entry)

        assert is_fully_loaded(actor, triple_crossbow)
        assert actor.get_item("stack-arrows").quantity == 8
        assert actor.get_item("stack-bolts").quantity == 4

        selector.ammunition_source_id = "item.arrow"
        result = perform_unload(actor, triple_crossbow, services)

        assert result.completed
        marker = actor.find_load_marker(triple_crossbow.id)
        assert marker.name == "Loaded (Triple Crossbow) (2/3)"
        assert [(entry.name, entry.quantity) for entry in marker.ammunition] == [("Arrow", 1), ("Bolt", 1)]
        assert actor.get_item("stack-arrows").quantity == 9
        assert persistence.notifications[actor.id][-1].text == "Loaded (Triple Crossbow) (2/3)"

    def test_conjure_into_partly_loaded_weapon_then_fire(
        self,
        actor: Actor,
        crossbow: Weapon,
        triple_crossbow: Weapon,
        services: ActionServices,
        persistence: InMemoryPersistence,
        make_entry: EntryFactory,
    ) -> None:
        """A conjured round fills the last chamber and is listed last."""
        actor.weapons = [crossbow, triple_crossbow]
        load_from_stack(actor, crossbow, "stack-bolts", persistence, make_entry)
        for _ in range(2):
            load_from_stack(actor, triple_crossbow, "stack-arrows", persistence, make_entry)

        result = conjure_bullet(actor, services)

        assert result.weapon_id == triple_crossbow.id
        assert rounds_loaded(actor, triple_crossbow) == 3
        assert [entry.name for entry in list_loaded_ammunition(actor, triple_crossbow)] == [
            "Arrow",
            "Conjured Round",
        ]

        ledger = UpdateLedger(actor.id)
        remove_rounds(actor, triple_crossbow, ledger)
        ledger.apply(persistence)

        assert rounds_loaded(actor, triple_crossbow) == 2
        assert actor.find_marker(MarkerKind.CONJURED_ROUND, triple_crossbow.id) is not None


class TestConjuredRoundFlow:
    """Conjured rounds never touch the inventory."""

    def test_conjure_then_unload(
        self,
        actor: Actor,
        crossbow: Weapon,
        services: ActionServices,
        persistence: InMemoryPersistence,
    ) -> None:
        """Conjuring and unloading a single weapon leaves no stack behind."""
        actor.weapons = [crossbow]
        inventory_before = [stack.model_copy() for stack in actor.inventory]

        assert conjure_bullet(actor, services).completed
        assert unload(actor, services).completed

        assert actor.markers == []
        assert actor.inventory == inventory_before
        assert persistence.batches == {actor.id: 2}


class TestMagazineFlow:
    """Magazines go in, get used and come back out."""

    def test_used_magazine_without_source_stack(
        self,
        actor: Actor,
        repeating_crossbow: Weapon,
        services: ActionServices,
        persistence: InMemoryPersistence,
    ) -> None:
        """A 4/6 magazine whose stack is gone becomes a new item of four."""
        insert_magazine(actor, repeating_crossbow, 4, persistence)
        ledger = UpdateLedger(actor.id)
        ledger.delete("stack-magazines")
        ledger.apply(persistence)

        perform_unload(actor, repeating_crossbow, services)

        magazines = [stack for stack in actor.inventory if stack.source_id == "item.repeating-magazine"]
        assert len(magazines) == 1
        assert magazines[0].quantity == 1
        assert magazines[0].uses.value == 4
        assert magazines[0].total_charges == 4

    def test_untouched_magazine_restored(
        self,
        actor: Actor,
        repeating_crossbow: Weapon,
        services: ActionServices,
        persistence: InMemoryPersistence,
    ) -> None:
        """Unloading a full magazine puts it back on its stack."""
        insert_magazine(actor, repeating_crossbow, 6, persistence)
        assert actor.get_item("stack-magazines").quantity == 1

        perform_unload(actor, repeating_crossbow, services)

        assert actor.get_item("stack-magazines").quantity == 2
        assert len(actor.inventory) == 3
        assert actor.markers == []

    def test_unload_then_consolidate(
        self,
        actor: Actor,
        repeating_crossbow: Weapon,
        services: ActionServices,
        persistence: InMemoryPersistence,
    ) -> None:
        """Two used magazines are merged back into full ones."""
        for remaining in (2, 4):
            insert_magazine(actor, repeating_crossbow, remaining, persistence)
            perform_unload(actor, repeating_crossbow, services)

        magazines = [stack for stack in actor.inventory if stack.source_id == "item.repeating-magazine"]
        total = sum(stack.total_charges for stack in magazines)
        assert len(magazines) == 3
        assert total == 6

        assert consolidate_ammunition(actor, services).completed
        assert consolidate_ammunition(actor, services).status == ActionStatus.NOTHING_TO_DO

        magazines = [stack for stack in actor.inventory if stack.source_id == "item.repeating-magazine"]
        assert [(stack.quantity, stack.uses.value) for stack in magazines] == [(1, 6)]
