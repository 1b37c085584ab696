"""Tests for the Consolidate Ammunition action."""

from __future__ import annotations

from ranged_ammo.actions import ActionServices, consolidate_ammunition
from ranged_ammo.models import Actor, ActionName, ActionStatus, AmmunitionStack, Uses
from ranged_ammo.storage import InMemoryPersistence


def magazine(uid: str, quantity: int, value: int) -> AmmunitionStack:
    return AmmunitionStack(
        uid=uid,
        source_id="item.repeating-magazine",
        name="Repeating Hand Crossbow Magazine",
        img="icons/magazine.webp",
        quantity=quantity,
        uses=Uses(value=value, max=6),
    )


class TestConsolidateAmmunition:
    """Tests for consolidate_ammunition."""

    def test_already_consolidated(
        self,
        actor: Actor,
        services: ActionServices,
        notifier,
        persistence: InMemoryPersistence,
    ) -> None:
        """A tidy inventory only shows a notice."""
        result = consolidate_ammunition(actor, services)

        assert result.status == ActionStatus.NOTHING_TO_DO
        assert result.message == "Your ammunition is already consolidated."
        assert notifier.infos == [result.message]
        assert notifier.messages == []
        assert persistence.batches == {}

    def test_partial_magazines_merged(
        self,
        actor: Actor,
        services: ActionServices,
        notifier,
    ) -> None:
        """Partial magazines are merged and the total kept."""
        actor.inventory = [magazine("stack-a", 1, 2), magazine("stack-b", 1, 5), magazine("stack-c", 1, 3)]

        result = consolidate_ammunition(actor, services)

        assert result.completed
        assert result.action == ActionName.CONSOLIDATE
        assert result.weapon_id is None
        assert [(stack.uid, stack.quantity, stack.uses.value) for stack in actor.inventory] == [
            ("stack-a", 1, 6),
            ("stack-b", 1, 4),
        ]
        assert notifier.messages[0]["text"] == "Vex consolidates their ammunition."
        assert notifier.messages[0]["img"] == "icons/magazine.webp"
        assert notifier.messages[0]["num_actions"] == 1

    def test_event_emitted(self, actor: Actor, services: ActionServices) -> None:
        """Completion is broadcast without a weapon."""
        events = []
        services.events.subscribe("action_completed", events.append)
        actor.inventory = [magazine("stack-a", 1, 2), magazine("stack-b", 1, 5)]

        consolidate_ammunition(actor, services)

        assert [(event.action_name, event.weapon_id) for event in events] == [(ActionName.CONSOLIDATE, None)]

    def test_second_run_does_nothing(self, actor: Actor, services: ActionServices) -> None:
        """Consolidating twice changes nothing the second time."""
        actor.inventory = [magazine("stack-a", 2, 1), magazine("stack-b", 1, 1)]

        first = consolidate_ammunition(actor, services)
        second = consolidate_ammunition(actor, services)

        assert first.completed
        assert second.status == ActionStatus.NOTHING_TO_DO
        assert sum(stack.total_charges for stack in actor.inventory) == 8
