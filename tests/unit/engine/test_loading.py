"""Tests for the loading state model."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from ranged_ammo.core.constants import CONJURED_ROUND_ITEM_ID
from ranged_ammo.engine.loading import (
    check_fully_loaded,
    is_fully_loaded,
    is_loaded,
    is_weapon_loaded,
    list_loaded_ammunition,
    rounds_loaded,
)
from ranged_ammo.models import (
    Actor,
    AmmunitionEntry,
    AmmunitionStack,
    CapacityLoadMarker,
    ConjuredRoundMarker,
    MagazineLoadMarker,
    SimpleLoadMarker,
    Weapon,
)


def capacity_marker(weapon: Weapon, entries: list[AmmunitionEntry], loaded: int | None = None) -> CapacityLoadMarker:
    loaded = sum(entry.quantity for entry in entries) if loaded is None else loaded
    return CapacityLoadMarker(
        weapon_id=weapon.id,
        name=f"Loaded ({loaded}/{weapon.capacity})",
        capacity=weapon.capacity,
        loaded_chambers=loaded,
        ammunition=entries,
        original_name="Loaded",
    )


class TestIsLoaded:
    """Tests for is_loaded and rounds_loaded."""

    def test_empty_weapon(self, actor: Actor, crossbow: Weapon) -> None:
        """A weapon without markers is not loaded."""
        assert not is_loaded(actor, crossbow)
        assert rounds_loaded(actor, crossbow) == 0

    def test_simple_marker(self, actor: Actor, crossbow: Weapon) -> None:
        """A simple marker means one loaded round."""
        actor.markers.append(SimpleLoadMarker(weapon_id=crossbow.id, name="Loaded"))

        assert is_loaded(actor, crossbow)
        assert rounds_loaded(actor, crossbow) == 1

    def test_conjured_round_only(self, actor: Actor, crossbow: Weapon) -> None:
        """A conjured round alone counts as loaded."""
        actor.markers.append(ConjuredRoundMarker(weapon_id=crossbow.id, name="Conjured Round"))

        assert is_loaded(actor, crossbow)
        assert rounds_loaded(actor, crossbow) == 1

    def test_capacity_plus_conjured(
        self,
        actor: Actor,
        triple_crossbow: Weapon,
        arrow_stack: AmmunitionStack,
        make_entry: Callable[..., AmmunitionEntry],
    ) -> None:
        """Conjured rounds add one to the loaded chambers."""
        actor.markers.append(capacity_marker(triple_crossbow, [make_entry(arrow_stack, 2)]))
        actor.markers.append(ConjuredRoundMarker(weapon_id=triple_crossbow.id, name="Conjured Round"))

        assert rounds_loaded(actor, triple_crossbow) == 3

    def test_markers_of_other_weapons_ignored(self, actor: Actor, crossbow: Weapon, triple_crossbow: Weapon) -> None:
        """Markers belong to one weapon only."""
        actor.markers.append(SimpleLoadMarker(weapon_id=triple_crossbow.id, name="Loaded"))

        assert not is_loaded(actor, crossbow)


class TestIsFullyLoaded:
    """Tests for is_fully_loaded and check_fully_loaded."""

    def test_single_weapon_full_with_one_round(self, actor: Actor, crossbow: Weapon) -> None:
        """Non-capacity weapons are full as soon as they hold a round."""
        assert not is_fully_loaded(actor, crossbow)
        actor.markers.append(SimpleLoadMarker(weapon_id=crossbow.id, name="Loaded"))
        assert is_fully_loaded(actor, crossbow)

    @pytest.mark.parametrize("loaded,conjured,expected", [(2, False, False), (2, True, True), (3, False, True)])
    def test_capacity_weapon(
        self,
        actor: Actor,
        triple_crossbow: Weapon,
        loaded: int,
        conjured: bool,
        expected: bool,
    ) -> None:
        """Capacity weapons are full once every chamber is used."""
        actor.markers.append(capacity_marker(triple_crossbow, [], loaded=loaded))
        if conjured:
            actor.markers.append(ConjuredRoundMarker(weapon_id=triple_crossbow.id, name="Conjured Round"))

        assert is_fully_loaded(actor, triple_crossbow) is expected

    def test_check_warns_loaded(self, actor: Actor, crossbow: Weapon, notifier) -> None:
        """Loaded single weapons warn that they are already loaded."""
        actor.markers.append(SimpleLoadMarker(weapon_id=crossbow.id, name="Loaded"))

        assert check_fully_loaded(actor, crossbow, notifier)
        assert notifier.warnings == ["Crossbow is already loaded."]

    def test_check_warns_fully_loaded(self, actor: Actor, triple_crossbow: Weapon, notifier) -> None:
        """Full capacity weapons warn that they are fully loaded."""
        actor.markers.append(capacity_marker(triple_crossbow, [], loaded=3))

        assert check_fully_loaded(actor, triple_crossbow, notifier)
        assert notifier.warnings == ["Triple Crossbow is already fully loaded."]

    def test_check_silent_when_room_left(self, actor: Actor, triple_crossbow: Weapon, notifier) -> None:
        """No warning while chambers are free."""
        actor.markers.append(capacity_marker(triple_crossbow, [], loaded=1))

        assert not check_fully_loaded(actor, triple_crossbow, notifier)
        assert notifier.warnings == []


class TestListLoadedAmmunition:
    """Tests for list_loaded_ammunition."""

    def test_capacity_entries_then_conjured(
        self,
        actor: Actor,
        triple_crossbow: Weapon,
        arrow_stack: AmmunitionStack,
        bolt_stack: AmmunitionStack,
        make_entry: Callable[..., AmmunitionEntry],
    ) -> None:
        """Entries keep storage order and the conjured round comes last."""
        actor.markers.append(
            capacity_marker(triple_crossbow, [make_entry(bolt_stack), make_entry(arrow_stack)])
        )
        actor.markers.append(ConjuredRoundMarker(weapon_id=triple_crossbow.id, name="Conjured Round"))

        loaded = list_loaded_ammunition(actor, triple_crossbow)

        assert [entry.source_id for entry in loaded] == [bolt_stack.source_id, arrow_stack.source_id, CONJURED_ROUND_ITEM_ID]
        assert loaded[-1].name == "Conjured Round"

    def test_simple_marker_with_ammunition(
        self,
        actor: Actor,
        crossbow: Weapon,
        bolt_stack: AmmunitionStack,
        make_entry: Callable[..., AmmunitionEntry],
    ) -> None:
        """A simple marker lists the round it holds."""
        actor.markers.append(SimpleLoadMarker(weapon_id=crossbow.id, name="Loaded", ammunition=make_entry(bolt_stack)))

        assert list_loaded_ammunition(actor, crossbow) == [make_entry(bolt_stack)]

    def test_untracked_simple_marker(self, actor: Actor, crossbow: Weapon) -> None:
        """Untracked rounds are not listed."""
        actor.markers.append(SimpleLoadMarker(weapon_id=crossbow.id, name="Loaded"))

        assert list_loaded_ammunition(actor, crossbow) == []


class TestIsWeaponLoaded:
    """Tests for unload eligibility."""

    @pytest.fixture
    def magazine(self, repeating_crossbow: Weapon) -> MagazineLoadMarker:
        return MagazineLoadMarker(
            weapon_id=repeating_crossbow.id,
            name="Magazine",
            capacity=6,
            remaining=4,
            ammunition_item_id="stack-magazines",
            ammunition_source_id="item.repeating-magazine",
            ammunition_name="Magazine",
        )

    def test_repeating_advanced_needs_magazine(
        self,
        actor: Actor,
        repeating_crossbow: Weapon,
        magazine: MagazineLoadMarker,
    ) -> None:
        """Under the advanced system only the magazine counts."""
        actor.markers.append(SimpleLoadMarker(weapon_id=repeating_crossbow.id, name="Loaded"))
        assert not is_weapon_loaded(actor, repeating_crossbow, advanced=True)

        actor.markers.append(magazine)
        assert is_weapon_loaded(actor, repeating_crossbow, advanced=True)

    def test_repeating_simple_system(self, actor: Actor, repeating_crossbow: Weapon) -> None:
        """Under the simple system repeating weapons use load markers."""
        actor.markers.append(SimpleLoadMarker(weapon_id=repeating_crossbow.id, name="Loaded"))

        assert is_weapon_loaded(actor, repeating_crossbow, advanced=False)

    @pytest.mark.parametrize("advanced", [True, False])
    def test_weapon_without_loading(self, actor: Actor, longbow: Weapon, advanced: bool) -> None:
        """Weapons that need no loading are never loaded."""
        actor.markers.append(SimpleLoadMarker(weapon_id=longbow.id, name="Loaded"))

        assert not is_weapon_loaded(actor, longbow, advanced=advanced)
