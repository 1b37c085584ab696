"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the ranged ammunition test suite.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import pytest

from ranged_ammo.actions.services import (
    ActionServices,
    BaseNotifier,
    BaseSelector,
)
from ranged_ammo.core.config import Settings
from ranged_ammo.core.constants import CONJURE_BULLET_ACTION_ID, CONJURED_ROUND_EFFECT_ID
from ranged_ammo.engine.events import EventBus
from ranged_ammo.engine.ledger import UpdateLedger
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import RecordType
from ranged_ammo.models.items import AmmunitionStack, RecordTemplate, Uses, Weapon
from ranged_ammo.models.markers import AmmunitionEntry
from ranged_ammo.storage.memory import InMemoryPersistence, InMemoryTemplateStore


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


ACTOR_ID = "actor-vex"
ARROW_ID = "item.arrow"
BOLT_ID = "item.bolt"
MAGAZINE_ID = "item.repeating-magazine"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from ranged_ammo.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    monkeypatch.chdir(tmp_path)
    env_vars = {
        "RANGED_AMMO_AMMUNITION_ADVANCED_SYSTEM": "false",
        "RANGED_AMMO_AMMUNITION_CONJURED_ROUND_DURATION_ROUNDS": "3",
        "RANGED_AMMO_LOG_LEVEL": "DEBUG",
        "RANGED_AMMO_DEBUG": "true",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Settings:
    """Default settings, isolated from any local .env file."""
    monkeypatch.chdir(tmp_path)
    return Settings()


# =============================================================================
# Collaborator Fakes
# =============================================================================


class RecordingNotifier(BaseNotifier):
    """Notifier that records everything it is asked to show."""

    def __init__(self) -> None:
        self.messages: list[dict] = []
        self.warnings: list[str] = []
        self.infos: list[str] = []

    def post_message(
        self,
        actor: Actor,
        img: str,
        text: str,
        *,
        action_name: str | None = None,
        num_actions: int | None = None,
        traits: Sequence[str] = (),
    ) -> None:
        self.messages.append(
            {
                "actor_id": actor.id,
                "img": img,
                "text": text,
                "action_name": action_name,
                "num_actions": num_actions,
                "traits": tuple(traits),
            }
        )

    def show_warning(self, text: str) -> None:
        self.warnings.append(text)

    def show_info(self, text: str) -> None:
        self.infos.append(text)


class ScriptedSelector(BaseSelector):
    """Selector answering with preset choices.

    Attributes:
        weapon_id: Weapon to pick, None to cancel.
        ammunition_source_id: Ammunition to pick, None to cancel.
        calls: Titles of the dialogs that were shown.
    """

    def __init__(self) -> None:
        self.weapon_id: str | None = None
        self.ammunition_source_id: str | None = None
        self.calls: list[str] = []
        self.offered_weapons: list[str] = []

    def select_weapon(self, actor: Actor, weapons: Sequence[Weapon], title: str) -> Weapon | None:
        self.calls.append(title)
        self.offered_weapons = [weapon.id for weapon in weapons]
        return next((weapon for weapon in weapons if weapon.id == self.weapon_id), None)

    def select_ammunition(
        self,
        title: str,
        prompt: str,
        options: dict[str, list[AmmunitionEntry]],
    ) -> AmmunitionEntry | None:
        self.calls.append(title)
        for entries in options.values():
            for entry in entries:
                if entry.source_id == self.ammunition_source_id:
                    return entry
        return None


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def crossbow() -> Weapon:
    """A single-round weapon that must be loaded."""
    return Weapon(id="weapon-crossbow", actor_id=ACTOR_ID, name="Crossbow")


@pytest.fixture
def triple_crossbow() -> Weapon:
    """A capacity weapon with three chambers."""
    return Weapon(id="weapon-triple", actor_id=ACTOR_ID, name="Triple Crossbow", capacity=3)


@pytest.fixture
def repeating_crossbow() -> Weapon:
    """A magazine-fed weapon."""
    return Weapon(
        id="weapon-repeating",
        actor_id=ACTOR_ID,
        name="Repeating Hand Crossbow",
        is_repeating=True,
    )


@pytest.fixture
def longbow() -> Weapon:
    """A weapon that needs no loading."""
    return Weapon(id="weapon-longbow", actor_id=ACTOR_ID, name="Longbow", requires_loading=False)


@pytest.fixture
def arrow_stack() -> AmmunitionStack:
    """Ten single-charge arrows."""
    return AmmunitionStack(uid="stack-arrows", source_id=ARROW_ID, name="Arrow", quantity=10)


@pytest.fixture
def bolt_stack() -> AmmunitionStack:
    """Five single-charge bolts."""
    return AmmunitionStack(uid="stack-bolts", source_id=BOLT_ID, name="Bolt", quantity=5)


@pytest.fixture
def magazine_stack() -> AmmunitionStack:
    """Two full six-round magazines."""
    return AmmunitionStack(
        uid="stack-magazines",
        source_id=MAGAZINE_ID,
        name="Repeating Hand Crossbow Magazine",
        quantity=2,
        uses=Uses(value=6, max=6),
    )


@pytest.fixture
def actor(
    crossbow: Weapon,
    triple_crossbow: Weapon,
    repeating_crossbow: Weapon,
    longbow: Weapon,
    arrow_stack: AmmunitionStack,
    bolt_stack: AmmunitionStack,
    magazine_stack: AmmunitionStack,
) -> Actor:
    """An actor carrying one weapon of every sort and some ammunition."""
    return Actor(
        id=ACTOR_ID,
        name="Vex",
        action_ids=[CONJURE_BULLET_ACTION_ID],
        weapons=[crossbow, triple_crossbow, repeating_crossbow, longbow],
        inventory=[arrow_stack, bolt_stack, magazine_stack],
    )


@pytest.fixture
def make_entry() -> Callable[..., AmmunitionEntry]:
    """Factory building the ammunition entry for rounds taken from a stack."""

    def factory(stack: AmmunitionStack, quantity: int = 1) -> AmmunitionEntry:
        return AmmunitionEntry(
            id=stack.uid,
            source_id=stack.source_id,
            name=stack.name,
            img=stack.img,
            quantity=quantity,
        )

    return factory


# =============================================================================
# Collaborator Fixtures
# =============================================================================


@pytest.fixture
def templates() -> InMemoryTemplateStore:
    """Templates for every ammunition kind plus the conjured round."""
    return InMemoryTemplateStore(
        [
            RecordTemplate(identity=ARROW_ID, name="Arrow"),
            RecordTemplate(identity=BOLT_ID, name="Bolt"),
            RecordTemplate(
                identity=MAGAZINE_ID,
                name="Repeating Hand Crossbow Magazine",
                uses=Uses(value=6, max=6),
            ),
            RecordTemplate(
                identity=CONJURED_ROUND_EFFECT_ID,
                name="Conjured Round",
                img="icons/conjured-round.webp",
                record_type=RecordType.EFFECT,
                duration_rounds=0,
            ),
        ]
    )


@pytest.fixture
def persistence(actor: Actor) -> InMemoryPersistence:
    """In-memory persistence holding the actor."""
    return InMemoryPersistence([actor])


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Notifier recording messages, warnings and notices."""
    return RecordingNotifier()


@pytest.fixture
def selector() -> ScriptedSelector:
    """Selector that cancels unless told otherwise."""
    return ScriptedSelector()


@pytest.fixture
def services(
    templates: InMemoryTemplateStore,
    persistence: InMemoryPersistence,
    notifier: RecordingNotifier,
    selector: ScriptedSelector,
    settings: Settings,
) -> ActionServices:
    """Action services wired to the in-memory collaborators."""
    return ActionServices(
        templates=templates,
        persistence=persistence,
        notifier=notifier,
        selector=selector,
        events=EventBus(),
        settings=settings,
    )


@pytest.fixture
def ledger(actor: Actor) -> UpdateLedger:
    """An empty ledger for the actor."""
    return UpdateLedger(actor.id)
