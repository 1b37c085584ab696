"""Collaborators and shared plumbing for the player actions.

The host supplies template lookup, persistence, notifications and
selection dialogs by implementing the base classes below. Actions take
every collaborator explicitly through ActionServices; nothing is looked
up from ambient state.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from ranged_ammo.core.config import Settings, get_settings
from ranged_ammo.core.constants import format_message
from ranged_ammo.core.logging import get_logger
from ranged_ammo.engine.events import ActionEvent, EventBus
from ranged_ammo.engine.ledger import BasePersistence, UpdateLedger
from ranged_ammo.engine.loading import list_loaded_ammunition
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.enums import ActionName, ActionStatus
from ranged_ammo.models.items import RecordTemplate, Weapon
from ranged_ammo.models.markers import AmmunitionEntry


logger = get_logger(__name__)


# =============================================================================
# Collaborator Interfaces
# =============================================================================


class BaseTemplateSource(ABC):
    """Abstract source of editable record templates."""

    @abstractmethod
    def fetch_template(self, identity: str) -> RecordTemplate:
        """Fetch an editable copy of a template.

        Raises:
            TemplateNotFoundError: If the identity is unknown.
        """
        ...


class BaseNotifier(ABC):
    """Abstract user-facing notification channel. Fire and forget."""

    @abstractmethod
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
        """Post a chat message on behalf of an actor."""
        ...

    @abstractmethod
    def show_warning(self, text: str) -> None:
        """Show a warning to the user."""
        ...

    @abstractmethod
    def show_info(self, text: str) -> None:
        """Show an informational notice to the user."""
        ...


class BaseSelector(ABC):
    """Abstract selection dialogs. Returning None means cancelled."""

    @abstractmethod
    def select_weapon(self, actor: Actor, weapons: Sequence[Weapon], title: str) -> Weapon | None:
        """Let the user pick one of several weapons."""
        ...

    @abstractmethod
    def select_ammunition(
        self,
        title: str,
        prompt: str,
        options: dict[str, list[AmmunitionEntry]],
    ) -> AmmunitionEntry | None:
        """Let the user pick one of several loaded ammunitions."""
        ...


# =============================================================================
# Services and Results
# =============================================================================


@dataclass
class ActionServices:
    """Everything an action needs besides the actor.

    Attributes:
        templates: Template lookup.
        persistence: Applies staged ledgers.
        notifier: Chat messages, warnings and notices.
        selector: Weapon and ammunition selection dialogs.
        events: Hooks and action-completion broadcast.
        settings: Application settings.
    """

    templates: BaseTemplateSource
    persistence: BasePersistence
    notifier: BaseNotifier
    selector: BaseSelector
    events: EventBus = field(default_factory=EventBus)
    settings: Settings = field(default_factory=get_settings)

    def new_ledger(self, actor: Actor) -> UpdateLedger:
        """Create a ledger for one action on an actor."""
        return UpdateLedger(actor.id, floating_text=self.settings.ammunition.floating_text)

    def use_advanced_system(self, actor: Actor) -> bool:
        """Whether the advanced ammunition system applies to an actor."""
        if actor.advanced_ammunition is not None:
            return actor.advanced_ammunition
        return self.settings.ammunition.advanced_system

    def post_message(self, actor: Actor, img: str, text: str, **kwargs: object) -> None:
        """Post a chat message unless chat messages are disabled."""
        if self.settings.ammunition.post_chat_messages:
            self.notifier.post_message(actor, img, text, **kwargs)

    def warn(self, text: str) -> None:
        """Show a precondition warning."""
        logger.info("Action aborted", reason=text)
        self.notifier.show_warning(text)


@dataclass
class ActionResult:
    """Outcome of running an action.

    Attributes:
        action: The action that ran.
        status: How it ended.
        actor_id: The actor it ran for.
        weapon_id: The weapon it affected, if any.
        message: Warning or notice shown to the user, if any.
        operations: Number of operations applied.
    """

    action: ActionName
    status: ActionStatus
    actor_id: str
    weapon_id: str | None = None
    message: str = ""
    operations: int = 0

    @property
    def completed(self) -> bool:
        """Whether the action applied its changes."""
        return self.status == ActionStatus.COMPLETED


def aborted(action: ActionName, actor: Actor, message: str, weapon: Weapon | None = None) -> ActionResult:
    """Build the result of an action stopped by a precondition."""
    return ActionResult(
        action=action,
        status=ActionStatus.ABORTED,
        actor_id=actor.id,
        weapon_id=weapon.id if weapon else None,
        message=message,
    )


def apply_and_broadcast(
    action: ActionName,
    actor: Actor,
    ledger: UpdateLedger,
    services: ActionServices,
    weapon: Weapon | None = None,
) -> ActionResult:
    """Apply a staged ledger and announce the completed action.

    The event is only emitted when the ledger applied successfully.

    Raises:
        PersistenceError: If persistence fails to apply the ledger.
    """
    applied = ledger.apply(services.persistence)
    logger.info("Action completed", action=action.value, operations=applied)

    services.events.emit(
        ActionEvent(
            action_name=action,
            actor_id=actor.id,
            weapon_id=weapon.id if weapon else None,
        )
    )
    return ActionResult(
        action=action,
        status=ActionStatus.COMPLETED,
        actor_id=actor.id,
        weapon_id=weapon.id if weapon else None,
        operations=applied,
    )


# =============================================================================
# Selection Helpers
# =============================================================================


def choose_weapon(
    actor: Actor,
    services: ActionServices,
    predicate: Callable[[Weapon], bool],
    no_weapons_message: str,
    priority: Callable[[Weapon], bool] | None = None,
) -> Weapon | None:
    """Choose the weapon an action applies to.

    Args:
        actor: The acting actor.
        services: Collaborators for warnings and selection.
        predicate: Which weapons are eligible.
        no_weapons_message: Warning shown when none are.
        priority: Preferred eligible weapons. When exactly one eligible
            weapon is preferred it is chosen without asking.

    Returns:
        The chosen weapon, or None when there is none or the user cancels.
    """
    weapons = [weapon for weapon in actor.weapons if predicate(weapon)]
    if not weapons:
        services.warn(no_weapons_message)
        return None
    if len(weapons) == 1:
        return weapons[0]

    if priority is not None:
        preferred = [weapon for weapon in weapons if priority(weapon)]
        if len(preferred) == 1:
            return preferred[0]
        if preferred:
            weapons = preferred

    return services.selector.select_weapon(actor, weapons, format_message("weaponSelect.title"))


def select_loaded_ammunition(
    actor: Actor,
    weapon: Weapon,
    services: ActionServices,
    action: str,
) -> AmmunitionEntry | None:
    """Choose which loaded ammunition an action applies to.

    Asks the user only when more than one kind is loaded.

    Returns:
        The chosen entry, or None when nothing is loaded or the user cancels.
    """
    loaded = list_loaded_ammunition(actor, weapon)
    if len(loaded) > 1:
        return services.selector.select_ammunition(
            format_message("ammunitionSelect.title"),
            format_message(f"ammunitionSelect.action.{action}"),
            {format_message("ammunitionSelect.header.loadedAmmunition"): loaded},
        )
    return loaded[0] if loaded else None


__all__ = [
    "ActionResult",
    "ActionServices",
    "BaseNotifier",
    "BaseSelector",
    "BaseTemplateSource",
    "aborted",
    "apply_and_broadcast",
    "choose_weapon",
    "select_loaded_ammunition",
]
