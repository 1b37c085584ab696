"""Hooks and action-completion events.

Observers register callbacks by hook name. Two kinds of delivery exist:

- ``call()`` runs hooks while an action is still staging, handing them
  the ledger so they can add operations (the ``reload`` hook).
- ``emit()`` broadcasts an ActionEvent once the ledger has been applied.
  Delivery is at most once and best-effort: a failing listener is
  logged and never changes the outcome of the action.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from ranged_ammo.core.logging import get_logger
from ranged_ammo.models.enums import ActionName


logger = get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

RELOAD_HOOK = "reload"
"""Called with ``weapon`` and ``ledger`` before a (re)loading action applies."""

ACTION_COMPLETED_HOOK = "action_completed"
"""Receives every ActionEvent."""


class ActionEvent(BaseModel):
    """Broadcast after an action's ledger has been applied."""

    model_config = ConfigDict(frozen=True)

    action_name: ActionName
    actor_id: str
    weapon_id: str | None = None
    timestamp: datetime = Field(default_factory=datetime.now)

    @property
    def hook_name(self) -> str:
        """Hook receiving only events of this action, e.g. ``unload``."""
        return self.action_name.value


class EventBus:
    """Registry of hook callbacks."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable[..., Any]]] = {}

    def subscribe(self, hook: str, callback: Callable[..., Any]) -> None:
        """Register a callback for a hook."""
        self._listeners.setdefault(hook, []).append(callback)

    def unsubscribe(self, hook: str, callback: Callable[..., Any]) -> None:
        """Remove a callback. Unknown callbacks are ignored."""
        listeners = self._listeners.get(hook, [])
        if callback in listeners:
            listeners.remove(callback)

    def on(self, hook: str) -> Callable[[F], F]:
        """Decorator registering a function for a hook.

        Example:
            >>> @bus.on("unload")
            ... def announce(event: ActionEvent) -> None:
            ...     print(event.actor_id)
        """
        def decorator(func: F) -> F:
            self.subscribe(hook, func)
            return func

        return decorator

    def listeners(self, hook: str) -> list[Callable[..., Any]]:
        """Callbacks registered for a hook."""
        return list(self._listeners.get(hook, []))

    def call(self, hook: str, **payload: Any) -> None:
        """Run the callbacks of a hook synchronously.

        Exceptions propagate: hooks called while staging take part in the
        action and must not fail silently.
        """
        for callback in self.listeners(hook):
            callback(**payload)

    def emit(self, event: ActionEvent) -> int:
        """Broadcast an action event.

        Args:
            event: The completed action.

        Returns:
            Number of listeners that handled the event without error.
        """
        delivered = 0
        for hook in (event.hook_name, ACTION_COMPLETED_HOOK):
            for callback in self.listeners(hook):
                try:
                    callback(event)
                except Exception:
                    logger.exception(
                        "Event listener failed",
                        hook=hook,
                        action=event.action_name.value,
                        actor_id=event.actor_id,
                    )
                else:
                    delivered += 1
        return delivered


__all__ = [
    "ACTION_COMPLETED_HOOK",
    "RELOAD_HOOK",
    "ActionEvent",
    "EventBus",
]
