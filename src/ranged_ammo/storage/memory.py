"""In-memory collaborators.

Reference implementations of the template source and the persistence
gateway. They hold plain Actor objects and apply ledgers to them
directly, which makes them suitable for tests and for embedding the
actions in hosts without a database.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import ValidationError as PydanticValidationError

from ranged_ammo.actions.services import BaseTemplateSource
from ranged_ammo.core.exceptions import PersistenceError, TemplateNotFoundError, ValidationError
from ranged_ammo.core.logging import get_logger
from ranged_ammo.engine.ledger import (
    BasePersistence,
    CreateOperation,
    DeleteOperation,
    NotifyOperation,
    Operation,
    UpdateOperation,
    merge_patch,
)
from ranged_ammo.models.actor import Actor
from ranged_ammo.models.items import AmmunitionStack, RecordTemplate
from ranged_ammo.models.markers import Marker, parse_marker


logger = get_logger(__name__)


# =============================================================================
# Templates
# =============================================================================


class InMemoryTemplateStore(BaseTemplateSource):
    """Template source backed by a dictionary.

    Example:
        >>> store = InMemoryTemplateStore([RecordTemplate(identity="arrow", name="Arrow")])
        >>> store.fetch_template("arrow").name
        'Arrow'
    """

    def __init__(self, templates: Iterable[RecordTemplate] = ()) -> None:
        self._templates: dict[str, RecordTemplate] = {}
        for template in templates:
            self.add(template)

    def add(self, template: RecordTemplate) -> None:
        """Register or replace a template."""
        self._templates[template.identity] = template

    def __contains__(self, identity: object) -> bool:
        return identity in self._templates

    def fetch_template(self, identity: str) -> RecordTemplate:
        """Fetch a deep copy of a template.

        Raises:
            TemplateNotFoundError: If the identity is unknown.
        """
        template = self._templates.get(identity)
        if template is None:
            raise TemplateNotFoundError(f"Unknown template: {identity}", identity=identity)
        return template.model_copy(deep=True)


# =============================================================================
# Persistence
# =============================================================================


class InMemoryPersistence(BasePersistence):
    """Applies ledgers to registered actors.

    Operations are applied in order and the first failing operation
    stops the batch. Earlier operations stay applied.

    Attributes:
        notifications: Floating-text notifications received, per actor.
        batches: Number of batches applied, per actor.
    """

    def __init__(self, actors: Iterable[Actor] = ()) -> None:
        self._actors: dict[str, Actor] = {}
        self.notifications: dict[str, list[NotifyOperation]] = {}
        self.batches: dict[str, int] = {}
        for actor in actors:
            self.register(actor)

    def register(self, actor: Actor) -> None:
        """Make an actor available to apply ledgers to."""
        self._actors[actor.id] = actor

    def get_actor(self, actor_id: str) -> Actor:
        """Get a registered actor.

        Raises:
            KeyError: If the actor is not registered.
        """
        return self._actors[actor_id]

    def apply(self, actor_id: str, operations: Sequence[Operation]) -> bool:
        """Apply operations to a registered actor.

        Raises:
            PersistenceError: If the actor is unknown or an operation
                fails. ``details["applied"]`` counts the operations that
                were applied before the failure.
        """
        actor = self._actors.get(actor_id)
        if actor is None:
            raise PersistenceError(
                f"Unknown actor: {actor_id}",
                applied=0,
                total=len(operations),
                actor_id=actor_id,
            )

        for index, operation in enumerate(operations):
            try:
                self._apply_operation(actor, operation)
            except (KeyError, ValidationError) as exc:
                logger.warning(
                    "Operation failed",
                    actor_id=actor_id,
                    index=index,
                    op=operation.op.value,
                    error=str(exc),
                )
                raise PersistenceError(
                    f"Failed to apply {operation.op.value} operation: {exc}",
                    applied=index,
                    total=len(operations),
                    actor_id=actor_id,
                ) from exc

        self.batches[actor_id] = self.batches.get(actor_id, 0) + 1
        logger.debug("Applied batch", actor_id=actor_id, operations=len(operations))
        return True

    def _apply_operation(self, actor: Actor, operation: Operation) -> None:
        if isinstance(operation, CreateOperation):
            record = operation.record.model_copy(deep=True)
            if isinstance(record, AmmunitionStack):
                actor.inventory.append(record)
            else:
                actor.markers.append(record)

        elif isinstance(operation, UpdateOperation):
            records, index = self._locate(actor, operation.target_uid)
            current = records[index]
            records[index] = self._revalidate(current, operation.patch)

        elif isinstance(operation, DeleteOperation):
            records, index = self._locate(actor, operation.target_uid)
            del records[index]

        elif isinstance(operation, NotifyOperation):
            self.notifications.setdefault(actor.id, []).append(operation)

    @staticmethod
    def _revalidate(current: AmmunitionStack | Marker, patch: dict) -> AmmunitionStack | Marker:
        merged = merge_patch(current.model_dump(), patch)
        try:
            if isinstance(current, AmmunitionStack):
                return AmmunitionStack.model_validate(merged)
            return parse_marker(merged)
        except PydanticValidationError as exc:
            error = exc.errors()[0]
            field_name = ".".join(str(part) for part in error["loc"])
            raise ValidationError(
                f"Patch leaves {current.uid} invalid: {error['msg']}",
                field_name=field_name,
                invalid_value=error.get("input"),
            ) from exc

    @staticmethod
    def _locate(actor: Actor, uid: str) -> tuple[list, int]:
        for records in (actor.inventory, actor.markers):
            for index, record in enumerate(records):
                if record.uid == uid:
                    return records, index
        raise KeyError(f"No record {uid} on actor {actor.id}")


__all__ = [
    "InMemoryPersistence",
    "InMemoryTemplateStore",
]
