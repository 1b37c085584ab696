"""Update ledger staging the changes of one action.

An action never touches the persistence layer while it computes. It
stages create/update/delete/notify operations on an UpdateLedger and
hands the ledger to a persistence gateway exactly once at the end.

Application is best-effort: gateways are not required to be
transactional, so a failure may leave some operations applied. The
ledger reports that through PersistenceError and never retries.

Example:
    >>> ledger = UpdateLedger(actor.id)
    >>> ledger.update(stack, {"quantity": stack.quantity + 1})
    >>> ledger.notify("Crossbow (1/2)")
    >>> ledger.apply(persistence)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ranged_ammo.core.exceptions import LedgerAlreadyAppliedError, PersistenceError
from ranged_ammo.core.logging import get_logger
from ranged_ammo.models.enums import OperationType
from ranged_ammo.models.items import AmmunitionStack
from ranged_ammo.models.markers import Marker


logger = get_logger(__name__)

Record = AmmunitionStack | Marker


# =============================================================================
# Operations
# =============================================================================


class CreateOperation(BaseModel):
    """Create a new record."""

    model_config = ConfigDict(frozen=True)

    op: Literal[OperationType.CREATE] = OperationType.CREATE
    record: Record


class UpdateOperation(BaseModel):
    """Patch fields of an existing record."""

    model_config = ConfigDict(frozen=True)

    op: Literal[OperationType.UPDATE] = OperationType.UPDATE
    target_uid: str
    patch: dict[str, Any]


class DeleteOperation(BaseModel):
    """Delete an existing record."""

    model_config = ConfigDict(frozen=True)

    op: Literal[OperationType.DELETE] = OperationType.DELETE
    target_uid: str


class NotifyOperation(BaseModel):
    """Show floating text over the actor."""

    model_config = ConfigDict(frozen=True)

    op: Literal[OperationType.NOTIFY] = OperationType.NOTIFY
    text: str
    is_error: bool = False


Operation = Annotated[
    CreateOperation | UpdateOperation | DeleteOperation | NotifyOperation,
    Field(discriminator="op"),
]


def merge_patch(base: Mapping[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge a patch into a base mapping.

    Nested mappings are merged key by key; any other value in the patch
    replaces the base value.

    Args:
        base: The original values.
        patch: The values to overlay.

    Returns:
        A new merged dictionary.
    """
    merged = dict(base)
    for key, value in patch.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = merge_patch(current, value)
        else:
            merged[key] = value
    return merged


# =============================================================================
# Persistence Interface
# =============================================================================


class BasePersistence(ABC):
    """Abstract base class for the host persistence layer."""

    @abstractmethod
    def apply(self, actor_id: str, operations: Sequence[Operation]) -> bool:
        """Apply operations in order.

        Args:
            actor_id: The actor owning the records.
            operations: Operations in the order they were staged.

        Returns:
            True if every operation was applied.
        """
        ...

    async def apply_async(self, actor_id: str, operations: Sequence[Operation]) -> bool:
        """Apply operations from async code. Override for asynchronous hosts."""
        return self.apply(actor_id, operations)


# =============================================================================
# Ledger
# =============================================================================


class UpdateLedger:
    """Accumulates the operations of one action for one actor.

    Repeated updates of one record are merged into the first update, in
    its original position. Deleting a record drops its pending updates.
    A ledger is single-use: applying it twice raises.
    """

    def __init__(self, actor_id: str, *, floating_text: bool = True) -> None:
        """Initialize an empty ledger.

        Args:
            actor_id: The actor whose records the operations target.
            floating_text: Stage notify operations. When False, notify()
                is a no-op.
        """
        self.actor_id = actor_id
        self.floating_text = floating_text
        self._operations: list[Operation] = []
        self._applied = False

    @property
    def operations(self) -> list[Operation]:
        """Staged operations in order."""
        return list(self._operations)

    @property
    def applied(self) -> bool:
        """Whether the ledger has been handed to persistence."""
        return self._applied

    def __len__(self) -> int:
        return len(self._operations)

    def create(self, record: Record) -> None:
        """Stage creation of a new record."""
        self._operations.append(CreateOperation(record=record))
        logger.debug("Staged create", record_uid=record.uid, record_type=type(record).__name__)

    def update(self, target: Record | str, patch: Mapping[str, Any]) -> None:
        """Stage a field patch of an existing record.

        Args:
            target: The record, or its uid.
            patch: Field values to set. Nested mappings are merged.
        """
        target_uid = target if isinstance(target, str) else target.uid
        if self._is_deleted(target_uid):
            logger.debug("Ignored update of deleted record", record_uid=target_uid)
            return

        for index, operation in enumerate(self._operations):
            if isinstance(operation, UpdateOperation) and operation.target_uid == target_uid:
                self._operations[index] = UpdateOperation(
                    target_uid=target_uid,
                    patch=merge_patch(operation.patch, patch),
                )
                logger.debug("Merged update", record_uid=target_uid, fields=sorted(patch))
                return

        self._operations.append(UpdateOperation(target_uid=target_uid, patch=dict(patch)))
        logger.debug("Staged update", record_uid=target_uid, fields=sorted(patch))

    def delete(self, target: Record | str) -> None:
        """Stage deletion of an existing record."""
        target_uid = target if isinstance(target, str) else target.uid
        if self._is_deleted(target_uid):
            return

        self._operations = [
            operation
            for operation in self._operations
            if not (isinstance(operation, UpdateOperation) and operation.target_uid == target_uid)
        ]
        self._operations.append(DeleteOperation(target_uid=target_uid))
        logger.debug("Staged delete", record_uid=target_uid)

    def notify(self, text: str, is_error: bool = False) -> None:
        """Stage a floating-text notification."""
        if not self.floating_text:
            return
        self._operations.append(NotifyOperation(text=text, is_error=is_error))

    def has_changes(self) -> bool:
        """Whether any operation has been staged."""
        return bool(self._operations)

    def _is_deleted(self, target_uid: str) -> bool:
        return any(
            isinstance(operation, DeleteOperation) and operation.target_uid == target_uid
            for operation in self._operations
        )

    def _begin_apply(self) -> list[Operation]:
        if self._applied:
            raise LedgerAlreadyAppliedError(
                "Ledger has already been applied",
                actor_id=self.actor_id,
            )
        self._applied = True
        return list(self._operations)

    def _finish_apply(self, success: bool, total: int) -> int:
        if not success:
            logger.warning("Persistence reported failure", actor_id=self.actor_id, total=total)
            raise PersistenceError(
                "Persistence failed to apply the ledger",
                total=total,
                actor_id=self.actor_id,
            )
        logger.debug("Applied ledger", actor_id=self.actor_id, total=total)
        return total

    def apply(self, persistence: BasePersistence) -> int:
        """Hand all staged operations to persistence as one batch.

        Args:
            persistence: The host persistence gateway.

        Returns:
            The number of operations applied.

        Raises:
            LedgerAlreadyAppliedError: If the ledger was applied before.
            PersistenceError: If persistence fails. Some operations may
                have been applied.
        """
        operations = self._begin_apply()
        try:
            success = persistence.apply(self.actor_id, operations)
        except PersistenceError:
            raise
        except Exception as exc:
            logger.warning("Persistence raised", actor_id=self.actor_id, error=str(exc))
            raise PersistenceError(
                f"Persistence failed to apply the ledger: {exc}",
                total=len(operations),
                actor_id=self.actor_id,
            ) from exc
        return self._finish_apply(success, len(operations))

    async def apply_async(self, persistence: BasePersistence) -> int:
        """Asynchronous counterpart of apply()."""
        operations = self._begin_apply()
        try:
            success = await persistence.apply_async(self.actor_id, operations)
        except PersistenceError:
            raise
        except Exception as exc:
            logger.warning("Persistence raised", actor_id=self.actor_id, error=str(exc))
            raise PersistenceError(
                f"Persistence failed to apply the ledger: {exc}",
                total=len(operations),
                actor_id=self.actor_id,
            ) from exc
        return self._finish_apply(success, len(operations))


__all__ = [
    "BasePersistence",
    "CreateOperation",
    "DeleteOperation",
    "NotifyOperation",
    "Operation",
    "Record",
    "UpdateLedger",
    "UpdateOperation",
    "merge_patch",
]
