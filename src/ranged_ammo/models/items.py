"""Inventory and weapon records.

Weapons are immutable for the duration of an action. Ammunition stacks
live in an actor's inventory and are only ever changed through staged
ledger operations; the engines read them and never assign to them.
"""

from __future__ import annotations

from typing import Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from ranged_ammo.models.enums import RecordType


def new_uid() -> str:
    """Generate a record identifier."""
    return uuid4().hex


class Uses(BaseModel):
    """Charges of the currently-open item of a stack."""

    model_config = ConfigDict(frozen=True)

    value: int = Field(default=1, ge=0, description="Charges left in the open item")
    max: int = Field(default=1, ge=0, description="Charges per item")
    auto_destroy: bool = Field(
        default=True,
        description="Spend one charge at a time, discarding empty items",
    )

    @model_validator(mode="after")
    def validate_value(self) -> Self:
        """Ensure the remaining charges never exceed the maximum."""
        if self.value > self.max:
            msg = f"uses.value ({self.value}) cannot exceed uses.max ({self.max})"
            raise ValueError(msg)
        return self


class AmmunitionStack(BaseModel):
    """A stack of identical consumable rounds in an actor's inventory.

    Attributes:
        uid: Identity of this stack.
        source_id: Identity of the template the stack was created from.
            Stacks of the same ammunition kind share it.
        quantity: Number of items in the stack.
        uses: Charges of the open item.
    """

    model_config = ConfigDict(frozen=False)

    uid: str = Field(default_factory=new_uid)
    source_id: str = Field(description="Template identity of the ammunition kind")
    name: str
    img: str = Field(default="")
    record_type: RecordType = Field(default=RecordType.CONSUMABLE)
    quantity: int = Field(default=1, ge=0)
    uses: Uses = Field(default_factory=Uses)
    is_ammo: bool = Field(default=True)
    is_stowed: bool = Field(default=False, description="Stowed items cannot be used")

    @computed_field(description="Charges remaining across the whole stack")
    @property
    def total_charges(self) -> int:
        if self.quantity <= 0:
            return 0
        return self.uses.value + (self.quantity - 1) * self.uses.max

    @property
    def is_multi_charge(self) -> bool:
        """Whether each item of the stack holds more than one charge."""
        return self.uses.max > 1

    @property
    def is_full(self) -> bool:
        """A non-empty stack whose open item is fully charged."""
        return self.quantity > 0 and self.uses.value == self.uses.max

    @property
    def is_partial(self) -> bool:
        """A single item that has been partly used."""
        return self.quantity == 1 and self.uses.value != self.uses.max


class Weapon(BaseModel):
    """A ranged weapon instance owned by an actor.

    Attributes:
        id: Identity of the weapon item.
        actor_id: Identity of the owning actor.
        requires_loading: Whether the weapon must be loaded before firing.
        is_repeating: Whether the weapon is fed from a magazine.
        capacity: Number of chambers, 0 for a single-round weapon.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_uid)
    actor_id: str
    name: str
    img: str = Field(default="")
    requires_loading: bool = Field(default=True)
    is_repeating: bool = Field(default=False)
    capacity: int = Field(default=0, ge=0)

    @computed_field(description="Whether chambers are tracked individually")
    @property
    def is_capacity(self) -> bool:
        return self.capacity > 0


class RecordTemplate(BaseModel):
    """An editable template for a new record, as returned by a template source.

    Templates are copies: callers may edit them freely before turning
    them into records.
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    identity: str
    name: str
    img: str = Field(default="")
    record_type: RecordType = Field(default=RecordType.CONSUMABLE)
    description: str = Field(default="")
    quantity: int = Field(default=1, ge=0)
    uses: Uses = Field(default_factory=Uses)
    duration_rounds: int | None = Field(default=None, ge=0)

    def to_stack(self) -> AmmunitionStack:
        """Materialize an ammunition stack from this template.

        Returns:
            A new stack with a fresh identity.
        """
        return AmmunitionStack(
            source_id=self.identity,
            name=self.name,
            img=self.img,
            record_type=self.record_type,
            quantity=self.quantity,
            uses=self.uses,
        )
