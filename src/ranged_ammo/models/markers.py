"""Marker records describing a weapon's loaded state.

Markers form a tagged union discriminated by ``kind``. Every marker is
frozen and validated on construction; changes are staged as ledger
updates and the persistence layer builds a fresh, re-validated record.

Kinds:
    SimpleLoadMarker: presence alone means "loaded".
    CapacityLoadMarker: per-chamber tracking for capacity weapons.
    MagazineLoadMarker: remaining rounds of a repeating weapon's magazine.
    ConjuredRoundMarker: one ephemeral round, never backed by inventory.
    ChamberMarker: which ammunition of a capacity weapon fires next.
"""

from __future__ import annotations

from typing import Annotated, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from ranged_ammo.core.constants import MARKER_SCHEMA_VERSION
from ranged_ammo.models.enums import MarkerKind
from ranged_ammo.models.items import new_uid


class AmmunitionEntry(BaseModel):
    """One kind of ammunition occupying a weapon's chambers.

    Attributes:
        id: Identity of the inventory stack the rounds were taken from.
        source_id: Template identity of the ammunition kind.
        quantity: Number of chambers holding this ammunition.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    source_id: str
    name: str
    img: str = Field(default="")
    quantity: int = Field(default=1, ge=1)


class MarkerBase(BaseModel):
    """Fields shared by every marker kind."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    uid: str = Field(default_factory=new_uid)
    schema_version: int = Field(default=MARKER_SCHEMA_VERSION, ge=1)
    weapon_id: str = Field(description="Weapon this marker belongs to")
    name: str
    img: str = Field(default="")
    description: str = Field(default="")


class SimpleLoadMarker(MarkerBase):
    """A loaded weapon without chamber tracking."""

    kind: Literal[MarkerKind.SIMPLE] = MarkerKind.SIMPLE
    ammunition: AmmunitionEntry | None = Field(
        default=None,
        description="The loaded round, when the advanced system tracks it",
    )


class CapacityLoadMarker(MarkerBase):
    """Chamber tracking for a weapon with capacity.

    An empty ``ammunition`` list means the rounds are not tracked by kind
    (simple ammunition system); otherwise the entry quantities always sum
    to ``loaded_chambers``.
    """

    kind: Literal[MarkerKind.CAPACITY] = MarkerKind.CAPACITY
    capacity: int = Field(ge=1)
    loaded_chambers: int = Field(ge=0)
    ammunition: list[AmmunitionEntry] = Field(default_factory=list)
    original_name: str
    original_description: str = Field(default="")

    @model_validator(mode="after")
    def validate_chambers(self) -> Self:
        if self.loaded_chambers > self.capacity:
            msg = f"loaded_chambers ({self.loaded_chambers}) exceeds capacity ({self.capacity})"
            raise ValueError(msg)
        if self.ammunition:
            tracked = sum(entry.quantity for entry in self.ammunition)
            if tracked != self.loaded_chambers:
                msg = (
                    f"ammunition quantities ({tracked}) do not match "
                    f"loaded_chambers ({self.loaded_chambers})"
                )
                raise ValueError(msg)
        return self

    @property
    def is_tracked(self) -> bool:
        """Whether the chambers record which ammunition they hold."""
        return bool(self.ammunition)


class MagazineLoadMarker(MarkerBase):
    """A magazine loaded into a repeating weapon."""

    kind: Literal[MarkerKind.MAGAZINE] = MarkerKind.MAGAZINE
    capacity: int = Field(ge=1)
    remaining: int = Field(ge=0)
    ammunition_item_id: str = Field(description="Stack the magazine was taken from")
    ammunition_source_id: str = Field(description="Template identity of the magazine")
    ammunition_name: str

    @model_validator(mode="after")
    def validate_remaining(self) -> Self:
        if self.remaining > self.capacity:
            msg = f"remaining ({self.remaining}) exceeds capacity ({self.capacity})"
            raise ValueError(msg)
        return self


class ConjuredRoundMarker(MarkerBase):
    """An ephemeral round. Always counts as exactly one loaded round."""

    kind: Literal[MarkerKind.CONJURED_ROUND] = MarkerKind.CONJURED_ROUND
    duration_rounds: int | None = Field(default=None, ge=0)


class ChamberMarker(MarkerBase):
    """The ammunition that will be fired next from a capacity weapon."""

    kind: Literal[MarkerKind.CHAMBER] = MarkerKind.CHAMBER
    ammunition: AmmunitionEntry


Marker = Annotated[
    SimpleLoadMarker
    | CapacityLoadMarker
    | MagazineLoadMarker
    | ConjuredRoundMarker
    | ChamberMarker,
    Field(discriminator="kind"),
]

LoadMarker = SimpleLoadMarker | CapacityLoadMarker

marker_adapter: TypeAdapter[Marker] = TypeAdapter(Marker)


def parse_marker(data: dict) -> Marker:
    """Validate a raw marker record at the persistence boundary.

    Args:
        data: The stored record, including its ``kind``.

    Returns:
        The typed marker.

    Raises:
        pydantic.ValidationError: If the record is malformed.
    """
    return marker_adapter.validate_python(data)
