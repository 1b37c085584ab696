"""Actor record owning weapons, inventory and markers.

The actor is the unit every action operates on. Lookups here are the
marker lookup the engines rely on; nothing in this module mutates the
actor except the persistence layer.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ranged_ammo.models.enums import MarkerKind
from ranged_ammo.models.items import AmmunitionStack, Weapon, new_uid
from ranged_ammo.models.markers import LoadMarker, Marker


class Actor(BaseModel):
    """A character with ranged weapons and ammunition.

    Attributes:
        id: Identity of the actor.
        name: Display name, used in messages.
        in_combat: Whether the actor's token is in an active encounter.
        advanced_ammunition: Per-actor override of the advanced system
            setting; None defers to configuration.
        action_ids: Identities of the actions the actor has.
        weapons: Weapons owned by the actor.
        inventory: Ammunition stacks carried by the actor.
        markers: Loaded-state markers, keyed by weapon.
    """

    model_config = ConfigDict(frozen=False)

    id: str = Field(default_factory=new_uid)
    name: str
    in_combat: bool = Field(default=False)
    advanced_ammunition: bool | None = Field(default=None)
    action_ids: list[str] = Field(default_factory=list)
    weapons: list[Weapon] = Field(default_factory=list)
    inventory: list[AmmunitionStack] = Field(default_factory=list)
    markers: list[Marker] = Field(default_factory=list)

    def has_action(self, action_id: str) -> bool:
        """Check whether the actor has an action."""
        return action_id in self.action_ids

    def get_weapon(self, weapon_id: str) -> Weapon | None:
        """Get a weapon by id."""
        for weapon in self.weapons:
            if weapon.id == weapon_id:
                return weapon
        return None

    def get_item(self, uid: str) -> AmmunitionStack | None:
        """Get an inventory stack by uid."""
        for stack in self.inventory:
            if stack.uid == uid:
                return stack
        return None

    def find_marker(self, kind: MarkerKind, weapon_id: str) -> Marker | None:
        """Find the marker of one kind attached to a weapon.

        Args:
            kind: The marker kind to look for.
            weapon_id: The weapon the marker belongs to.

        Returns:
            The marker, or None if the weapon has none of that kind.
        """
        for marker in self.markers:
            if marker.kind == kind and marker.weapon_id == weapon_id:
                return marker
        return None

    def find_load_marker(self, weapon_id: str) -> LoadMarker | None:
        """Find the simple or capacity load marker of a weapon."""
        for marker in self.markers:
            if marker.kind.is_load_marker and marker.weapon_id == weapon_id:
                return marker
        return None

    def ammunition_stacks(self, *, include_stowed: bool = False) -> list[AmmunitionStack]:
        """List the ammunition stacks in inventory.

        Args:
            include_stowed: Also list stowed stacks.

        Returns:
            Ammunition stacks in inventory order.
        """
        return [
            stack
            for stack in self.inventory
            if stack.is_ammo and (include_stowed or not stack.is_stowed)
        ]
