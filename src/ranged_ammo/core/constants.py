"""Application-wide constants for the ranged ammunition system.

This module defines the stable template identities used by the actions
and the user-facing message templates. Hosts that localize messages can
replace entries in MESSAGES before running any action.
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Template Identities
# =============================================================================

CONJURED_ROUND_EFFECT_ID = "ranged-ammo.effect.conjured-round"
"""Template identity of the conjured round marker."""

CONJURED_ROUND_ITEM_ID = "ranged-ammo.item.conjured-round"
"""Identity used for the synthetic conjured round ammunition entry."""

CONJURE_BULLET_ACTION_ID = "ranged-ammo.action.conjure-bullet"
"""Identity of the action an actor needs to conjure bullets."""

CONJURE_BULLET_IMG = "icons/ranged-ammo/conjure-bullet.webp"
"""Image shown for conjured rounds and the conjure chat message."""

LOADED_MARKER_IMG = "icons/ranged-ammo/loaded.webp"
"""Image given to loaded markers created by the transfer engine."""

CHAMBER_MARKER_IMG = "icons/ranged-ammo/chamber-loaded.webp"
"""Image given to chamber markers."""

# =============================================================================
# Marker Names
# =============================================================================

LOADED_MARKER_NAME = "Loaded"
"""Base name of a loaded marker, suffixed with the weapon name."""

CHAMBER_MARKER_NAME = "Chamber Loaded"
"""Base name of a chamber marker, suffixed with the ammunition name."""

MARKER_SCHEMA_VERSION = 1
"""Current version of the persisted marker records."""

# =============================================================================
# Messages
# =============================================================================

MESSAGES: dict[str, str] = {
    "utils.warningFullyLoaded": "{weapon} is already fully loaded.",
    "utils.warningLoaded": "{weapon} is already loaded.",
    "ammunitionSelect.title": "Select Ammunition",
    "ammunitionSelect.action.unload": "Select the ammunition to unload.",
    "ammunitionSelect.header.loadedAmmunition": "Loaded Ammunition",
    "weaponSelect.title": "Select Weapon",
    "conjureBullet.conjuredRound": "Conjured Round",
    "conjureBullet.warningNoAction": "{actor} does not have the Conjure Bullet action.",
    "conjureBullet.noReloadableWeapons": "You have no weapons that can be loaded.",
    "conjureBullet.warningSingleRound": "{weapon} already has a conjured round loaded.",
    "conjureBullet.chatMessage": "{actor} conjures a round into their {weapon}.",
    "conjureBullet.chatActionName": "Conjure Bullet",
    "unload.noLoadedWeapons": "You have no loaded weapons.",
    "unload.warningNotLoaded": "{weapon} is not loaded.",
    "unload.tokenUnloadsWeapon": "{actor} unloads their {weapon}.",
    "unload.tokenUnloadsAmmunitionFromWeapon": "{actor} unloads {ammunition} from their {weapon}.",
    "consolidate.chatMessage": "{actor} consolidates their ammunition.",
    "consolidate.infoAlreadyConsolidated": "Your ammunition is already consolidated.",
}


def format_message(key: str, **data: Any) -> str:
    """Format a user-facing message.

    Args:
        key: Key into MESSAGES.
        **data: Values substituted into the template.

    Returns:
        The formatted message, or the key itself when it is unknown.
    """
    template = MESSAGES.get(key)
    if template is None:
        return key
    return template.format(**data)
