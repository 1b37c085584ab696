"""Custom exception hierarchy for the ranged ammunition system.

All exceptions inherit from RangedAmmoError, enabling unified error
handling at the host boundary while preserving domain-specific context.

Precondition violations (weapon not loaded, already fully loaded, ...)
are not exceptions: actions report them to the user as warnings and
abort before staging anything. The exceptions below cover the cases
that must reach the caller.

Example:
    >>> from ranged_ammo.core.exceptions import TemplateNotFoundError
    >>> raise TemplateNotFoundError("Unknown template", identity="ammo.arrow")
"""

from __future__ import annotations

from typing import Any


class RangedAmmoError(Exception):
    """Base exception for all ranged ammunition errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Ammunition Domain Exceptions
# =============================================================================


class AmmunitionError(RangedAmmoError):
    """Base exception for errors raised while computing an ammunition action."""

    def __init__(
        self,
        message: str,
        *,
        actor_id: str | None = None,
        weapon_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize ammunition error with actor and weapon context.

        Args:
            message: Human-readable error description.
            actor_id: Identifier of the actor whose state was being changed.
            weapon_id: Identifier of the weapon involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if actor_id:
            combined_details["actor_id"] = actor_id
        if weapon_id:
            combined_details["weapon_id"] = weapon_id
        super().__init__(message, details=combined_details)


class InvalidMarkerStateError(AmmunitionError):
    """Raised when a marker or stack breaks its invariant.

    This also covers marker kinds the transfer engine does not know how
    to handle.
    """


class TemplateNotFoundError(AmmunitionError):
    """Raised when a record template cannot be fetched for an identity."""

    def __init__(
        self,
        message: str,
        *,
        identity: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize template error with the identity that was requested.

        Args:
            message: Human-readable error description.
            identity: The template identity that could not be resolved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if identity:
            combined_details["identity"] = identity
        super().__init__(message, details=combined_details)


class LedgerError(AmmunitionError):
    """Raised when an update ledger is misused."""


class LedgerAlreadyAppliedError(LedgerError):
    """Raised when a ledger is applied a second time."""


class PersistenceError(AmmunitionError):
    """Raised when the persistence collaborator fails to apply a ledger.

    Application is best-effort: some of the operations may already have
    been applied when this is raised.
    """

    def __init__(
        self,
        message: str,
        *,
        applied: int | None = None,
        total: int | None = None,
        actor_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize persistence error with progress context.

        Args:
            message: Human-readable error description.
            applied: Number of operations known to be applied, if reported.
            total: Number of operations handed to the collaborator.
            actor_id: Identifier of the actor the ledger belongs to.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if applied is not None:
            combined_details["applied"] = applied
        if total is not None:
            combined_details["total"] = total
        super().__init__(message, actor_id=actor_id, details=combined_details)


# =============================================================================
# Configuration & Validation Exceptions
# =============================================================================


class ConfigurationError(RangedAmmoError):
    """Raised when application configuration is invalid."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


class ValidationError(RangedAmmoError):
    """Raised when data validation fails outside of pydantic models."""

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize validation error with field context.

        Args:
            message: Human-readable error description.
            field_name: Name of the field that failed validation.
            invalid_value: The value that failed validation.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if field_name:
            combined_details["field_name"] = field_name
        if invalid_value is not None:
            combined_details["invalid_value"] = invalid_value
        super().__init__(message, details=combined_details)


__all__ = [
    # Base exception
    "RangedAmmoError",
    # Ammunition exceptions
    "AmmunitionError",
    "InvalidMarkerStateError",
    "TemplateNotFoundError",
    "LedgerError",
    "LedgerAlreadyAppliedError",
    "PersistenceError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
]
