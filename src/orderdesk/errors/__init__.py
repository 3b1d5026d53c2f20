"""Custom exception hierarchy for orderdesk."""

from __future__ import annotations


class OrderDeskError(Exception):
    """Base class for all custom errors raised by orderdesk."""


# --- 3-layer hierarchy ---

class DomainError(OrderDeskError):
    """Base class for domain-level errors."""


class InfrastructureError(OrderDeskError):
    """Base class for infrastructure-level errors."""


class ApplicationError(OrderDeskError):
    """Base class for application-level errors."""


# --- Domain errors ---

class ValidationError(DomainError):
    """Raised when a request is rejected before anything is sent to the backend."""


class ConfirmationRequiredError(ValidationError):
    """Raised when a hard delete is attempted without the typed confirmation."""


class OrderNotFoundError(DomainError):
    """Raised when the requested order cannot be located."""


# --- Infrastructure errors ---

class TransportError(InfrastructureError):
    """Raised when the backend store cannot be reached or a query fails.

    Retryable: local state is never touched when this is raised.
    """


class ConnectionPoolExhausted(TransportError):
    """Raised when no connections are available in the pool."""


# --- Application errors ---

class PartialBulkFailure(ApplicationError):
    """Raised when the backend rejects a bulk filter or patch."""


class StaleResponse(ApplicationError):
    """Raised internally when a superseded load completes; never shown to the user."""


# --- DI-specific errors ---

class CircularDependencyError(OrderDeskError):
    """Raised when a circular dependency is detected during resolution."""


class ResolutionError(OrderDeskError):
    """Raised when a dependency cannot be resolved."""


# --- Settings ---

class SettingsError(OrderDeskError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""
