"""Exception hierarchy for the fleet service.

Every error carries the HTTP status it is reported with, so route handlers
raise and ``main`` translates.
"""

from __future__ import annotations


class FleetError(Exception):
    """Base exception for all fleet errors."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class UnauthenticatedError(FleetError):
    """No caller identity could be resolved."""

    status_code = 401


class ForbiddenError(FleetError):
    """Caller does not own the resource."""

    status_code = 403


class NotFoundError(FleetError):
    """Resource, or embedded element, does not exist."""

    status_code = 404


class FleetValidationError(FleetError):
    """Malformed input."""

    status_code = 400


class InvalidIdentifierError(FleetValidationError):
    """Identifier is not a canonical ObjectId string."""


class MissingParameterError(FleetValidationError):
    """Required query parameter was not supplied."""


class NoDriverAssignedError(FleetError):
    """Item operation on a vehicle without a driver."""

    status_code = 409


class UpstreamError(FleetError):
    """Database or image host failure."""

    status_code = 502


class ConfigError(FleetError):
    """Required setting is missing."""
