"""Centralized exception hierarchy for LeafLink.

All domain and service exceptions inherit from :class:`LeafLinkError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    LeafLinkError (base, maps to 500)
    ├── ValidationError          (400: bad input from caller)
    ├── AuthenticationError      (401: sign-in / session failure)
    ├── NotFoundError            (404: entity does not exist)
    ├── ConflictError            (409: duplicate / state conflict)
    ├── ServiceError             (500: business-logic failure)
    │   ├── RepositoryError      (500: plant store rejected the operation)
    │   └── ExternalServiceError (502: third-party / network)
    └── ConfigurationError       (500: missing / invalid config)
"""

from __future__ import annotations


class LeafLinkError(Exception):
    """Base exception for all LeafLink application errors.

    Parameters
    ----------
    message:
        Human-readable description. For store failures this is the
        backend's own message and is shown to the user in the error
        notification.
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(LeafLinkError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class AuthenticationError(LeafLinkError):
    """Sign-in, sign-up or session query rejected by the provider (HTTP 401)."""

    http_status: int = 401


class NotFoundError(LeafLinkError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(LeafLinkError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(LeafLinkError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Plant store / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class ExternalServiceError(ServiceError):
    """Third-party or network dependency failure (HTTP 502)."""

    http_status: int = 502


class ConfigurationError(LeafLinkError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
