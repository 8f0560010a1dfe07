"""Exception hierarchy for catalog, override and contact errors.

Each exception carries the HTTP status the API layer maps it to. Messages
are safe to show to clients; upstream error details are only logged.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for errors raised by catalog services."""

    status_code: int = 500

    def __init__(self, message: str, **details: Any) -> None:
        self.message = message
        self.details = details
        super().__init__(message)


class CatalogNotFoundError(CatalogError):
    """Route parameters do not resolve to a catalog entity."""

    status_code = 404


class AmbiguousOverrideError(CatalogError):
    """Two equally specific override documents match the same stage."""

    status_code = 409

    def __init__(self, stage_name: str, override_ids: list[str]) -> None:
        super().__init__(
            f"Ambiguous overrides for stage '{stage_name}'",
            stage_name=stage_name,
            override_ids=override_ids,
        )


class OverrideConflictError(CatalogError):
    """An override with the same scope already exists."""

    status_code = 409


class ContactDeliveryError(CatalogError):
    """The contact request could not be delivered to the mail provider."""

    status_code = 502


class InvalidOverrideError(CatalogError):
    """The override's scope does not fit any specificity tier."""

    status_code = 422
