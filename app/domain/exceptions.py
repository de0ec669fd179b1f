"""Centralized exception hierarchy for the garden planner.

All domain and service exceptions inherit from :class:`GardenPlannerError` so
that callers can catch a single base class when they need a broad safety net,
yet still match on specific subclasses where narrower handling is appropriate.

Blueprint-level error handling (see ``app/utils/http.safe_route``) maps these
to the correct HTTP status codes automatically.

Hierarchy
---------
::

    GardenPlannerError (base: maps to 500)
    ├── ValidationError              (400: bad input from caller)
    │   ├── InsufficientSpaceError   (400: plant does not fit the row)
    │   └── InsufficientStockError   (400: no units of the plant left)
    ├── NotFoundError                (404: entity does not exist)
    ├── ConflictError                (409: duplicate / state conflict)
    └── ServiceError                 (500: business-logic failure)
        ├── RepositoryError          (500: database / persistence)
        └── StoreError               (503: backing store rejected a mutation)
"""

from __future__ import annotations


class GardenPlannerError(Exception):
    """Base exception for all garden planner errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side, **not** leaked to
        the HTTP client unless the exception class opts in).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(GardenPlannerError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400


class InsufficientSpaceError(ValidationError):
    """The candidate plant would overflow the row."""

    def __init__(self, row_id: int, plant_id: int, *, used_space: float, length: float) -> None:
        super().__init__(
            "There's not enough space in this row for this plant",
            detail={"row_id": row_id, "plant_id": plant_id, "used_space": used_space, "length": length},
        )


class InsufficientStockError(ValidationError):
    """Every unit of the plant is already placed."""

    def __init__(self, plant_id: int, plant_name: str) -> None:
        super().__init__(
            f"You don't have any more {plant_name} available",
            detail={"plant_id": plant_id},
        )


class NotFoundError(GardenPlannerError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404


class ConflictError(GardenPlannerError):
    """Operation conflicts with existing state (HTTP 409)."""

    http_status: int = 409


# ── Server errors (5xx) ──────────────────────────────────────────────


class ServiceError(GardenPlannerError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500


class RepositoryError(ServiceError):
    """Database / persistence layer failure (HTTP 500)."""

    http_status: int = 500


class StoreError(ServiceError):
    """The backing store failed a mutation; local state was rolled back or reloaded.

    Always retryable: the row can be reloaded from the store as ground truth.
    """

    http_status: int = 503
    retryable: bool = True

    def __init__(self, operation: str, row_id: int, *, cause: BaseException | None = None) -> None:
        super().__init__(
            f"Failed to {operation} plant",
            detail={"operation": operation, "row_id": row_id, "retryable": True},
        )
        self.operation = operation
        self.row_id = row_id
        self.__cause__ = cause
