"""
Blueprint Common Utilities
==========================

Shared helper functions for the API blueprints.

Usage:
    from app.blueprints.api._common import (
        get_container, get_json, parse_body, success, fail,
        get_garden_service, get_coordinator,
    )

This module centralizes:
- Service container access
- Request JSON parsing and pydantic validation
- Standardized response helpers
- Common service accessors
"""
from __future__ import annotations

import logging
from typing import Type, TypeVar

from flask import current_app, request
from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from app.domain.exceptions import ValidationError
from app.utils.http import error_response, success_response

logger = logging.getLogger("api._common")

ModelT = TypeVar("ModelT", bound=BaseModel)

# ============================================================================
# CONTAINER ACCESS
# ============================================================================


def get_container():
    """
    Get the service container from Flask app config.

    Returns:
        ServiceContainer: The application service container

    Raises:
        RuntimeError: If container is not configured
    """
    container = current_app.config.get("CONTAINER")
    if not container:
        raise RuntimeError("ServiceContainer not found in app config")
    return container


# ============================================================================
# REQUEST HELPERS
# ============================================================================


def get_json() -> dict:
    """
    Get JSON request body with silent failure.

    Returns:
        dict: Parsed JSON body or empty dict if not available
    """
    return request.get_json(silent=True) or {}


def parse_body(model: Type[ModelT]) -> ModelT:
    """Validate the JSON body against ``model``.

    Raises:
        ValidationError: with the pydantic error list under ``detail["errors"]``.
    """
    try:
        return model(**get_json())
    except SchemaValidationError as ve:
        raise ValidationError(
            "Invalid request",
            detail={"errors": ve.errors(include_url=False, include_context=False, include_input=False)},
        ) from None


# ============================================================================
# RESPONSE HELPERS
# ============================================================================


def success(data: dict | list | None = None, status: int = 200, *, message: str | None = None):
    """
    Standard success response wrapper.

    Returns:
        Flask Response with format: {"ok": true, "data": ..., "error": null}
    """
    return success_response(data, status, message=message)


def fail(message: str, status: int = 400, *, details: dict | None = None):
    """
    Standard error response wrapper.

    Returns:
        Flask Response with format: {"ok": false, "data": null, "error": {...}}
    """
    return error_response(message, status, details=details)


# ============================================================================
# SERVICE ACCESSORS
# ============================================================================


def get_garden_service():
    """Get the garden catalog service (gardens, rows, plants)."""
    return get_container().garden_service


def get_coordinator():
    """Get the row mutation coordinator (add / remove / move)."""
    return get_container().row_coordinator
