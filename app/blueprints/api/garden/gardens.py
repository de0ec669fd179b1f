"""
Garden and Row CRUD
===================

Endpoints for gardens and the rows inside them.
"""

from __future__ import annotations

import logging

from flask import Response

from app.blueprints.api._common import (
    get_garden_service as _garden_service,
    parse_body,
    success as _success,
)
from app.schemas import CreateGardenRequest, CreateRowRequest, UpdateGardenRequest, UpdateRowRequest
from app.utils.http import safe_route

from . import garden_api

logger = logging.getLogger("garden_api.gardens")


# ============================================================================
# GARDENS
# ============================================================================


@garden_api.get("/gardens")
@safe_route("Failed to list gardens")
def list_gardens() -> Response:
    gardens = _garden_service().list_gardens()
    return _success({"gardens": [g.to_dict() for g in gardens], "count": len(gardens)})


@garden_api.post("/gardens")
@safe_route("Failed to create garden")
def create_garden() -> Response:
    body = parse_body(CreateGardenRequest)
    garden = _garden_service().create_garden(body.name)
    return _success(garden.to_dict(), 201, message="Garden created")


@garden_api.put("/gardens/<int:garden_id>")
@safe_route("Failed to rename garden")
def rename_garden(garden_id: int) -> Response:
    body = parse_body(UpdateGardenRequest)
    garden = _garden_service().rename_garden(garden_id, body.name)
    return _success(garden.to_dict(), message="Garden updated")


@garden_api.delete("/gardens/<int:garden_id>")
@safe_route("Failed to delete garden")
def delete_garden(garden_id: int) -> Response:
    _garden_service().delete_garden(garden_id)
    return _success({"garden_id": garden_id}, message="Garden deleted")


# ============================================================================
# ROWS
# ============================================================================


@garden_api.get("/gardens/<int:garden_id>/rows")
@safe_route("Failed to list rows")
def list_rows(garden_id: int) -> Response:
    rows = _garden_service().list_rows(garden_id)
    return _success({"rows": rows, "count": len(rows)})


@garden_api.post("/gardens/<int:garden_id>/rows")
@safe_route("Failed to create row")
def create_row(garden_id: int) -> Response:
    body = parse_body(CreateRowRequest)
    logger.info("Creating row '%s' in garden %s", body.name, garden_id)
    row = _garden_service().create_row(garden_id, name=body.name, length=body.length, row_ends=body.row_ends)
    return _success(row, 201, message="Row created")


@garden_api.put("/rows/<int:row_id>")
@safe_route("Failed to update row")
def update_row(row_id: int) -> Response:
    body = parse_body(UpdateRowRequest)
    row = _garden_service().update_row(row_id, **body.model_dump(exclude_none=True))
    return _success(row, message="Row updated")


@garden_api.delete("/rows/<int:row_id>")
@safe_route("Failed to delete row")
def delete_row(row_id: int) -> Response:
    _garden_service().delete_row(row_id)
    return _success({"row_id": row_id}, message="Row deleted")
