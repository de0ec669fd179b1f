"""
Row Layout and Planting
=======================

Endpoints exposing a row's layout numbers and triggering the optimistic
add / remove / move mutations.

A mutation sent while the row is still busy with a previous one is dropped;
the response is ``200`` with ``"applied": false`` and the current row.
"""

from __future__ import annotations

import logging

from flask import Response, request

from app.blueprints.api._common import (
    fail as _fail,
    get_coordinator as _coordinator,
    parse_body,
    success as _success,
)
from app.schemas import AddPlantToRowRequest, MovePlantRequest
from app.utils.http import safe_route

from . import garden_api

logger = logging.getLogger("garden_api.layout")


@garden_api.get("/rows/<int:row_id>/layout")
@safe_route("Failed to load row layout")
def get_layout(row_id: int) -> Response:
    return _success(_coordinator().describe_row(row_id))


@garden_api.get("/rows/<int:row_id>/fit")
@safe_route("Failed to check fit")
def check_fit(row_id: int) -> Response:
    plant_id = request.args.get("plant_id", type=int)
    if plant_id is None:
        return _fail("plant_id query parameter is required", 400)
    return _success(_coordinator().evaluate_fit(row_id, plant_id))


@garden_api.post("/rows/<int:row_id>/reload")
@safe_route("Failed to reload row")
def reload_row(row_id: int) -> Response:
    coordinator = _coordinator()
    reloaded = coordinator.reload_row(row_id)
    return _success({"applied": reloaded is not None, "row": coordinator.describe_row(row_id)})


@garden_api.post("/rows/<int:row_id>/plants")
@safe_route("Failed to add plant")
def add_plant(row_id: int) -> Response:
    body = parse_body(AddPlantToRowRequest)
    coordinator = _coordinator()
    instance = coordinator.add_plant(row_id, body.plant_id)
    row = coordinator.describe_row(row_id)
    if instance is None:
        return _success({"applied": False, "row": row})
    return _success({"applied": True, "instance": instance.to_dict(), "row": row}, 201, message="Plant added")


@garden_api.delete("/rows/<int:row_id>/plants/<int:instance_id>")
@safe_route("Failed to remove plant")
def remove_plant(row_id: int, instance_id: int) -> Response:
    coordinator = _coordinator()
    reflowed = coordinator.remove_plant(row_id, instance_id)
    return _success({"applied": reflowed is not None, "row": coordinator.describe_row(row_id)})


@garden_api.post("/rows/<int:row_id>/plants/<int:instance_id>/move")
@safe_route("Failed to move plant")
def move_plant(row_id: int, instance_id: int) -> Response:
    body = parse_body(MovePlantRequest)
    coordinator = _coordinator()
    moved = coordinator.move_plant(row_id, instance_id, body.direction)
    return _success({"applied": moved is not None, "row": coordinator.describe_row(row_id)})
