"""
Plant Catalogue
===============

Endpoints for the plants the user owns, with usage counts.
"""

from __future__ import annotations

import logging

from flask import Response

from app.blueprints.api._common import (
    get_garden_service as _garden_service,
    parse_body,
    success as _success,
)
from app.schemas import CreatePlantRequest, UpdatePlantRequest
from app.utils.http import safe_route

from . import garden_api

logger = logging.getLogger("garden_api.plants")


@garden_api.get("/plants")
@safe_route("Failed to list plants")
def list_plants() -> Response:
    plants = _garden_service().list_plants()
    return _success({"plants": [p.to_dict() for p in plants], "count": len(plants)})


@garden_api.post("/plants")
@safe_route("Failed to create plant")
def create_plant() -> Response:
    body = parse_body(CreatePlantRequest)
    plant = _garden_service().create_plant(**body.model_dump())
    return _success(plant.to_dict(), 201, message="Plant created")


@garden_api.put("/plants/<int:plant_id>")
@safe_route("Failed to update plant")
def update_plant(plant_id: int) -> Response:
    body = parse_body(UpdatePlantRequest)
    plant = _garden_service().update_plant(plant_id, **body.model_dump(exclude_none=True))
    return _success(plant.to_dict(), message="Plant updated")


@garden_api.delete("/plants/<int:plant_id>")
@safe_route("Failed to delete plant")
def delete_plant(plant_id: int) -> Response:
    _garden_service().delete_plant(plant_id)
    return _success({"plant_id": plant_id}, message="Plant deleted")
