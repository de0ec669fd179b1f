"""
Schemas Module
==============

This module provides Pydantic models for request validation.
"""

from app.schemas.garden import (
    AddPlantToRowRequest,
    CreateGardenRequest,
    CreatePlantRequest,
    CreateRowRequest,
    MovePlantRequest,
    UpdateGardenRequest,
    UpdatePlantRequest,
    UpdateRowRequest,
)

__all__ = [
    "AddPlantToRowRequest",
    "CreateGardenRequest",
    "CreatePlantRequest",
    "CreateRowRequest",
    "MovePlantRequest",
    "UpdateGardenRequest",
    "UpdatePlantRequest",
    "UpdateRowRequest",
]
