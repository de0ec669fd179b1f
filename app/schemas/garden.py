"""
Garden Schemas
==============

Pydantic models for garden, row, plant catalogue and row mutation requests.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.enums.garden import MoveDirection


# ============================================================================
# Gardens
# ============================================================================


class CreateGardenRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Garden name")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Garden name must not be blank")
        return v


class UpdateGardenRequest(CreateGardenRequest):
    """Rename a garden."""


# ============================================================================
# Rows
# ============================================================================


class CreateRowRequest(BaseModel):
    """Schema for creating a row; all lengths share one unit (usually cm)."""

    name: str = Field(..., min_length=1, max_length=100)
    length: float = Field(..., gt=0, description="Total row length")
    row_ends: float = Field(default=0, ge=0, description="Clearance reserved at each end")

    @model_validator(mode="after")
    def validate_ends(self):
        if 2 * self.row_ends >= self.length:
            raise ValueError("row_ends must leave plantable space (2 * row_ends < length)")
        return self

    model_config = ConfigDict(
        json_schema_extra={"example": {"name": "Carrots", "length": 240, "row_ends": 10}}
    )


class UpdateRowRequest(BaseModel):
    """Schema for updating a row (all fields optional)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    length: Optional[float] = Field(default=None, gt=0)
    row_ends: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_ends(self):
        if self.length is not None and self.row_ends is not None and 2 * self.row_ends >= self.length:
            raise ValueError("row_ends must leave plantable space (2 * row_ends < length)")
        return self


# ============================================================================
# Plant catalogue
# ============================================================================


class CreatePlantRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    spacing: float = Field(..., gt=0, description="Space one plant needs along the row")
    quantity: int = Field(default=1, ge=0, description="Units owned")
    image_url: Optional[str] = Field(default=None, max_length=500)


class UpdatePlantRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    spacing: Optional[float] = Field(default=None, gt=0)
    quantity: Optional[int] = Field(default=None, ge=0)
    image_url: Optional[str] = Field(default=None, max_length=500)


# ============================================================================
# Row mutations
# ============================================================================


class AddPlantToRowRequest(BaseModel):
    plant_id: int = Field(..., gt=0)


class MovePlantRequest(BaseModel):
    direction: MoveDirection

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v
