"""
Garden Domain Entities
======================
Plants, rows and the plant instances placed along a row.

Lengths (row length, row ends, spacing, position) share one unit, usually
centimetres. Entities are plain dataclasses; the layout rules that operate on
them live in :mod:`app.domain.row_layout`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from app.domain.exceptions import ValidationError


def _mapping(record: Any) -> Mapping[str, Any]:
    """Accept ``sqlite3.Row`` or plain dicts."""
    return dict(record) if hasattr(record, "keys") else record


@dataclass(slots=True)
class Plant:
    """Catalog entry for a plant the user owns."""

    id: int
    name: str
    spacing: float
    quantity: int = 1
    used_count: int = 0
    image_url: str | None = None

    @property
    def available(self) -> int:
        return self.quantity - self.used_count

    @classmethod
    def from_record(cls, record: Any) -> "Plant":
        data = _mapping(record)
        quantity = data.get("quantity")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            spacing=data["spacing"],
            quantity=1 if quantity is None else int(quantity),
            used_count=int(data.get("used_count") or 0),
            image_url=data.get("image_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "spacing": self.spacing,
            "quantity": self.quantity,
            "used_count": self.used_count,
            "available": self.available,
            "image_url": self.image_url,
        }


@dataclass(slots=True)
class PlantInstance:
    """One physical placement of a catalog plant within a row.

    ``id`` is negative while the placement is optimistic and not yet
    confirmed by the store.
    """

    id: int
    plant_id: int
    position: float
    name: str
    spacing: float
    image_url: str | None = None

    @property
    def is_tentative(self) -> bool:
        return self.id < 0

    @classmethod
    def from_record(cls, record: Any) -> "PlantInstance":
        data = _mapping(record)
        return cls(
            id=int(data["id"]),
            plant_id=int(data["plant_id"]),
            position=data["position"],
            name=data["name"],
            spacing=data["spacing"],
            image_url=data.get("image_url"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "plant_id": self.plant_id,
            "position": self.position,
            "name": self.name,
            "spacing": self.spacing,
            "image_url": self.image_url,
        }


@dataclass(slots=True)
class GardenRow:
    """A bounded one-dimensional planting space."""

    id: int
    name: str
    length: float
    row_ends: float = 0
    garden_id: int | None = None
    plants: list[PlantInstance] = field(default_factory=list)

    @property
    def reserved_ends(self) -> float:
        return 2 * self.row_ends

    def find_instance(self, instance_id: int) -> PlantInstance | None:
        for instance in self.plants:
            if instance.id == instance_id:
                return instance
        return None

    @classmethod
    def from_record(cls, record: Any, plants: list[PlantInstance] | None = None) -> "GardenRow":
        data = _mapping(record)
        row_ends = data.get("row_ends")
        return cls(
            id=int(data["id"]),
            name=data["name"],
            length=data["length"],
            row_ends=row_ends if isinstance(row_ends, (int, float)) else 0,
            garden_id=data.get("garden_id"),
            plants=list(plants or []),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "garden_id": self.garden_id,
            "name": self.name,
            "length": self.length,
            "row_ends": self.row_ends,
            "plants": [instance.to_dict() for instance in self.plants],
        }


@dataclass(slots=True)
class Garden:
    """Named collection of rows."""

    id: int
    name: str

    @classmethod
    def from_record(cls, record: Any) -> "Garden":
        data = _mapping(record)
        return cls(id=int(data["id"]), name=data["name"])

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


def validate_row_dimensions(length: float, row_ends: float) -> None:
    """Reject rows whose end clearances leave no plantable space.

    The layout rules assume ``2 * row_ends < length``; they do not check it.
    """
    if length is None or length <= 0:
        raise ValidationError("Row length must be greater than zero", detail={"length": length})
    if row_ends is None or row_ends < 0:
        raise ValidationError("Row ends must not be negative", detail={"row_ends": row_ends})
    if 2 * row_ends >= length:
        raise ValidationError(
            "Row ends take up the whole row",
            detail={"length": length, "row_ends": row_ends},
        )
