"""
Garden Repositories
===================

Typed facades over :class:`GardenOperations`.

- ``GardenRepository``: gardens, rows and plant catalogue CRUD, used by
  GardenService.
- ``PlantingRepository``: the PlantingStore / PlantCatalog implementation the
  row mutation coordinator reconciles against.

The operations layer logs ``sqlite3.Error`` and returns ``None``/``False``;
these facades turn that into ``RepositoryError`` and missing rows into
``NotFoundError``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from app.domain import row_layout
from app.domain.exceptions import NotFoundError, RepositoryError
from app.domain.garden import Garden, GardenRow, Plant, PlantInstance
from infrastructure.database.ops.garden import GardenOperations

logger = logging.getLogger(__name__)


def _require(result: Any, message: str) -> Any:
    if result is None or result is False:
        raise RepositoryError(message)
    return result


class GardenRepository:
    """Repository for garden, row and plant catalogue operations."""

    def __init__(self, backend: GardenOperations) -> None:
        self._backend = backend

    # Gardens -------------------------------------------------------------------
    def list_gardens(self) -> List[Garden]:
        records = _require(self._backend.list_gardens(), "Failed to list gardens")
        return [Garden.from_record(record) for record in records]

    def get_garden(self, garden_id: int) -> Optional[Garden]:
        record = self._backend.get_garden(garden_id)
        return Garden.from_record(record) if record else None

    def count_gardens(self) -> int:
        return _require(self._backend.count_gardens(), "Failed to count gardens")

    def create_garden(self, name: str) -> Garden:
        garden_id = _require(self._backend.insert_garden(name), "Failed to create garden")
        return Garden(id=garden_id, name=name)

    def rename_garden(self, garden_id: int, name: str) -> None:
        _require(self._backend.update_garden(garden_id, {"name": name}), f"Failed to rename garden {garden_id}")

    def delete_garden(self, garden_id: int) -> None:
        _require(self._backend.delete_garden(garden_id), f"Failed to delete garden {garden_id}")

    # Rows ----------------------------------------------------------------------
    def list_rows(self, garden_id: int) -> List[GardenRow]:
        records = _require(self._backend.list_row_records(garden_id), f"Failed to list rows of garden {garden_id}")
        return [self._hydrate_row(record) for record in records]

    def get_row(self, row_id: int) -> Optional[GardenRow]:
        record = self._backend.get_row_record(row_id)
        return self._hydrate_row(record) if record else None

    def create_row(self, garden_id: int, *, name: str, length: float, row_ends: float = 0) -> GardenRow:
        row_id = _require(
            self._backend.insert_row(garden_id, name, length, row_ends),
            f"Failed to create row in garden {garden_id}",
        )
        return GardenRow(id=row_id, garden_id=garden_id, name=name, length=length, row_ends=row_ends)

    def update_row(self, row_id: int, **fields: Any) -> None:
        _require(self._backend.update_row(row_id, fields), f"Failed to update row {row_id}")

    def delete_row(self, row_id: int) -> None:
        _require(self._backend.delete_row(row_id), f"Failed to delete row {row_id}")

    # Plants --------------------------------------------------------------------
    def list_plants(self) -> List[Plant]:
        records = _require(self._backend.list_plant_records(), "Failed to list plants")
        return [Plant.from_record(record) for record in records]

    def get_plant(self, plant_id: int) -> Optional[Plant]:
        record = self._backend.get_plant_record(plant_id)
        return Plant.from_record(record) if record else None

    def create_plant(self, *, name: str, spacing: float, quantity: int = 1, image_url: str | None = None) -> Plant:
        plant_id = _require(
            self._backend.insert_plant(name, spacing, quantity, image_url),
            "Failed to create plant",
        )
        return Plant(id=plant_id, name=name, spacing=spacing, quantity=quantity, image_url=image_url)

    def update_plant(self, plant_id: int, **fields: Any) -> None:
        _require(self._backend.update_plant(plant_id, fields), f"Failed to update plant {plant_id}")

    def delete_plant(self, plant_id: int) -> None:
        _require(self._backend.delete_plant(plant_id), f"Failed to delete plant {plant_id}")

    def count_placements(self, plant_id: int) -> int:
        return _require(self._backend.count_plant_instances(plant_id), f"Failed to count plant {plant_id}")

    def _hydrate_row(self, record: Any) -> GardenRow:
        instances = _require(
            self._backend.list_row_instances(record["id"]),
            f"Failed to load plants of row {record['id']}",
        )
        return GardenRow.from_record(record, [PlantInstance.from_record(item) for item in instances])


class PlantingRepository:
    """SQLite-backed PlantingStore and PlantCatalog."""

    def __init__(self, backend: GardenOperations) -> None:
        self._backend = backend

    # PlantingStore ---------------------------------------------------------------
    def fetch_row(self, row_id: int) -> GardenRow:
        record = self._backend.get_row_record(row_id)
        if record is None:
            raise NotFoundError(f"Row {row_id} not found", detail={"row_id": row_id})
        instances = _require(self._backend.list_row_instances(row_id), f"Failed to load plants of row {row_id}")
        return GardenRow.from_record(record, [PlantInstance.from_record(item) for item in instances])

    def add_instance(self, row_id: int, plant_id: int, position: float) -> PlantInstance:
        instance_id = _require(
            self._backend.insert_plant_instance(row_id, plant_id, position),
            f"Failed to place plant {plant_id} in row {row_id}",
        )
        record = _require(
            self._backend.get_plant_instance(instance_id),
            f"Plant instance {instance_id} vanished after insert",
        )
        return PlantInstance.from_record(record)

    def remove_instance(self, instance_id: int) -> None:
        record = self._backend.get_plant_instance(instance_id)
        if record is None:
            raise NotFoundError(f"Plant instance {instance_id} not found", detail={"instance_id": instance_id})
        row = self.fetch_row(record["row_id"])
        positions: Dict[int, float] = {p.id: p.position for p in row_layout.reflow(row, instance_id)}
        _require(
            self._backend.delete_instance_and_reposition(instance_id, positions.items()),
            f"Failed to remove plant instance {instance_id}",
        )
        logger.debug("Removed plant instance %s and repositioned %s", instance_id, len(positions))

    def update_instance_position(self, instance_id: int, position: float) -> None:
        _require(
            self._backend.update_plant_instance_position(instance_id, position),
            f"Failed to move plant instance {instance_id}",
        )

    # PlantCatalog ----------------------------------------------------------------
    def get_plant(self, plant_id: int) -> Optional[Plant]:
        record = self._backend.get_plant_record(plant_id)
        return Plant.from_record(record) if record else None

    def list_plants(self) -> List[Plant]:
        records = _require(self._backend.list_plant_records(), "Failed to list plants")
        return [Plant.from_record(record) for record in records]
