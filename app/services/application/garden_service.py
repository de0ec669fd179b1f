"""
Garden Service
==============
Application-level service for the garden catalogue: gardens, their rows and
the plants the user owns.

Responsibilities:
- Garden CRUD (the last garden cannot be deleted)
- Row CRUD with dimension validation (``2 * row_ends < length``)
- Plant catalogue CRUD with usage counts derived from placed instances
- Keep the planner board consistent: edited or deleted rows and plants are
  dropped from the RowMutationCoordinator so the next access reloads them

Row contents (adding, removing and moving plant instances) belong to the
RowMutationCoordinator; this service never touches instances directly.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from app.domain.exceptions import ConflictError, NotFoundError, ValidationError
from app.domain.garden import Garden, GardenRow, Plant, validate_row_dimensions
from app.enums.events import CatalogEvent
from app.utils.event_bus import EventBus

if TYPE_CHECKING:
    from app.services.application.row_mutation_coordinator import RowMutationCoordinator
    from infrastructure.database.repositories.garden import GardenRepository

logger = logging.getLogger(__name__)


def _clean_name(name: Optional[str], what: str) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(f"{what} name must not be empty", detail={"name": name})
    return cleaned


class GardenService:
    """Application service for gardens, rows and the plant catalogue."""

    def __init__(
        self,
        repository: "GardenRepository",
        coordinator: "RowMutationCoordinator",
        event_bus: Optional[EventBus] = None,
    ):
        """
        Initialize garden service.

        Args:
            repository: Garden repository for catalogue persistence
            coordinator: Row mutation coordinator owning the planner board
            event_bus: EventBus for catalog events
        """
        self.repository = repository
        self.coordinator = coordinator
        self.event_bus = event_bus or coordinator.event_bus

    # ==================== Gardens ====================

    def ensure_default_garden(self, name: str) -> Garden:
        """Create ``name`` when no garden exists yet; return the first garden."""
        gardens = self.repository.list_gardens()
        if gardens:
            return gardens[0]
        logger.info(f"No gardens found, creating default garden '{name}'")
        return self.repository.create_garden(_clean_name(name, "Garden"))

    def list_gardens(self) -> List[Garden]:
        return self.repository.list_gardens()

    def get_garden(self, garden_id: int) -> Garden:
        garden = self.repository.get_garden(garden_id)
        if garden is None:
            raise NotFoundError(f"Garden {garden_id} not found", detail={"garden_id": garden_id})
        return garden

    def create_garden(self, name: str) -> Garden:
        garden = self.repository.create_garden(_clean_name(name, "Garden"))
        logger.info(f"Created garden {garden.id} '{garden.name}'")
        return garden

    def rename_garden(self, garden_id: int, name: str) -> Garden:
        garden = self.get_garden(garden_id)
        garden.name = _clean_name(name, "Garden")
        self.repository.rename_garden(garden_id, garden.name)
        return garden

    def delete_garden(self, garden_id: int) -> None:
        self.get_garden(garden_id)
        if self.repository.count_gardens() <= 1:
            raise ConflictError("Cannot delete the last garden", detail={"garden_id": garden_id})

        rows = self.repository.list_rows(garden_id)
        busy = [row.id for row in rows if self.coordinator.is_active(row.id)]
        if busy:
            raise ConflictError("A row in this garden is being updated", detail={"row_ids": busy})

        self.repository.delete_garden(garden_id)
        for row in rows:
            self.coordinator.forget_row(row.id)
        self.coordinator.forget_plants()
        logger.info(f"Deleted garden {garden_id} with {len(rows)} row(s)")

    # ==================== Rows ====================

    def list_rows(self, garden_id: int) -> List[Dict[str, Any]]:
        """Rows of a garden with their layout, capacity numbers and mutation state."""
        self.get_garden(garden_id)
        return [self.coordinator.describe_row(row.id) for row in self.repository.list_rows(garden_id)]

    def get_row(self, row_id: int) -> GardenRow:
        row = self.repository.get_row(row_id)
        if row is None:
            raise NotFoundError(f"Row {row_id} not found", detail={"row_id": row_id})
        return row

    def create_row(self, garden_id: int, *, name: str, length: float, row_ends: float = 0) -> Dict[str, Any]:
        self.get_garden(garden_id)
        validate_row_dimensions(length, row_ends)
        row = self.repository.create_row(garden_id, name=_clean_name(name, "Row"), length=length, row_ends=row_ends)
        logger.info(f"Created row {row.id} in garden {garden_id} (length={length}, row_ends={row_ends})")
        self.event_bus.publish(
            CatalogEvent.ROW_CREATED,
            {"row_id": row.id, "garden_id": garden_id, "length": length, "row_ends": row_ends},
        )
        return self.coordinator.describe_row(row.id)

    def update_row(
        self,
        row_id: int,
        *,
        name: Optional[str] = None,
        length: Optional[float] = None,
        row_ends: Optional[float] = None,
    ) -> Dict[str, Any]:
        row = self.get_row(row_id)
        fields: Dict[str, Any] = {}
        if name is not None:
            fields["name"] = _clean_name(name, "Row")
        if length is not None:
            fields["length"] = length
        if row_ends is not None:
            fields["row_ends"] = row_ends
        validate_row_dimensions(fields.get("length", row.length), fields.get("row_ends", row.row_ends))

        if self.coordinator.is_active(row_id):
            raise ConflictError("Row is being updated, try again shortly", detail={"row_id": row_id})

        self.repository.update_row(row_id, **fields)
        self.coordinator.forget_row(row_id)
        self.event_bus.publish(CatalogEvent.ROW_UPDATED, {"row_id": row_id, **fields})
        return self.coordinator.describe_row(row_id)

    def delete_row(self, row_id: int) -> None:
        row = self.get_row(row_id)
        if self.coordinator.is_active(row_id):
            raise ConflictError("Row is being updated, try again shortly", detail={"row_id": row_id})

        self.repository.delete_row(row_id)
        self.coordinator.forget_row(row_id)
        # Placed units return to stock.
        for plant_id in {instance.plant_id for instance in row.plants}:
            self.coordinator.forget_plant(plant_id)
        logger.info(f"Deleted row {row_id} ({len(row.plants)} plant(s) released)")
        self.event_bus.publish(
            CatalogEvent.ROW_DELETED,
            {"row_id": row_id, "garden_id": row.garden_id, "released": len(row.plants)},
        )

    # ==================== Plant catalogue ====================

    def list_plants(self) -> List[Plant]:
        return self.repository.list_plants()

    def get_plant(self, plant_id: int) -> Plant:
        plant = self.repository.get_plant(plant_id)
        if plant is None:
            raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
        return plant

    def create_plant(
        self,
        *,
        name: str,
        spacing: float,
        quantity: int = 1,
        image_url: Optional[str] = None,
    ) -> Plant:
        self._validate_plant_numbers(spacing, quantity)
        plant = self.repository.create_plant(
            name=_clean_name(name, "Plant"), spacing=spacing, quantity=quantity, image_url=image_url
        )
        logger.info(f"Created plant {plant.id} '{plant.name}' (spacing={spacing}, quantity={quantity})")
        return plant

    def update_plant(
        self,
        plant_id: int,
        *,
        name: Optional[str] = None,
        spacing: Optional[float] = None,
        quantity: Optional[int] = None,
        image_url: Optional[str] = None,
    ) -> Plant:
        self.get_plant(plant_id)
        self._validate_plant_numbers(spacing, quantity)
        fields: Dict[str, Any] = {
            "name": _clean_name(name, "Plant") if name is not None else None,
            "spacing": spacing,
            "quantity": quantity,
            "image_url": image_url,
        }
        if quantity is not None:
            # Board count includes adds still waiting on the store.
            self.coordinator.limit_quantity(plant_id, quantity)

        try:
            self.repository.update_plant(plant_id, **fields)
        except Exception:
            self.coordinator.forget_plant(plant_id)
            raise
        if name is not None or spacing is not None or image_url is not None:
            self.coordinator.forget_plant(plant_id)
        return self.get_plant(plant_id)

    def delete_plant(self, plant_id: int) -> None:
        plant = self.get_plant(plant_id)
        placed = self.repository.count_placements(plant_id)
        if placed:
            raise ConflictError(
                f"{plant.name} is still placed in {placed} spot(s); remove it from the rows first",
                detail={"plant_id": plant_id, "used_count": placed},
            )
        self.repository.delete_plant(plant_id)
        self.coordinator.forget_plant(plant_id)
        logger.info(f"Deleted plant {plant_id} '{plant.name}'")

    @staticmethod
    def _validate_plant_numbers(spacing: Optional[float], quantity: Optional[int]) -> None:
        if spacing is not None and spacing <= 0:
            raise ValidationError("Spacing must be greater than zero", detail={"spacing": spacing})
        if quantity is not None and quantity < 0:
            raise ValidationError("Quantity must not be negative", detail={"quantity": quantity})
