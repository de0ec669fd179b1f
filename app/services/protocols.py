"""
Service protocols (structural typing interfaces).

Protocols let consumer services declare the *minimal* surface they depend on
without importing the concrete class, breaking circular imports and making
tests trivially mockable.

Usage
-----
In a consumer service::

    from __future__ import annotations
    from typing import TYPE_CHECKING
    if TYPE_CHECKING:
        from app.services.protocols import PlantingStore

    class RowMutationCoordinator:
        def __init__(self, store: "PlantingStore", ...): ...

At runtime the concrete ``PlantingRepository`` already satisfies the protocol
via structural subtyping; no explicit inheritance needed.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, runtime_checkable

from app.domain.garden import GardenRow, Plant, PlantInstance


@runtime_checkable
class PlantingStore(Protocol):
    """Authoritative store for row contents.

    Every method raises on failure; callers treat any exception as a store
    failure and fall back to rollback or reload.
    """

    def fetch_row(self, row_id: int) -> GardenRow:
        """Return the full row with its instances ordered by position."""
        ...

    def add_instance(self, row_id: int, plant_id: int, position: float) -> PlantInstance:
        """Persist a new instance; the store assigns the real id."""
        ...

    def remove_instance(self, instance_id: int) -> None:
        """Delete an instance and reflow the stored positions of the rest of its row."""
        ...

    def update_instance_position(self, instance_id: int, position: float) -> None:
        """Persist a new position for an existing instance."""
        ...


@runtime_checkable
class PlantCatalog(Protocol):
    """Read-only view over the plant catalogue with usage counts."""

    def get_plant(self, plant_id: int) -> Optional[Plant]:
        """Return a single plant, or ``None`` if not found."""
        ...

    def list_plants(self) -> List[Plant]:
        """Return every plant in the catalogue."""
        ...
