"""Repository facades exposing typed accessors over low-level mixins."""

from infrastructure.database.repositories.garden import GardenRepository, PlantingRepository

__all__ = [
    "GardenRepository",
    "PlantingRepository",
]
