"""
Garden Domain Package
=====================
Entities for gardens, rows, plants and their placements, plus the pure row
layout rules in :mod:`app.domain.row_layout`.
"""

from .garden import Garden, GardenRow, Plant, PlantInstance, validate_row_dimensions

__all__ = [
    "Garden",
    "GardenRow",
    "Plant",
    "PlantInstance",
    "validate_row_dimensions",
]
