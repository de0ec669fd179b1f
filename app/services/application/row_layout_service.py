"""
Row Layout Service

Cached front for the pure layout rules in :mod:`app.domain.row_layout`.
Only the no-candidate numbers are memoised; fit checks for a candidate plant
are per-request and always computed fresh.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from app.domain import row_layout
from app.domain.garden import GardenRow, Plant
from app.utils.cache import LayoutCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RowUsage:
    """Derived capacity numbers for one row."""

    used_space: float
    used_percentage: int
    remaining_space: float
    over_capacity: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "used_space": self.used_space,
            "used_percentage": self.used_percentage,
            "remaining_space": self.remaining_space,
            "over_capacity": self.over_capacity,
        }


class RowLayoutService:
    """Owns the layout cache and answers capacity questions about rows."""

    def __init__(self, cache: LayoutCache | None = None) -> None:
        self._cache = cache if cache is not None else LayoutCache()

    @property
    def cache(self) -> LayoutCache:
        return self._cache

    def usage(self, row: GardenRow) -> RowUsage:
        key = LayoutCache.key_for(row.id, len(row.plants))
        return self._cache.get(key, lambda: self._compute_usage(row))

    def used_space(self, row: GardenRow) -> float:
        return self.usage(row).used_space

    def used_percentage(self, row: GardenRow) -> int:
        return self.usage(row).used_percentage

    def used_space_with(self, row: GardenRow, candidate: Plant) -> float:
        return row_layout.used_space(row, candidate)

    def would_fit(self, row: GardenRow, candidate: Plant) -> bool:
        return row_layout.would_fit(row, candidate)

    def invalidate(self, row_id: int) -> None:
        self._cache.invalidate(row_id)

    def invalidate_all(self) -> None:
        logger.debug("Layout cache cleared")
        self._cache.invalidate_all()

    def cache_stats(self) -> dict[str, Any]:
        return self._cache.get_stats()

    @staticmethod
    def _compute_usage(row: GardenRow) -> RowUsage:
        used = row_layout.used_space(row)
        return RowUsage(
            used_space=used,
            used_percentage=row_layout.used_percentage(row),
            remaining_space=row.length - used,
            over_capacity=used > row.length,
        )
