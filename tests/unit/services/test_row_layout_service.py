"""
Tests for RowLayoutService.

Covers:
- Cached usage numbers keyed by (row_id, instance_count)
- Candidate fit checks bypass the cache
- Explicit invalidation
"""

from __future__ import annotations

from app.domain.garden import GardenRow, Plant, PlantInstance
from app.services.application.row_layout_service import RowLayoutService
from app.utils.cache import LayoutCache


def _row(*positions_and_spacings) -> GardenRow:
    plants = [
        PlantInstance(id=i, plant_id=1, position=pos, name="Carrot", spacing=spacing)
        for i, (pos, spacing) in enumerate(positions_and_spacings, start=1)
    ]
    return GardenRow(id=7, name="Row", length=240, row_ends=10, plants=plants)


class TestUsage:
    def test_usage_numbers(self):
        usage = RowLayoutService().usage(_row((10, 30), (50, 40)))
        assert usage.used_space == 60
        assert usage.used_percentage == 25
        assert usage.remaining_space == 180
        assert usage.over_capacity is False
        assert usage.to_dict()["used_space"] == 60

    def test_usage_is_cached_by_row_and_count(self):
        service = RowLayoutService(LayoutCache())
        service.usage(_row((10, 30), (50, 40)))
        # Same count, different positions: the stale value is served until invalidated.
        stale = service.usage(_row((10, 30), (90, 40)))
        assert stale.used_space == 60
        assert service.cache_stats()["hits"] == 1

        service.invalidate_all()
        assert service.usage(_row((10, 30), (90, 40))).used_space == 100

    def test_invalidate_single_row(self):
        service = RowLayoutService()
        service.usage(_row((10, 30)))
        service.invalidate(7)
        assert len(service.cache) == 0

    def test_fit_checks_are_not_cached(self):
        service = RowLayoutService()
        row = _row((10, 30))
        candidate = Plant(id=2, name="Kale", spacing=40, quantity=1)
        assert service.used_space_with(row, candidate) == 60
        assert service.would_fit(row, candidate) is True
        assert len(service.cache) == 0

    def test_over_capacity_row(self):
        row = GardenRow(
            id=1,
            name="Tight",
            length=50,
            row_ends=10,
            plants=[PlantInstance(id=1, plant_id=1, position=10, name="Squash", spacing=80)],
        )
        usage = RowLayoutService().usage(row)
        assert usage.used_percentage == 100
        assert usage.remaining_space == -50
        assert usage.over_capacity is True
