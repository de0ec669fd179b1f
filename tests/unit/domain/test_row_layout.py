"""
Tests for the pure row layout rules.

Covers:
- next_position and the max-of-neighbours spacing rule
- used_space for empty, single and multi-instance rows, with and without a candidate
- used_percentage rounding and clamping
- reflow after removal (including idempotence)
- swap_with_neighbour boundary behaviour
"""

from __future__ import annotations

import pytest

from app.domain import row_layout
from app.domain.exceptions import ValidationError
from app.domain.garden import GardenRow, Plant, PlantInstance, validate_row_dimensions
from app.enums.garden import MoveDirection


def _plant(plant_id: int = 1, spacing: float = 30, name: str = "Carrot") -> Plant:
    return Plant(id=plant_id, name=name, spacing=spacing, quantity=10)


def _instance(instance_id: int, position: float, spacing: float, plant_id: int = 1) -> PlantInstance:
    return PlantInstance(id=instance_id, plant_id=plant_id, position=position, name=f"P{plant_id}", spacing=spacing)


def _row(*instances: PlantInstance, length: float = 240, row_ends: float = 10) -> GardenRow:
    return GardenRow(id=1, name="Row", length=length, row_ends=row_ends, plants=list(instances))


def _place_all(row: GardenRow, *spacings: float) -> GardenRow:
    for index, spacing in enumerate(spacings, start=1):
        position = row_layout.next_position(row, _plant(index, spacing))
        row.plants.append(_instance(index, position, spacing, plant_id=index))
    return row


class TestNextPosition:
    def test_first_instance_starts_at_row_ends(self):
        assert row_layout.next_position(_row(row_ends=12), _plant(spacing=30)) == 12

    def test_gap_is_max_of_neighbours(self):
        row = _row(_instance(1, 10, 30))
        assert row_layout.next_position(row, _plant(spacing=40)) == 50
        assert row_layout.next_position(row, _plant(spacing=20)) == 40

    def test_uses_last_instance_by_position_not_list_order(self):
        row = _row(_instance(2, 50, 40), _instance(1, 10, 30))
        assert row_layout.next_position(row, _plant(spacing=10)) == 90


class TestUsedSpace:
    def test_empty_row_is_both_row_ends(self):
        assert row_layout.used_space(_row(row_ends=10)) == 20

    def test_empty_row_with_candidate_adds_candidate_spacing(self):
        assert row_layout.used_space(_row(row_ends=10), _plant(spacing=30)) == 50

    def test_single_instance_adds_its_spacing(self):
        assert row_layout.used_space(_row(_instance(1, 10, 35))) == 55

    def test_multiple_instances_use_span_between_first_and_last(self):
        row = _place_all(_row(), 30, 40)
        assert [p.position for p in row.plants] == [10, 50]
        assert row_layout.used_space(row) == 60

    def test_candidate_is_appended_at_next_position(self):
        row = _place_all(_row(), 30, 40)
        # candidate lands at 50 + max(40, 20) = 90
        assert row_layout.used_space(row, _plant(spacing=20)) == 20 + 80

    def test_single_instance_plus_candidate_uses_span(self):
        row = _place_all(_row(), 30)
        assert row_layout.used_space(row, _plant(spacing=40)) == 20 + 40

    def test_misconfigured_row_is_not_detected(self):
        assert row_layout.used_space(_row(length=10, row_ends=10)) == 20

    def test_does_not_mutate_row(self):
        row = _place_all(_row(), 30)
        row_layout.used_space(row, _plant(spacing=40))
        assert len(row.plants) == 1


class TestPercentageAndFit:
    def test_percentage_rounds_half_up(self):
        # 20 / 80 = 25%, 1 / 8 = 12.5% -> 13
        assert row_layout.used_percentage(_row(length=80, row_ends=10)) == 25
        assert row_layout.used_percentage(_row(length=8, row_ends=0.5)) == 13

    def test_percentage_is_clamped_to_100(self):
        row = _row(_instance(1, 10, 300), length=100, row_ends=10)
        assert row_layout.raw_percentage(row) == 320
        assert row_layout.used_percentage(row) == 100
        assert row_layout.is_over_capacity(row) is True
        assert row_layout.remaining_space(row) == -220

    @pytest.mark.parametrize("spacing", [10, 30, 100, 180, 220, 221])
    def test_would_fit_matches_used_space(self, spacing):
        row = _place_all(_row(), 30)
        candidate = _plant(spacing=spacing)
        assert row_layout.would_fit(row, candidate) == (row_layout.used_space(row, candidate) <= row.length)

    def test_exact_fit_is_allowed(self):
        row = _row(length=50, row_ends=10)
        assert row_layout.would_fit(row, _plant(spacing=30)) is True
        assert row_layout.would_fit(row, _plant(spacing=31)) is False


class TestReflow:
    def test_remove_first_repositions_from_row_ends(self):
        row = _place_all(_row(), 30, 40)
        remaining = row_layout.reflow(row, removed_instance_id=1)
        assert [(p.id, p.position) for p in remaining] == [(2, 10)]
        assert row_layout.used_space(_row(*remaining)) == 60

    def test_closes_gaps_with_max_of_neighbours(self):
        row = _place_all(_row(), 30, 40, 20)
        remaining = row_layout.reflow(row, removed_instance_id=2)
        assert [p.position for p in remaining] == [10, 40]

    def test_is_idempotent(self):
        row = _row(_instance(1, 17, 30), _instance(2, 99, 25), _instance(3, 150, 50))
        once = row_layout.reflow(row)
        twice = row_layout.reflow(_row(*once))
        assert [(p.id, p.position) for p in once] == [(p.id, p.position) for p in twice]

    def test_removing_last_instance_empties_row(self):
        row = _place_all(_row(), 30)
        assert row_layout.reflow(row, removed_instance_id=1) == []

    def test_returns_new_objects(self):
        row = _place_all(_row(), 30, 40)
        remaining = row_layout.reflow(row, removed_instance_id=1)
        assert row.plants[1].position == 50
        assert remaining[0] is not row.plants[1]


class TestSwap:
    def test_swaps_positions_with_right_neighbour(self):
        row = _place_all(_row(), 30, 40, 20)
        swapped = row_layout.swap_with_neighbour(row, 1, MoveDirection.RIGHT)
        assert [(p.id, p.position) for p in swapped] == [(2, 10), (1, 50), (3, 90)]

    def test_swaps_positions_with_left_neighbour(self):
        row = _place_all(_row(), 30, 40, 20)
        swapped = row_layout.swap_with_neighbour(row, 3, "left")
        assert [(p.id, p.position) for p in swapped] == [(1, 10), (3, 50), (2, 90)]

    def test_boundary_moves_are_noops(self):
        row = _place_all(_row(), 30, 40)
        assert row_layout.swap_with_neighbour(row, 1, MoveDirection.LEFT) is None
        assert row_layout.swap_with_neighbour(row, 2, MoveDirection.RIGHT) is None

    def test_unknown_instance_is_noop(self):
        assert row_layout.swap_with_neighbour(_place_all(_row(), 30), 42, MoveDirection.LEFT) is None

    def test_index_of(self):
        row = _place_all(_row(), 30, 40)
        assert row_layout.index_of(row, 2) == 1
        assert row_layout.index_of(row, 99) is None


class TestRowDimensions:
    def test_accepts_plantable_row(self):
        validate_row_dimensions(240, 10)

    @pytest.mark.parametrize("length, row_ends", [(0, 0), (-5, 0), (100, -1), (20, 10), (20, 11)])
    def test_rejects_rows_without_plantable_space(self, length, row_ends):
        with pytest.raises(ValidationError):
            validate_row_dimensions(length, row_ends)
