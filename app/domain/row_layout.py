"""
Row Layout Domain Service
=========================
Spacing, fit and position rules for plant instances along a row.

Everything here is pure: functions read a :class:`GardenRow` and return new
numbers or new instance lists, never mutating their inputs.

Spacing rule:
    The gap between two neighbouring instances is ``max(a.spacing, b.spacing)``,
    never the sum. The first instance starts at ``row_ends``.

Used space:
    base = 2 * row_ends
    0 instances            -> base (+ candidate.spacing when a candidate is given)
    1 instance             -> base + instance.spacing
    N >= 2 instances       -> base + (last.position - first.position)

    The last instance's spacing is not added for N >= 2; the trailing
    ``row_ends`` already reserves that clearance.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable

from app.domain.garden import GardenRow, Plant, PlantInstance
from app.enums.garden import MoveDirection

CANDIDATE_INSTANCE_ID = -1


def sorted_instances(row: GardenRow) -> list[PlantInstance]:
    """Return the row's instances ordered by position (stable for ties)."""
    return sorted(row.plants, key=lambda instance: instance.position)


def index_of(row: GardenRow, instance_id: int) -> int | None:
    """Index of ``instance_id`` in position order, or ``None`` if absent."""
    for index, instance in enumerate(sorted_instances(row)):
        if instance.id == instance_id:
            return index
    return None


# --- Position assigner ---------------------------------------------------------


def next_position(row: GardenRow, candidate: Plant) -> float:
    """Position a newly added ``candidate`` would take at the end of the row."""
    ordered = sorted_instances(row)
    if not ordered:
        return row.row_ends
    last = ordered[-1]
    return last.position + max(last.spacing, candidate.spacing)


def reflow(row: GardenRow, removed_instance_id: int | None = None) -> list[PlantInstance]:
    """Reassign positions after ``removed_instance_id`` leaves the row.

    Gaps are recomputed from ``row_ends`` with the max-of-neighbours rule
    rather than shifted, so running it twice yields the same positions.
    """
    remaining = [p for p in sorted_instances(row) if p.id != removed_instance_id]
    reflowed: list[PlantInstance] = []
    position = row.row_ends
    previous: PlantInstance | None = None
    for instance in remaining:
        if previous is not None:
            position = position + max(previous.spacing, instance.spacing)
        reflowed.append(replace(instance, position=position))
        previous = instance
    return reflowed


def swap_with_neighbour(
    row: GardenRow, instance_id: int, direction: MoveDirection | str
) -> list[PlantInstance] | None:
    """Swap the stored positions of an instance and its neighbour.

    Returns the full instance list in the new position order, or ``None`` when
    the move is a no-op (unknown instance, first moving left, last moving right).
    Other gaps are untouched; no reflow happens.
    """
    direction = MoveDirection(direction)
    ordered = sorted_instances(row)
    index = index_of(row, instance_id)
    if index is None:
        return None
    neighbour_index = index - 1 if direction is MoveDirection.LEFT else index + 1
    if neighbour_index < 0 or neighbour_index >= len(ordered):
        return None

    current, neighbour = ordered[index], ordered[neighbour_index]
    ordered[index] = replace(current, position=neighbour.position)
    ordered[neighbour_index] = replace(neighbour, position=current.position)
    return sorted(ordered, key=lambda instance: instance.position)


# --- Spacing / fit calculator ----------------------------------------------------


def _occupied_span(instances: Iterable[PlantInstance]) -> float:
    ordered = list(instances)
    if not ordered:
        return 0
    if len(ordered) == 1:
        return ordered[0].spacing
    return ordered[-1].position - ordered[0].position


def used_space(row: GardenRow, candidate: Plant | None = None) -> float:
    """Linear space consumed by row-end reservations plus placed instances.

    With ``candidate`` the plant is first appended at :func:`next_position`.
    """
    ordered = sorted_instances(row)
    if candidate is not None:
        ordered.append(
            PlantInstance(
                id=CANDIDATE_INSTANCE_ID,
                plant_id=candidate.id,
                position=next_position(row, candidate),
                name=candidate.name,
                spacing=candidate.spacing,
                image_url=candidate.image_url,
            )
        )
    return row.reserved_ends + _occupied_span(ordered)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def raw_percentage(row: GardenRow) -> int:
    """Unclamped utilisation; above 100 when the row is over capacity."""
    return _round_half_up(used_space(row) / row.length * 100)


def used_percentage(row: GardenRow) -> int:
    """Utilisation in whole percent, never above 100."""
    return min(100, raw_percentage(row))


def would_fit(row: GardenRow, candidate: Plant) -> bool:
    return used_space(row, candidate) <= row.length


def remaining_space(row: GardenRow) -> float:
    """Length left after the current layout; negative when over capacity."""
    return row.length - used_space(row)


def is_over_capacity(row: GardenRow) -> bool:
    return used_space(row) > row.length
