"""
Row Mutation Coordinator.

Applies add / remove / move optimistically to an in-memory planner board,
then reconciles each change with the authoritative PlantingStore.

Responsibilities:
- Validate a mutation before touching any state (fit, stock)
- Apply the tentative change locally and mark the row busy
- Call the store outside the lock; commit on success
- Roll back (add) or reload the row from the store (remove / move) on failure
- Settle transitions after the configured delay and return the row to idle

Per-row state machine::

    idle --propose--> pending --confirm--> settling --timer--> idle
                         \\--reject / reload------------------> idle

A mutation requested while its row is not idle is dropped: the call returns
``None`` and nothing changes. Rows are independent of each other.

Related services:
- RowLayoutService: cached used space / percentage for the board's rows
- TransitionTracker: per-instance UI transition states
- GardenService: row and plant CRUD, drops rows from the board on edit
"""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from app.domain import row_layout
from app.domain.exceptions import (
    InsufficientSpaceError,
    InsufficientStockError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from app.domain.garden import GardenRow, Plant, PlantInstance
from app.enums.events import RowEvent
from app.enums.garden import MoveDirection, RowMutationState, TransitionState
from app.services.application.row_layout_service import RowLayoutService
from app.services.application.transition_tracker import TransitionTracker
from app.utils.concurrency import synchronized
from app.utils.event_bus import EventBus

if TYPE_CHECKING:
    from app.services.protocols import PlantCatalog, PlantingStore

logger = logging.getLogger(__name__)


class RowMutationCoordinator:
    """
    Optimistic add / remove / move of plant instances with store reconciliation.

    The coordinator lock only guards short board updates. It is never held
    across a store call or a transition delay; the per-row state is what keeps
    two mutations of one row apart.
    """

    def __init__(
        self,
        store: "PlantingStore",
        catalog: "PlantCatalog",
        layout: RowLayoutService,
        *,
        event_bus: Optional[EventBus] = None,
        transitions: Optional[TransitionTracker] = None,
        exit_delay: float = 0.0,
        move_delay: float = 0.0,
        settle_delay: float = 0.0,
        persist_moves: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize RowMutationCoordinator.

        Args:
            store: Authoritative store for row contents
            catalog: Plant catalogue used to resolve plants and stock
            layout: Layout service owning the layout cache
            event_bus: Bus for mutation events (a private one when omitted)
            transitions: Transition tracker shared with the API layer
            exit_delay: Seconds between marking an instance exiting and reflowing
            move_delay: Seconds between marking a move and swapping positions
            settle_delay: Seconds before transitions clear and the row goes idle
            persist_moves: Write swapped positions back to the store
            sleep: Blocking sleep used for the exit / move delays
        """
        self.store = store
        self.catalog = catalog
        self.layout = layout
        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.transitions = transitions if transitions is not None else TransitionTracker()
        self.exit_delay = exit_delay
        self.move_delay = move_delay
        self.settle_delay = settle_delay
        self.persist_moves = persist_moves
        self._sleep = sleep

        self._rows: Dict[int, GardenRow] = {}
        self._plants: Dict[int, Plant] = {}
        self._states: Dict[int, RowMutationState] = {}
        self._timers: Dict[int, threading.Timer] = {}
        self._sentinel_ids = itertools.count(-1, -1)
        self._lock = threading.RLock()

    # ==================== Board ====================

    def row(self, row_id: int) -> GardenRow:
        """Return the live board row, loading it from the store on first use."""
        row = self._cached_row(row_id)
        if row is not None:
            return row
        fetched = self.store.fetch_row(row_id)
        return self._remember_row(row_id, fetched)

    def plant(self, plant_id: int) -> Plant:
        """Return the board's copy of a plant, including optimistic usage counts."""
        plant = self._cached_plant(plant_id)
        if plant is not None:
            return plant
        fetched = self.catalog.get_plant(plant_id)
        if fetched is None:
            raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
        return self._remember_plant(plant_id, fetched)

    @synchronized
    def get_row(self, row_id: int) -> Optional[GardenRow]:
        """Snapshot of a board row, or ``None`` when it has not been loaded."""
        row = self._rows.get(row_id)
        if row is None:
            return None
        return replace(row, plants=row_layout.sorted_instances(row))

    def describe_row(self, row_id: int) -> Dict[str, Any]:
        """Row contents with capacity numbers, mutation state and transitions."""
        self.row(row_id)
        snapshot, state = self._snapshot_with_state(row_id)
        usage = self.layout.usage(snapshot)
        transitions = self.transitions.snapshot(p.id for p in snapshot.plants)

        data = snapshot.to_dict()
        for instance in data["plants"]:
            instance["transition"] = transitions.get(instance["id"], TransitionState.NONE.value)
        data.update(usage.to_dict())
        data["state"] = state.value
        data["active"] = state is not RowMutationState.IDLE
        return data

    def evaluate_fit(self, row_id: int, plant_id: int) -> Dict[str, Any]:
        """Would-fit check for a candidate plant against the board row."""
        self.row(row_id)
        plant = self.plant(plant_id)
        snapshot, _ = self._snapshot_with_state(row_id)
        used_with = self.layout.used_space_with(snapshot, plant)
        return {
            "row_id": row_id,
            "plant_id": plant_id,
            "would_fit": used_with <= snapshot.length,
            "used_space_with_plant": used_with,
            "next_position": row_layout.next_position(snapshot, plant),
            "available": plant.available,
            "length": snapshot.length,
        }

    @synchronized
    def row_state(self, row_id: int) -> RowMutationState:
        return self._states.get(row_id, RowMutationState.IDLE)

    def is_active(self, row_id: int) -> bool:
        return self.row_state(row_id) is not RowMutationState.IDLE

    def reload_row(self, row_id: int) -> Optional[GardenRow]:
        """Replace the board row with the store's copy. ``None`` while the row is busy."""
        if not self._claim_for_reload(row_id):
            return None
        try:
            fresh = self.store.fetch_row(row_id)
        except Exception:
            self._release(row_id)
            raise
        self._replace_row(row_id, fresh)
        self.event_bus.publish(RowEvent.ROW_RELOADED, {"row_id": row_id, "reason": "requested"})
        return self.get_row(row_id)

    @synchronized
    def forget_row(self, row_id: int) -> None:
        """Drop a row from the board so the next access reloads it."""
        self._rows.pop(row_id, None)
        self._states.pop(row_id, None)
        timer = self._timers.pop(row_id, None)
        if timer is not None:
            timer.cancel()
        self.layout.invalidate_all()

    @synchronized
    def forget_plant(self, plant_id: int) -> None:
        """Drop a catalogue plant and every idle row holding copies of its details."""
        self._plants.pop(plant_id, None)
        stale = [
            row_id
            for row_id, row in self._rows.items()
            if self._states.get(row_id, RowMutationState.IDLE) is RowMutationState.IDLE
            and any(p.plant_id == plant_id for p in row.plants)
        ]
        for row_id in stale:
            self._rows.pop(row_id, None)
        if stale:
            self.layout.invalidate_all()

    @synchronized
    def forget_plants(self) -> None:
        self._plants.clear()

    def limit_quantity(self, plant_id: int, quantity: int) -> Plant:
        """
        Apply a new owned quantity to the board's plant before it is stored.

        The check counts tentative placements still waiting on the store, and
        later proposals see the new quantity at once.

        Raises:
            ValidationError: ``quantity`` is below the placed count.
        """
        self.plant(plant_id)
        return self._apply_quantity(plant_id, quantity)

    @synchronized
    def _apply_quantity(self, plant_id: int, quantity: int) -> Plant:
        plant = self._plants.get(plant_id)
        if plant is None:
            raise NotFoundError(f"Plant {plant_id} not found", detail={"plant_id": plant_id})
        if quantity < plant.used_count:
            raise ValidationError(
                f"{plant.name} is placed {plant.used_count} time(s); quantity cannot go below that",
                detail={"plant_id": plant_id, "used_count": plant.used_count, "quantity": quantity},
            )
        plant.quantity = quantity
        return plant

    def shutdown(self) -> None:
        """Cancel pending settle timers."""
        with self._lock:
            timers = list(self._timers.values())
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        logger.info("RowMutationCoordinator stopped: %s settle timer(s) cancelled", len(timers))

    # ==================== Add ====================

    def add_plant(self, row_id: int, plant_id: int) -> Optional[PlantInstance]:
        """
        Place one unit of ``plant_id`` at the end of the row.

        Returns:
            The committed instance, or ``None`` when the row is busy.

        Raises:
            InsufficientSpaceError / InsufficientStockError: validation failed,
                nothing changed.
            StoreError: the store rejected the insert; the tentative instance
                was rolled back.
        """
        self.row(row_id)
        plant = self.plant(plant_id)
        tentative = self._propose_add(row_id, plant)
        if tentative is None:
            return None

        try:
            stored = self.store.add_instance(row_id, plant_id, tentative.position)
        except Exception as exc:
            logger.warning(f"Store rejected add of plant {plant_id} to row {row_id}: {exc}")
            self._reject_add(row_id, tentative)
            self.event_bus.publish(
                RowEvent.MUTATION_ROLLED_BACK,
                {"operation": "add", "row_id": row_id, "plant_id": plant_id, "error": str(exc)},
            )
            raise StoreError("add", row_id, cause=exc) from exc

        committed = self._confirm_add(row_id, tentative, stored)
        logger.info(f"Added plant {plant_id} to row {row_id} as instance {committed.id} at {committed.position}")
        self.event_bus.publish(
            RowEvent.INSTANCE_ADDED,
            {
                "row_id": row_id,
                "plant_id": plant_id,
                "instance_id": committed.id,
                "position": committed.position,
            },
        )
        self._settle(row_id, [committed.id])
        return committed

    @synchronized
    def _propose_add(self, row_id: int, candidate: Plant) -> Optional[PlantInstance]:
        if not self._accepts_mutation(row_id, "add"):
            return None
        row = self._board_row(row_id)
        plant = self._plants.setdefault(candidate.id, candidate)

        used_with = row_layout.used_space(row, plant)
        if used_with > row.length:
            raise InsufficientSpaceError(row_id, plant.id, used_space=used_with, length=row.length)
        if plant.available <= 0:
            raise InsufficientStockError(plant.id, plant.name)

        tentative = PlantInstance(
            id=next(self._sentinel_ids),
            plant_id=plant.id,
            position=row_layout.next_position(row, plant),
            name=plant.name,
            spacing=plant.spacing,
            image_url=plant.image_url,
        )
        row.plants = [*row.plants, tentative]
        plant.used_count += 1
        self.transitions.mark(tentative.id, TransitionState.ENTERING)
        self._states[row_id] = RowMutationState.PENDING
        self.layout.invalidate_all()
        return tentative

    @synchronized
    def _confirm_add(self, row_id: int, tentative: PlantInstance, stored: PlantInstance) -> PlantInstance:
        row = self._rows.get(row_id)
        if row is not None:
            row.plants = [stored if p.id == tentative.id else p for p in row.plants]
        self.transitions.rekey(tentative.id, stored.id)
        self.layout.invalidate_all()
        return stored

    @synchronized
    def _reject_add(self, row_id: int, tentative: PlantInstance) -> None:
        row = self._rows.get(row_id)
        if row is not None:
            row.plants = [p for p in row.plants if p.id != tentative.id]
        plant = self._plants.get(tentative.plant_id)
        if plant is not None:
            plant.used_count = max(0, plant.used_count - 1)
        self.transitions.clear([tentative.id])
        self._states[row_id] = RowMutationState.IDLE
        self.layout.invalidate_all()

    # ==================== Remove ====================

    def remove_plant(self, row_id: int, instance_id: int) -> Optional[List[PlantInstance]]:
        """
        Remove an instance and reflow the rest of the row.

        Returns:
            The reflowed instances, or ``None`` when the row is busy.

        Raises:
            NotFoundError: the instance is not in the row.
            StoreError: the store rejected the delete; the row was reloaded.
        """
        self.row(row_id)
        removed = self._propose_remove(row_id, instance_id)
        if removed is None:
            return None

        self._pause(self.exit_delay)
        reflowed = self._apply_reflow(row_id, instance_id)

        try:
            self.store.remove_instance(instance_id)
        except Exception as exc:
            logger.warning(f"Store rejected removal of instance {instance_id} from row {row_id}: {exc}")
            self._recover_by_reload(row_id, "remove", exc)
            raise StoreError("remove", row_id, cause=exc) from exc

        self._confirm_remove(row_id, removed)
        logger.info(f"Removed instance {instance_id} from row {row_id}; {len(reflowed)} instance(s) reflowed")
        self.event_bus.publish(
            RowEvent.INSTANCE_REMOVED,
            {
                "row_id": row_id,
                "plant_id": removed.plant_id,
                "instance_id": instance_id,
                "positions": {p.id: p.position for p in reflowed},
            },
        )
        self._settle(row_id, [instance_id])
        return reflowed

    @synchronized
    def _propose_remove(self, row_id: int, instance_id: int) -> Optional[PlantInstance]:
        if not self._accepts_mutation(row_id, "remove"):
            return None
        instance = self._board_row(row_id).find_instance(instance_id)
        if instance is None:
            raise NotFoundError(
                f"Plant instance {instance_id} not found in row {row_id}",
                detail={"row_id": row_id, "instance_id": instance_id},
            )
        self.transitions.mark(instance_id, TransitionState.EXITING)
        self._states[row_id] = RowMutationState.PENDING
        return instance

    @synchronized
    def _apply_reflow(self, row_id: int, instance_id: int) -> List[PlantInstance]:
        row = self._board_row(row_id)
        row.plants = row_layout.reflow(row, instance_id)
        self.layout.invalidate_all()
        return list(row.plants)

    @synchronized
    def _confirm_remove(self, row_id: int, removed: PlantInstance) -> None:
        plant = self._plants.get(removed.plant_id)
        if plant is not None:
            plant.used_count = max(0, plant.used_count - 1)

    # ==================== Move ====================

    def move_plant(
        self, row_id: int, instance_id: int, direction: MoveDirection | str
    ) -> Optional[List[PlantInstance]]:
        """
        Swap an instance with its left or right neighbour.

        Returns:
            The row's instances in their new order, or ``None`` for a boundary
            move or a busy row.

        Raises:
            ValidationError: unknown direction.
            NotFoundError: the instance is not in the row.
            StoreError: persisting the swap failed; the row was reloaded.
        """
        try:
            direction = MoveDirection(direction)
        except ValueError:
            raise ValidationError(
                f"Invalid move direction: {direction}", detail={"direction": str(direction)}
            ) from None

        self.row(row_id)
        pair = self._propose_move(row_id, instance_id, direction)
        if pair is None:
            return None

        self._pause(self.move_delay)
        swapped = self._apply_swap(row_id, instance_id, direction)
        moved = [p for p in swapped if p.id in {pair[0].id, pair[1].id}]

        if self.persist_moves:
            try:
                for instance in moved:
                    self.store.update_instance_position(instance.id, instance.position)
            except Exception as exc:
                logger.warning(f"Store rejected move of instance {instance_id} in row {row_id}: {exc}")
                self._recover_by_reload(row_id, "move", exc)
                raise StoreError("move", row_id, cause=exc) from exc

        logger.info(f"Moved instance {instance_id} {direction} in row {row_id}")
        self.event_bus.publish(
            RowEvent.INSTANCE_MOVED,
            {
                "row_id": row_id,
                "instance_id": instance_id,
                "direction": direction.value,
                "positions": {p.id: p.position for p in moved},
                "persisted": self.persist_moves,
            },
        )
        self._settle(row_id, [p.id for p in moved])
        return swapped

    @synchronized
    def _propose_move(
        self, row_id: int, instance_id: int, direction: MoveDirection
    ) -> Optional[tuple[PlantInstance, PlantInstance]]:
        if not self._accepts_mutation(row_id, "move"):
            return None
        row = self._board_row(row_id)
        index = row_layout.index_of(row, instance_id)
        if index is None:
            raise NotFoundError(
                f"Plant instance {instance_id} not found in row {row_id}",
                detail={"row_id": row_id, "instance_id": instance_id},
            )
        ordered = row_layout.sorted_instances(row)
        neighbour_index = index - 1 if direction is MoveDirection.LEFT else index + 1
        if neighbour_index < 0 or neighbour_index >= len(ordered):
            logger.debug(f"Move of instance {instance_id} {direction} in row {row_id} is a boundary no-op")
            return None

        instance, neighbour = ordered[index], ordered[neighbour_index]
        if direction is MoveDirection.LEFT:
            self.transitions.mark(instance.id, TransitionState.MOVING_LEFT)
            self.transitions.mark(neighbour.id, TransitionState.MOVING_RIGHT)
        else:
            self.transitions.mark(instance.id, TransitionState.MOVING_RIGHT)
            self.transitions.mark(neighbour.id, TransitionState.MOVING_LEFT)
        self._states[row_id] = RowMutationState.PENDING
        return instance, neighbour

    @synchronized
    def _apply_swap(self, row_id: int, instance_id: int, direction: MoveDirection) -> List[PlantInstance]:
        row = self._board_row(row_id)
        swapped = row_layout.swap_with_neighbour(row, instance_id, direction)
        if swapped is not None:
            row.plants = swapped
        self.layout.invalidate_all()
        return list(row.plants)

    # ==================== Recovery & settling ====================

    def _recover_by_reload(self, row_id: int, operation: str, error: BaseException) -> None:
        """Discard the local row and take the store's copy as ground truth."""
        try:
            fresh = self.store.fetch_row(row_id)
        except Exception as reload_error:
            logger.error(f"Reload of row {row_id} after failed {operation} also failed: {reload_error}")
            fresh = None
        self._replace_row(row_id, fresh)
        self.event_bus.publish(
            RowEvent.ROW_RELOADED,
            {"row_id": row_id, "reason": operation, "error": str(error), "reloaded": fresh is not None},
        )

    @synchronized
    def _replace_row(self, row_id: int, fresh: Optional[GardenRow]) -> None:
        """Swap in the store copy and return the row to idle. Only the holder of the pending state calls this."""
        previous = self._rows.pop(row_id, None)
        if previous is not None:
            self.transitions.clear(p.id for p in previous.plants)
            # Usage counts may be stale too; reread them from the catalogue.
            for instance in previous.plants:
                self._plants.pop(instance.plant_id, None)
        if fresh is not None:
            self._rows[row_id] = fresh
        self._states[row_id] = RowMutationState.IDLE
        self.layout.invalidate_all()

    def _settle(self, row_id: int, instance_ids: List[int]) -> None:
        self._mark_settling(row_id)
        if self.settle_delay <= 0:
            self._finish(row_id, instance_ids)
            return
        timer = threading.Timer(self.settle_delay, self._finish, args=(row_id, instance_ids))
        timer.daemon = True
        with self._lock:
            self._timers[row_id] = timer
        timer.start()

    @synchronized
    def _mark_settling(self, row_id: int) -> None:
        self._states[row_id] = RowMutationState.SETTLING

    def _finish(self, row_id: int, instance_ids: List[int]) -> None:
        self._clear_activity(row_id, instance_ids)
        self.event_bus.publish(RowEvent.ROW_SETTLED, {"row_id": row_id})

    @synchronized
    def _clear_activity(self, row_id: int, instance_ids: List[int]) -> None:
        self.transitions.clear(instance_ids)
        self._timers.pop(row_id, None)
        if row_id in self._states:
            self._states[row_id] = RowMutationState.IDLE

    # ==================== Helpers ====================

    @synchronized
    def _claim_for_reload(self, row_id: int) -> bool:
        if not self._accepts_mutation(row_id, "reload"):
            return False
        self._states[row_id] = RowMutationState.PENDING
        return True

    @synchronized
    def _release(self, row_id: int) -> None:
        self._states[row_id] = RowMutationState.IDLE

    def _accepts_mutation(self, row_id: int, operation: str) -> bool:
        state = self._states.get(row_id, RowMutationState.IDLE)
        if state is not RowMutationState.IDLE:
            logger.debug(f"Ignoring {operation} on row {row_id}: row is {state}")
            return False
        return True

    def _pause(self, delay: float) -> None:
        if delay > 0:
            self._sleep(delay)

    def _board_row(self, row_id: int) -> GardenRow:
        row = self._rows.get(row_id)
        if row is None:
            raise NotFoundError(f"Row {row_id} not found", detail={"row_id": row_id})
        return row

    @synchronized
    def _cached_row(self, row_id: int) -> Optional[GardenRow]:
        return self._rows.get(row_id)

    @synchronized
    def _remember_row(self, row_id: int, row: GardenRow) -> GardenRow:
        return self._rows.setdefault(row_id, row)

    @synchronized
    def _cached_plant(self, plant_id: int) -> Optional[Plant]:
        return self._plants.get(plant_id)

    @synchronized
    def _remember_plant(self, plant_id: int, plant: Plant) -> Plant:
        return self._plants.setdefault(plant_id, plant)

    @synchronized
    def _snapshot_with_state(self, row_id: int) -> tuple[GardenRow, RowMutationState]:
        row = self._board_row(row_id)
        snapshot = replace(row, plants=row_layout.sorted_instances(row))
        return snapshot, self._states.get(row_id, RowMutationState.IDLE)
