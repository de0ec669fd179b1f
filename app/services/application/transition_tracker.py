"""
Transition Tracker.

Keeps the UI transition state of plant instances (entering, exiting,
moving-left, moving-right) keyed by instance id, so the instance entities stay
plain data. The coordinator marks states when a mutation starts and clears them
when the row settles.
"""

from __future__ import annotations

import threading
from typing import Dict, Iterable

from app.enums.garden import TransitionState


class TransitionTracker:
    """Thread-safe map of ``instance_id -> TransitionState``."""

    def __init__(self) -> None:
        self._states: Dict[int, TransitionState] = {}
        self._lock = threading.Lock()

    def mark(self, instance_id: int, state: TransitionState | str) -> None:
        state = TransitionState(state)
        with self._lock:
            if state is TransitionState.NONE:
                self._states.pop(instance_id, None)
            else:
                self._states[instance_id] = state

    def rekey(self, old_id: int, new_id: int) -> None:
        """Carry a state over when a tentative id is replaced by the stored one."""
        with self._lock:
            state = self._states.pop(old_id, None)
            if state is not None:
                self._states[new_id] = state

    def state_of(self, instance_id: int) -> TransitionState:
        with self._lock:
            return self._states.get(instance_id, TransitionState.NONE)

    def clear(self, instance_ids: Iterable[int]) -> None:
        with self._lock:
            for instance_id in instance_ids:
                self._states.pop(instance_id, None)

    def snapshot(self, instance_ids: Iterable[int] | None = None) -> Dict[int, str]:
        """Return ``{instance_id: state}`` for the given ids (all tracked ids when omitted)."""
        with self._lock:
            if instance_ids is None:
                return {key: state.value for key, state in self._states.items()}
            return {
                instance_id: self._states.get(instance_id, TransitionState.NONE).value
                for instance_id in instance_ids
            }

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
