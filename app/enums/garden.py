"""
Garden Layout Enumerations
==========================

This module contains the enums used by the row layout engine and the
mutation coordinator.
"""

from enum import Enum


class MoveDirection(str, Enum):
    """Direction a plant instance swaps with its neighbour"""

    LEFT = "left"
    RIGHT = "right"

    def __str__(self):
        return self.value


class TransitionState(str, Enum):
    """
    UI transition state of a plant instance.
    Tracked by TransitionTracker, never stored on the instance itself.
    """

    NONE = "none"
    ENTERING = "entering"
    EXITING = "exiting"
    MOVING_LEFT = "moving-left"
    MOVING_RIGHT = "moving-right"

    def __str__(self):
        return self.value


class RowMutationState(str, Enum):
    """Per-row mutation state (idle -> pending -> settling -> idle)"""

    IDLE = "idle"
    PENDING = "pending"
    SETTLING = "settling"

    def __str__(self):
        return self.value
