"""
Enums Module
============

This module provides enumeration types for the garden planner.
Enums ensure type safety and consistency across the codebase.
"""

from app.enums.events import CatalogEvent, EventType, RowEvent
from app.enums.garden import MoveDirection, RowMutationState, TransitionState

__all__ = [
    # Events
    "CatalogEvent",
    "EventType",
    "RowEvent",
    # Garden layout
    "MoveDirection",
    "RowMutationState",
    "TransitionState",
]
