from enum import Enum
from typing import TypeAlias


class RowEvent(str, Enum):
    """Topics published by the row mutation coordinator."""

    INSTANCE_ADDED = "instance_added"
    INSTANCE_REMOVED = "instance_removed"
    INSTANCE_MOVED = "instance_moved"
    MUTATION_ROLLED_BACK = "mutation_rolled_back"
    ROW_RELOADED = "row_reloaded"
    ROW_SETTLED = "row_settled"


class CatalogEvent(str, Enum):
    """Topics published by the garden catalog service."""

    ROW_CREATED = "row_created"
    ROW_UPDATED = "row_updated"
    ROW_DELETED = "row_deleted"


EventType: TypeAlias = RowEvent | CatalogEvent
