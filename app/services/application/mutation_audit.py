"""
Mutation Audit Listener.

EventBus -> AuditLogger bridge: every committed, rolled back or reloaded row
mutation becomes one JSON line in the audit log.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from app.enums.events import CatalogEvent, RowEvent
from app.utils.event_bus import EventBus
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)

_OUTCOMES: Dict[RowEvent | CatalogEvent, str] = {
    RowEvent.INSTANCE_ADDED: "committed",
    RowEvent.INSTANCE_REMOVED: "committed",
    RowEvent.INSTANCE_MOVED: "committed",
    RowEvent.MUTATION_ROLLED_BACK: "rolled_back",
    RowEvent.ROW_RELOADED: "reloaded",
    CatalogEvent.ROW_CREATED: "committed",
    CatalogEvent.ROW_UPDATED: "committed",
    CatalogEvent.ROW_DELETED: "committed",
}


class MutationAuditListener:
    """Subscribes an AuditLogger to row and catalog events."""

    def __init__(self, audit_logger: AuditLogger, event_bus: EventBus, actor: str = "planner"):
        self.audit_logger = audit_logger
        self.event_bus = event_bus
        self.actor = actor
        self._subscriptions: List[Callable[[], None]] = []

    def start(self) -> None:
        for event, outcome in _OUTCOMES.items():
            self._subscriptions.append(self.event_bus.subscribe(event, self._handler(event, outcome)))
        logger.info(f"MutationAuditListener started: subscribed to {len(_OUTCOMES)} events")

    def stop(self) -> None:
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions.clear()

    def _handler(self, event: RowEvent | CatalogEvent, outcome: str) -> Callable[[Any], None]:
        def record(payload: Optional[Dict[str, Any]]) -> None:
            data = dict(payload or {})
            row_id = data.pop("row_id", None)
            self.audit_logger.log_event(
                actor=self.actor,
                action=event.value,
                resource=f"row:{row_id}",
                outcome=outcome,
                **data,
            )

        return record
