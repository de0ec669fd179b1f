"""
Lightweight EventBus used between the mutation coordinator and its listeners.

Key invariants (enforced by call sites + tests):
  - Event topics come from enums in app.enums.events (RowEvent, CatalogEvent).
  - Payloads are dataclasses / Pydantic models / dicts.
  - Subscribers always receive a plain dict payload.
  - Each container owns its own bus; there is no process-wide singleton.
"""
import logging
import threading
from collections import defaultdict
from dataclasses import asdict, is_dataclass
from enum import Enum
from typing import Any, Callable, Dict, Hashable, Iterable

from pydantic import BaseModel

from app.enums.events import EventType

logger = logging.getLogger(__name__)


class EventBus:
    """
    Handles event-driven communication across modules.

    Delivery is synchronous on the publishing thread; a failing subscriber is
    logged and does not stop delivery to the others.
    """

    def __init__(self) -> None:
        self.subscribers: Dict[Hashable, list[Callable[[Any], None]]] = defaultdict(list)
        self.lock = threading.Lock()
        self._published = 0
        self._failed_callbacks = 0

    def subscribe(self, event_name: EventType | str, callback: Callable[[Any], None]) -> Callable[[], None]:
        """
        Subscribes a callback function to an event.

        Args:
            event_name: The enum topic (preferred) or raw string.
            callback: Function to call when the event occurs.
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name
        with self.lock:
            self.subscribers[name].append(callback)

        def unsubscribe() -> None:
            with self.lock:
                callbacks = self.subscribers.get(name, [])
                try:
                    callbacks.remove(callback)
                except ValueError:
                    return

        return unsubscribe

    def publish(self, event_name: EventType | str, data: Any | None = None) -> None:
        """
        Publishes an event, calling all subscribed callback functions.

        Args:
            event_name: The enum topic (preferred) or raw string.
            data: Payload object (Pydantic model, dataclass, or dict/primitive).
        """
        name = event_name.value if isinstance(event_name, Enum) else event_name

        # Normalize payload for subscribers: they always receive a dict or primitive.
        if isinstance(data, BaseModel):
            payload: Any = data.model_dump()
        elif is_dataclass(data) and not isinstance(data, type):
            payload = asdict(data)
        else:
            payload = data

        with self.lock:
            callbacks: Iterable[Callable[[Any], None]] = list(self.subscribers.get(name, []))
            self._published += 1
        for callback in callbacks:
            try:
                callback(payload)
            except Exception as exc:
                self._failed_callbacks += 1
                logger.error("Error in callback for event %s: %s", name, exc, exc_info=exc)

    def listener(self, event_name: EventType | str) -> Callable[[Callable[[Any], None]], Callable[[Any], None]]:
        """
        Decorator for subscribing a function to an event at definition time.

        Args:
            event_name: The enum topic (preferred) or raw string.
        """

        def decorator(func: Callable[[Any], None]) -> Callable[[Any], None]:
            self.subscribe(event_name, func)
            return func

        return decorator

    def get_metrics(self) -> Dict[str, Any]:
        """Return lightweight metrics for health endpoints/logging."""
        with self.lock:
            subscriber_count = sum(len(values) for values in self.subscribers.values())
        return {
            "published": self._published,
            "failed_callbacks": self._failed_callbacks,
            "subscribers": subscriber_count,
        }
