# subconv/editor/events.py
"""Change notification for the subtitle editor."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from ..models.enums import ChangeType

logger = logging.getLogger(__name__)


@dataclass
class ChangeEvent:
    type: ChangeType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }


Listener = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """
    Ordered, synchronous observer list.

    Listeners run inline in registration order. A listener that raises is
    logged and skipped; the remaining listeners still run.
    """

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener) -> bool:
        if listener in self._listeners:
            self._listeners.remove(listener)
            return True
        return False

    def emit(self, change_type: ChangeType, **data: Any) -> ChangeEvent:
        event = ChangeEvent(change_type, data)
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Error in change listener %r for %s", listener, change_type.value)
        return event

    def __len__(self) -> int:
        return len(self._listeners)
