"""
In-process domain events.

Handlers subscribe per event type and are called synchronously after the
database transaction that produced the event has committed. A failing
handler is logged and never affects the caller.
"""

import time
import logging
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

BOOKING_CONFIRMED = "booking_confirmed"
BOOKING_CANCELLED = "booking_cancelled"
BOOKING_COMPLETED = "booking_completed"

Handler = Callable[[dict], None]

_handlers: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_type: str, handler: Handler) -> None:
    _handlers[event_type].append(handler)


def unsubscribe(event_type: str, handler: Handler) -> None:
    if handler in _handlers.get(event_type, []):
        _handlers[event_type].remove(handler)


def emit_event(event_type: str, payload: dict) -> None:
    """Deliver an event to every handler subscribed to ``event_type``."""
    event = {
        "type": event_type,
        **payload,
        "ts": int(time.time()),
    }
    logger.info("Event emitted: %s (booking %s)", event_type, payload.get("booking_id"))
    for handler in list(_handlers.get(event_type, [])):
        try:
            handler(event)
        except Exception:
            logger.exception("Event handler %r failed for %s", handler, event_type)
