from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from kakeibo.errors import api_error_message
from kakeibo.logging_setup import get_logger

__all__ = [
    'event_bus', 'NOTIFICATION', 'EXPENSE_ADDED', 'EXPENSE_UPDATED', 'EXPENSE_DELETED',
    'Event', 'EventBus', 'notify', 'notify_error', 'notify_success', 'register_default_handlers',
]

logger = get_logger(__name__)


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Callable[[Event, dict], dict]]] = {}

    def subscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name not in self._subscribers:
            self._subscribers[name] = []
        if handler not in self._subscribers[name]:
            self._subscribers[name].append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(
            name=name,
            ts=datetime.now().isoformat(),
            payload=payload
        )

        results = []
        for handler in list(self._subscribers[name]):
            result = handler(event, payload)
            results.append(result)
        return results

    def unsubscribe(self, name: str, handler: Callable[[Event, dict], dict]) -> None:
        if name in self._subscribers:
            if handler in self._subscribers[name]:
                self._subscribers[name].remove(handler)

    def subscribers(self, name: str) -> List[Callable[[Event, dict], dict]]:
        return list(self._subscribers.get(name, []))


NOTIFICATION = "NOTIFICATION"
EXPENSE_ADDED = "EXPENSE_ADDED"
EXPENSE_UPDATED = "EXPENSE_UPDATED"
EXPENSE_DELETED = "EXPENSE_DELETED"

event_bus = EventBus()


def notify(message: str, level: str = "info", bus: EventBus = event_bus, **extra) -> str:
    bus.publish(NOTIFICATION, {"level": level, "message": message, **extra})
    return message


def notify_error(error: BaseException, default_message: str, bus: EventBus = event_bus) -> str:
    """Announce a failed backend call; 401 and 404 get their own wording."""
    message = api_error_message(error, default_message)
    return notify(message, "error", bus, status=getattr(error, "status", None))


def notify_success(message: str, bus: EventBus = event_bus) -> str:
    return notify(message, "success", bus)


def log_notification_handler(event: Event, payload: dict) -> dict:
    level = payload.get("level", "info")
    message = payload.get("message", "")
    if level == "error":
        logger.warning("notification: %s (status=%s)", message, payload.get("status"))
    else:
        logger.info("notification: %s", message)
    return {"logged": True}


def log_expense_change_handler(event: Event, payload: dict) -> dict:
    logger.info("%s id=%s", event.name, payload.get("id"))
    return {}


def register_default_handlers(bus: EventBus = event_bus) -> None:
    bus.subscribe(NOTIFICATION, log_notification_handler)
    for name in (EXPENSE_ADDED, EXPENSE_UPDATED, EXPENSE_DELETED):
        bus.subscribe(name, log_expense_change_handler)
