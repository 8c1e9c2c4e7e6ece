"""Process-wide initialisation for the dashboard.

``init_app`` is the one place that configures logging, registers the default
event handlers and picks the expense backend. It runs once per process.
"""
from dataclasses import dataclass
from typing import Any, Optional

from kakeibo.api import ExpenseApi
from kakeibo.config import Settings, load_settings
from kakeibo.events import EventBus, event_bus, register_default_handlers
from kakeibo.local import LocalExpenseApi
from kakeibo.logging_setup import configure_logging, get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppContext:
    settings: Settings
    api: Any
    bus: EventBus


_context: Optional[AppContext] = None


def build_api(settings: Settings) -> Any:
    if settings.uses_backend:
        logger.info("using expense backend at %s", settings.api_base_url)
        return ExpenseApi(settings.api_base_url, settings.api_token, settings.request_timeout)
    logger.info("no backend configured; using local store from %s", settings.seed_path)
    return LocalExpenseApi.from_seed(settings.seed_path)


def init_app(settings: Optional[Settings] = None) -> AppContext:
    global _context
    if _context is not None:
        return _context

    settings = settings or load_settings()
    configure_logging(settings.log_level)
    register_default_handlers(event_bus)
    _context = AppContext(settings=settings, api=build_api(settings), bus=event_bus)
    return _context


def reset_app() -> None:
    """Forget the cached context. Tests use this between cases."""
    global _context
    _context = None
