from kakeibo.errors import ApiError, NOT_FOUND_MESSAGE, UNAUTHORIZED_MESSAGE, api_error_message
from kakeibo.events import (
    EXPENSE_ADDED,
    NOTIFICATION,
    Event,
    EventBus,
    notify,
    notify_error,
    notify_success,
    register_default_handlers,
)


def collect(bus):
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(payload)
        return {"seen": True}

    bus.subscribe(NOTIFICATION, handler)
    return seen


def test_publish_without_subscribers():
    assert EventBus().publish(NOTIFICATION, {"message": "x"}) == []


def test_subscribe_is_idempotent_and_unsubscribe():
    bus = EventBus()
    calls = []

    def handler(event, payload):
        calls.append(event.name)
        return {}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.subscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"id": "1"})
    assert calls == [EXPENSE_ADDED]

    bus.unsubscribe(EXPENSE_ADDED, handler)
    bus.publish(EXPENSE_ADDED, {"id": "2"})
    assert calls == [EXPENSE_ADDED]


def test_handler_may_unsubscribe_while_publishing():
    bus = EventBus()

    def once(event, payload):
        bus.unsubscribe(NOTIFICATION, once)
        return {"once": True}

    bus.subscribe(NOTIFICATION, once)
    seen = collect(bus)
    results = bus.publish(NOTIFICATION, {"message": "hi"})
    assert results == [{"once": True}, {"seen": True}]
    assert seen == [{"message": "hi"}]


def test_error_messages_by_status():
    assert api_error_message(ApiError("x", 401), "既定") == UNAUTHORIZED_MESSAGE
    assert api_error_message(ApiError("x", 404), "既定") == NOT_FOUND_MESSAGE
    assert api_error_message(ApiError("x", 500), "既定") == "既定"
    assert api_error_message(ApiError("x"), "既定") == "既定"
    assert api_error_message(ValueError("x"), "既定") == "既定"


def test_notify_error_publishes_one_notification():
    bus = EventBus()
    seen = collect(bus)
    message = notify_error(ApiError("boom", 401), "取得に失敗しました", bus)
    assert message == UNAUTHORIZED_MESSAGE
    assert seen == [{"level": "error", "message": UNAUTHORIZED_MESSAGE, "status": 401}]


def test_notify_success_and_info():
    bus = EventBus()
    seen = collect(bus)
    notify_success("支出を追加しました", bus)
    notify("お知らせ", bus=bus)
    assert seen == [
        {"level": "success", "message": "支出を追加しました"},
        {"level": "info", "message": "お知らせ"},
    ]


def test_register_default_handlers_is_explicit():
    bus = EventBus()
    assert bus.subscribers(NOTIFICATION) == []
    register_default_handlers(bus)
    register_default_handlers(bus)
    assert len(bus.subscribers(NOTIFICATION)) == 1
    assert bus.publish(NOTIFICATION, {"level": "info", "message": "x"}) == [{"logged": True}]
