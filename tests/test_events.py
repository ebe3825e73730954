import logging
from dataclasses import dataclass
from unittest.mock import Mock

from photoSweep.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from photoSweep.events.bus import Event, EventBus


@dataclass(kw_only=True)
class SimpleEvent(Event):
    payload: str = ""


def test_sync_subscribe_publish():
    bus = EventBus()
    received = []

    bus.subscribe(SimpleEvent, lambda event: received.append(event.payload))
    bus.publish(SimpleEvent(payload="hello"))

    assert received == ["hello"]


def test_unsubscribe_and_failing_handler():
    bus = EventBus(logger=Mock(spec=logging.Logger))
    received = []

    def broken(event):
        raise RuntimeError("boom")

    bus.subscribe(SimpleEvent, broken)
    sub = bus.subscribe(SimpleEvent, received.append)
    bus.publish(SimpleEvent())
    bus.unsubscribe(sub)
    bus.publish(SimpleEvent())

    assert len(received) == 1
    assert bus._logger.error.call_count == 2


def test_handle_error_logs_and_publishes():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    handler = ErrorHandler(logger, event_bus)

    error = ValueError("test error")
    handler.handle(error, ErrorSeverity.ERROR)

    logger.error.assert_called()
    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR


def test_warnings_do_not_reach_ui():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(Exception("soft"), ErrorSeverity.WARNING)
    handler.handle(RuntimeError("hard"), ErrorSeverity.CRITICAL)

    callback.assert_called_once_with("hard", ErrorSeverity.CRITICAL)


def test_default_logger_is_package_child(caplog):
    bus = EventBus()
    bus.subscribe(SimpleEvent, lambda event: 1 / 0)

    with caplog.at_level(logging.ERROR, logger="photoSweep"):
        bus.publish(SimpleEvent())

    assert bus._logger.name == "photoSweep.events"
    assert [record.name for record in caplog.records] == ["photoSweep.events"]
