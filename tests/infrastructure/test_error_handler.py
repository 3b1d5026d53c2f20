import logging
from unittest.mock import Mock

from orderdesk.errors import TransportError
from orderdesk.errors.handler import ErrorHandler, ErrorOccurredEvent, ErrorSeverity
from orderdesk.events.bus import EventBus


def test_handle_error_logs_and_publishes():
    logger = Mock(spec=logging.Logger)
    event_bus = Mock(spec=EventBus)
    handler = ErrorHandler(logger, event_bus)

    error = TransportError("connection reset")
    message = handler.handle(error, ErrorSeverity.ERROR, context={"tab": "all"})

    assert message == "connection reset"
    logger.error.assert_called()
    event = event_bus.publish.call_args[0][0]
    assert isinstance(event, ErrorOccurredEvent)
    assert event.error is error
    assert event.severity == ErrorSeverity.ERROR
    assert event.context == {"tab": "all"}


def test_warning_uses_warning_logger():
    logger = Mock(spec=logging.Logger)
    handler = ErrorHandler(logger, Mock(spec=EventBus))

    handler.handle(ValueError("meh"), ErrorSeverity.WARNING)

    logger.warning.assert_called()
    logger.error.assert_not_called()


def test_ui_callback():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(RuntimeError("ui error"), ErrorSeverity.CRITICAL)

    callback.assert_called_with("ui error", ErrorSeverity.CRITICAL)


def test_ignore_info_severity_in_ui():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    callback = Mock()
    handler.register_ui_callback(callback)

    handler.handle(Exception("info"), ErrorSeverity.INFO)

    callback.assert_not_called()


def test_message_falls_back_to_class_name():
    handler = ErrorHandler(Mock(spec=logging.Logger), Mock(spec=EventBus))
    assert handler.handle(TransportError()) == "TransportError"
