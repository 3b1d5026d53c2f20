"""Qt adapters for dispatch, debounce and realtime relay."""

import threading
import time

import pytest

pytest.importorskip("PySide6")

from PySide6.QtCore import QCoreApplication  # noqa: E402

from orderdesk.di import Container, bootstrap, shutdown  # noqa: E402
from orderdesk.gui.services.qt_runtime import (  # noqa: E402
    QtChangeRelay,
    QtDebouncer,
    QtDispatcher,
    create_qt_order_list_view_model,
)
from orderdesk.settings import SettingsManager  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


def _process_until(app, predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while not predicate() and time.monotonic() < deadline:
        app.processEvents()
        time.sleep(0.01)
    return predicate()


def test_dispatcher_delivers_result_on_owner_thread(qapp):
    dispatcher = QtDispatcher()
    results = []
    owner = threading.get_ident()

    dispatcher.submit(lambda: threading.get_ident(), lambda value: results.append((value, threading.get_ident())), results.append)

    assert _process_until(qapp, lambda: results)
    worker_thread, callback_thread = results[0]
    assert callback_thread == owner
    assert worker_thread != owner
    assert not dispatcher.is_busy()


def test_dispatcher_delivers_errors(qapp):
    dispatcher = QtDispatcher()
    errors = []

    def fail():
        raise RuntimeError("backend down")

    dispatcher.submit(fail, lambda _value: None, errors.append)

    assert _process_until(qapp, lambda: errors)
    assert str(errors[0]) == "backend down"


def test_debouncer_collapses_triggers(qapp):
    fired = []
    debouncer = QtDebouncer(interval_ms=50, callback=lambda: fired.append(1))

    for _ in range(5):
        debouncer.trigger()
    assert debouncer.pending

    assert _process_until(qapp, lambda: fired)
    _process_until(qapp, lambda: False, timeout=0.15)
    assert fired == [1]
    assert not debouncer.pending


def test_debouncer_cancel(qapp):
    fired = []
    debouncer = QtDebouncer(interval_ms=20)
    debouncer.bind(lambda: fired.append(1))
    debouncer.trigger()
    debouncer.cancel()

    _process_until(qapp, lambda: False, timeout=0.1)
    assert fired == []
    assert debouncer.interval_ms == 20


def test_relay_runs_posted_calls_on_its_thread(qapp):
    relay = QtChangeRelay()
    seen = []
    owner = threading.get_ident()

    worker = threading.Thread(target=lambda: relay.post(lambda: seen.append(threading.get_ident())))
    worker.start()
    worker.join()

    assert _process_until(qapp, lambda: seen)
    assert seen == [owner]


def test_qt_view_model_uses_configured_debounce(qapp, tmp_path):
    settings = SettingsManager(tmp_path / "settings.json")
    settings.load()
    settings.set("realtime.debounce_ms", 120)
    container = bootstrap(Container(), settings.database_path(), settings=settings)

    vm = create_qt_order_list_view_model(container)

    assert isinstance(vm._debouncer, QtDebouncer)
    assert vm._debouncer.interval_ms == 120
    assert isinstance(vm._dispatcher, QtDispatcher)
    vm.dispose()
    shutdown(container)
