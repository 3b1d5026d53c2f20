import json
from datetime import timedelta

import pytest

pytest.importorskip("PySide6")

from orderdesk.application.services.undo_manager import UndoManager  # noqa: E402
from orderdesk.di import Container, DeskPreferences, bootstrap, create_order_list_view_model, shutdown  # noqa: E402
from orderdesk.domain.models import OrderQuery, Tab, utc_now  # noqa: E402
from orderdesk.domain.repositories import IOrderRepository  # noqa: E402
from orderdesk.errors import SettingsLoadError, SettingsValidationError  # noqa: E402
from orderdesk.settings import DEFAULT_SETTINGS, SettingsManager, merge_with_defaults  # noqa: E402


def test_load_creates_defaults(tmp_path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.load()

    assert path.exists()
    assert manager.page_size() == 50
    assert manager.debounce_ms() == 400
    assert manager.undo_window_seconds() == 10.0
    assert manager.retention_days() == 30
    assert manager.database_path() == tmp_path / "orders.db"


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"list": {"page_size": 25}}), encoding="utf-8")
    manager = SettingsManager(path)
    manager.load()

    assert manager.page_size() == 25
    assert manager.get("list.default_tab") == "all"


def test_set_persists_and_notifies(tmp_path):
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.load()
    changes = []
    manager.settingsChanged.connect(lambda key, value: changes.append((key, value)))

    manager.set("list.page_size", 100)

    assert changes == [("list.page_size", 100)]
    assert json.loads(path.read_text(encoding="utf-8"))["list"]["page_size"] == 100


def test_invalid_value_is_rejected(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()

    with pytest.raises(SettingsValidationError):
        manager.set("list.page_size", 33)
    assert manager.page_size() == 50


def test_corrupt_file_raises_load_error(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(SettingsLoadError):
        SettingsManager(path).load()


def test_get_missing_key_returns_default():
    manager = SettingsManager()
    assert manager.get("list.nope", "fallback") == "fallback"


def test_merge_keeps_defaults_untouched():
    merge_with_defaults({"undo": {"window_seconds": 5}})
    assert DEFAULT_SETTINGS["undo"]["window_seconds"] == 10.0


def test_bootstrap_reads_preferences_from_settings(tmp_path):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()
    manager.set("list.page_size", 25)
    manager.set("list.default_tab", "trash")
    manager.set("realtime.debounce_ms", 150)
    manager.set("undo.window_seconds", 4.0)
    manager.set("trash.retention_days", 7)

    container = bootstrap(Container(), manager.database_path(), settings=manager)

    assert container.resolve(DeskPreferences) == DeskPreferences(
        page_size=25,
        default_tab=Tab.TRASH,
        debounce_ms=150,
        undo_window_sec=4.0,
        retention_days=7,
    )
    assert container.resolve(SettingsManager) is manager
    assert container.resolve(UndoManager).window_sec == 4.0

    vm = create_order_list_view_model(container)
    assert vm.tab.value is Tab.TRASH
    assert vm.page_size.value == 25
    vm.dispose()
    shutdown(container)


def test_retention_setting_controls_expired_purge(tmp_path, order_factory):
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()
    manager.set("trash.retention_days", 7)
    container = bootstrap(Container(), manager.database_path(), settings=manager)
    repo = container.resolve(IOrderRepository)
    now = utc_now()
    repo.insert_many([
        order_factory(1, deleted_at=now - timedelta(days=10)),
        order_factory(2, deleted_at=now - timedelta(days=3)),
    ])

    vm = create_order_list_view_model(container)
    vm.start()
    assert vm.empty_expired_trash("DELETE")

    trash_ids = {order.id for order in repo.find_by_query(OrderQuery.for_tab(Tab.TRASH))}
    assert trash_ids == {"o0002"}
    vm.dispose()
    shutdown(container)
