from orderdesk.domain.models import AllInTabSelection, ExplicitSelection, Tab
from orderdesk.gui.viewmodels.selection_model import SelectionModel


def test_toggle_twice_restores_state():
    model = SelectionModel()
    model.toggle("a")
    assert model.is_selected("a")
    model.toggle("a")
    assert model.selection == ExplicitSelection()


def test_toggle_visible_selects_then_deselects_page():
    model = SelectionModel()
    model.toggle("off-page")
    page = ["a", "b", "c"]

    model.toggle_visible(page)
    assert all(model.is_selected(i) for i in page)

    model.toggle_visible(page)
    assert not any(model.is_selected(i) for i in page)
    assert model.is_selected("off-page")


def test_toggle_visible_partial_page_selects_rest():
    model = SelectionModel()
    model.toggle("a")
    model.toggle_visible(["a", "b"])
    assert model.selection == ExplicitSelection(frozenset({"a", "b"}))


def test_select_all_on_empty_tab_is_noop():
    model = SelectionModel()
    changes = []
    model.changed.connect(changes.append)

    assert model.select_all_in_tab(Tab.TRASH, 0) is False
    assert model.selection == ExplicitSelection()
    assert changes == []


def test_all_in_tab_count_is_arithmetic():
    model = SelectionModel()
    model.select_all_in_tab(Tab.TRASH, 120)
    for order_id in ("x", "y", "z"):
        model.toggle(order_id)

    assert model.is_all_in_tab
    assert model.selection == AllInTabSelection(Tab.TRASH, frozenset({"x", "y", "z"}))
    assert model.selected_count() == 117
    assert not model.is_selected("x")
    assert model.is_selected("never-loaded")

    model.set_total_in_tab(2)
    assert model.selected_count() == 0


def test_toggle_visible_under_all_in_tab_uses_exclusions():
    model = SelectionModel()
    model.select_all_in_tab(Tab.ALL, 10)

    model.toggle_visible(["a", "b"])
    assert model.selection == AllInTabSelection(Tab.ALL, frozenset({"a", "b"}))

    model.toggle_visible(["a", "b"])
    assert model.selection == AllInTabSelection(Tab.ALL)


def test_forget_drops_id_from_either_variant():
    model = SelectionModel()
    model.toggle("a")
    model.forget("a")
    assert model.selection == ExplicitSelection()

    model.select_all_in_tab(Tab.ALL, 5)
    model.toggle("b")
    model.forget("b")
    assert model.selection == AllInTabSelection(Tab.ALL)


def test_reset_and_changed_signal():
    model = SelectionModel()
    changes = []
    model.changed.connect(changes.append)

    model.toggle("a")
    model.reset()
    model.reset()

    assert changes == [ExplicitSelection(frozenset({"a"})), ExplicitSelection()]
