"""Gmail-style selection over a paged, filtered list.

The model holds exactly one :data:`~orderdesk.domain.models.selection.Selection`
value.  Every operation computes the next value and swaps it in, so
``Explicit`` and ``AllInTab`` can never be active together.
"""

from __future__ import annotations

import logging
from typing import Iterable

from orderdesk.domain.models.selection import (
    EMPTY_SELECTION,
    AllInTabSelection,
    ExplicitSelection,
    Selection,
)
from orderdesk.domain.models.tabs import Tab

from .signal import Signal

_logger = logging.getLogger(__name__)


class SelectionModel:
    """Track the operator's target set independently of the loaded page.

    ``changed`` fires with the new selection value after each transition
    that actually changed something.
    """

    def __init__(self) -> None:
        self._selection: Selection = EMPTY_SELECTION
        self._total_in_tab = 0
        self.changed = Signal()

    # -- state ---------------------------------------------------------------

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def is_all_in_tab(self) -> bool:
        return isinstance(self._selection, AllInTabSelection)

    def snapshot(self) -> Selection:
        """The current value; immutable, safe to hand to a bulk action."""
        return self._selection

    def set_total_in_tab(self, total: int) -> None:
        """Keep the tab total used by :meth:`selected_count` current."""
        self._total_in_tab = max(0, int(total))

    def is_selected(self, order_id: str) -> bool:
        return self._selection.contains(order_id)

    def selected_count(self) -> int:
        selection = self._selection
        if isinstance(selection, AllInTabSelection):
            # Arithmetic only; the matching ids are never enumerated
            return max(0, self._total_in_tab - len(selection.excluded))
        return len(selection.ids)

    # -- transitions ---------------------------------------------------------

    def toggle(self, order_id: str) -> None:
        selection = self._selection
        if isinstance(selection, AllInTabSelection):
            self._set(AllInTabSelection(selection.tab, selection.excluded ^ {order_id}))
        else:
            self._set(ExplicitSelection(selection.ids ^ {order_id}))

    def toggle_visible(self, visible_ids: Iterable[str]) -> None:
        """Select the visible page, or deselect it if it is already fully selected.

        Only ids in *visible_ids* are touched; off-page state is kept.
        """
        visible = frozenset(visible_ids)
        if not visible:
            return
        all_selected = all(self.is_selected(order_id) for order_id in visible)
        selection = self._selection
        if isinstance(selection, AllInTabSelection):
            excluded = selection.excluded | visible if all_selected else selection.excluded - visible
            self._set(AllInTabSelection(selection.tab, excluded))
        else:
            ids = selection.ids - visible if all_selected else selection.ids | visible
            self._set(ExplicitSelection(ids))

    def select_all_in_tab(self, tab: Tab | str, total_in_tab: int) -> bool:
        """Switch to ``AllInTab(tab, {})``; a no-op returning False for an empty tab."""
        if total_in_tab <= 0:
            _logger.debug("Ignoring select-all on empty tab %s", tab)
            return False
        self._total_in_tab = int(total_in_tab)
        self._set(AllInTabSelection(Tab(tab)))
        return True

    def forget(self, order_id: str) -> None:
        """Drop *order_id* from whichever id set the selection holds.

        Used when the order no longer exists: it is neither selected
        explicitly nor worth excluding.
        """
        selection = self._selection
        if isinstance(selection, AllInTabSelection):
            if order_id in selection.excluded:
                self._set(AllInTabSelection(selection.tab, selection.excluded - {order_id}))
        elif order_id in selection.ids:
            self._set(ExplicitSelection(selection.ids - {order_id}))

    def reset(self) -> None:
        self._set(EMPTY_SELECTION)

    def _set(self, selection: Selection) -> None:
        if selection == self._selection:
            return
        self._selection = selection
        self.changed.emit(selection)
