"""Selection variants and the target descriptor handed to bulk mutations.

Both variants are immutable; :class:`~orderdesk.gui.viewmodels.selection_model.SelectionModel`
swaps whole values instead of flipping flags, so the two modes can never be
active at once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Union

from .tabs import Predicate, Tab, predicate_for


@dataclass(frozen=True)
class ExplicitSelection:
    """Selected iff the id is in ``ids``."""

    ids: FrozenSet[str] = frozenset()

    def contains(self, order_id: str) -> bool:
        return order_id in self.ids

    def to_predicate(self) -> Predicate:
        return Predicate.id_in(self.ids)

    @property
    def is_empty(self) -> bool:
        return not self.ids


@dataclass(frozen=True)
class AllInTabSelection:
    """Selected iff the order currently matches ``tab`` and is not in ``excluded``."""

    tab: Tab
    excluded: FrozenSet[str] = frozenset()

    def contains(self, order_id: str) -> bool:
        return order_id not in self.excluded

    def to_predicate(self) -> Predicate:
        return predicate_for(self.tab).excluding(self.excluded)

    @property
    def is_empty(self) -> bool:
        return False


Selection = Union[ExplicitSelection, AllInTabSelection]

EMPTY_SELECTION = ExplicitSelection()


@dataclass(frozen=True)
class TargetDescriptor:
    """The (tab, explicit-or-excluded ids) pair a bulk action was issued with.

    ``pinned_ids`` is filled in once the backend has reported the rows the
    action touched.  A pinned descriptor targets exactly those rows, which
    is what an undo needs: the original action has usually moved them out
    of the tab (trash, unread) so re-evaluating the tab filter would miss
    them.
    """

    selection: Selection
    pinned_ids: Optional[FrozenSet[str]] = None
    extra: Predicate = field(default_factory=Predicate)

    @classmethod
    def of(cls, selection: Selection) -> TargetDescriptor:
        return cls(selection=selection)

    @property
    def is_pinned(self) -> bool:
        return self.pinned_ids is not None

    def pin(self, ids) -> TargetDescriptor:
        return TargetDescriptor(
            selection=self.selection,
            pinned_ids=frozenset(ids),
            extra=self.extra,
        )

    def narrowed(self, predicate: Predicate) -> TargetDescriptor:
        """Add extra conditions (e.g. ``deleted_at < cutoff``) to the target."""
        return TargetDescriptor(
            selection=self.selection,
            pinned_ids=self.pinned_ids,
            extra=self.extra.and_(*predicate.conditions),
        )

    def to_predicate(self) -> Predicate:
        if self.pinned_ids is not None:
            return Predicate.id_in(self.pinned_ids)
        return self.selection.to_predicate().and_(*self.extra.conditions)
