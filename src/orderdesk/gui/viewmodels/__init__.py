from .signal import Signal, ObservableProperty
from .base import BaseViewModel
from .selection_model import SelectionModel
from .realtime_reconciler import RealtimeReconciler, reduce_delete, reduce_insert, reduce_update
from .order_list_viewmodel import OrderListViewModel

__all__ = [
    "BaseViewModel",
    "ObservableProperty",
    "OrderListViewModel",
    "RealtimeReconciler",
    "SelectionModel",
    "Signal",
    "reduce_delete",
    "reduce_insert",
    "reduce_update",
]
