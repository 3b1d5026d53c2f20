from .bootstrap import DeskPreferences, bootstrap, create_order_list_view_model, shutdown
from .container import Container, Lifetime, Registration

__all__ = [
    "Container",
    "DeskPreferences",
    "Lifetime",
    "Registration",
    "bootstrap",
    "create_order_list_view_model",
    "shutdown",
]
