"""Admin order desk: tabbed order list, bulk actions with undo, realtime reconciliation."""

__version__ = "0.1.0"
