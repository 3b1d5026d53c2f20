"""Default configuration values for orderdesk."""

from __future__ import annotations

from typing import Final

# Page sizes offered by the list view.  Changing the page size always sends
# the view back to page 1 so it cannot be stranded past the last page.
PAGE_SIZE_OPTIONS: Final[tuple[int, ...]] = (25, 50, 100)
DEFAULT_PAGE_SIZE: Final[int] = 50

# Quiet period after the last realtime update/delete before the authoritative
# reload runs.  Bursts of events inside the window collapse into one reload.
RECONCILE_DEBOUNCE_MS: Final[int] = 400

# How long the single undo affordance stays available after a bulk action.
UNDO_WINDOW_SEC: Final[float] = 10.0

# Literal the operator has to type before any hard delete is executed.
HARD_DELETE_CONFIRMATION: Final[str] = "DELETE"

# "Empty trash older than N days" default.
TRASH_RETENTION_DAYS: Final[int] = 30

DB_FILE_NAME: Final[str] = "orders.db"
APP_DIR_NAME: Final[str] = "orderdesk"
