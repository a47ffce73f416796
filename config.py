# config.py
import logging
import os
from pathlib import Path
from typing import Optional, Union

# --- Window / canvas ---
WINDOW_TITLE = "Page Viewer (Progressive Zoom)"
WINDOW_GEOMETRY = "1100x800"
CANVAS_BG = "#202020"

# --- Zoom behaviour ---
# zoom is relative to the "center inside" fit of the page
MIN_ZOOM = 0.5
MAX_ZOOM = 16.0
WHEEL_ZOOM_BASE = 1.125         # zoom factor per 120 wheel units
KEY_ZOOM_STEP = 1.25

# --- Rendering ---
IDLE_DELAY_MS = 120             # quiet time after the last transform change before "idle"
RENDER_DELAY_MS = 0             # delay between schedule() and the render job
PDF_PAGE_INDEX = 0

# --- Logging ---
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_LEVEL_ENV = "PAGEVIEW_LOG_LEVEL"
DEBUG_LOG_ENV = "PAGEVIEW_DEBUG_LOG"
LOG_FILE_PATH = Path(__file__).with_name("pageview_debug.log")


def debug_log_enabled() -> bool:
    return os.getenv(DEBUG_LOG_ENV, "0").strip().lower() in {"1", "true", "yes", "on"}


def resolve_log_level(level: Optional[Union[str, int]] = None) -> int:
    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or "WARNING"
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def setup_logging(level: Optional[Union[str, int]] = None) -> logging.Logger:
    """
    Configure the root logger once: stderr handler, plus a debug file
    handler when PAGEVIEW_DEBUG_LOG is set.
    """
    root = logging.getLogger()
    root.setLevel(resolve_log_level(level))
    if getattr(root, "_pageview_configured", False):
        return root

    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)
    stream = logging.StreamHandler()
    stream.setFormatter(fmt)
    root.addHandler(stream)

    if debug_log_enabled():
        handler = logging.FileHandler(LOG_FILE_PATH, mode="a", encoding="utf-8")
        handler.setFormatter(fmt)
        handler.setLevel(logging.DEBUG)
        root.addHandler(handler)
        root.setLevel(logging.DEBUG)

    root._pageview_configured = True
    return root
