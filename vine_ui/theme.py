# vine_ui/theme.py
from __future__ import annotations

from typing import Dict

from .domain import UploadStatus


# -----------------------------
# Palette
# -----------------------------

VINE_GREEN = "#00B488"
SURFACE_BACKGROUND = "#0E1512"
ON_SURFACE = "#F2F5F3"
ON_SURFACE_MUTED = "#4B5A53"
ON_SURFACE_DISABLED = "#2C3632"
SECONDARY_TEXT = "#A3AEA8"
ON_PRIMARY = "#002417"
ERROR = "#F44336"
ORANGE = "#FF9800"
BLUE = "#2196F3"
WHITE = "#FFFFFF"
GHOST_SCRIM = "rgba(0, 0, 0, 166)"            # 65% black
GHOST_SECONDARY_SCRIM = "rgba(0, 0, 0, 38)"   # 15% black
NAV_BACKGROUND = "#00150D"

BOTTOM_SHEET_RADIUS = 32

_STATUS_COLORS: Dict[UploadStatus, str] = {
    UploadStatus.PENDING: ORANGE,
    UploadStatus.UPLOADING: BLUE,
    UploadStatus.RETRYING: ORANGE,
    UploadStatus.PROCESSING: BLUE,
    UploadStatus.READY_TO_PUBLISH: VINE_GREEN,
    UploadStatus.PUBLISHED: VINE_GREEN,
    UploadStatus.FAILED: ERROR,
    UploadStatus.PAUSED: ORANGE,
}


def status_color(status: UploadStatus) -> str:
    return _STATUS_COLORS.get(status, SECONDARY_TEXT)


# -----------------------------
# Stylesheet helpers
# -----------------------------

def title_style(size: int = 16) -> str:
    return f"color: {ON_SURFACE}; font-size: {size}px; font-weight: 600;"


def body_style(color: str = SECONDARY_TEXT, size: int = 13) -> str:
    return f"color: {color}; font-size: {size}px;"


def sheet_style() -> str:
    return (
        f"background-color: {SURFACE_BACKGROUND};"
        f"border-top-left-radius: {BOTTOM_SHEET_RADIUS}px;"
        f"border-top-right-radius: {BOTTOM_SHEET_RADIUS}px;"
    )
