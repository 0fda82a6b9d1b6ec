# vine_ui/widgets/buttons.py
from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Optional, Tuple

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QIcon
from PyQt5.QtWidgets import QPushButton, QSizePolicy, QWidget

from .. import theme


class DivineButtonType(Enum):
    PRIMARY = "primary"                  # green fill, dark text
    SECONDARY = "secondary"              # dark fill, green border + text
    TERTIARY = "tertiary"                # white fill, dark green text
    GHOST = "ghost"                      # 65% black scrim, white text (over video)
    GHOST_SECONDARY = "ghost_secondary"  # 15% black scrim, white text
    LINK = "link"                        # no background, underlined
    ERROR = "error"                      # destructive


class DivineButtonSize(Enum):
    SMALL = "small"
    BASE = "base"


# (background, foreground, border)
_COLORS: Dict[DivineButtonType, Tuple[str, str, str]] = {
    DivineButtonType.PRIMARY: (theme.VINE_GREEN, theme.ON_PRIMARY, theme.VINE_GREEN),
    DivineButtonType.SECONDARY: (theme.SURFACE_BACKGROUND, theme.VINE_GREEN, theme.VINE_GREEN),
    DivineButtonType.TERTIARY: (theme.WHITE, theme.ON_PRIMARY, theme.WHITE),
    DivineButtonType.GHOST: (theme.GHOST_SCRIM, theme.WHITE, "transparent"),
    DivineButtonType.GHOST_SECONDARY: (theme.GHOST_SECONDARY_SCRIM, theme.WHITE, "transparent"),
    DivineButtonType.LINK: ("transparent", theme.ON_SURFACE, "transparent"),
    DivineButtonType.ERROR: (theme.ERROR, theme.WHITE, theme.ERROR),
}

# (horizontal padding, vertical padding, radius)
_METRICS: Dict[DivineButtonSize, Tuple[int, int, int]] = {
    DivineButtonSize.SMALL: (16, 8, 16),
    DivineButtonSize.BASE: (24, 12, 20),
}


def button_stylesheet(kind: DivineButtonType, size: DivineButtonSize) -> str:
    bg, fg, border = _COLORS[kind]
    px, py, radius = _METRICS[size]
    underline = "text-decoration: underline;" if kind == DivineButtonType.LINK else ""
    return (
        "QPushButton {"
        f"background-color: {bg}; color: {fg}; border: 2px solid {border};"
        f"border-radius: {radius}px; padding: {py}px {px}px; font-weight: 600; {underline}"
        "}"
        "QPushButton:disabled { color: rgba(255, 255, 255, 80); }"
    )


class DivineButton(QPushButton):
    """
    Design-system button. Appearance comes from (type, size); a button created without
    on_pressed is shown disabled.
    """

    def __init__(
        self,
        label: str,
        on_pressed: Optional[Callable[[], object]] = None,
        kind: DivineButtonType = DivineButtonType.PRIMARY,
        size: DivineButtonSize = DivineButtonSize.BASE,
        icon: Optional[QIcon] = None,
        expanded: bool = False,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(label, parent)
        self.kind = kind
        self.size_variant = size

        if icon is not None:
            self.setIcon(icon)
        if expanded:
            self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)

        self.setStyleSheet(button_stylesheet(kind, size))
        self.setCursor(Qt.PointingHandCursor)
        self.set_on_pressed(on_pressed)

    def set_on_pressed(self, on_pressed: Optional[Callable[[], object]]) -> None:
        try:
            self.clicked.disconnect()
        except TypeError:
            pass  # nothing connected yet
        if on_pressed is None:
            self.setEnabled(False)
            return
        self.clicked.connect(lambda _checked=False: on_pressed())
        self.setEnabled(True)
