# vine_ui/widgets/bottom_nav.py
from __future__ import annotations

from typing import List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import QHBoxLayout, QToolButton, QWidget

from .. import theme
from ..routing import TAB_NAMES


_GLYPHS = ["⌂", "⌕", "♪", "☺"]  # home, explore, notifications, profile


class BottomNavBar(QWidget):
    """
    Four-tab navigation bar. Emits tab_tapped(index) on every tap, including a tap on the
    tab that is already active; the shell decides what a tap means.
    """
    tab_tapped = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._current = 0
        self._buttons: List[QToolButton] = []
        self._build_ui()
        self.set_current_index(0)

    def _build_ui(self):
        self.setObjectName("BottomNavBar")
        self.setStyleSheet(f"#BottomNavBar {{ background-color: {theme.NAV_BACKGROUND}; }}")

        lay = QHBoxLayout(self)
        lay.setContentsMargins(8, 4, 8, 4)
        lay.setSpacing(0)

        for i, name in enumerate(TAB_NAMES):
            b = QToolButton()
            b.setText(f"{_GLYPHS[i]}\n{name}")
            b.setToolTip(name)
            b.setAutoRaise(True)
            b.setCursor(Qt.PointingHandCursor)
            b.setToolButtonStyle(Qt.ToolButtonTextOnly)
            b.clicked.connect(lambda _checked=False, idx=i: self.tab_tapped.emit(idx))
            lay.addWidget(b, 1)
            self._buttons.append(b)

    def current_index(self) -> int:
        return self._current

    def set_current_index(self, index: int) -> None:
        self._current = index
        for i, b in enumerate(self._buttons):
            color = theme.VINE_GREEN if i == index else theme.SECONDARY_TEXT
            b.setStyleSheet(f"QToolButton {{ color: {color}; border: none; font-size: 11px; }}")

    def button(self, index: int) -> QToolButton:
        return self._buttons[index]
