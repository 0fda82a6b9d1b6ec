# vine_ui/dialogs/bottom_sheet.py
from __future__ import annotations

from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QDialog, QFrame, QLabel, QVBoxLayout, QWidget

from .. import theme


class VineBottomSheet(QDialog):
    """
    Modal sheet chrome: handle bar, optional title, and a body layout for subclasses.
    """

    def __init__(self, title: Optional[str] = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.setModal(True)
        self.setObjectName("VineBottomSheet")
        self.setStyleSheet(f"#VineBottomSheet {{ {theme.sheet_style()} }}")
        self.setMinimumWidth(360)

        outer = QVBoxLayout(self)
        outer.setContentsMargins(24, 12, 24, 24)
        outer.setSpacing(8)

        self.handle = QFrame()
        self.handle.setFixedSize(40, 4)
        self.handle.setStyleSheet(f"background-color: {theme.ON_SURFACE_MUTED}; border-radius: 2px;")
        outer.addWidget(self.handle, alignment=Qt.AlignHCenter)
        outer.addSpacing(16)

        self.title_label = QLabel(title or "")
        self.title_label.setStyleSheet(theme.title_style(18))
        self.title_label.setVisible(bool(title))
        outer.addWidget(self.title_label)

        self.body = QVBoxLayout()
        self.body.setSpacing(8)
        outer.addLayout(self.body)

    def set_title(self, title: Optional[str]) -> None:
        self.title_label.setText(title or "")
        self.title_label.setVisible(bool(title))
