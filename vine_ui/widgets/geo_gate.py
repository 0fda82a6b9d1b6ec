# vine_ui/widgets/geo_gate.py
from __future__ import annotations

import logging
from typing import Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import QLabel, QProgressBar, QStackedWidget, QVBoxLayout, QWidget

from .. import theme
from ..domain import GeoBlockResponse
from ..geo_blocking import GeoBlockingService
from ..tasks import start_task


logger = logging.getLogger("vine_ui.geo_gate")

PAGE_CHECKING = 0
PAGE_BLOCKED = 1
PAGE_ALLOWED = 2


class GeoBlockedScreen(QWidget):
    """Full-page notice shown when the region check says no."""

    def __init__(self, response: GeoBlockResponse, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.response = response

        lay = QVBoxLayout(self)
        lay.setAlignment(Qt.AlignCenter)
        lay.setContentsMargins(32, 32, 32, 32)

        title = QLabel("diVine is not available in your region")
        title.setAlignment(Qt.AlignCenter)
        title.setWordWrap(True)
        title.setStyleSheet(theme.title_style(20))
        lay.addWidget(title)

        where = ", ".join(p for p in (response.region, response.country_code) if p)
        self.location_label = QLabel(f"Detected location: {where}" if where else "")
        self.location_label.setAlignment(Qt.AlignCenter)
        self.location_label.setStyleSheet(theme.body_style())
        self.location_label.setVisible(bool(where))
        lay.addWidget(self.location_label)

        self.reason_label = QLabel(response.reason or "Access is restricted due to local regulations.")
        self.reason_label.setTextFormat(Qt.PlainText)
        self.reason_label.setAlignment(Qt.AlignCenter)
        self.reason_label.setWordWrap(True)
        self.reason_label.setStyleSheet(theme.body_style())
        lay.addWidget(self.reason_label)


class GeoBlockingGate(QStackedWidget):
    """
    Shows `child` only once the region check allows it.

        Checking -> Allowed | Blocked(response)

    One check per gate. If the check raises, the gate logs a warning and lets the user through.

    Emits:
      - resolved(GeoBlockResponse or None)   None when the check failed
    """
    resolved = pyqtSignal(object)

    def __init__(
        self,
        service: GeoBlockingService,
        child: QWidget,
        parent: Optional[QWidget] = None,
        autostart: bool = True,
    ):
        super().__init__(parent)
        self._service = service
        self._child = child
        self._blocked_screen: Optional[GeoBlockedScreen] = None
        self._started = False
        self._done = False
        self._task_signals = None

        self._build_ui()

        if autostart:
            self.start()

    # ---------------- UI ----------------

    def _build_ui(self):
        loading = QWidget()
        lay = QVBoxLayout(loading)
        lay.setAlignment(Qt.AlignCenter)
        spinner = QProgressBar()
        spinner.setRange(0, 0)
        spinner.setTextVisible(False)
        spinner.setFixedSize(120, 4)
        lay.addWidget(spinner)
        loading.setStyleSheet(f"background-color: {theme.SURFACE_BACKGROUND};")
        self.addWidget(loading)

        self.addWidget(QWidget())  # blocked placeholder, replaced on demand
        self.addWidget(self._child)
        self.setCurrentIndex(PAGE_CHECKING)

    # ---------------- Public API ----------------

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        task = start_task(
            lambda _report: self._service.check_geo_block(),
            on_finished=self._on_response,
            on_failed=self._on_error,
            name="geo-check",
        )
        self._task_signals = task.signals

    def is_checking(self) -> bool:
        return not self._done

    def is_blocked(self) -> bool:
        return self.currentIndex() == PAGE_BLOCKED

    def is_allowed(self) -> bool:
        return self.currentIndex() == PAGE_ALLOWED

    def guarded_child(self) -> QWidget:
        return self._child

    def blocked_screen(self) -> Optional[GeoBlockedScreen]:
        return self._blocked_screen

    # ---------------- Results ----------------

    def _on_response(self, response: GeoBlockResponse) -> None:
        if self._done:
            return
        self._done = True
        if response.blocked:
            self._show_blocked(response)
        else:
            self.setCurrentIndex(PAGE_ALLOWED)
        self.resolved.emit(response)

    def _on_error(self, error: Exception) -> None:
        if self._done:
            return
        self._done = True
        logger.warning("Geo check failed, allowing access: %s", error)
        self.setCurrentIndex(PAGE_ALLOWED)
        self.resolved.emit(None)

    def _show_blocked(self, response: GeoBlockResponse) -> None:
        screen = GeoBlockedScreen(response)
        old = self.widget(PAGE_BLOCKED)
        self.removeWidget(old)
        old.deleteLater()
        self.insertWidget(PAGE_BLOCKED, screen)
        self._blocked_screen = screen
        self.setCurrentIndex(PAGE_BLOCKED)
