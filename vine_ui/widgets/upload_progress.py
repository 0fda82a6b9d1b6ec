# vine_ui/widgets/upload_progress.py
from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QVBoxLayout,
    QWidget,
)

from .. import theme
from ..domain import PendingUpload, UploadStatus, format_time_ago
from .buttons import DivineButton, DivineButtonSize, DivineButtonType


Callback = Optional[Callable[[], object]]

_STATUS_GLYPHS: Dict[UploadStatus, str] = {
    UploadStatus.PENDING: "◷",
    UploadStatus.UPLOADING: "↑",
    UploadStatus.RETRYING: "↻",
    UploadStatus.PROCESSING: "⚙",
    UploadStatus.READY_TO_PUBLISH: "⇪",
    UploadStatus.PUBLISHED: "✔",
    UploadStatus.FAILED: "✖",
    UploadStatus.PAUSED: "⏸",
}


def _percent(value: float) -> int:
    return int(value * 100)


def _progress_bar_style(color: str) -> str:
    return (
        "QProgressBar { background-color: #3A3A3A; border: none; border-radius: 2px; }"
        f"QProgressBar::chunk {{ background-color: {color}; border-radius: 2px; }}"
    )


class UploadProgressIndicator(QFrame):
    """
    Card showing one upload: title, coloured status text + glyph, progress bar, percentage and age.

    The action row appears only with show_actions=True and a status that has actions.
    A button is shown only when its callback was given.
    """
    tapped = pyqtSignal()

    def __init__(
        self,
        upload: PendingUpload,
        on_retry: Callback = None,
        on_cancel: Callback = None,
        on_delete: Callback = None,
        on_pause: Callback = None,
        on_resume: Callback = None,
        show_actions: bool = True,
        now: Optional[Callable[[], datetime]] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.upload = upload
        self.show_actions = show_actions
        self._callbacks: Dict[str, Callback] = {
            "retry": on_retry,
            "cancel": on_cancel,
            "delete": on_delete,
            "pause": on_pause,
            "resume": on_resume,
        }
        self._now = now or datetime.now
        self._action_buttons: List[DivineButton] = []

        self._build_ui()
        self._render()

    # ---------------- UI ----------------

    def _build_ui(self):
        self.setObjectName("UploadProgressIndicator")
        self.setStyleSheet("#UploadProgressIndicator { background-color: #1E1E1E; border-radius: 8px; }")

        outer = QVBoxLayout(self)
        outer.setContentsMargins(12, 12, 12, 12)
        outer.setSpacing(8)

        top = QHBoxLayout()
        texts = QVBoxLayout()
        self.title_label = QLabel()
        self.title_label.setStyleSheet(theme.title_style(16))
        self.status_label = QLabel()
        texts.addWidget(self.title_label)
        texts.addWidget(self.status_label)
        top.addLayout(texts, 1)
        self.status_icon = QLabel()
        self.status_icon.setAlignment(Qt.AlignCenter)
        self.status_icon.setFixedWidth(28)
        top.addWidget(self.status_icon)
        outer.addLayout(top)

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setTextVisible(False)
        self.progress.setFixedHeight(4)
        outer.addWidget(self.progress)

        info = QHBoxLayout()
        self.percent_label = QLabel()
        self.percent_label.setStyleSheet(theme.body_style(theme.SECONDARY_TEXT, 12))
        self.time_label = QLabel()
        self.time_label.setStyleSheet(theme.body_style(theme.SECONDARY_TEXT, 12))
        info.addWidget(self.percent_label)
        info.addStretch(1)
        info.addWidget(self.time_label)
        outer.addLayout(info)

        self.actions_row = QWidget()
        self.actions_layout = QHBoxLayout(self.actions_row)
        self.actions_layout.setContentsMargins(0, 0, 0, 0)
        self.actions_layout.addStretch(1)
        outer.addWidget(self.actions_row)

    # ---------------- Public API ----------------

    def set_upload(self, upload: PendingUpload) -> None:
        self.upload = upload
        self._render()

    def action_labels(self) -> List[str]:
        return [b.text() for b in self._action_buttons]

    def trigger_action(self, label: str) -> None:
        for b in self._action_buttons:
            if b.text() == label:
                b.click()
                return
        raise KeyError(label)

    def mousePressEvent(self, event):
        self.tapped.emit()
        super().mousePressEvent(event)

    # ---------------- Rendering ----------------

    def _render(self) -> None:
        u = self.upload
        color = theme.status_color(u.status)

        self.title_label.setText(u.title or "Video Upload")
        self.status_label.setText(u.status_text)
        self.status_label.setStyleSheet(theme.body_style(color, 14))
        self.status_icon.setText(_STATUS_GLYPHS.get(u.status, "?"))
        self.status_icon.setStyleSheet(f"color: {color}; font-size: 20px;")

        self.progress.setValue(_percent(u.progress_value))
        self.progress.setStyleSheet(_progress_bar_style(color))
        self.percent_label.setText(f"{_percent(u.progress_value)}%")
        self.time_label.setText(format_time_ago(u.created_at, self._now()))

        self._rebuild_actions()

    def _has_actions(self) -> bool:
        u = self.upload
        return self.show_actions and (
            u.can_retry or u.status in (UploadStatus.UPLOADING, UploadStatus.PAUSED, UploadStatus.FAILED)
        )

    def _rebuild_actions(self) -> None:
        for b in self._action_buttons:
            self.actions_layout.removeWidget(b)
            b.deleteLater()
        self._action_buttons = []

        visible = self._has_actions()
        self.actions_row.setVisible(visible)
        if not visible:
            return

        u = self.upload
        cb = self._callbacks
        retry_label = f"Retry ({u.retries_left} left)"

        if u.status == UploadStatus.UPLOADING and cb["pause"] is not None:
            self._add_action("Pause", cb["pause"], DivineButtonType.SECONDARY)
        if u.status == UploadStatus.PAUSED and cb["resume"] is not None:
            self._add_action("Resume", cb["resume"], DivineButtonType.SECONDARY)

        if u.status == UploadStatus.FAILED:
            if cb["cancel"] is not None:
                self._add_action("Go Back", cb["cancel"], DivineButtonType.GHOST_SECONDARY)
            if cb["retry"] is not None and u.can_retry:
                self._add_action(retry_label, cb["retry"], DivineButtonType.PRIMARY)
            if cb["delete"] is not None:
                self._add_action("Delete", cb["delete"], DivineButtonType.ERROR)
        elif u.can_retry and cb["retry"] is not None:
            self._add_action(retry_label, cb["retry"], DivineButtonType.PRIMARY)

    def _add_action(self, label: str, callback: Callable[[], object], kind: DivineButtonType) -> None:
        b = DivineButton(label, callback, kind=kind, size=DivineButtonSize.SMALL)
        self.actions_layout.addWidget(b)
        self._action_buttons.append(b)


class CompactUploadProgress(QFrame):
    """One-line progress pill for notification areas."""
    tapped = pyqtSignal()

    def __init__(self, upload: PendingUpload, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.upload = upload

        self.setObjectName("CompactUploadProgress")
        self.setStyleSheet("#CompactUploadProgress { background-color: rgba(0, 0, 0, 204); border-radius: 8px; }")
        lay = QHBoxLayout(self)
        lay.setContentsMargins(12, 8, 12, 8)

        self.progress = QProgressBar()
        self.progress.setRange(0, 100)
        self.progress.setTextVisible(False)
        self.progress.setFixedSize(16, 16)
        self.label = QLabel()
        self.label.setStyleSheet(f"color: {theme.WHITE}; font-size: 12px;")
        lay.addWidget(self.progress)
        lay.addWidget(self.label)

        self._render()

    def set_upload(self, upload: PendingUpload) -> None:
        self.upload = upload
        self._render()

    def text(self) -> str:
        return self.label.text()

    def mousePressEvent(self, event):
        self.tapped.emit()
        super().mousePressEvent(event)

    def _render(self) -> None:
        u = self.upload
        pct = _percent(u.progress_value)
        if u.status == UploadStatus.UPLOADING:
            text = f"Uploading {pct}%"
        elif u.status == UploadStatus.PAUSED:
            text = f"Paused {pct}%"
        else:
            text = u.status_text
        self.label.setText(text)
        self.progress.setValue(pct)
        color = theme.ERROR if u.status == UploadStatus.FAILED else theme.WHITE
        self.progress.setStyleSheet(_progress_bar_style(color))
