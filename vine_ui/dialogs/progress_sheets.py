# vine_ui/dialogs/progress_sheets.py
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QLabel,
    QProgressBar,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from .. import theme
from ..domain import (
    OriginalSaveStage,
    SaveFailure,
    SavePermissionDenied,
    SaveResult,
    SaveStage,
    SaveSuccess,
    VideoItem,
    WatermarkDownloadStage,
)
from ..media_save import WatermarkDownloadService
from ..platform_services import PermissionsService, ShareService
from ..tasks import start_task
from ..widgets.buttons import DivineButton, DivineButtonSize, DivineButtonType
from .bottom_sheet import VineBottomSheet


logger = logging.getLogger("vine_ui.progress_sheets")

SaveOperation = Callable[[Callable[[SaveStage], None]], SaveResult]

PAGE_PROGRESS = 0
PAGE_SUCCESS = 1
PAGE_DENIED = 2
PAGE_FAILURE = 3


class SaveProgressSheet(VineBottomSheet):
    """
    Runs one save operation in the background and tracks it:

        InProgress(stage) -> Success(path) | PermissionDenied | Failure(reason)

    - Stage updates are applied in the order the operation reports them.
    - Once a result arrives, later stage updates are ignored.
    - Once the sheet is closed, nothing is applied at all.
    - There is no retry; the user reopens the flow.

    Emits:
      - stage_changed(stage)
      - completed(SaveResult)
    """
    stage_changed = pyqtSignal(object)
    completed = pyqtSignal(object)

    def __init__(
        self,
        operation: SaveOperation,
        initial_stage: SaveStage,
        share_service: ShareService,
        permissions_service: PermissionsService,
        parent: Optional[QWidget] = None,
        autostart: bool = True,
        title: str = "Save Video",
    ):
        super().__init__(parent=parent)
        self.setWindowTitle(title)

        self._operation = operation
        self._share = share_service
        self._permissions = permissions_service

        self._stage: SaveStage = initial_stage
        self._result: Optional[SaveResult] = None
        self._started = False
        self._mounted = True
        self._task_signals = None

        self._build_ui()
        self._render()

        if autostart:
            self.start()

    # ---------------- UI ----------------

    def _build_ui(self):
        self.pages = QStackedWidget()
        self.body.addWidget(self.pages)

        # In progress
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setAlignment(Qt.AlignHCenter)
        self.spinner = QProgressBar()
        self.spinner.setRange(0, 0)  # busy indicator
        self.spinner.setTextVisible(False)
        self.spinner.setFixedHeight(6)
        self.stage_label = QLabel()
        self.stage_label.setStyleSheet(theme.title_style())
        self.stage_label.setAlignment(Qt.AlignCenter)
        self.stage_description = QLabel()
        self.stage_description.setStyleSheet(theme.body_style())
        self.stage_description.setAlignment(Qt.AlignCenter)
        lay.addWidget(self.spinner)
        lay.addSpacing(16)
        lay.addWidget(self.stage_label)
        lay.addWidget(self.stage_description)
        self.pages.addWidget(page)

        # Success
        page, lay = self._result_page("✔", theme.VINE_GREEN, "Saved to Camera Roll")
        self.btn_share = DivineButton("Share", self._share_file, expanded=True)
        self.btn_done = self._text_button("Done")
        lay.addWidget(self.btn_share)
        lay.addWidget(self.btn_done)
        self.pages.addWidget(page)

        # Permission denied
        page, lay = self._result_page("\U0001F512", theme.VINE_GREEN, "Photos Access Needed")
        body = QLabel("To save videos, allow Photos access in Settings.")
        body.setStyleSheet(theme.body_style())
        body.setAlignment(Qt.AlignCenter)
        body.setWordWrap(True)
        lay.addWidget(body)
        self.btn_open_settings = DivineButton("Open Settings", self._open_settings, expanded=True)
        self.btn_not_now = self._text_button("Not Now")
        lay.addWidget(self.btn_open_settings)
        lay.addWidget(self.btn_not_now)
        self.pages.addWidget(page)

        # Failure
        page, lay = self._result_page("⚠", theme.ERROR, "Download Failed")
        self.reason_label = QLabel()
        self.reason_label.setTextFormat(Qt.PlainText)
        self.reason_label.setStyleSheet(theme.body_style())
        self.reason_label.setAlignment(Qt.AlignCenter)
        self.reason_label.setWordWrap(True)
        lay.addWidget(self.reason_label)
        self.btn_dismiss = self._text_button("Dismiss")
        lay.addWidget(self.btn_dismiss)
        self.pages.addWidget(page)

    def _result_page(self, glyph: str, color: str, title: str):
        page = QWidget()
        lay = QVBoxLayout(page)
        lay.setAlignment(Qt.AlignHCenter)
        icon = QLabel(glyph)
        icon.setAlignment(Qt.AlignCenter)
        icon.setStyleSheet(f"color: {color}; font-size: 40px;")
        heading = QLabel(title)
        heading.setAlignment(Qt.AlignCenter)
        heading.setStyleSheet(theme.title_style())
        lay.addWidget(icon)
        lay.addSpacing(12)
        lay.addWidget(heading)
        return page, lay

    def _text_button(self, label: str) -> DivineButton:
        return DivineButton(label, self.accept, kind=DivineButtonType.LINK, size=DivineButtonSize.SMALL)

    # ---------------- Public API ----------------

    def start(self) -> None:
        """Start the save operation. Only the first call does anything."""
        if self._started:
            return
        self._started = True
        task = start_task(
            self._operation,
            on_progress=self._on_stage,
            on_finished=self._on_result,
            on_failed=self._on_operation_error,
            name=self.windowTitle(),
        )
        self._task_signals = task.signals

    def stage(self) -> SaveStage:
        return self._stage

    def result(self) -> Optional[SaveResult]:
        return self._result

    def is_processing(self) -> bool:
        return self._result is None

    def is_mounted(self) -> bool:
        return self._mounted

    def available_actions(self) -> List[str]:
        """Labels of the action buttons on the current page."""
        page = self.pages.currentWidget()
        return [b.text() for b in page.findChildren(QPushButton) if b.isEnabled()]

    # ---------------- State transitions ----------------

    def _on_stage(self, stage: SaveStage) -> None:
        if not self._mounted or self._result is not None:
            return
        self._stage = stage
        self._render()
        self.stage_changed.emit(stage)

    def _on_result(self, result: SaveResult) -> None:
        if not self._mounted or self._result is not None:
            return
        self._result = result
        logger.info("%s finished: %s", self.windowTitle(), type(result).__name__)
        self._render()
        self.completed.emit(result)

    def _on_operation_error(self, error: Exception) -> None:
        self._on_result(SaveFailure(f"Unexpected error: {error}"))

    def _render(self) -> None:
        result = self._result
        if result is None:
            self.stage_label.setText(self._stage.label)
            self.stage_description.setText(self._stage.description)
            self.pages.setCurrentIndex(PAGE_PROGRESS)
        elif isinstance(result, SaveSuccess):
            self.pages.setCurrentIndex(PAGE_SUCCESS)
        elif isinstance(result, SavePermissionDenied):
            self.pages.setCurrentIndex(PAGE_DENIED)
        elif isinstance(result, SaveFailure):
            self.reason_label.setText(result.reason)
            self.pages.setCurrentIndex(PAGE_FAILURE)
        else:
            raise TypeError(f"Unknown save result: {result!r}")

    # ---------------- Actions ----------------

    def _share_file(self) -> None:
        result = self._result
        if isinstance(result, SaveSuccess):
            self._share.share_file(result.file_path)

    def _open_settings(self) -> None:
        self._permissions.open_app_settings()

    # ---------------- Teardown ----------------

    def done(self, r: int) -> None:
        self._mounted = False
        super().done(r)

    def closeEvent(self, event):
        self._mounted = False
        super().closeEvent(event)


class WatermarkDownloadSheet(SaveProgressSheet):
    """downloading -> watermarking -> saving"""

    def __init__(
        self,
        video: VideoItem,
        username: str,
        service: WatermarkDownloadService,
        share_service: ShareService,
        permissions_service: PermissionsService,
        parent: Optional[QWidget] = None,
        autostart: bool = True,
    ):
        self.video = video
        self.username = username
        super().__init__(
            lambda report: service.download_with_watermark(video, username, report),
            WatermarkDownloadStage.DOWNLOADING,
            share_service,
            permissions_service,
            parent=parent,
            autostart=autostart,
            title="Save with Watermark",
        )


class SaveOriginalSheet(SaveProgressSheet):
    """downloading -> saving, no watermark"""

    def __init__(
        self,
        video: VideoItem,
        service: WatermarkDownloadService,
        share_service: ShareService,
        permissions_service: PermissionsService,
        parent: Optional[QWidget] = None,
        autostart: bool = True,
    ):
        self.video = video
        super().__init__(
            lambda report: service.download_original(video, report),
            OriginalSaveStage.DOWNLOADING,
            share_service,
            permissions_service,
            parent=parent,
            autostart=autostart,
            title="Save Original",
        )


def show_watermark_download_sheet(parent: Optional[QWidget], services, video: VideoItem, username: str) -> int:
    sheet = WatermarkDownloadSheet(
        video,
        username,
        services.downloads,
        services.share,
        services.permissions,
        parent=parent,
    )
    return sheet.exec_()


def show_save_original_sheet(parent: Optional[QWidget], services, video: VideoItem) -> int:
    sheet = SaveOriginalSheet(video, services.downloads, services.share, services.permissions, parent=parent)
    return sheet.exec_()
