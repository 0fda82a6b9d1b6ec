# tests/test_progress_sheets.py
from __future__ import annotations

import threading

from conftest import drain, wait_until
from vine_ui.dialogs.progress_sheets import SaveOriginalSheet, SaveProgressSheet, WatermarkDownloadSheet
from vine_ui.domain import (
    OriginalSaveStage,
    SaveFailure,
    SavePermissionDenied,
    SaveSuccess,
    VideoItem,
    WatermarkDownloadStage,
)


class FakeShare:
    def __init__(self):
        self.shared = []

    def share_file(self, path):
        self.shared.append(path)
        return True


class FakePermissions:
    def __init__(self):
        self.opened = 0

    def open_app_settings(self):
        self.opened += 1
        return True


class FakeDownloads:
    def __init__(self, result, stages=None):
        self.result = result
        self.stages = stages
        self.calls = []

    def download_with_watermark(self, video, username, on_progress):
        self.calls.append(("watermark", video.id, username))
        for s in self.stages or list(WatermarkDownloadStage):
            on_progress(s)
        return self.result

    def download_original(self, video, on_progress):
        self.calls.append(("original", video.id))
        for s in self.stages or list(OriginalSaveStage):
            on_progress(s)
        return self.result


VIDEO = VideoItem(id="abc123", video_url="https://cdn.example/v.mp4", title="clip")


def _sheet(qapp, operation, initial=WatermarkDownloadStage.DOWNLOADING, share=None, perms=None, autostart=True):
    return SaveProgressSheet(
        operation,
        initial,
        share or FakeShare(),
        perms or FakePermissions(),
        autostart=autostart,
    )


def test_stages_render_in_order_then_terminal(qapp):
    seen = []
    sheet = WatermarkDownloadSheet(VIDEO, "alice", FakeDownloads(SaveSuccess("/tmp/a.mp4")), FakeShare(), FakePermissions())
    sheet.stage_changed.connect(seen.append)

    wait_until(qapp, lambda: sheet.result() is not None)

    assert seen == [
        WatermarkDownloadStage.DOWNLOADING,
        WatermarkDownloadStage.WATERMARKING,
        WatermarkDownloadStage.SAVING,
    ]
    assert sheet.stage() == WatermarkDownloadStage.SAVING
    assert sheet.result() == SaveSuccess("/tmp/a.mp4")
    assert not sheet.is_processing()


def test_stage_label_tracks_latest_stage(qapp):
    gate = threading.Event()

    def op(report):
        report(WatermarkDownloadStage.WATERMARKING)
        gate.wait(5)
        return SaveFailure("x")

    sheet = _sheet(qapp, op)
    wait_until(qapp, lambda: sheet.stage() == WatermarkDownloadStage.WATERMARKING)

    assert sheet.is_processing()
    assert sheet.stage_label.text() == "Adding Watermark"
    assert sheet.stage_description.text() == "Applying the diVine watermark..."

    gate.set()
    wait_until(qapp, lambda: sheet.result() is not None)


def test_stage_after_terminal_is_ignored(qapp):
    captured = {}

    def op(report):
        captured["report"] = report
        report(WatermarkDownloadStage.DOWNLOADING)
        return SaveFailure("Network unreachable")

    sheet = _sheet(qapp, op)
    wait_until(qapp, lambda: sheet.result() is not None)

    captured["report"](WatermarkDownloadStage.SAVING)
    drain(qapp)

    assert sheet.stage() == WatermarkDownloadStage.DOWNLOADING
    assert sheet.result() == SaveFailure("Network unreachable")


def test_nothing_applied_after_close(qapp):
    release = threading.Event()
    started = threading.Event()

    def op(report):
        started.set()
        release.wait(5)
        report(WatermarkDownloadStage.SAVING)
        return SaveSuccess("/tmp/late.mp4")

    sheet = _sheet(qapp, op)
    assert started.wait(5)

    sheet.reject()
    assert not sheet.is_mounted()

    release.set()
    drain(qapp)

    assert sheet.result() is None
    assert sheet.stage() == WatermarkDownloadStage.DOWNLOADING


def test_operation_runs_once(qapp):
    service = FakeDownloads(SaveSuccess("/tmp/a.mp4"))
    sheet = SaveOriginalSheet(VIDEO, service, FakeShare(), FakePermissions(), autostart=False)
    sheet.start()
    sheet.start()
    wait_until(qapp, lambda: sheet.result() is not None)
    drain(qapp)

    assert service.calls == [("original", "abc123")]


def test_original_sheet_uses_original_stages(qapp):
    seen = []
    service = FakeDownloads(SaveSuccess("/tmp/o.mp4"))
    sheet = SaveOriginalSheet(VIDEO, service, FakeShare(), FakePermissions(), autostart=False)
    sheet.stage_changed.connect(seen.append)
    sheet.start()
    wait_until(qapp, lambda: sheet.result() is not None)

    assert seen == [OriginalSaveStage.DOWNLOADING, OriginalSaveStage.SAVING]
    assert service.calls == [("original", "abc123")]


def test_success_share_receives_exact_path(qapp):
    share = FakeShare()
    sheet = _sheet(qapp, lambda report: SaveSuccess("/tmp/a.mp4"), share=share)
    wait_until(qapp, lambda: sheet.result() is not None)

    assert sheet.available_actions() == ["Share", "Done"]
    sheet.btn_share.click()

    assert share.shared == ["/tmp/a.mp4"]


def test_done_dismisses(qapp):
    sheet = _sheet(qapp, lambda report: SaveSuccess("/tmp/a.mp4"))
    wait_until(qapp, lambda: sheet.result() is not None)

    sheet.btn_done.click()

    assert not sheet.is_mounted()


def test_failure_shows_reason_verbatim_with_only_dismiss(qapp):
    sheet = _sheet(qapp, lambda report: SaveFailure("Network unreachable"))
    wait_until(qapp, lambda: sheet.result() is not None)

    assert sheet.reason_label.text() == "Network unreachable"
    assert sheet.available_actions() == ["Dismiss"]


def test_permission_denied_offers_settings(qapp):
    perms = FakePermissions()
    sheet = _sheet(qapp, lambda report: SavePermissionDenied(), perms=perms)
    wait_until(qapp, lambda: sheet.result() is not None)

    assert sheet.available_actions() == ["Open Settings", "Not Now"]
    sheet.btn_open_settings.click()

    assert perms.opened == 1


def test_raising_operation_becomes_failure(qapp):
    def op(report):
        raise RuntimeError("kaboom")

    sheet = _sheet(qapp, op)
    wait_until(qapp, lambda: sheet.result() is not None)

    assert sheet.result() == SaveFailure("Unexpected error: kaboom")
