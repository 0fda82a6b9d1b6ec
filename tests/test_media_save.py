# tests/test_media_save.py
from __future__ import annotations

import os

import pytest

import vine_ui.media_save as media_save
from vine_ui.domain import (
    OriginalSaveStage,
    SaveFailure,
    SavePermissionDenied,
    SaveSuccess,
    VideoItem,
    WatermarkDownloadStage,
)
from vine_ui.media_save import GallerySaveService, MediaCache, WatermarkDownloadService, watermark_filter


class FakeResponse:
    def __init__(self, chunks, status=200):
        self.chunks = chunks
        self.status = status

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise media_save.requests.HTTPError(f"{self.status}")

    def iter_content(self, chunk_size=1):
        yield from self.chunks


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, stream=False, timeout=None):
        self.urls.append(url)
        return self.response


@pytest.fixture
def ffmpeg_calls(monkeypatch):
    calls = []

    def fake_run_cmd(cmd):
        calls.append(cmd)
        with open(cmd[-1], "wb") as f:
            f.write(b"rendered")
        return 0, ""

    monkeypatch.setattr(media_save, "run_cmd", fake_run_cmd)
    return calls


def _service(tmp_path, session, gallery=None):
    cache = MediaCache(str(tmp_path / "cache"), session=session)
    gallery = gallery or GallerySaveService(str(tmp_path / "gallery"))
    return WatermarkDownloadService(cache, gallery, temp_dir=str(tmp_path / "render"))


VIDEO = VideoItem(id="ev1", video_url="https://cdn.example/ev1.mp4")


def test_watermark_happy_path(tmp_path, ffmpeg_calls):
    session = FakeSession(FakeResponse([b"abc", b"def"]))
    service = _service(tmp_path, session)
    stages = []

    result = service.download_with_watermark(VIDEO, "alice", stages.append)

    assert stages == list(WatermarkDownloadStage)
    assert isinstance(result, SaveSuccess)
    assert os.path.isfile(result.file_path)
    assert session.urls == ["https://cdn.example/ev1.mp4"]
    with open(tmp_path / "cache" / "ev1.mp4", "rb") as f:
        assert f.read() == b"abcdef"
    assert os.listdir(tmp_path / "gallery") == [os.path.basename(result.file_path)]
    assert "-vf" in ffmpeg_calls[0]


def test_original_saves_downloaded_file(tmp_path):
    service = _service(tmp_path, FakeSession(FakeResponse([b"xyz"])))
    stages = []

    result = service.download_original(VIDEO, stages.append)

    assert stages == [OriginalSaveStage.DOWNLOADING, OriginalSaveStage.SAVING]
    assert isinstance(result, SaveSuccess)
    assert os.listdir(tmp_path / "gallery") == ["ev1.mp4"]


def test_cached_file_is_reused(tmp_path):
    session = FakeSession(FakeResponse([b"never"]))
    service = _service(tmp_path, session)
    os.makedirs(tmp_path / "cache")
    with open(tmp_path / "cache" / "ev1.mp4", "wb") as f:
        f.write(b"cached")

    result = service.download_original(VIDEO, lambda s: None)

    assert isinstance(result, SaveSuccess)
    assert session.urls == []


def test_missing_url_fails(tmp_path):
    service = _service(tmp_path, FakeSession(FakeResponse([])))
    stages = []

    result = service.download_with_watermark(VideoItem(id="nourl"), "alice", stages.append)

    assert result == SaveFailure("Could not download video file")
    assert stages == [WatermarkDownloadStage.DOWNLOADING]


def test_render_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(media_save, "run_cmd", lambda cmd: (1, "encoder missing"))
    service = _service(tmp_path, FakeSession(FakeResponse([b"a"])))

    result = service.download_with_watermark(VIDEO, "alice", lambda s: None)

    assert result == SaveFailure("Failed to render watermarked video")


def test_http_error_is_unexpected_failure(tmp_path):
    service = _service(tmp_path, FakeSession(FakeResponse([], status=404)))

    result = service.download_original(VIDEO, lambda s: None)

    assert isinstance(result, SaveFailure)
    assert result.reason.startswith("Unexpected error: ")
    assert not [n for n in os.listdir(tmp_path / "cache") if n.endswith(".part")]


class DeniedGallery:
    def save_video(self, path):
        return SavePermissionDenied()


class BrokenGallery:
    def save_video(self, path):
        return SaveFailure("disk full")


def test_gallery_permission_denied(tmp_path, ffmpeg_calls):
    service = _service(tmp_path, FakeSession(FakeResponse([b"a"])), gallery=DeniedGallery())
    assert service.download_with_watermark(VIDEO, "alice", lambda s: None) == SavePermissionDenied()


def test_gallery_failure_reason(tmp_path):
    service = _service(tmp_path, FakeSession(FakeResponse([b"a"])), gallery=BrokenGallery())
    assert service.download_original(VIDEO, lambda s: None) == SaveFailure("Gallery save failed: disk full")


def test_unwritable_gallery_is_permission_denied(tmp_path, monkeypatch):
    gallery = GallerySaveService(str(tmp_path / "gallery"))
    monkeypatch.setattr(gallery, "has_permission", lambda: False)
    assert gallery.save_video(str(tmp_path / "x.mp4")) == SavePermissionDenied()


def test_hls_is_remuxed(tmp_path, ffmpeg_calls):
    cache = MediaCache(str(tmp_path / "cache"), session=FakeSession(FakeResponse([])))
    path = cache.cache_file("https://cdn.example/stream.m3u8?sig=1", key="ev2")

    assert path == cache.path_for("ev2")
    assert ffmpeg_calls[0][-3:-1] == ["-c", "copy"]
    with open(path, "rb") as f:
        assert f.read() == b"rendered"
    assert os.listdir(cache.cache_dir) == ["ev2.mp4"]


@pytest.fixture
def failing_ffmpeg(monkeypatch):
    calls = []

    def fake_run_cmd(cmd):
        calls.append(cmd)
        with open(cmd[-1], "wb") as f:
            f.write(b"partial")
        return 1, "connection reset"

    monkeypatch.setattr(media_save, "run_cmd", fake_run_cmd)
    return calls


def test_failed_remux_is_not_cached(tmp_path, failing_ffmpeg):
    service = _service(tmp_path, FakeSession(FakeResponse([])))
    video = VideoItem(id="ev3", video_url="https://cdn.example/ev3.m3u8")

    first = service.download_original(video, lambda s: None)
    second = service.download_original(video, lambda s: None)

    assert isinstance(first, SaveFailure)
    assert isinstance(second, SaveFailure)
    assert len(failing_ffmpeg) == 2
    assert os.listdir(tmp_path / "cache") == []
    assert not (tmp_path / "gallery").exists() or os.listdir(tmp_path / "gallery") == []


def test_failed_render_leaves_no_output(tmp_path, failing_ffmpeg):
    service = _service(tmp_path, FakeSession(FakeResponse([b"a"])))

    result = service.download_with_watermark(VIDEO, "alice", lambda s: None)

    assert result == SaveFailure("Failed to render watermarked video")
    assert [n for n in os.listdir(tmp_path / "render") if n.startswith("watermarked_")] == []

def test_watermark_filter_escapes_username():
    f = watermark_filter("a:b")
    assert "text='diVine'" in f
    assert "@a\\:b" in f
    assert watermark_filter("").count("drawtext") == 1
