# vine_ui/media_save.py
from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import tempfile
import time
from typing import Callable, List, Optional, Tuple

import requests

from .domain import (
    OriginalSaveStage,
    SaveFailure,
    SavePermissionDenied,
    SaveResult,
    SaveSuccess,
    VideoItem,
    WatermarkDownloadStage,
)


logger = logging.getLogger("vine_ui.media_save")

DOWNLOAD_CHUNK_BYTES = 256 * 1024
WATERMARK_TEXT = "diVine"


def ext_lower(path_or_url: str) -> str:
    base = path_or_url.strip().split("?")[0].split("#")[0]
    _, ext = os.path.splitext(base)
    return ext.lower().strip()


def safe_cache_key(key: str) -> str:
    # event ids are hex, but keep arbitrary keys filesystem-safe
    return re.sub(r"[^A-Za-z0-9._-]", "_", key or "") or "video"


# -----------------------------
# ffmpeg helpers
# -----------------------------

def find_ffmpeg() -> str:
    # rely on PATH; allow override via env
    return os.environ.get("FFMPEG_BIN", "ffmpeg")


def run_cmd(cmd: List[str]) -> Tuple[int, str]:
    """
    Runs a command and returns (returncode, combined_output).
    """
    proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    out = (proc.stdout or b"") + b"\n" + (proc.stderr or b"")
    return proc.returncode, out.decode("utf-8", errors="ignore")


def _drawtext_escape(text: str) -> str:
    # drawtext option values: escape backslash, quote, colon and percent
    return (
        text.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace(":", "\\:")
        .replace("%", "\\%")
    )


def watermark_filter(username: str) -> str:
    """
    Two stacked drawtext overlays in the bottom-right corner: the brand and "@username".
    Sizes scale with the frame height so square and portrait videos look the same.
    """
    brand = _drawtext_escape(WATERMARK_TEXT)
    handle = _drawtext_escape(f"@{username}") if username else ""
    common = "fontcolor=white@0.85:shadowcolor=black@0.6:shadowx=2:shadowy=2"
    parts = [
        f"drawtext=text='{brand}':{common}:fontsize=h/18:x=w-tw-h/40:y=h-th-h/12",
    ]
    if handle:
        parts.append(f"drawtext=text='{handle}':{common}:fontsize=h/36:x=w-tw-h/40:y=h-th-h/40")
    return ",".join(parts)


def ffmpeg_remux(src: str, dst: str) -> None:
    """
    For m3u8 or other ffmpeg-readable URLs, remux into an mp4 container.
    Uses stream copy when possible.
    """
    if os.path.exists(dst):
        os.remove(dst)
    cmd = [find_ffmpeg(), "-y", "-i", src, "-c", "copy", dst]
    code, out = run_cmd(cmd)
    if code != 0:
        raise RuntimeError(out.strip() or "ffmpeg failed")


def ffmpeg_watermark(src: str, dst: str, username: str) -> None:
    """Re-encode src with the watermark overlay. Audio is copied when present."""
    if os.path.exists(dst):
        os.remove(dst)
    cmd = [
        find_ffmpeg(),
        "-y",
        "-i", src,
        "-map", "0:v:0",
        "-map", "0:a:0?",
        "-vf", watermark_filter(username),
        "-c:v", "libx264",
        "-pix_fmt", "yuv420p",
        "-preset", "veryfast",
        "-crf", "20",
        "-c:a", "copy",
        "-movflags", "+faststart",
        dst,
    ]
    code, out = run_cmd(cmd)
    if code != 0:
        raise RuntimeError(out.strip() or "ffmpeg watermark failed")


# -----------------------------
# Media cache
# -----------------------------

class MediaCache:
    """
    Downloaded video files, keyed by video id, under cache_dir.
    """

    def __init__(self, cache_dir: str, session: Optional[requests.Session] = None, timeout: float = 30.0):
        self.cache_dir = cache_dir
        self.timeout = timeout
        self._session = session

    def _http(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    def path_for(self, key: str) -> str:
        return os.path.join(self.cache_dir, f"{safe_cache_key(key)}.mp4")

    def get_cached_file(self, key: str) -> Optional[str]:
        p = self.path_for(key)
        if os.path.isfile(p) and os.path.getsize(p) > 0:
            return p
        return None

    def cache_file(self, url: str, key: str) -> str:
        """
        Downloads url into the cache and returns the local path.
        HLS playlists are remuxed with ffmpeg; everything else is streamed over HTTP.
        """
        os.makedirs(self.cache_dir, exist_ok=True)
        dst = self.path_for(key)

        if ext_lower(url) == ".m3u8":
            # ffmpeg picks the muxer from the extension
            fd, tmp_path = tempfile.mkstemp(prefix=".remux_", suffix=".mp4", dir=self.cache_dir)
            os.close(fd)
            try:
                ffmpeg_remux(url, tmp_path)
                os.replace(tmp_path, dst)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
            logger.debug("Remuxed %s -> %s", url, dst)
            return dst

        fd, tmp_path = tempfile.mkstemp(prefix=".dl_", suffix=".part", dir=self.cache_dir)
        try:
            with os.fdopen(fd, "wb") as f:
                with self._http().get(url, stream=True, timeout=self.timeout) as resp:
                    resp.raise_for_status()
                    for chunk in resp.iter_content(chunk_size=DOWNLOAD_CHUNK_BYTES):
                        if chunk:
                            f.write(chunk)
            os.replace(tmp_path, dst)
        finally:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
        logger.debug("Cached %s -> %s", url, dst)
        return dst


# -----------------------------
# Gallery
# -----------------------------

class GallerySaveService:
    """
    The desktop "camera roll": a directory the user's videos are copied into.
    An unwritable directory is reported as a denied permission, not an error.
    """

    def __init__(self, gallery_dir: str):
        self.gallery_dir = gallery_dir

    def has_permission(self) -> bool:
        try:
            os.makedirs(self.gallery_dir, exist_ok=True)
        except PermissionError:
            return False
        return os.access(self.gallery_dir, os.W_OK)

    def save_video(self, path: str) -> SaveResult:
        if not self.has_permission():
            return SavePermissionDenied()
        dst = os.path.join(self.gallery_dir, os.path.basename(path))
        try:
            shutil.copy2(path, dst)
        except PermissionError:
            return SavePermissionDenied()
        except OSError as e:
            return SaveFailure(str(e))
        return SaveSuccess(dst)


# -----------------------------
# Download / watermark / save pipeline
# -----------------------------

class WatermarkDownloadService:
    """
    Downloads a video, optionally burns in the diVine watermark, and saves it to the gallery.

    Both operations report stages through on_progress and always return a SaveResult;
    they never raise.
    """

    def __init__(self, media_cache: MediaCache, gallery: GallerySaveService, temp_dir: Optional[str] = None):
        self._cache = media_cache
        self._gallery = gallery
        self._temp_dir = temp_dir

    def download_with_watermark(
        self,
        video: VideoItem,
        username: str,
        on_progress: Callable[[WatermarkDownloadStage], None],
    ) -> SaveResult:
        try:
            on_progress(WatermarkDownloadStage.DOWNLOADING)
            video_file = self._get_video_file(video)
            if video_file is None:
                return SaveFailure("Could not download video file")

            on_progress(WatermarkDownloadStage.WATERMARKING)
            output = self._render_with_watermark(video_file, username, video.id)
            if output is None:
                return SaveFailure("Failed to render watermarked video")

            on_progress(WatermarkDownloadStage.SAVING)
            saved = self._gallery.save_video(output)
            if isinstance(saved, SavePermissionDenied):
                return saved
            if isinstance(saved, SaveFailure):
                return SaveFailure(f"Gallery save failed: {saved.reason}")

            logger.info("Watermarked video saved to gallery")
            return SaveSuccess(output)
        except Exception as e:
            logger.warning("Watermark download failed: %s", e)
            return SaveFailure(f"Unexpected error: {e}")

    def download_original(
        self,
        video: VideoItem,
        on_progress: Callable[[OriginalSaveStage], None],
    ) -> SaveResult:
        try:
            on_progress(OriginalSaveStage.DOWNLOADING)
            video_file = self._get_video_file(video)
            if video_file is None:
                return SaveFailure("Could not download video file")

            on_progress(OriginalSaveStage.SAVING)
            saved = self._gallery.save_video(video_file)
            if isinstance(saved, SavePermissionDenied):
                return saved
            if isinstance(saved, SaveFailure):
                return SaveFailure(f"Gallery save failed: {saved.reason}")

            logger.info("Original video saved to gallery")
            return SaveSuccess(video_file)
        except Exception as e:
            logger.warning("Original video save failed: %s", e)
            return SaveFailure(f"Unexpected error: {e}")

    # ---------------- Internals ----------------

    def _get_video_file(self, video: VideoItem) -> Optional[str]:
        cached = self._cache.get_cached_file(video.id)
        if cached is not None:
            logger.debug("Using cached video file")
            return cached
        if not video.video_url:
            logger.warning("No video URL available for %s", video.id)
            return None
        return self._cache.cache_file(video.video_url, key=video.id)

    def _render_with_watermark(self, video_file: str, username: str, video_id: str) -> Optional[str]:
        temp_dir = self._temp_dir or tempfile.gettempdir()
        out = os.path.join(temp_dir, f"watermarked_{safe_cache_key(video_id)}_{int(time.time() * 1e6)}.mp4")
        try:
            os.makedirs(temp_dir, exist_ok=True)
            ffmpeg_watermark(video_file, out, username)
        except (OSError, RuntimeError) as e:
            logger.error("Failed to render watermarked video: %s", e)
            if os.path.exists(out):
                os.remove(out)
            return None
        logger.debug("Watermarked video rendered to: %s", out)
        return out
