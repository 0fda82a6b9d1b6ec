# vine_ui/domain.py
from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, Optional, Union


# Failed uploads can be retried this many times from the UI.
MAX_UPLOAD_RETRIES = 3


# -----------------------------
# Display helpers
# -----------------------------

def truncate_pubkey(pubkey: str) -> str:
    """Shorten a public key / npub for display: 'npub1abc...xyz123'."""
    s = (pubkey or "").strip()
    if len(s) <= 16:
        return s
    return f"{s[:8]}...{s[-6:]}"


def format_time_ago(created_at: datetime, now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    diff = now - created_at
    seconds = int(diff.total_seconds())
    if diff.days > 0:
        return f"{diff.days}d ago"
    if seconds >= 3600:
        return f"{seconds // 3600}h ago"
    if seconds >= 60:
        return f"{seconds // 60}m ago"
    return "Just now"


# -----------------------------
# Uploads
# -----------------------------

class UploadStatus(Enum):
    PENDING = "pending"                    # waiting to start upload
    UPLOADING = "uploading"
    RETRYING = "retrying"                  # retrying after failure
    PROCESSING = "processing"              # server-side processing
    READY_TO_PUBLISH = "ready_to_publish"
    PUBLISHED = "published"
    FAILED = "failed"
    PAUSED = "paused"                      # paused by user


@dataclass(frozen=True, eq=False)
class PendingUpload:
    """
    A video upload observed by the UI. Owned and mutated by the upload service;
    widgets only render it. Two records are equal when their ids match.
    """
    id: str
    local_video_path: str
    pubkey: str
    status: UploadStatus
    created_at: datetime
    upload_progress: Optional[float] = None  # 0.0 .. 1.0
    retry_count: int = 0
    title: Optional[str] = None
    error_message: Optional[str] = None

    @staticmethod
    def create(local_video_path: str, pubkey: str, title: Optional[str] = None) -> "PendingUpload":
        now = datetime.now()
        micros = int(now.timestamp() * 1_000_000)
        return PendingUpload(
            id=f"{micros}_{random.randint(0, 999998)}",
            local_video_path=local_video_path,
            pubkey=pubkey,
            status=UploadStatus.PENDING,
            created_at=now,
            title=title,
        )

    def with_changes(self, **changes) -> "PendingUpload":
        return replace(self, **changes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PendingUpload):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_completed(self) -> bool:
        return self.status in (UploadStatus.PUBLISHED, UploadStatus.FAILED)

    @property
    def can_retry(self) -> bool:
        return self.status == UploadStatus.FAILED and int(self.retry_count or 0) < MAX_UPLOAD_RETRIES

    @property
    def retries_left(self) -> int:
        return MAX_UPLOAD_RETRIES - int(self.retry_count or 0)

    @property
    def status_text(self) -> str:
        st = self.status
        if st == UploadStatus.PENDING:
            return "Waiting to upload..."
        if st == UploadStatus.UPLOADING:
            if self.upload_progress is not None:
                return f"Uploading {int(self.upload_progress * 100)}%..."
            return "Uploading..."
        if st == UploadStatus.RETRYING:
            return "Retrying upload..."
        if st == UploadStatus.PROCESSING:
            return "Processing video..."
        if st == UploadStatus.READY_TO_PUBLISH:
            return "Ready to publish"
        if st == UploadStatus.PUBLISHED:
            return "Published"
        if st == UploadStatus.FAILED:
            return f"Failed: {self.error_message or 'Unknown error'}"
        return "Upload paused"

    @property
    def progress_value(self) -> float:
        st = self.status
        if st in (UploadStatus.UPLOADING, UploadStatus.RETRYING, UploadStatus.PAUSED):
            return float(self.upload_progress or 0.0)
        if st == UploadStatus.PROCESSING:
            return 0.8
        if st == UploadStatus.READY_TO_PUBLISH:
            return 0.9
        if st == UploadStatus.PUBLISHED:
            return 1.0
        # pending, failed
        return 0.0


# -----------------------------
# Videos
# -----------------------------

@dataclass(frozen=True)
class VideoItem:
    """
    Metadata for a published video.

    id is the event id, also used as the download cache key.
    pubkey is the author's public key (hex or npub).
    """
    id: str
    video_url: Optional[str] = None
    title: str = ""
    pubkey: str = ""
    thumbnail_url: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "video_url": self.video_url,
            "title": self.title,
            "pubkey": self.pubkey,
            "thumbnail_url": self.thumbnail_url,
        }

    @staticmethod
    def from_dict(d: Dict) -> "VideoItem":
        return VideoItem(
            id=str(d["id"]),
            video_url=d.get("video_url") or None,
            title=str(d.get("title", "")),
            pubkey=str(d.get("pubkey", "")),
            thumbnail_url=d.get("thumbnail_url") or None,
        )


# -----------------------------
# Save / download stages + results
# -----------------------------

class WatermarkDownloadStage(Enum):
    DOWNLOADING = "downloading"
    WATERMARKING = "watermarking"
    SAVING = "saving"

    @property
    def label(self) -> str:
        return {
            WatermarkDownloadStage.DOWNLOADING: "Downloading Video",
            WatermarkDownloadStage.WATERMARKING: "Adding Watermark",
            WatermarkDownloadStage.SAVING: "Saving to Camera Roll",
        }[self]

    @property
    def description(self) -> str:
        return {
            WatermarkDownloadStage.DOWNLOADING: "Fetching the video from the network...",
            WatermarkDownloadStage.WATERMARKING: "Applying the diVine watermark...",
            WatermarkDownloadStage.SAVING: "Saving the watermarked video to your camera roll...",
        }[self]


class OriginalSaveStage(Enum):
    DOWNLOADING = "downloading"
    SAVING = "saving"

    @property
    def label(self) -> str:
        if self == OriginalSaveStage.DOWNLOADING:
            return "Downloading Video"
        return "Saving to Camera Roll"

    @property
    def description(self) -> str:
        if self == OriginalSaveStage.DOWNLOADING:
            return "Fetching the video from the network..."
        return "Saving the original video to your camera roll..."


SaveStage = Union[WatermarkDownloadStage, OriginalSaveStage]


@dataclass(frozen=True)
class SaveResult:
    """Base for the closed set of save outcomes. Use the subclasses."""


@dataclass(frozen=True)
class SaveSuccess(SaveResult):
    file_path: str


@dataclass(frozen=True)
class SavePermissionDenied(SaveResult):
    """Gallery permission was denied; the UI offers to open Settings."""


@dataclass(frozen=True)
class SaveFailure(SaveResult):
    reason: str  # human-readable, shown verbatim


# -----------------------------
# Geo blocking
# -----------------------------

@dataclass(frozen=True)
class GeoBlockResponse:
    blocked: bool
    country_code: str = ""
    region: str = ""
    reason: str = ""
    info: Dict = field(default_factory=dict, compare=False)

    @staticmethod
    def from_dict(d: Dict) -> "GeoBlockResponse":
        blocked = d.get("blocked", False)
        if not isinstance(blocked, bool):
            raise ValueError(f"blocked must be true or false, got {blocked!r}")
        return GeoBlockResponse(
            blocked=blocked,
            country_code=str(d.get("country") or d.get("country_code") or ""),
            region=str(d.get("region", "")),
            reason=str(d.get("reason", "")),
            info=dict(d),
        )


# -----------------------------
# Profiles
# -----------------------------

@dataclass(frozen=True)
class UserProfile:
    pubkey: str
    name: Optional[str] = None
    display_name: Optional[str] = None
    nip05: Optional[str] = None
    picture: Optional[str] = None

    @property
    def best_display_name(self) -> str:
        if self.display_name:
            return self.display_name
        if self.name:
            return self.name
        return truncate_pubkey(self.pubkey)

    @property
    def display_nip05(self) -> Optional[str]:
        if not self.nip05:
            return None
        if self.nip05.startswith("_@"):
            return self.nip05[1:]
        return self.nip05

    @staticmethod
    def from_dict(pubkey: str, d: Dict) -> "UserProfile":
        return UserProfile(
            pubkey=pubkey,
            name=d.get("name") or None,
            display_name=d.get("display_name") or d.get("displayName") or None,
            nip05=d.get("nip05") or None,
            picture=d.get("picture") or None,
        )


class ProfileStatus(Enum):
    LOADING = "loading"
    DATA = "data"
    ERROR = "error"


@dataclass(frozen=True)
class ProfileState:
    status: ProfileStatus
    profile: Optional[UserProfile] = None
    error: str = ""

    @staticmethod
    def loading() -> "ProfileState":
        return ProfileState(ProfileStatus.LOADING)

    @staticmethod
    def data(profile: UserProfile) -> "ProfileState":
        return ProfileState(ProfileStatus.DATA, profile=profile)

    @staticmethod
    def failed(message: str) -> "ProfileState":
        return ProfileState(ProfileStatus.ERROR, error=message)


def is_reserved_username(profile: Optional[UserProfile]) -> bool:
    # Always False until a reserved-name verification cache exists.
    return False


# -----------------------------
# Config payload
# -----------------------------

@dataclass
class AppConfig:
    """
    Stored in <config_dir>/config.json
    """
    config_dir: str
    cache_dir: str = ""
    gallery_dir: str = ""
    geo_check_url: str = "https://divine.video/api/geo-check"
    profile_api_url: str = "https://divine.video/api/profiles"
    settings_url: str = ""
    current_npub: str = ""
    log_level: str = "INFO"
    request_timeout: float = 30.0
    # file values of fields replaced by environment overrides; restored on save
    env_shadowed: Dict[str, str] = field(default_factory=dict, repr=False)

    def to_dict(self) -> Dict:
        return {
            "cache_dir": self.cache_dir,
            "gallery_dir": self.gallery_dir,
            "geo_check_url": self.geo_check_url,
            "profile_api_url": self.profile_api_url,
            "settings_url": self.settings_url,
            "current_npub": self.current_npub,
            "log_level": self.log_level,
            "request_timeout": float(self.request_timeout),
            "config_version": 1,
        }

    @staticmethod
    def from_dict(config_dir: str, d: Dict) -> "AppConfig":
        cfg = AppConfig(config_dir=config_dir)
        cfg.cache_dir = str(d.get("cache_dir") or "")
        cfg.gallery_dir = str(d.get("gallery_dir") or "")
        cfg.geo_check_url = str(d.get("geo_check_url") or cfg.geo_check_url)
        cfg.profile_api_url = str(d.get("profile_api_url") or cfg.profile_api_url)
        cfg.settings_url = str(d.get("settings_url") or "")
        cfg.current_npub = str(d.get("current_npub") or "")
        cfg.log_level = str(d.get("log_level") or "INFO").upper()
        try:
            cfg.request_timeout = float(d.get("request_timeout", cfg.request_timeout))
        except (TypeError, ValueError):
            pass
        return cfg
