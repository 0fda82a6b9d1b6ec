# vine_ui/services.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

import requests

from .domain import AppConfig
from .geo_blocking import GeoBlockingService
from .media_save import GallerySaveService, MediaCache, WatermarkDownloadService
from .platform_services import PermissionsService, ShareService
from .profiles import HttpProfileFetcher, UserProfileCache


@dataclass
class AppServices:
    """Everything the widgets talk to, built once from config."""
    config: AppConfig
    downloads: WatermarkDownloadService
    permissions: PermissionsService
    share: ShareService
    geo: GeoBlockingService
    profiles: UserProfileCache


def build_services(cfg: AppConfig, session: Optional[requests.Session] = None) -> AppServices:
    session = session or requests.Session()
    os.makedirs(cfg.cache_dir, exist_ok=True)

    cache = MediaCache(cfg.cache_dir, session=session, timeout=cfg.request_timeout)
    gallery = GallerySaveService(cfg.gallery_dir)
    fetcher = HttpProfileFetcher(cfg.profile_api_url, session=session, timeout=cfg.request_timeout) if cfg.profile_api_url else None

    return AppServices(
        config=cfg,
        downloads=WatermarkDownloadService(cache, gallery, temp_dir=os.path.join(cfg.cache_dir, "render")),
        permissions=PermissionsService(cfg.settings_url, cfg.gallery_dir),
        share=ShareService(),
        geo=GeoBlockingService(cfg.geo_check_url, session=session, timeout=min(cfg.request_timeout, 10.0)),
        profiles=UserProfileCache(fetcher),
    )
