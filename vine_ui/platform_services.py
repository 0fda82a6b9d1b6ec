# vine_ui/platform_services.py
from __future__ import annotations

import logging
import os
import sys
from typing import Callable, Optional

from PyQt5.QtCore import QUrl
from PyQt5.QtGui import QDesktopServices
from PyQt5.QtWidgets import QApplication


logger = logging.getLogger("vine_ui.platform_services")

UrlOpener = Callable[[QUrl], bool]


def default_settings_url() -> str:
    if sys.platform == "darwin":
        return "x-apple.systempreferences:com.apple.preference.security?Privacy_Photos"
    if sys.platform.startswith("win"):
        return "ms-settings:privacy-broadfilesystemaccess"
    return ""


class PermissionsService:
    """
    Hands the user over to the OS settings page where storage / photos access is granted.
    Falls back to opening the gallery folder when the platform has no such page.
    """

    def __init__(self, settings_url: str = "", gallery_dir: str = "", opener: Optional[UrlOpener] = None):
        self.settings_url = settings_url or default_settings_url()
        self.gallery_dir = gallery_dir
        self._open = opener or QDesktopServices.openUrl

    def open_app_settings(self) -> bool:
        if self.settings_url:
            url = QUrl(self.settings_url)
        elif self.gallery_dir:
            url = QUrl.fromLocalFile(self.gallery_dir)
        else:
            logger.warning("No settings page available on this platform")
            return False
        logger.info("Opening settings: %s", url.toString())
        return bool(self._open(url))


class ShareService:
    """
    Desktop stand-in for the platform share sheet: copies the file path to the clipboard
    and reveals the containing folder.
    """

    def __init__(self, opener: Optional[UrlOpener] = None):
        self._open = opener or QDesktopServices.openUrl

    def share_file(self, path: str) -> bool:
        if not path:
            return False
        app = QApplication.instance()
        if app is not None:
            QApplication.clipboard().setText(path)
        folder = os.path.dirname(path) or "."
        logger.info("Sharing %s", path)
        return bool(self._open(QUrl.fromLocalFile(folder)))
