# vine_ui/__init__.py
'''
vine_ui/
    __init__.py
    __main__.py

    app.py                 # QApplication + logging + boot (shell behind the geo gate)
    main_window.py         # AppShell: header, content area, bottom nav, back/tab dispatch
    services.py            # AppServices bundle built from config

    domain.py              # dataclasses: PendingUpload, VideoItem, save stages/results, profiles, AppConfig
    errors.py              # VineUIError, ConfigError, GeoCheckError
    persistence.py         # load/save config.json (atomic), env overrides
    routing.py             # RouteContext parse/build, TabPositionMemory, NavigationRouter
    tasks.py               # QThreadPool runnables with queued result signals
    theme.py               # palette + stylesheet helpers

    media_save.py          # cached download (requests), ffmpeg watermark/remux, gallery save
    geo_blocking.py        # region check endpoint client
    platform_services.py   # open settings / share hand-offs (QDesktopServices)
    profiles.py            # reactive profile cache + HTTP fetcher

    widgets/
      buttons.py           # DivineButton types + sizes
      bottom_nav.py        # four-tab bar
      geo_gate.py          # GeoBlockingGate + GeoBlockedScreen
      upload_progress.py   # UploadProgressIndicator + CompactUploadProgress
      user_profile_tile.py # profile row + follow button + reserved badge

    dialogs/
      bottom_sheet.py      # VineBottomSheet chrome
      progress_sheets.py   # watermark / original save progress sheets
'''

from __future__ import annotations

__all__ = ["__version__", "run_app"]

__version__ = "0.1.0"

from .app import run_app
