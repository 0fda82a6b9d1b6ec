# vine_ui/main_window.py
from __future__ import annotations

import logging
from typing import Dict, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QStackedWidget,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from . import theme
from .profiles import UserProfileCache
from .routing import (
    NavigationRouter,
    RouteContext,
    RouteType,
    TabPositionMemory,
    build_route,
    explore_path,
    home_path,
    search_path,
    tab_index_for_route_type,
    tab_name,
    tab_target_path,
)
from .widgets.bottom_nav import BottomNavBar


logger = logging.getLogger("vine_ui.navigation")


class _TitleLabel(QLabel):
    clicked = pyqtSignal()

    def mousePressEvent(self, event):
        self.clicked.emit()
        super().mousePressEvent(event)


class AppShell(QMainWindow):
    """
    Header + content + bottom navigation around a NavigationRouter.

    Content pages are registered per route type with set_page(); routes without a page show
    a placeholder naming the location.
    """

    def __init__(
        self,
        router: NavigationRouter,
        current_npub: str = "",
        memory: Optional[TabPositionMemory] = None,
        profiles: Optional[UserProfileCache] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.setWindowTitle("diVine")
        self.resize(480, 860)

        self.router = router
        self.memory = memory if memory is not None else router.memory
        self.current_npub = current_npub
        self.profiles = profiles

        self._pages: Dict[RouteType, QWidget] = {}

        self._build_ui()

        self.router.location_changed.connect(self._on_location_changed)
        if self.profiles is not None:
            self.profiles.profile_changed.connect(self._on_profile_changed)
        self._on_location_changed(self.router.location)

    # ---------------- UI ----------------

    def _build_ui(self):
        root = QWidget()
        root.setStyleSheet(f"background-color: {theme.SURFACE_BACKGROUND};")
        outer = QVBoxLayout(root)
        outer.setContentsMargins(0, 0, 0, 0)
        outer.setSpacing(0)

        header = QWidget()
        header.setFixedHeight(72)
        hl = QHBoxLayout(header)
        hl.setContentsMargins(12, 0, 12, 0)

        self.btn_back = self._icon_button("‹", "Back")
        self.btn_back.clicked.connect(self.handle_back)
        hl.addWidget(self.btn_back)

        self.title_label = _TitleLabel()
        self.title_label.setStyleSheet(theme.title_style(22))
        self.title_label.clicked.connect(self.handle_title_tap)
        hl.addWidget(self.title_label, 1)

        self.btn_search = self._icon_button("⌕", "Search")
        self.btn_search.clicked.connect(self._on_search)
        hl.addWidget(self.btn_search)

        self.btn_camera = self._icon_button("●", "Open camera")
        self.btn_camera.clicked.connect(self._on_camera)
        hl.addWidget(self.btn_camera)

        outer.addWidget(header)

        self.content = QStackedWidget()
        self.placeholder = QLabel()
        self.placeholder.setAlignment(Qt.AlignCenter)
        self.placeholder.setStyleSheet(theme.body_style())
        self.content.addWidget(self.placeholder)
        outer.addWidget(self.content, 1)

        self.nav = BottomNavBar()
        self.nav.tab_tapped.connect(self.handle_tab_tap)
        outer.addWidget(self.nav)

        self.setCentralWidget(root)

    def _icon_button(self, glyph: str, tooltip: str) -> QToolButton:
        b = QToolButton()
        b.setText(glyph)
        b.setToolTip(tooltip)
        b.setFixedSize(48, 48)
        b.setCursor(Qt.PointingHandCursor)
        b.setStyleSheet(
            "QToolButton {"
            f"color: {theme.WHITE}; background-color: {theme.GHOST_SECONDARY_SCRIM};"
            "border: none; border-radius: 20px; font-size: 22px;"
            "}"
        )
        return b

    # ---------------- Public API ----------------

    def set_page(self, route_type: RouteType, page: QWidget) -> None:
        old = self._pages.get(route_type)
        if old is not None:
            self.content.removeWidget(old)
        self._pages[route_type] = page
        self.content.addWidget(page)
        self._on_location_changed(self.router.location)

    def set_current_npub(self, npub: str) -> None:
        """Switch the signed-in identity. Remembered tab positions belong to the old one."""
        if npub == self.current_npub:
            return
        if self.current_npub:
            self.memory.reset()
        self.current_npub = npub
        self._on_location_changed(self.router.location)

    def title(self) -> str:
        return self.title_label.text()

    def back_visible(self) -> bool:
        return not self.btn_back.isHidden()

    # ---------------- Navigation ----------------

    def handle_tab_tap(self, tab_index: int) -> None:
        logger.info("User tapped bottom nav: tab=%d (%s)", tab_index, tab_name(tab_index))
        self.router.pop_to_root()
        self.router.go(tab_target_path(tab_index, self.memory, self.current_npub))

    def handle_title_tap(self) -> None:
        ctx = self.router.context()
        if ctx.type not in (RouteType.EXPLORE, RouteType.HASHTAG):
            return
        logger.info("User tapped header title: %s", self.title())
        self.router.pop_to_root()
        self.router.go(explore_path())

    def handle_back(self) -> None:
        logger.info("User tapped back button")

        if self.router.can_pop():
            logger.info("Popping navigation stack")
            self.router.pop()
            return

        ctx = self.router.context()

        if ctx.type in (RouteType.HASHTAG, RouteType.SEARCH):
            self.router.go(explore_path())
            return

        # feed mode -> grid / base state of the same page
        if ctx.video_index is not None:
            if ctx.type in (RouteType.EXPLORE, RouteType.PROFILE):
                self.router.go(build_route(RouteContext(ctx.type, npub=ctx.npub)))
                return
            if ctx.type == RouteType.NOTIFICATIONS and ctx.video_index != 0:
                self.router.go(build_route(RouteContext(ctx.type, video_index=0)))
                return

        tab = tab_index_for_route_type(ctx.type)
        if tab is not None and tab != 0:
            self.router.go(home_path())
            return
        # at home base state: nothing to go back to

    def _on_search(self) -> None:
        logger.info("User tapped search button")
        self.router.go(search_path())

    def _on_camera(self) -> None:
        logger.info("User tapped camera button")
        self.router.push("/camera")

    # ---------------- Rendering ----------------

    def _on_location_changed(self, location: str) -> None:
        ctx = self.router.context()

        self.title_label.setText(self._title_for(ctx))
        self.btn_back.setVisible(self._show_back(ctx))
        self.btn_search.setVisible(ctx.type != RouteType.SEARCH)

        tab = tab_index_for_route_type(ctx.type)
        if tab is not None:
            self.nav.set_current_index(tab)

        page = self._pages.get(ctx.type)
        if page is not None:
            self.content.setCurrentWidget(page)
        else:
            self.placeholder.setText(location)
            self.content.setCurrentWidget(self.placeholder)

    def _on_profile_changed(self, pubkey: str) -> None:
        ctx = self.router.context()
        if ctx.type == RouteType.PROFILE and ctx.npub == pubkey:
            self.title_label.setText(self._title_for(ctx))

    def _title_for(self, ctx: RouteContext) -> str:
        t = ctx.type
        if t == RouteType.HOME:
            return "Home"
        if t == RouteType.EXPLORE:
            return "Explore"
        if t == RouteType.NOTIFICATIONS:
            return "Notifications"
        if t == RouteType.HASHTAG:
            return f"#{ctx.hashtag}" if ctx.hashtag else "#—"
        if t == RouteType.PROFILE:
            npub = ctx.npub or ""
            if npub == "me" or (npub and npub == self.current_npub):
                return "My Profile"
            if self.profiles is not None and npub:
                self.profiles.ensure(npub)
                profile = self.profiles.cached_profile(npub)
                name = profile.display_name if profile is not None else None
                if name and not name.startswith("npub1"):
                    return name
            return "Profile"
        if t == RouteType.SEARCH:
            return "Search"
        return ""

    def _show_back(self, ctx: RouteContext) -> bool:
        if self.router.can_pop():
            return True
        t = ctx.type
        if t in (RouteType.HASHTAG, RouteType.SEARCH):
            return True
        if t == RouteType.EXPLORE and ctx.video_index is not None:
            return True
        if t == RouteType.NOTIFICATIONS and ctx.video_index not in (None, 0):
            return True
        if t == RouteType.PROFILE:
            if ctx.video_index is not None:
                return True
            return ctx.npub not in ("me", self.current_npub)
        return False
