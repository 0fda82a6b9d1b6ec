# vine_ui/routing.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from PyQt5.QtCore import QObject, pyqtSignal


logger = logging.getLogger("vine_ui.routing")


class RouteType(Enum):
    HOME = "home"
    EXPLORE = "explore"
    NOTIFICATIONS = "notifications"
    PROFILE = "profile"
    HASHTAG = "hashtag"      # pushed within explore
    SEARCH = "search"
    CAMERA = "camera"
    SETTINGS = "settings"


@dataclass(frozen=True)
class RouteContext:
    """
    Structured form of a route path.

    video_index is set in feed mode; None means grid mode (where the route has one).
    event_id is preferred over video_index when both are present.
    """
    type: RouteType
    video_index: Optional[int] = None
    event_id: Optional[str] = None
    npub: Optional[str] = None
    hashtag: Optional[str] = None
    search_term: Optional[str] = None


# -----------------------------
# Parse / build
# -----------------------------

def _enc(s: str) -> str:
    return quote(s or "", safe="")


def _clamp(index: int) -> int:
    return 0 if index < 0 else index


def _parse_int(s: str) -> Optional[int]:
    try:
        return int(s)
    except (TypeError, ValueError):
        return None


def _parse_index(segment: str, default: Optional[int]) -> Optional[int]:
    raw = _parse_int(segment)
    if raw is None:
        return default
    return _clamp(raw)


def parse_route(path: str) -> RouteContext:
    """
    Parse a URL path into a RouteContext. Negative indices become 0, components are URL-decoded,
    unknown paths fall back to home.
    """
    segments = [s for s in (path or "").split("/") if s]
    if not segments:
        return RouteContext(RouteType.HOME, video_index=0)

    first = segments[0]

    if first == "home":
        if len(segments) > 1:
            seg = segments[1]
            if seg.startswith("nevent"):
                return RouteContext(RouteType.HOME, event_id=unquote(seg))
            return RouteContext(RouteType.HOME, video_index=_parse_index(seg, 0))
        return RouteContext(RouteType.HOME, video_index=0)

    if first in ("explore", "notifications"):
        rtype = RouteType(first)
        if len(segments) > 1:
            seg = segments[1]
            if seg.startswith("nevent"):
                return RouteContext(rtype, event_id=unquote(seg))
            default = None if rtype == RouteType.EXPLORE else 0
            return RouteContext(rtype, video_index=_parse_index(seg, default))
        return RouteContext(rtype)

    if first in ("profile", "hashtag"):
        if len(segments) < 2:
            return RouteContext(RouteType.HOME)
        rtype = RouteType(first)
        key = unquote(segments[1])
        base = {"npub": key} if rtype == RouteType.PROFILE else {"hashtag": key}
        if len(segments) > 2:
            seg = segments[2]
            if seg.startswith("nevent"):
                return RouteContext(rtype, event_id=unquote(seg), **base)
            default = 0 if rtype == RouteType.PROFILE else None
            return RouteContext(rtype, video_index=_parse_index(seg, default), **base)
        # "/profile/me" stays as npub="me"; the shell resolves it to the current user.
        return RouteContext(rtype, **base)

    if first == "search":
        term: Optional[str] = None
        index: Optional[int] = None
        if len(segments) > 1:
            maybe = _parse_int(segments[1])
            if maybe is not None:
                index = _clamp(maybe)
            else:
                term = unquote(segments[1])
                if len(segments) > 2:
                    index = _parse_index(segments[2], None)
        return RouteContext(RouteType.SEARCH, video_index=index, search_term=term)

    if first == "camera":
        return RouteContext(RouteType.CAMERA)
    if first == "settings":
        return RouteContext(RouteType.SETTINGS)

    return RouteContext(RouteType.HOME, video_index=0)


def build_route(ctx: RouteContext) -> str:
    """Inverse of parse_route. Encodes components and normalizes indices to >= 0."""
    t = ctx.type

    if t == RouteType.HOME:
        if ctx.event_id is not None:
            return f"/home/{_enc(ctx.event_id)}"
        return f"/home/{_clamp(ctx.video_index or 0)}"

    if t in (RouteType.EXPLORE, RouteType.NOTIFICATIONS):
        base = f"/{t.value}"
        if ctx.event_id is not None:
            return f"{base}/{_enc(ctx.event_id)}"
        if ctx.video_index is not None:
            return f"{base}/{_clamp(ctx.video_index)}"
        return base

    if t in (RouteType.PROFILE, RouteType.HASHTAG):
        key = ctx.npub if t == RouteType.PROFILE else ctx.hashtag
        base = f"/{t.value}/{_enc(key or '')}"
        if ctx.event_id is not None:
            return f"{base}/{_enc(ctx.event_id)}"
        if ctx.video_index is not None:
            return f"{base}/{_clamp(ctx.video_index)}"
        return base

    if t == RouteType.SEARCH:
        if ctx.search_term is not None:
            base = f"/search/{_enc(ctx.search_term)}"
            if ctx.video_index is None:
                return base
            return f"{base}/{_clamp(ctx.video_index)}"
        if ctx.video_index is None:
            return "/search"
        return f"/search/{_clamp(ctx.video_index)}"

    if t == RouteType.CAMERA:
        return "/camera"
    return "/settings"


# -----------------------------
# Path builders
# -----------------------------

def home_path(index: int = 0) -> str:
    return build_route(RouteContext(RouteType.HOME, video_index=index))


def explore_path(index: Optional[int] = None) -> str:
    return build_route(RouteContext(RouteType.EXPLORE, video_index=index))


def notifications_path(index: Optional[int] = None) -> str:
    return build_route(RouteContext(RouteType.NOTIFICATIONS, video_index=index))


def profile_path(npub: str, index: Optional[int] = None) -> str:
    return build_route(RouteContext(RouteType.PROFILE, npub=npub, video_index=index))


def hashtag_path(tag: str, index: Optional[int] = None) -> str:
    return build_route(RouteContext(RouteType.HASHTAG, hashtag=tag, video_index=index))


def search_path(term: Optional[str] = None, index: Optional[int] = None) -> str:
    return build_route(RouteContext(RouteType.SEARCH, search_term=term, video_index=index))


# -----------------------------
# Tabs
# -----------------------------

TAB_NAMES: List[str] = ["Home", "Explore", "Notifications", "Profile"]
TAB_ROUTE_TYPES: List[RouteType] = [
    RouteType.HOME,
    RouteType.EXPLORE,
    RouteType.NOTIFICATIONS,
    RouteType.PROFILE,
]

_TAB_FOR_ROUTE: Dict[RouteType, int] = {
    RouteType.HOME: 0,
    RouteType.EXPLORE: 1,
    RouteType.HASHTAG: 1,
    RouteType.SEARCH: 1,
    RouteType.NOTIFICATIONS: 2,
    RouteType.PROFILE: 3,
}


def tab_index_for_route_type(route_type: RouteType) -> Optional[int]:
    return _TAB_FOR_ROUTE.get(route_type)


def tab_name(index: int) -> str:
    if 0 <= index < len(TAB_NAMES):
        return TAB_NAMES[index]
    return "Unknown"


class TabPositionMemory:
    """
    Last visited feed index per route type. Process-wide; cleared on logout / account switch.
    """

    def __init__(self):
        self._positions: Dict[RouteType, int] = {}

    def get_position(self, route_type: RouteType) -> Optional[int]:
        return self._positions.get(route_type)

    def set_position(self, route_type: RouteType, index: int) -> None:
        self._positions[route_type] = _clamp(int(index))

    def reset(self) -> None:
        self._positions.clear()


tab_positions = TabPositionMemory()


# -----------------------------
# Router
# -----------------------------

class NavigationRouter(QObject):
    """
    Shell location plus a stack of routes pushed on top of it.

    go() replaces the shell location and leaves pushed routes in place, so callers that switch
    sections must pop_to_root() first.
    """
    location_changed = pyqtSignal(str)

    def __init__(self, initial: str = "/home/0", memory: Optional[TabPositionMemory] = None, parent=None):
        super().__init__(parent)
        self._memory = memory if memory is not None else tab_positions
        self._location = initial
        self._pushed: List[str] = []
        self._remember(initial)

    # ---------------- Queries ----------------

    @property
    def memory(self) -> TabPositionMemory:
        return self._memory

    @property
    def location(self) -> str:
        return self._pushed[-1] if self._pushed else self._location

    @property
    def shell_location(self) -> str:
        return self._location

    def context(self) -> RouteContext:
        return parse_route(self.location)

    def pushed(self) -> List[str]:
        return list(self._pushed)

    def can_pop(self) -> bool:
        return bool(self._pushed)

    # ---------------- Navigation ----------------

    def go(self, path: str) -> None:
        logger.debug("go %s", path)
        self._location = path
        self._remember(path)
        self.location_changed.emit(self.location)

    def push(self, path: str) -> None:
        logger.debug("push %s", path)
        self._pushed.append(path)
        self._remember(path)
        self.location_changed.emit(self.location)

    def pop(self) -> Optional[str]:
        if not self._pushed:
            return None
        popped = self._pushed.pop()
        self.location_changed.emit(self.location)
        return popped

    def pop_to_root(self) -> int:
        n = len(self._pushed)
        if n:
            self._pushed.clear()
            self.location_changed.emit(self.location)
        return n

    def _remember(self, path: str) -> None:
        ctx = parse_route(path)
        if ctx.video_index is not None and ctx.type in TAB_ROUTE_TYPES:
            self._memory.set_position(ctx.type, ctx.video_index)


def tab_target_path(
    tab_index: int,
    memory: TabPositionMemory,
    current_npub: str,
) -> str:
    """
    Where a bottom-nav tap lands: the remembered index for the tab, else its default.
    The profile tab always targets the current user's own profile grid.
    """
    if tab_index == 3:
        return profile_path(current_npub or "me")
    if tab_index == 0:
        return home_path(memory.get_position(RouteType.HOME) or 0)
    if tab_index == 1:
        return explore_path(memory.get_position(RouteType.EXPLORE))
    if tab_index == 2:
        return notifications_path(memory.get_position(RouteType.NOTIFICATIONS))
    raise ValueError(f"Unknown tab index: {tab_index}")
