# vine_ui/profiles.py
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

import requests
from PyQt5.QtCore import QObject, pyqtSignal

from .domain import ProfileState, ProfileStatus, UserProfile
from .tasks import TaskSignals, start_task


logger = logging.getLogger("vine_ui.profiles")

ProfileFetcher = Callable[[str], UserProfile]


class HttpProfileFetcher:
    """GET <base_url>/<pubkey> returning the profile metadata JSON."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def __call__(self, pubkey: str) -> UserProfile:
        resp = self._session.get(f"{self.base_url}/{pubkey}", timeout=self.timeout)
        resp.raise_for_status()
        return UserProfile.from_dict(pubkey, resp.json() or {})


class UserProfileCache(QObject):
    """
    Reactive profile cache keyed by public key.

    state(pubkey) is loading / data / error. Widgets subscribe to profile_changed and re-read
    the state for their key. Each key is fetched at most once unless invalidated.
    """
    profile_changed = pyqtSignal(str)

    def __init__(self, fetcher: Optional[ProfileFetcher] = None, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._fetcher = fetcher
        self._states: Dict[str, ProfileState] = {}
        # keep signal carriers alive until their queued results are delivered
        self._inflight: Dict[str, TaskSignals] = {}

    def state(self, pubkey: str) -> ProfileState:
        return self._states.get(pubkey) or ProfileState.loading()

    def cached_profile(self, pubkey: str) -> Optional[UserProfile]:
        st = self._states.get(pubkey)
        if st is not None and st.status == ProfileStatus.DATA:
            return st.profile
        return None

    def ensure(self, pubkey: str) -> None:
        if not pubkey or pubkey in self._states:
            return
        self._states[pubkey] = ProfileState.loading()
        if self._fetcher is None:
            return
        fetcher = self._fetcher
        task = start_task(
            lambda _report: fetcher(pubkey),
            on_finished=self.put,
            on_failed=lambda e: self.fail(pubkey, str(e)),
            name=f"profile:{pubkey[:12]}",
        )
        self._inflight[pubkey] = task.signals

    def put(self, profile: UserProfile) -> None:
        self._inflight.pop(profile.pubkey, None)
        self._states[profile.pubkey] = ProfileState.data(profile)
        self.profile_changed.emit(profile.pubkey)

    def fail(self, pubkey: str, message: str) -> None:
        self._inflight.pop(pubkey, None)
        logger.debug("Profile fetch failed for %s: %s", pubkey, message)
        self._states[pubkey] = ProfileState.failed(message)
        self.profile_changed.emit(pubkey)

    def invalidate(self, pubkey: str) -> None:
        self._states.pop(pubkey, None)
