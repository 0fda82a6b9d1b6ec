# vine_ui/widgets/user_profile_tile.py
from __future__ import annotations

from typing import Callable, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtWidgets import QHBoxLayout, QLabel, QMessageBox, QVBoxLayout, QWidget

from .. import theme
from ..domain import ProfileStatus, UserProfile, is_reserved_username, truncate_pubkey
from ..profiles import UserProfileCache
from .buttons import DivineButton, DivineButtonSize, DivineButtonType, button_stylesheet


def _ask_unfollow(parent: QWidget, display_name: str) -> bool:
    answer = QMessageBox.question(
        parent,
        "Unfollow",
        f"Unfollow {display_name}?",
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return answer == QMessageBox.Yes


class ReservedBadge(QLabel):
    """Small pill marking a reserved username."""

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__("Reserved", parent)
        self.setStyleSheet(
            f"color: {theme.ON_PRIMARY}; background-color: {theme.VINE_GREEN};"
            "border-radius: 6px; padding: 1px 6px; font-size: 10px; font-weight: 600;"
        )


class UserProfileTile(QWidget):
    """
    Avatar placeholder, display name and identifier for one public key, read from the
    profile cache. Re-renders whenever the cache reports a change for this key.

    Follow button appears only for other users, and only when both is_following and
    on_toggle_follow are given. Unfollowing asks for confirmation first.

    Emits:
      - tapped(pubkey)
    """
    tapped = pyqtSignal(str)

    def __init__(
        self,
        pubkey: str,
        cache: UserProfileCache,
        current_pubkey: str = "",
        show_follow_button: bool = True,
        is_following: Optional[bool] = None,
        on_toggle_follow: Optional[Callable[[], object]] = None,
        confirm_unfollow: Optional[Callable[[QWidget, str], bool]] = None,
        parent: Optional[QWidget] = None,
    ):
        super().__init__(parent)
        self.pubkey = pubkey
        self.cache = cache
        self.current_pubkey = current_pubkey
        self.show_follow_button = show_follow_button
        self.is_following = is_following
        self._on_toggle_follow = on_toggle_follow
        self._confirm_unfollow = confirm_unfollow or _ask_unfollow
        self._subscribed = False

        self._build_ui()

        self.cache.profile_changed.connect(self._on_profile_changed)
        self._subscribed = True
        self.cache.ensure(pubkey)
        self._render()

    # ---------------- UI ----------------

    def _build_ui(self):
        lay = QHBoxLayout(self)
        lay.setContentsMargins(16, 16, 16, 16)
        lay.setSpacing(12)

        self.avatar = QLabel()
        self.avatar.setFixedSize(48, 48)
        self.avatar.setAlignment(Qt.AlignCenter)
        self.avatar.setStyleSheet(
            f"border: 1px solid {theme.ON_SURFACE_DISABLED}; border-radius: 15px;"
            f"color: {theme.SECONDARY_TEXT}; font-size: 20px;"
        )
        lay.addWidget(self.avatar)

        texts = QVBoxLayout()
        texts.setSpacing(2)
        name_row = QHBoxLayout()
        self.name_label = QLabel()
        self.name_label.setTextFormat(Qt.PlainText)
        self.name_label.setStyleSheet(theme.title_style(15))
        self.badge = ReservedBadge()
        name_row.addWidget(self.name_label)
        name_row.addWidget(self.badge)
        name_row.addStretch(1)
        texts.addLayout(name_row)
        self.identifier_label = QLabel()
        self.identifier_label.setTextFormat(Qt.PlainText)
        self.identifier_label.setStyleSheet(theme.body_style(theme.SECONDARY_TEXT, 12))
        texts.addWidget(self.identifier_label)
        lay.addLayout(texts, 1)

        self.follow_button = DivineButton("Follow", self._toggle_follow, size=DivineButtonSize.SMALL)
        lay.addWidget(self.follow_button)

    # ---------------- Public API ----------------

    def display_name(self) -> str:
        return self.name_label.text()

    def identifier(self) -> str:
        return self.identifier_label.text()

    def follow_visible(self) -> bool:
        return not self.follow_button.isHidden()

    def badge_visible(self) -> bool:
        return not self.badge.isHidden()

    def set_following(self, is_following: Optional[bool]) -> None:
        self.is_following = is_following
        self._render()

    def detach(self) -> None:
        """Stop listening to the profile cache."""
        if self._subscribed:
            self.cache.profile_changed.disconnect(self._on_profile_changed)
            self._subscribed = False

    def closeEvent(self, event):
        self.detach()
        super().closeEvent(event)

    def mousePressEvent(self, event):
        self.tapped.emit(self.pubkey)
        super().mousePressEvent(event)

    # ---------------- Rendering ----------------

    def _on_profile_changed(self, pubkey: str) -> None:
        if pubkey == self.pubkey:
            self._render()

    def _current_profile(self) -> Optional[UserProfile]:
        state = self.cache.state(self.pubkey)
        if state.status == ProfileStatus.DATA:
            return state.profile
        # loading and error both fall back to the bare key
        return None

    def _render(self) -> None:
        profile = self._current_profile()
        short = truncate_pubkey(self.pubkey)

        if profile is None:
            name = short
            ident = short
        else:
            name = profile.best_display_name
            ident = profile.display_nip05 or short

        self.name_label.setText(name)
        self.identifier_label.setText(ident)
        self.avatar.setText((name[:1] or "?").upper())
        self.badge.setVisible(is_reserved_username(profile))

        show_follow = (
            self.show_follow_button
            and self.pubkey != self.current_pubkey
            and self.is_following is not None
            and self._on_toggle_follow is not None
        )
        self.follow_button.setVisible(show_follow)
        if show_follow:
            following = bool(self.is_following)
            self.follow_button.setText("Following" if following else "Follow")
            kind = DivineButtonType.SECONDARY if following else DivineButtonType.PRIMARY
            self.follow_button.setStyleSheet(button_stylesheet(kind, DivineButtonSize.SMALL))

    def _toggle_follow(self) -> None:
        if self._on_toggle_follow is None:
            return
        if self.is_following and not self._confirm_unfollow(self, self.display_name()):
            return
        self._on_toggle_follow()
