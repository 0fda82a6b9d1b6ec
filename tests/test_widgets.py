# tests/test_widgets.py
from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from PyQt5.QtCore import Qt
from PyQt5.QtTest import QTest

from vine_ui.domain import PendingUpload, UploadStatus, UserProfile, truncate_pubkey
from vine_ui.profiles import UserProfileCache
from vine_ui.widgets.buttons import DivineButton, DivineButtonType
from vine_ui.widgets.upload_progress import CompactUploadProgress, UploadProgressIndicator
from vine_ui.widgets.user_profile_tile import UserProfileTile


NOW = datetime(2024, 5, 1, 12, 0, 0)
PK = "npub1" + "k" * 52 + "abc123"


def _upload(**kw) -> PendingUpload:
    base = dict(
        id="u1",
        local_video_path="/v.mp4",
        pubkey="pk",
        status=UploadStatus.UPLOADING,
        created_at=NOW - timedelta(minutes=3),
        upload_progress=0.5,
    )
    base.update(kw)
    return PendingUpload(**base)


def _callbacks(log):
    return {name: (lambda n=name: log.append(n)) for name in ("on_retry", "on_cancel", "on_delete", "on_pause", "on_resume")}


# ---------------- Buttons ----------------

def test_button_without_handler_is_disabled(qapp):
    assert not DivineButton("Nope").isEnabled()


def test_button_handler_can_change(qapp):
    hits = []
    b = DivineButton("Go", lambda: hits.append(1), kind=DivineButtonType.SECONDARY)
    b.click()
    b.set_on_pressed(lambda: hits.append(2))
    b.click()
    b.set_on_pressed(None)
    b.click()
    assert hits == [1, 2]
    assert not b.isEnabled()


# ---------------- Upload progress ----------------

def test_indicator_renders_upload(qapp):
    w = UploadProgressIndicator(_upload(title=None), now=lambda: NOW)

    assert w.title_label.text() == "Video Upload"
    assert w.status_label.text() == "Uploading 50%..."
    assert w.percent_label.text() == "50%"
    assert w.time_label.text() == "3m ago"
    assert w.progress.value() == 50


def test_failed_actions(qapp):
    log = []
    w = UploadProgressIndicator(_upload(status=UploadStatus.FAILED, retry_count=1), **_callbacks(log))

    assert w.action_labels() == ["Go Back", "Retry (2 left)", "Delete"]
    w.trigger_action("Retry (2 left)")
    assert log == ["on_retry"]


def test_retry_hidden_when_exhausted(qapp):
    w = UploadProgressIndicator(_upload(status=UploadStatus.FAILED, retry_count=3), **_callbacks([]))
    assert w.action_labels() == ["Go Back", "Delete"]


def test_buttons_need_callbacks(qapp):
    w = UploadProgressIndicator(_upload(status=UploadStatus.FAILED), on_delete=lambda: None)
    assert w.action_labels() == ["Delete"]


def test_pause_resume(qapp):
    log = []
    w = UploadProgressIndicator(_upload(), **_callbacks(log))
    assert w.action_labels() == ["Pause"]

    w.set_upload(_upload(status=UploadStatus.PAUSED))
    assert w.action_labels() == ["Resume"]
    w.trigger_action("Resume")
    assert log == ["on_resume"]


@pytest.mark.parametrize("status", [UploadStatus.PUBLISHED, UploadStatus.PROCESSING, UploadStatus.PENDING])
def test_no_action_row_for_passive_states(qapp, status):
    w = UploadProgressIndicator(_upload(status=status), **_callbacks([]))
    assert w.actions_row.isHidden()
    assert w.action_labels() == []


def test_show_actions_off(qapp):
    w = UploadProgressIndicator(_upload(status=UploadStatus.FAILED), show_actions=False, **_callbacks([]))
    assert w.actions_row.isHidden()


def test_compact_progress_text(qapp):
    w = CompactUploadProgress(_upload())
    assert w.text() == "Uploading 50%"
    w.set_upload(_upload(status=UploadStatus.PAUSED, upload_progress=0.25))
    assert w.text() == "Paused 25%"
    w.set_upload(_upload(status=UploadStatus.FAILED, error_message="boom"))
    assert w.text() == "Failed: boom"


# ---------------- Profile tile ----------------

def test_tile_loading_shows_truncated_key(qapp):
    tile = UserProfileTile(PK, UserProfileCache())
    assert tile.display_name() == truncate_pubkey(PK)
    assert tile.identifier() == truncate_pubkey(PK)
    assert not tile.badge_visible()


def test_tile_updates_when_profile_arrives(qapp):
    cache = UserProfileCache()
    tile = UserProfileTile(PK, cache)

    cache.put(UserProfile(PK, display_name="Alice", nip05="_@alice.video"))

    assert tile.display_name() == "Alice"
    assert tile.identifier() == "@alice.video"


def test_tile_ignores_other_keys(qapp):
    cache = UserProfileCache()
    tile = UserProfileTile(PK, cache)
    cache.put(UserProfile("npub1someoneelse", display_name="Eve"))
    assert tile.display_name() == truncate_pubkey(PK)


def test_tile_error_falls_back(qapp):
    cache = UserProfileCache()
    tile = UserProfileTile(PK, cache)
    cache.fail(PK, "relay down")
    assert tile.display_name() == truncate_pubkey(PK)


def test_tile_detached_stops_updating(qapp):
    cache = UserProfileCache()
    tile = UserProfileTile(PK, cache)
    tile.detach()
    cache.put(UserProfile(PK, display_name="Alice"))
    assert tile.display_name() == truncate_pubkey(PK)


def test_follow_button(qapp):
    toggles = []
    tile = UserProfileTile(PK, UserProfileCache(), is_following=False, on_toggle_follow=lambda: toggles.append(1))
    assert tile.follow_visible()
    assert tile.follow_button.text() == "Follow"

    tile.follow_button.click()
    assert toggles == [1]


def test_unfollow_needs_confirmation(qapp):
    toggles = []
    answers = [False, True]
    tile = UserProfileTile(
        PK,
        UserProfileCache(),
        is_following=True,
        on_toggle_follow=lambda: toggles.append(1),
        confirm_unfollow=lambda parent, name: answers.pop(0),
    )
    assert tile.follow_button.text() == "Following"

    tile.follow_button.click()
    assert toggles == []
    tile.follow_button.click()
    assert toggles == [1]


def test_no_follow_button_for_self_or_without_callback(qapp):
    assert not UserProfileTile(PK, UserProfileCache(), current_pubkey=PK, is_following=False, on_toggle_follow=lambda: None).follow_visible()
    assert not UserProfileTile(PK, UserProfileCache(), is_following=False).follow_visible()


def test_tile_tap_signal(qapp):
    tapped = []
    tile = UserProfileTile(PK, UserProfileCache())
    tile.tapped.connect(tapped.append)
    tile.show()
    QTest.mouseClick(tile, Qt.LeftButton)
    tile.close()
    assert tapped == [PK]
