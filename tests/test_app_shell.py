# tests/test_app_shell.py
from __future__ import annotations

import logging

import pytest
from PyQt5.QtCore import Qt
from PyQt5.QtTest import QTest

from vine_ui.domain import UserProfile
from vine_ui.main_window import AppShell
from vine_ui.profiles import UserProfileCache
from vine_ui.routing import NavigationRouter, RouteType, TabPositionMemory


@pytest.fixture
def shell(qapp):
    mem = TabPositionMemory()
    router = NavigationRouter("/home/0", memory=mem)
    return AppShell(router, current_npub="npub1me", memory=mem)


def test_profile_tab_routes_to_current_identity(shell):
    shell.memory.set_position(RouteType.PROFILE, 5)

    shell.handle_tab_tap(3)

    assert shell.router.location == "/profile/npub1me"
    assert shell.title() == "My Profile"
    assert shell.nav.current_index() == 3


def test_retapping_active_tab_pops_pushed_routes(shell):
    shell.router.go("/home/2")
    shell.router.push("/hashtag/cats")
    shell.router.push("/profile/npub1other")

    shell.nav.button(0).click()

    assert shell.router.pushed() == []
    assert shell.router.location == "/home/2"


def test_tab_tap_is_logged(shell, caplog):
    with caplog.at_level(logging.INFO, logger="vine_ui.navigation"):
        shell.handle_tab_tap(1)

    assert "User tapped bottom nav: tab=1 (Explore)" in caplog.text


def test_tab_returns_to_remembered_position(shell):
    shell.router.go("/explore/3")
    shell.handle_tab_tap(0)
    shell.handle_tab_tap(1)

    assert shell.router.location == "/explore/3"


def test_titles(shell):
    shell.router.go("/hashtag/cats")
    assert shell.title() == "#cats"
    shell.router.go("/search")
    assert shell.title() == "Search"
    assert shell.btn_search.isHidden()
    shell.router.go("/profile/npub1other")
    assert shell.title() == "Profile"


def test_profile_title_uses_display_name(qapp):
    cache = UserProfileCache()
    router = NavigationRouter("/home/0", memory=TabPositionMemory())
    shell = AppShell(router, current_npub="npub1me", profiles=cache)

    router.go("/profile/npub1other")
    cache.put(UserProfile("npub1other", display_name="Bob"))

    assert shell.title() == "Bob"


@pytest.mark.parametrize(
    "start, expected",
    [
        ("/hashtag/cats", "/explore"),
        ("/search/dogs", "/explore"),
        ("/explore/3", "/explore"),
        ("/profile/npub1other/2", "/profile/npub1other"),
        ("/notifications/4", "/notifications/0"),
        ("/notifications/0", "/home/0"),
        ("/explore", "/home/0"),
        ("/home/3", "/home/3"),
    ],
)
def test_back_button(shell, start, expected):
    shell.router.go(start)
    shell.handle_back()
    assert shell.router.location == expected


def test_back_pops_pushed_first(shell):
    shell.router.go("/explore/1")
    shell.router.push("/camera")
    shell.handle_back()
    assert shell.router.location == "/explore/1"


def test_back_visibility(shell):
    shell.router.go("/home/0")
    assert not shell.back_visible()
    shell.router.go("/profile/npub1me")
    assert not shell.back_visible()
    shell.router.go("/profile/npub1other")
    assert shell.back_visible()
    shell.router.go("/notifications/0")
    assert not shell.back_visible()


def test_switching_account_resets_positions(shell):
    shell.router.go("/explore/7")
    shell.set_current_npub("npub1new")

    assert shell.memory.get_position(RouteType.EXPLORE) is None
    shell.handle_tab_tap(3)
    assert shell.router.location == "/profile/npub1new"


def test_title_tap_returns_to_explore(shell):
    shell.router.go("/hashtag/cats/2")
    shell.handle_title_tap()
    assert shell.router.location == "/explore"

    shell.router.go("/home/1")
    shell.handle_title_tap()
    assert shell.router.location == "/home/1"


def test_clicking_title_returns_to_explore(shell, qapp):
    shell.show()
    shell.router.go("/hashtag/cats")

    QTest.mouseClick(shell.title_label, Qt.LeftButton)

    assert shell.router.location == "/explore"
    shell.close()
