# tests/conftest.py
from __future__ import annotations

import os
import time

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5.QtCore import QThreadPool
from PyQt5.QtWidgets import QApplication


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def process_events(qapp, rounds: int = 5) -> None:
    for _ in range(rounds):
        qapp.processEvents()


def wait_until(qapp, predicate, timeout: float = 5.0) -> None:
    """Pump the event loop until predicate() is true or fail after timeout seconds."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        qapp.processEvents()
        if predicate():
            return
        time.sleep(0.005)
    raise AssertionError("condition not met before timeout")


def drain(qapp) -> None:
    """Wait for all pool work, then deliver every queued signal."""
    QThreadPool.globalInstance().waitForDone(5000)
    process_events(qapp, rounds=10)
