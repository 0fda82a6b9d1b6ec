# vine_ui/tasks.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt5.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal


logger = logging.getLogger("vine_ui.tasks")


class TaskSignals(QObject):
    """
    Signal carrier for a BackgroundTask. Lives in the GUI thread; emissions from the worker
    thread are queued, so receivers see them in emission order on the GUI thread.

      - progress(object): intermediate value reported by the task
      - finished(object): the task's return value
      - failed(object): the exception the task raised
    """
    progress = pyqtSignal(object)
    finished = pyqtSignal(object)
    failed = pyqtSignal(object)


class BackgroundTask(QRunnable):
    """
    Runs fn(report) on a pool thread, where report(value) emits progress.

    Exactly one of finished / failed is emitted.
    """

    def __init__(self, fn: Callable[[Callable[[object], None]], object], name: str = "task"):
        super().__init__()
        self.setAutoDelete(True)
        self._fn = fn
        self._name = name
        self.signals = TaskSignals()

    def run(self) -> None:
        try:
            result = self._fn(self.signals.progress.emit)
        except Exception as e:
            logger.warning("Background task %s failed: %s", self._name, e)
            self.signals.failed.emit(e)
            return
        self.signals.finished.emit(result)


def start_task(
    fn: Callable[[Callable[[object], None]], object],
    on_progress: Optional[Callable[[object], None]] = None,
    on_finished: Optional[Callable[[object], None]] = None,
    on_failed: Optional[Callable[[object], None]] = None,
    name: str = "task",
    pool: Optional[QThreadPool] = None,
) -> BackgroundTask:
    task = BackgroundTask(fn, name=name)
    if on_progress is not None:
        task.signals.progress.connect(on_progress)
    if on_finished is not None:
        task.signals.finished.connect(on_finished)
    if on_failed is not None:
        task.signals.failed.connect(on_failed)
    (pool or QThreadPool.globalInstance()).start(task)
    return task
