"""QTimer-backed tick scheduler for the editor core."""
from __future__ import annotations

from typing import Callable

from PyQt6 import QtCore


class QtTickHandle:
    def __init__(self, timer: QtCore.QTimer) -> None:
        self._timer = timer

    @property
    def active(self) -> bool:
        return self._timer.isActive()

    def stop(self) -> None:
        self._timer.stop()
        self._timer.deleteLater()


class QtScheduler:
    def __init__(self, parent: QtCore.QObject) -> None:
        self.parent = parent

    def start(self, interval_ms: int, callback: Callable[[], None]) -> QtTickHandle:
        timer = QtCore.QTimer(self.parent)
        timer.timeout.connect(callback)
        timer.start(interval_ms)
        return QtTickHandle(timer)
