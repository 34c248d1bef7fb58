"""Periodic tick scheduling with an explicit, owned handle."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol

logger = logging.getLogger(__name__)


class TickHandle(Protocol):
    @property
    def active(self) -> bool:
        ...

    def stop(self) -> None:
        ...


class Scheduler(Protocol):
    def start(self, interval_ms: int, callback: Callable[[], None]) -> TickHandle:
        ...


class ManualHandle:
    def __init__(self, scheduler: "ManualScheduler", interval_ms: int, callback: Callable[[], None]) -> None:
        self.interval_ms = interval_ms
        self.callback = callback
        self._scheduler = scheduler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def stop(self) -> None:
        if self._active:
            self._active = False
            self._scheduler._handles.remove(self)
            logger.debug("Tick stopped (%d ms)", self.interval_ms)


class ManualScheduler:
    """Scheduler driven by the host calling :meth:`fire`; used headless."""

    def __init__(self) -> None:
        self._handles: List[ManualHandle] = []

    def start(self, interval_ms: int, callback: Callable[[], None]) -> ManualHandle:
        handle = ManualHandle(self, interval_ms, callback)
        self._handles.append(handle)
        logger.debug("Tick started (%d ms)", interval_ms)
        return handle

    @property
    def active_count(self) -> int:
        return len(self._handles)

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for handle in list(self._handles):
                handle.callback()


class Ticker:
    """Start/stop wrapper so a component owns at most one live subscription."""

    def __init__(self, scheduler: Scheduler, interval_ms: int, callback: Callable[[], None]) -> None:
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.callback = callback
        self._handle: Optional[TickHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None and self._handle.active

    def start(self) -> None:
        if self.running:
            return
        self._handle = self.scheduler.start(self.interval_ms, self.callback)

    def stop(self) -> None:
        if self._handle is None:
            return
        self._handle.stop()
        self._handle = None
