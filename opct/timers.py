"""Execution timers for the steps of report processing."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any


@dataclass
class Timer:
    """A timer started at ``start``; ``total`` is the elapsed seconds when stopped."""

    start: float
    total: float = 0.0


@dataclass
class Timers:
    """Named timers; :meth:`set` works as a lap, stopping the previous one."""

    clock: Callable[[], float] = time.monotonic
    timers: dict[str, Timer] = field(default_factory=dict)
    _last: str = ""

    def _mark(self, key: str) -> None:
        timer = self.timers.get(key)
        if timer is None:
            self.timers[key] = Timer(start=self.clock())
        else:
            timer.total = self.clock() - timer.start

    def set(self, key: str) -> None:
        """Stop the last timer set and start (or stop) ``key``."""
        if self._last:
            self._mark(self._last)
        self._mark(key)
        self._last = key

    def add(self, key: str) -> None:
        """Start ``key``, or stop it when it already runs."""
        self._mark(key)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: elapsed seconds per timer."""
        if not self.timers:
            return {}
        return {"Timers": {key: {"seconds": t.total} for key, t in self.timers.items()}}