"""Timing and counting for planner profiling.

Planners accept an optional :class:`PerformanceTracker`.  With one they time
their phases (``"enumerate"``, ``"evaluate"`` and one section per planner
call) and bump counters such as ``"memo_hits"``.  Sections nest, so each label
records both inclusive time and the time not spent in child sections.
"""

from __future__ import annotations

import time
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, ContextManager, Dict, List, Optional


@dataclass
class PerfStat:
    """Accumulated timings for one section label."""

    count: int = 0
    total: float = 0.0
    self_time: float = 0.0
    max_time: float = 0.0

    @property
    def average(self) -> float:
        return self.total / self.count if self.count else 0.0


@dataclass
class _Frame:
    name: str
    start: float
    children: float = 0.0


class _Section:
    __slots__ = ("_tracker", "_name", "_frame")

    def __init__(self, tracker: "PerformanceTracker", name: str) -> None:
        self._tracker = tracker
        self._name = name
        self._frame: Optional[_Frame] = None

    def __enter__(self) -> "_Section":
        self._frame = self._tracker._push(self._name)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        self._tracker._pop(self._frame)
        self._frame = None
        return False


class PerformanceTracker:
    """Per-section timings plus named event counters."""

    def __init__(self, *, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or time.perf_counter
        self._stats: Dict[str, PerfStat] = {}
        self._counters: Dict[str, int] = {}
        self._stack: List[_Frame] = []

    def _push(self, name: str) -> _Frame:
        frame = _Frame(name=name, start=self._clock())
        self._stack.append(frame)
        return frame

    def _pop(self, frame: _Frame) -> None:
        elapsed = self._clock() - frame.start
        if not self._stack or self._stack[-1] is not frame:
            raise RuntimeError("Timer stack out of sync")
        self._stack.pop()
        stat = self._stats.setdefault(frame.name, PerfStat())
        stat.count += 1
        stat.total += elapsed
        stat.self_time += max(0.0, elapsed - frame.children)
        stat.max_time = max(stat.max_time, elapsed)
        if self._stack:
            self._stack[-1].children += elapsed

    def section(self, name: str) -> _Section:
        """Return a context manager timing ``name``."""

        return _Section(self, name)

    def count(self, name: str, amount: int = 1) -> None:
        self._counters[name] = self._counters.get(name, 0) + amount

    def counters(self) -> Dict[str, int]:
        return dict(self._counters)

    def reset(self) -> None:
        """Forget all timings and counters."""

        self._stats.clear()
        self._counters.clear()
        self._stack.clear()

    def summary(self, *, sort_by: str = "total") -> List[Dict[str, float | int | str]]:
        """Return one row per section, largest ``sort_by`` first.

        ``sort_by`` is one of ``"total"``, ``"self"``, ``"count"``,
        ``"average"`` or ``"max"``.
        """

        keys = {
            "total": lambda stat: stat.total,
            "self": lambda stat: stat.self_time,
            "count": lambda stat: stat.count,
            "average": lambda stat: stat.average,
            "max": lambda stat: stat.max_time,
        }
        if sort_by not in keys:
            raise ValueError(f"Unknown sort key: {sort_by}")
        key = keys[sort_by]
        ordered = sorted(self._stats.items(), key=lambda item: key(item[1]), reverse=True)
        return [
            {
                "name": name,
                "count": stat.count,
                "total": stat.total,
                "self": stat.self_time,
                "average": stat.average,
                "max": stat.max_time,
            }
            for name, stat in ordered
        ]


def maybe_section(profiler: Optional[PerformanceTracker], name: str) -> ContextManager:
    """Return ``profiler.section(name)``, or a no-op context without a profiler."""

    if profiler is None:
        return nullcontext()
    return profiler.section(name)


__all__ = ["PerfStat", "PerformanceTracker", "maybe_section"]
