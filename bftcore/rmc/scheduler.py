"""Scheduling of repeated tasks with exponentially growing delays."""

from __future__ import annotations

import asyncio
import heapq
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, Iterable, List, Tuple, TypeVar, Union

T = TypeVar("T")

Delay = Union[float, int, timedelta]


def _seconds(delay: Delay) -> float:
    if isinstance(delay, timedelta):
        return delay.total_seconds()
    return float(delay)


class TaskScheduler(ABC, Generic[T]):
    """Decides at what moments abstract tasks should be performed.

    As the network can be faulty, sending a message has to be repeated so that
    the recipient eventually gets it.
    """

    @abstractmethod
    def add_task(self, task: T) -> None:
        """Start scheduling ``task``."""

    @abstractmethod
    async def next_task(self) -> T:
        """Wait until a task is due and return it."""


@dataclass
class _ScheduledTask(Generic[T]):
    task: T
    delay: float


class DoublingDelayScheduler(TaskScheduler[T]):
    """Schedules each task at once, then after ``initial_delay``, then doubling each delay.

    Delays are given in seconds or as :class:`datetime.timedelta`.
    """

    def __init__(self, initial_delay: Delay) -> None:
        self._initial_delay = _seconds(initial_delay)
        self._instants: List[Tuple[float, int]] = []
        self._tasks: List[_ScheduledTask[T]] = []

    @classmethod
    def with_tasks(
        cls, initial_tasks: Iterable[T], initial_delay: Delay
    ) -> "DoublingDelayScheduler[T]":
        """A scheduler whose first tasks are spread evenly over the initial delay."""
        scheduler: DoublingDelayScheduler[T] = cls(initial_delay)
        tasks = list(initial_tasks)
        if not tasks:
            return scheduler
        delta = scheduler._initial_delay / len(tasks)
        for i, task in enumerate(tasks):
            scheduler._add_task_after(task, delta * i)
        return scheduler

    def _add_task_after(self, task: T, delta: float) -> None:
        index = len(self._tasks)
        heapq.heappush(self._instants, (time.monotonic() + delta, index))
        self._tasks.append(_ScheduledTask(task, self._initial_delay))

    def add_task(self, task: T) -> None:
        self._add_task_after(task, 0.0)

    async def next_task(self) -> T:
        """Wait until the earliest task is due; wait forever if there are no tasks."""
        if not self._instants:
            await asyncio.get_running_loop().create_future()
        instant, _ = self._instants[0]
        while (remaining := instant - time.monotonic()) > 0:
            await asyncio.sleep(remaining)
        instant, index = heapq.heappop(self._instants)
        scheduled = self._tasks[index]
        heapq.heappush(self._instants, (instant + scheduled.delay, index))
        scheduled.delay *= 2
        return scheduled.task

    def __repr__(self) -> str:
        return (
            f"DoublingDelayScheduler(initial_delay={self._initial_delay!r}, "
            f"scheduled_instants={len(self._instants)}, "
            f"scheduled_tasks={len(self._tasks)})"
        )