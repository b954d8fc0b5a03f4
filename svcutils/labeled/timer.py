"""Timers that can be stopped, and a timer that stops several at once."""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class Timer(Protocol):
    """A running timer."""

    def stop(self) -> float:
        """Stop the timer, record the observation and return it."""


class MultiTimer:
    """Stops a group of timers together."""

    def __init__(self, timers: Iterable[Timer]) -> None:
        self.timers = tuple(timers)

    def stop(self) -> float:
        """Stop every timer in order and return the last one's value."""
        result = 0.0
        for timer in self.timers:
            result = timer.stop()
        return result

    def __enter__(self) -> MultiTimer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()