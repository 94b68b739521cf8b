"""
Completion signal for the controller startup sequence.

Two views of one event, "all controllers initialized (or startup failed)":

- ``ControllersInitialized``: a multicast broadcast delivered once to the
  callbacks subscribed at the time it fires. Late subscribers get no replay.
- ``CompletionToken``: a one-shot awaitable that stores the outcome, so it
  can be awaited before or after completion.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from typing import Any

from controller_init.core.report import StartupReport
from controller_init.errors import StartupError
from controller_init.utilities.logging_patterns import get_logger

logger = get_logger(__name__, component="completion_signal")

Subscriber = Callable[[StartupReport], Any]


class ControllersInitialized:
    """One-time broadcast to subscribers, in subscription order."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._fired = False

    def subscribe(self, callback: Subscriber) -> Subscriber:
        """Add ``callback``; returns it so this can be used as a decorator."""
        self._subscribers.append(callback)
        return callback

    def unsubscribe(self, callback: Subscriber) -> bool:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            return False
        return True

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def fire(self, report: StartupReport) -> bool:
        """Deliver ``report`` to current subscribers. Returns False if already fired."""
        if self._fired:
            return False
        self._fired = True
        for callback in list(self._subscribers):
            try:
                callback(report)
            except Exception:
                logger.exception(
                    f"Subscriber {getattr(callback, '__qualname__', callback)!r} raised",
                    startup_id=report.startup_id,
                )
        return True


class CompletionToken:
    """One-shot completion future; resolving twice is a no-op."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._report: StartupReport | None = None
        self._error: StartupError | None = None

    def resolve(self, report: StartupReport) -> bool:
        if self._event.is_set():
            return False
        self._report = report
        self._event.set()
        return True

    def fault(self, error: StartupError, report: StartupReport | None = None) -> bool:
        if self._event.is_set():
            return False
        self._report = report
        self._error = error
        self._event.set()
        return True

    def done(self) -> bool:
        return self._event.is_set()

    def faulted(self) -> bool:
        return self._error is not None

    def report(self) -> StartupReport | None:
        """Stored report; raises ``asyncio.InvalidStateError`` while pending."""
        if not self._event.is_set():
            raise asyncio.InvalidStateError("Controller startup has not completed")
        return self._report

    def exception(self) -> StartupError | None:
        if not self._event.is_set():
            raise asyncio.InvalidStateError("Controller startup has not completed")
        return self._error

    async def wait(self) -> StartupReport | None:
        """Suspend until resolved; raises the stored error if startup failed."""
        await self._event.wait()
        if self._error is not None:
            raise self._error
        return self._report

    def __await__(self) -> Generator[Any, None, StartupReport | None]:
        return self.wait().__await__()

    def __repr__(self) -> str:
        state = "pending"
        if self.done():
            state = "faulted" if self.faulted() else "resolved"
        return f"<CompletionToken {state}>"


class CompletionSignal:
    """Broadcast and token fired together when startup ends."""

    def __init__(self) -> None:
        self.event = ControllersInitialized()
        self.token = CompletionToken()

    def subscribe(self, callback: Subscriber) -> Subscriber:
        return self.event.subscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> bool:
        return self.event.unsubscribe(callback)

    def complete(self, report: StartupReport) -> None:
        """Fire the broadcast, then resolve or fault the token from ``report``."""
        self.event.fire(report)
        if report.error is not None:
            self.token.fault(report.error, report)
        else:
            self.token.resolve(report)

    @property
    def completed(self) -> bool:
        return self.token.done()


__all__ = ["CompletionSignal", "CompletionToken", "ControllersInitialized", "Subscriber"]
