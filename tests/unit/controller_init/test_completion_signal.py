"""
Tests for the completion broadcast and the one-shot completion token.
"""

from __future__ import annotations

import asyncio
import logging

import pytest

from controller_init.core.report import StartupReport
from controller_init.errors import InitializationError
from controller_init.signal import CompletionSignal, CompletionToken, ControllersInitialized


def _report(**kwargs) -> StartupReport:
    return StartupReport(startup_id="test-run", **kwargs)


class TestControllersInitialized:
    def test_fires_to_subscribers_in_order(self) -> None:
        event = ControllersInitialized()
        calls: list[str] = []
        event.subscribe(lambda report: calls.append("first"))
        event.subscribe(lambda report: calls.append("second"))

        assert event.fire(_report()) is True
        assert calls == ["first", "second"]

    def test_fires_only_once(self) -> None:
        event = ControllersInitialized()
        calls: list[StartupReport] = []
        event.subscribe(calls.append)

        event.fire(_report())
        assert event.fire(_report()) is False

        assert len(calls) == 1
        assert event.fired is True

    def test_late_subscriber_gets_no_replay(self) -> None:
        event = ControllersInitialized()
        event.fire(_report())

        late: list[StartupReport] = []
        event.subscribe(late.append)
        event.fire(_report())

        assert late == []

    def test_unsubscribed_callback_is_not_called(self) -> None:
        event = ControllersInitialized()
        calls: list[StartupReport] = []
        event.subscribe(calls.append)

        assert event.unsubscribe(calls.append) is True
        assert event.unsubscribe(calls.append) is False
        event.fire(_report())

        assert calls == []
        assert event.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        event = ControllersInitialized()
        calls: list[str] = []

        def broken(report: StartupReport) -> None:
            raise RuntimeError("subscriber bug")

        event.subscribe(broken)
        event.subscribe(lambda report: calls.append("after"))

        with caplog.at_level(logging.ERROR, logger="controller_init.signal"):
            event.fire(_report())

        assert calls == ["after"]
        assert any("raised" in record.getMessage() for record in caplog.records)


class TestCompletionToken:
    @pytest.mark.asyncio
    async def test_await_after_resolution_returns_immediately(self) -> None:
        token = CompletionToken()
        report = _report()
        token.resolve(report)

        assert await token is report
        assert await token.wait() is report

    @pytest.mark.asyncio
    async def test_waiter_suspends_until_resolved(self) -> None:
        token = CompletionToken()
        report = _report()
        waiter = asyncio.create_task(token.wait())

        await asyncio.sleep(0)
        assert not waiter.done()

        token.resolve(report)
        assert await asyncio.wait_for(waiter, timeout=1) is report

    @pytest.mark.asyncio
    async def test_faulted_token_raises_for_every_waiter(self) -> None:
        token = CompletionToken()
        error = InitializationError(int, ValueError("boom"))
        early = asyncio.create_task(token.wait())
        await asyncio.sleep(0)

        token.fault(error, _report(error=error))

        with pytest.raises(InitializationError):
            await early
        with pytest.raises(InitializationError):
            await token
        assert token.faulted() is True
        assert token.exception() is error

    def test_second_resolution_is_a_no_op(self) -> None:
        token = CompletionToken()
        first = _report()

        assert token.resolve(first) is True
        assert token.resolve(_report()) is False
        assert token.fault(InitializationError(int, ValueError("late"))) is False

        assert token.report() is first
        assert token.faulted() is False

    def test_report_while_pending_raises_invalid_state(self) -> None:
        token = CompletionToken()

        with pytest.raises(asyncio.InvalidStateError):
            token.report()
        assert "pending" in repr(token)


class TestCompletionSignal:
    @pytest.mark.asyncio
    async def test_broadcast_fires_before_token_resolves(self) -> None:
        signal = CompletionSignal()
        seen: list[bool] = []
        signal.subscribe(lambda report: seen.append(signal.token.done()))

        signal.complete(_report())

        assert seen == [False]
        assert signal.completed is True
        assert (await signal.token).succeeded

    @pytest.mark.asyncio
    async def test_failed_report_faults_token(self) -> None:
        signal = CompletionSignal()
        error = InitializationError(str, RuntimeError("nope"))
        delivered: list[StartupReport] = []
        signal.subscribe(delivered.append)

        signal.complete(_report(error=error))

        assert delivered[0].succeeded is False
        with pytest.raises(InitializationError):
            await signal.token
        assert signal.token.report().failed_type is str
