"""Property-based tests for sequential controller startup invariants."""

from __future__ import annotations

import asyncio

from hypothesis import given, seed, settings
from hypothesis import strategies as st

from controller_init.errors import ControllerNotFoundError, InitializationError
from tests.property.controller_invariants_test_helpers import (
    build_controllers,
    build_sequencer,
    controller_count_strategy,
    nonempty_controller_count_strategy,
)


@seed(4101)
@settings(max_examples=50, deadline=None)
@given(count=controller_count_strategy)
def test_successful_startup_registers_every_type_once_in_order(count: int) -> None:
    """
    Property: With no failures, each discovered type is initialized exactly once,
    in discovery order, and is retrievable by its own type.
    """
    started: list[int] = []
    types = build_controllers(count, started)
    sequencer = build_sequencer(types)

    report = asyncio.run(sequencer.run())

    assert report.succeeded is True
    assert started == list(range(count))
    assert report.initialized == tuple(types)
    assert len(sequencer.registry) == count
    for cls in types:
        instance = sequencer.registry.get(cls)
        assert type(instance) is cls
        assert instance.initialized is True


@seed(4102)
@settings(max_examples=50, deadline=None)
@given(count=nonempty_controller_count_strategy, data=st.data())
def test_failure_stops_the_sequence_at_the_failing_controller(
    count: int, data: st.DataObject
) -> None:
    """
    Property: When controller k fails, controllers before k stay registered,
    controllers after k are never started, and the completion token is faulted.
    """
    fail_at = data.draw(st.integers(min_value=0, max_value=count - 1), label="fail_at")
    started: list[int] = []
    types = build_controllers(count, started, fail_at=fail_at)
    sequencer = build_sequencer(types)

    report = asyncio.run(sequencer.run())

    assert report.succeeded is False
    assert started == list(range(fail_at + 1))
    assert report.failed_type is types[fail_at]
    assert report.initialized == tuple(types[:fail_at])
    assert report.pending == tuple(types[fail_at + 1 :])
    assert sequencer.signal.token.faulted() is True
    assert isinstance(sequencer.signal.token.exception(), InitializationError)

    for cls in types[:fail_at]:
        assert sequencer.registry.get(cls).initialized is True
    for cls in types[fail_at:]:
        try:
            sequencer.registry.get(cls)
        except ControllerNotFoundError:
            continue
        raise AssertionError(f"{cls.__name__} should not be registered")


@seed(4103)
@settings(max_examples=30, deadline=None)
@given(count=controller_count_strategy, subscribers=st.integers(min_value=0, max_value=5))
def test_completion_is_broadcast_exactly_once(count: int, subscribers: int) -> None:
    """
    Property: Every subscriber receives the same report exactly once, even
    when the sequence is run repeatedly.
    """
    types = build_controllers(count, [])
    sequencer = build_sequencer(types)
    inboxes: list[list[object]] = [[] for _ in range(subscribers)]
    for inbox in inboxes:
        sequencer.signal.subscribe(inbox.append)

    async def run_twice():
        first = await sequencer.run()
        second = await sequencer.run()
        return first, second

    first, second = asyncio.run(run_twice())

    assert first is second
    for inbox in inboxes:
        assert inbox == [first]
