"""Unit tests for the trailing-edge debouncer."""

from __future__ import annotations

import asyncio

import pytest

from talabahub.feed.debounce import Debouncer

pytestmark = pytest.mark.asyncio


class TestDebouncer:
    async def test_only_last_call_of_burst_runs(self):
        calls: list[str] = []

        async def record(query: str) -> None:
            calls.append(query)

        debouncer = Debouncer(0.05)
        for query in ("k", "ko", "kof", "kofe"):
            debouncer.submit(record, query)
        await asyncio.sleep(0.15)

        assert calls == ["kofe"]
        assert debouncer.pending is False

    async def test_spaced_calls_all_run(self):
        calls: list[int] = []

        async def record(n: int) -> None:
            calls.append(n)

        debouncer = Debouncer(0.01)
        debouncer.submit(record, 1)
        await asyncio.sleep(0.05)
        debouncer.submit(record, 2)
        await asyncio.sleep(0.05)

        assert calls == [1, 2]

    async def test_cancel_drops_pending_call(self):
        calls: list[int] = []

        async def record(n: int) -> None:
            calls.append(n)

        debouncer = Debouncer(0.05)
        debouncer.submit(record, 1)
        assert debouncer.pending is True
        await debouncer.cancel()
        await asyncio.sleep(0.1)

        assert calls == []
        assert debouncer.pending is False

    async def test_cancel_without_pending_is_noop(self):
        await Debouncer(0.01).cancel()

    async def test_failing_call_does_not_break_debouncer(self):
        calls: list[int] = []

        async def explode(_n: int) -> None:
            raise RuntimeError("backend down")

        async def record(n: int) -> None:
            calls.append(n)

        debouncer = Debouncer(0.01)
        debouncer.submit(explode, 1)
        await asyncio.sleep(0.05)
        debouncer.submit(record, 2)
        await asyncio.sleep(0.05)

        assert calls == [2]
