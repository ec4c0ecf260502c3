"""Tests for TransferProgress — synthetic progress around a pending call."""

from __future__ import annotations

import asyncio

import pytest

from ftpgate.config import DOWNLOAD_CADENCE, UPLOAD_CADENCE, ProgressCadence
from ftpgate.progress import TransferKind, TransferProgress

FAST = ProgressCadence(step=10, interval=0.01, ceiling=90, grace=0.05)


class TestDefaults:
    def test_upload_cadence(self):
        tracker = TransferProgress(TransferKind.UPLOAD)
        assert tracker.cadence is UPLOAD_CADENCE
        assert tracker.cadence.step == 10

    def test_download_cadence(self):
        tracker = TransferProgress(TransferKind.DOWNLOAD)
        assert tracker.cadence is DOWNLOAD_CADENCE
        assert tracker.cadence.step == 15

    def test_starts_idle(self):
        tracker = TransferProgress(TransferKind.UPLOAD)
        assert tracker.percent == 0
        assert not tracker.active


class TestTrack:
    async def test_returns_result(self):
        tracker = TransferProgress(TransferKind.DOWNLOAD, FAST)

        async def work() -> str:
            return "done"

        assert await tracker.track(work()) == "done"
        assert tracker.percent == 100

    async def test_reraises_and_completes(self):
        tracker = TransferProgress(TransferKind.DOWNLOAD, FAST)

        async def work() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await tracker.track(work())
        assert tracker.percent == 100
        assert not tracker.active

    async def test_ceiling_never_exceeded_while_pending(self):
        tracker = TransferProgress(TransferKind.UPLOAD, FAST)
        seen: list[int] = []
        tracker.subscribe(lambda _kind, pct: seen.append(pct))

        async def slow() -> None:
            await asyncio.sleep(0.25)

        await tracker.track(slow())
        pending = seen[:-1]
        assert max(pending) == FAST.ceiling
        assert seen[-1] == 100

    async def test_monotonic_then_reset(self):
        tracker = TransferProgress(TransferKind.UPLOAD, FAST)
        seen: list[int] = []
        tracker.subscribe(lambda _kind, pct: seen.append(pct))

        async def slow() -> None:
            await asyncio.sleep(0.05)

        await tracker.track(slow())
        await tracker.wait_idle()

        assert seen[-1] == 0
        running = seen[:-1]
        assert running == sorted(running)
        assert running[-1] == 100
        assert tracker.percent == 0

    async def test_zero_grace_resets_immediately(self):
        cadence = ProgressCadence(step=10, interval=0.01, ceiling=90, grace=0)
        tracker = TransferProgress(TransferKind.UPLOAD, cadence)

        async def work() -> None:
            return None

        await tracker.track(work())
        assert tracker.percent == 0

    async def test_new_transfer_cancels_pending_reset(self):
        tracker = TransferProgress(TransferKind.DOWNLOAD, FAST)

        async def work() -> None:
            return None

        await tracker.track(work())
        gate = asyncio.Event()
        task = asyncio.create_task(tracker.track(gate.wait()))
        await asyncio.sleep(FAST.grace * 2)
        # the first transfer's reset must not clobber the running one
        assert 0 < tracker.percent < 100
        gate.set()
        await task
        assert tracker.percent == 100
        tracker.close()
        assert tracker.percent == 0


    async def test_overlapping_transfers_share_one_estimate(self):
        tracker = TransferProgress(TransferKind.UPLOAD, FAST)
        seen: list[int] = []
        tracker.subscribe(lambda _kind, pct: seen.append(pct))
        first_gate = asyncio.Event()
        second_gate = asyncio.Event()

        first = asyncio.create_task(tracker.track(first_gate.wait()))
        await asyncio.sleep(FAST.interval * 3)
        second = asyncio.create_task(tracker.track(second_gate.wait()))
        await asyncio.sleep(FAST.interval * 3)

        first_gate.set()
        await first
        await asyncio.sleep(FAST.interval * 5)
        assert tracker.active
        assert 0 < tracker.percent < 100
        assert 100 not in seen

        second_gate.set()
        await second
        assert tracker.percent == 100
        assert not tracker.active
        pending = seen[:-1]
        assert pending == sorted(pending)
        tracker.close()


class TestListeners:
    async def test_failing_listener_is_skipped(self):
        tracker = TransferProgress(TransferKind.UPLOAD, FAST)
        good: list[int] = []

        def bad(_kind: TransferKind, _pct: int) -> None:
            raise RuntimeError("listener broke")

        tracker.subscribe(bad)
        tracker.subscribe(lambda _kind, pct: good.append(pct))

        async def work() -> None:
            return None

        await tracker.track(work())
        assert good[-1] == 100

    def test_unsubscribe(self):
        tracker = TransferProgress(TransferKind.UPLOAD)

        def listener(_kind: TransferKind, _pct: int) -> None:
            pass

        tracker.subscribe(listener)
        assert tracker.unsubscribe(listener) is True
        assert tracker.unsubscribe(listener) is False

    async def test_listener_receives_kind(self):
        tracker = TransferProgress(TransferKind.DOWNLOAD, FAST)
        kinds: set[TransferKind] = set()
        tracker.subscribe(lambda kind, _pct: kinds.add(kind))

        async def work() -> None:
            return None

        await tracker.track(work())
        assert kinds == {TransferKind.DOWNLOAD}
