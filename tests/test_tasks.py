"""Tests for TaskRunner."""

import asyncio
import logging

import pytest

from swipe_stack.tasks import TaskRunner


@pytest.mark.asyncio
async def test_spawn_runs_in_background_and_drain_waits():
    runner = TaskRunner()
    done = []

    async def work():
        await asyncio.sleep(0)
        done.append("work")

    runner.spawn(work(), name="work")
    assert done == []
    assert runner.pending == 1

    await runner.drain()

    assert done == ["work"]
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_drain_waits_for_follow_up_tasks():
    runner = TaskRunner()
    done = []

    async def second():
        done.append("second")

    async def first():
        runner.spawn(second(), name="second")
        done.append("first")

    runner.spawn(first(), name="first")
    await runner.drain()

    assert done == ["first", "second"]


@pytest.mark.asyncio
async def test_failed_task_is_logged(caplog):
    runner = TaskRunner()

    async def broken():
        raise RuntimeError("boom")

    with caplog.at_level(logging.ERROR, logger="swipe_stack.tasks"):
        runner.spawn(broken(), name="broken-task")
        await runner.drain()

    assert "background task broken-task failed" in caplog.text
    assert runner.pending == 0


@pytest.mark.asyncio
async def test_cancel_all():
    runner = TaskRunner()
    gate = asyncio.Event()

    async def blocked():
        await gate.wait()

    task = runner.spawn(blocked(), name="blocked")
    await asyncio.sleep(0)
    runner.cancel_all()
    await runner.drain()

    assert task.cancelled()
    assert runner.pending == 0


def test_spawn_requires_running_loop():
    runner = TaskRunner()

    async def noop():
        return None

    coro = noop()
    with pytest.raises(RuntimeError):
        runner.spawn(coro)
    coro.close()
