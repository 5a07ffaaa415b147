import asyncio

from unittest.mock import MagicMock

from rift_reviewer.core.background import SideTaskQueue


async def test_submitted_task_runs(side_tasks):
    """Test queued work runs without the caller awaiting it"""
    done = asyncio.Event()

    async def work():
        done.set()

    assert side_tasks.submit("work", work, match_id="NA1_1") is True
    await side_tasks.join()

    assert done.is_set()
    assert side_tasks.stats["submitted"] == 1
    assert side_tasks.stats["completed"] == 1


async def test_failure_reaches_error_callback_and_not_caller():
    """Test a failing task is observed by the callback only"""
    on_error = MagicMock()
    queue = SideTaskQueue(workers=1, maxsize=10, on_error=on_error)
    await queue.start()

    async def boom():
        raise RuntimeError("backfill failed")

    queue.submit("boom", boom)
    await queue.join()
    await queue.stop()

    on_error.assert_called_once()
    task, error = on_error.call_args.args
    assert task.name == "boom"
    assert isinstance(error, RuntimeError)
    assert queue.stats["failed"] == 1


async def test_full_queue_drops_task():
    """Test submit never blocks when the queue is full"""
    queue = SideTaskQueue(workers=1, maxsize=1)
    queue.running = True  # accept submissions without draining them

    async def noop():
        return None

    assert queue.submit("first", noop) is True
    assert queue.submit("second", noop) is False
    assert queue.stats["dropped"] == 1


async def test_stopped_queue_drops_task():
    queue = SideTaskQueue()

    async def noop():
        return None

    assert queue.submit("late", noop) is False
    assert queue.stats["dropped"] == 1
