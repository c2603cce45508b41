"""Tests for step scheduling and the work-item queue."""

import pytest

from img2img.processing.work import WorkItem, WorkQueue, iter_work_items
from img2img.utils.dimension import calculate_step_count


@pytest.mark.parametrize(
    "tile_count,steps_per_tile,batch_size,expected",
    [(4, 1, 4, 4), (4, 1, 3, 6), (3, 8, 4, 24), (5, 8, 3, 42), (1, 1, 1, 1), (9, 1, 4, 12)],
)
def test_step_count_fills_whole_batches(tile_count, steps_per_tile, batch_size, expected):
    assert calculate_step_count(tile_count, steps_per_tile, batch_size) == expected


def test_work_items_without_augmentation():
    items = list(iter_work_items(6, 1))
    assert items == [WorkItem(i, 0) for i in range(6)]


def test_work_items_with_augmentation():
    items = list(iter_work_items(24, 8))
    assert items[0] == WorkItem(0, 0)
    assert items[7] == WorkItem(0, 7)
    assert items[8] == WorkItem(1, 0)
    assert items[-1] == WorkItem(2, 7)


def test_padding_items():
    assert WorkItem(4, 0).is_padding(4)
    assert not WorkItem(3, 7).is_padding(4)


def test_queue_is_fifo():
    queue = WorkQueue()
    for item in iter_work_items(5, 1):
        queue.push(item)

    assert queue.drain(2) == [WorkItem(0, 0), WorkItem(1, 0)]
    assert len(queue) == 3
    assert queue.drain(3) == [WorkItem(2, 0), WorkItem(3, 0), WorkItem(4, 0)]
    assert len(queue) == 0


def test_queue_refuses_partial_drain():
    queue = WorkQueue()
    queue.push(WorkItem(0, 0))
    with pytest.raises(IndexError):
        queue.drain(2)
    assert len(queue) == 1
