"""Work items issued to the executor and the FIFO that tracks them."""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List


@dataclass(frozen=True)
class WorkItem:
    """One executor pass: a tile and the augmentation it is rendered with."""

    tile_index: int
    augmentation_index: int

    def is_padding(self, tile_count: int) -> bool:
        return self.tile_index >= tile_count


class WorkQueue:
    """FIFO of work items in the order their tiles were placed in a batch."""

    def __init__(self):
        self._items: Deque[WorkItem] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def push(self, item: WorkItem):
        self._items.append(item)

    def drain(self, count: int) -> List[WorkItem]:
        """Pop exactly ``count`` items, oldest first."""
        if count > len(self._items):
            raise IndexError(f"Cannot drain {count} work items, only {len(self._items)} queued")
        return [self._items.popleft() for _ in range(count)]


def iter_work_items(step_count: int, steps_per_tile: int) -> Iterator[WorkItem]:
    """Yield the work item of every pipeline step.

    Args:
        step_count (int): Total steps, including batch padding
        steps_per_tile (int): Executor passes per tile

    Yields:
        WorkItem: (step // steps_per_tile, step % steps_per_tile)
    """
    for step in range(step_count):
        yield WorkItem(step // steps_per_tile, step % steps_per_tile)
