"""Bounded, newest-first history lists.

The calculator keeps its last 10 calculations, the global history keeps 50,
the activity log keeps 100 and the coin flip page keeps its last 10 flips.
All of them share the same ring buffer: appending past capacity evicts the
oldest entry.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Deque, Generic, Iterator, List, Optional, TypeVar


CALCULATOR_HISTORY_CAPACITY = 10
GLOBAL_HISTORY_CAPACITY = 50
ACTIVITY_LOG_CAPACITY = 100
COIN_FLIP_HISTORY_CAPACITY = 10

T = TypeVar('T')


@dataclass
class HistoryEntry:
    """A single completed calculation."""
    calculation: str
    result: str
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def text(self) -> str:
        return f"{self.calculation} = {self.result}"

    def to_dict(self) -> dict:
        return {
            'calculation': self.calculation,
            'result': self.result,
            'timestamp': self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'HistoryEntry':
        timestamp = data.get('timestamp')
        return cls(
            calculation=data.get('calculation', ''),
            result=data.get('result', ''),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else datetime.now(),
        )


class HistoryBuffer(Generic[T]):
    """Fixed-capacity list that keeps the newest item first."""

    def __init__(self, capacity: int, items: Optional[List[T]] = None):
        """Create a buffer.

        Args:
            capacity: Maximum number of items retained
            items: Optional initial items, newest first; truncated to capacity
        """
        if capacity <= 0:
            raise ValueError("History capacity must be positive")
        self.capacity = capacity
        self._items: Deque[T] = deque(maxlen=capacity)
        for item in (items or [])[:capacity]:
            self._items.append(item)

    def append(self, item: T) -> None:
        """Add ``item`` as the newest entry, evicting the oldest when full."""
        self._items.appendleft(item)

    def clear(self) -> None:
        self._items.clear()

    def latest(self) -> Optional[T]:
        return self._items[0] if self._items else None

    def to_list(self) -> List[T]:
        return list(self._items)

    def map(self, func: Callable[[T], object]) -> list:
        return [func(item) for item in self._items]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __getitem__(self, index: int) -> T:
        return self._items[index]
