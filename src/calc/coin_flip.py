"""Coin flip mini-game: results, running statistics and streaks."""

import random
import time
from dataclasses import dataclass, field
from typing import Optional

from model.History import COIN_FLIP_HISTORY_CAPACITY, HistoryBuffer


HEADS = 'heads'
TAILS = 'tails'


@dataclass
class FlipRecord:
    result: str
    timestamp: float = field(default_factory=lambda: time.time() * 1000)


@dataclass
class CoinStats:
    heads: int = 0
    tails: int = 0
    total: int = 0

    def ratio(self, side: str) -> float:
        """Share of flips that landed on ``side`` (0 when nothing was flipped)."""
        if self.total == 0:
            return 0.0
        return (self.heads if side == HEADS else self.tails) / self.total


@dataclass
class Streak:
    count: int = 0
    side: Optional[str] = None


class CoinFlipGame:
    """Flips a fair coin and keeps statistics.

    The random source is injectable so tests can make flips deterministic.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.stats = CoinStats()
        self.streak = Streak()
        self.history: HistoryBuffer = HistoryBuffer(COIN_FLIP_HISTORY_CAPACITY)
        self.last_result: Optional[str] = None

    def flip(self) -> str:
        result = HEADS if self.rng.random() < 0.5 else TAILS
        self.last_result = result

        self.stats.total += 1
        if result == HEADS:
            self.stats.heads += 1
        else:
            self.stats.tails += 1

        if self.streak.side == result:
            self.streak.count += 1
        else:
            self.streak = Streak(1, result)

        self.history.append(FlipRecord(result))
        return result

    def reset(self) -> None:
        self.stats = CoinStats()
        self.streak = Streak()
        self.history.clear()
        self.last_result = None
