"""Tests for the coin flip game."""

import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '../src')))

from calc.coin_flip import HEADS, TAILS, CoinFlipGame, CoinStats


class FakeRandom:
    """Returns queued values from random()."""

    def __init__(self, values):
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


class TestCoinFlipGame:
    def test_low_values_are_heads(self):
        game = CoinFlipGame(FakeRandom([0.1, 0.9, 0.5]))
        assert [game.flip() for _ in range(3)] == [HEADS, TAILS, TAILS]

    def test_statistics(self):
        game = CoinFlipGame(FakeRandom([0.1, 0.2, 0.7, 0.3]))
        for _ in range(4):
            game.flip()
        assert (game.stats.heads, game.stats.tails, game.stats.total) == (3, 1, 4)
        assert game.stats.ratio(HEADS) == 0.75
        assert game.stats.ratio(TAILS) == 0.25

    def test_streak_resets_on_change(self):
        game = CoinFlipGame(FakeRandom([0.9, 0.8, 0.7, 0.1]))
        for _ in range(3):
            game.flip()
        assert (game.streak.count, game.streak.side) == (3, TAILS)
        game.flip()
        assert (game.streak.count, game.streak.side) == (1, HEADS)

    def test_history_keeps_last_ten(self):
        game = CoinFlipGame(FakeRandom([0.1] * 11 + [0.9]))
        for _ in range(12):
            game.flip()
        assert len(game.history) == 10
        assert game.history.latest().result == TAILS

    def test_reset(self):
        game = CoinFlipGame(FakeRandom([0.1]))
        game.flip()
        game.reset()
        assert game.stats == CoinStats()
        assert game.streak.count == 0
        assert game.last_result is None
        assert len(game.history) == 0


def test_ratio_with_no_flips():
    assert CoinStats().ratio(HEADS) == 0.0
