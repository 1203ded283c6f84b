"""Deterministic pseudo-random stream backing the live backtest preview."""

from __future__ import annotations

UINT32_MASK = 0xFFFFFFFF
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
DEFAULT_STREAM_SEED = 1234567


class SeededStream:
    """32-bit linear congruential generator with a Math.random-like interface.

    The state wraps modulo 2**32 using integer arithmetic, so a given seed
    yields the same sequence on every platform.
    """

    def __init__(self, seed: int = DEFAULT_STREAM_SEED) -> None:
        self._seed = int(seed) & UINT32_MASK
        self._state = self._seed

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def state(self) -> int:
        return self._state

    def next(self) -> float:
        """Advance the state and return it scaled by 2**32 - 1."""
        self._state = (LCG_MULTIPLIER * self._state + LCG_INCREMENT) & UINT32_MASK
        return self._state / UINT32_MASK

    def __iter__(self) -> SeededStream:
        return self

    def __next__(self) -> float:
        return self.next()
