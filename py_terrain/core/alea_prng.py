"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. A single instance is owned by the
generation context and handed to every stage that needs randomness, so a seed
string fully determines a generated map.
"""

from typing import Callable, Sequence, Union

_TWO_POW_32 = 0x100000000
_TWO_POW_NEG_32 = 2.3283064365386963e-10


def _uint32(n) -> int:
    return int(n) & 0xFFFFFFFF


def _make_mash() -> Callable[[object], float]:
    """Return a stateful mash function hashing values into [0, 1)."""
    state = 0xEFC8249D

    def mash(data) -> float:
        nonlocal state
        for char in str(data):
            state += ord(char)
            h = 0.02519603282416938 * state
            state = _uint32(h)
            h -= state
            h *= state
            state = _uint32(h)
            h -= state
            state += h * _TWO_POW_32
        return _uint32(state) * _TWO_POW_NEG_32

    return mash


class AleaPRNG:
    """Seedable generator producing floats in [0, 1).

    Attributes:
        seed: Seed the generator was created with.
        call_count: Number of values drawn so far.
    """

    def __init__(self, seed: Union[str, int, Sequence]):
        self.seed = seed
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            parts = list(seed)
        else:
            parts = [seed]

        mash = _make_mash()
        self._s0 = mash(" ")
        self._s1 = mash(" ")
        self._s2 = mash(" ")
        self._c = 1

        for part in parts:
            self._s0 = self._fold(self._s0 - mash(part))
            self._s1 = self._fold(self._s1 - mash(part))
            self._s2 = self._fold(self._s2 - mash(part))

    @staticmethod
    def _fold(value: float) -> float:
        return value + 1 if value < 0 else value

    def random(self) -> float:
        """Draw the next float in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self._s0 + self._c * _TWO_POW_NEG_32
        self._s0 = self._s1
        self._s1 = self._s2
        self._c = int(t)
        self._s2 = t - self._c
        return self._s2

    def rand(self, low: int, high: int = None) -> int:
        """Integer in [low, high]; with one argument, in [0, low]."""
        if high is None:
            low, high = 0, low
        return int(self.random() * (high - low + 1)) + low

    def chance(self, probability: float) -> bool:
        """Return True with the given probability.

        Certain outcomes (probability <= 0 or >= 1) do not consume a draw.
        """
        if probability >= 1:
            return True
        if probability <= 0:
            return False
        return self.random() < probability
