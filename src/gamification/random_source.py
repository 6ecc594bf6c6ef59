"""
Random Source
Single injectable source of randomness for gacha rolls, modifier
generation, and quest selection
"""
import math
import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar('T')


class RandomSource:
    """Every draw is derived from uniform() so a seeded or scripted source replays exactly"""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def uniform(self) -> float:
        """Float in [0, 1)"""
        return self._rng.random()

    def randint(self, low: int, high: int) -> int:
        """Integer in [low, high], both inclusive"""
        if high <= low:
            return low
        return low + min(math.floor(self.uniform() * (high - low + 1)), high - low)

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise IndexError("Cannot choose from an empty sequence")
        return items[self.randint(0, len(items) - 1)]

    def shuffle(self, items: Sequence[T]) -> List[T]:
        """Return a Fisher-Yates shuffled copy"""
        shuffled = list(items)
        for i in range(len(shuffled) - 1, 0, -1):
            j = self.randint(0, i)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    def sample(self, items: Sequence[T], count: int) -> List[T]:
        """Pick `count` items without replacement (shuffle, then take)"""
        return self.shuffle(items)[:max(0, count)]
