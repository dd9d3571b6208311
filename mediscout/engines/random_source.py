"""
Random primitives for synthetic data generation.

Every generator draws from a RandomSource rather than the global random
module, so a seeded source reproduces a cohort exactly.
"""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Sequence, TypeVar

T = TypeVar("T")

ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
ID_LENGTH = 9


class RandomSource:
    """Seedable wrapper around random.Random with the helpers generators need."""

    def __init__(self, seed: int | None = None, today: date | None = None):
        self.seed = seed
        self.rng = random.Random(seed)
        self._today = today

    def today(self) -> date:
        return self._today or date.today()

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return self.rng.randint(low, high)

    def uniform(self, low: float, high: float, decimals: int = 1) -> float:
        """Uniform float in [low, high] rounded to `decimals` places."""
        return round(self.rng.uniform(low, high), decimals)

    def choice(self, options: Sequence[T]) -> T:
        return self.rng.choice(options)

    def chance(self, probability: float) -> bool:
        """Bernoulli draw: True with the given probability."""
        return self.rng.random() < probability

    def shuffle(self, items: list) -> None:
        """Unbiased in-place shuffle (Fisher-Yates)."""
        self.rng.shuffle(items)

    def generate_id(self) -> str:
        return "".join(self.rng.choice(ID_ALPHABET) for _ in range(ID_LENGTH))

    def recent_date(self, max_days_back: int = 60) -> date:
        return self.today() - timedelta(days=self.randint(0, max_days_back))

    def blood_pressure(self, systolic: tuple[int, int], diastolic: tuple[int, int]) -> str:
        """A 'sys/dia' reading drawn from the two ranges."""
        return f"{self.randint(*systolic)}/{self.randint(*diastolic)}"
