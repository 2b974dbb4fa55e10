"""Injectable randomness for template selection and placeholder values.

Fallback templates and synthetic transcript confidences are picked through
a ``ChoicePolicy`` instead of the global ``random`` module so a seeded
policy gives reproducible output.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

from ..config import get_settings

T = TypeVar("T")


class ChoicePolicy:
    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def choose(self, options: Sequence[T]) -> T:
        if not options:
            raise ValueError("choose() needs at least one option")
        return options[self._rng.randrange(len(options))]

    def index(self, size: int) -> int:
        """Pick an index in ``range(size)``; used to keep paired lists aligned."""
        return self._rng.randrange(size)

    def uniform(self, lo: float, hi: float) -> float:
        return self._rng.uniform(lo, hi)


def get_choice_policy() -> ChoicePolicy:
    """FastAPI dependency. Seeded from IDEAJUDGE_RANDOM_SEED when set."""
    return ChoicePolicy(get_settings().random_seed)
