import random
from typing import List, Optional, Sequence, TypeVar

T = TypeVar("T")


class RNG(random.Random):
    """Seeded RNG to keep deterministic behavior."""

    def shuffled(self, items: Sequence[T]) -> List[T]:
        out = list(items)
        self.shuffle(out)
        return out

    def sign(self) -> int:
        return self.choice((-1, 1))


def new_rng(seed: Optional[int] = None) -> RNG:
    rng = RNG()
    rng.seed(seed)
    return rng
