import random
from typing import Iterable, List, Optional, TypeVar


T = TypeVar("T")

# Process-wide source, seeded from OS entropy once at import
_rng = random.Random()


def get_rng() -> random.Random:
    """FastAPI dependency returning the shared random source."""
    return _rng


def pick_random_distinct(candidates: Optional[Iterable[T]], n: int,
                         rng: Optional[random.Random] = None) -> List[T]:
    """
    Pick up to n distinct elements uniformly without replacement.
    The input is copied and never mutated; a partial Fisher-Yates shuffle
    fills the first n slots of the copy.
    """
    if candidates is None or n <= 0:
        return []

    pool = list(candidates)
    if len(pool) <= n:
        return pool

    rng = rng or _rng
    for i in range(n):
        j = rng.randrange(i, len(pool))
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:n]
