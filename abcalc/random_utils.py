from __future__ import annotations

import random
from typing import Union

Seed = Union[int, str, random.Random, None]


def seed_from_string(seed_str: str) -> int:
    """Simple 31-multiplier string hash, wrapped to a signed 32-bit int.

    Lets users type a memorable seed ("checkout-test") in the dashboard.
    """
    h = 0
    for ch in seed_str:
        h = ((h << 5) - h) + ord(ch)
        h = (h + 2**31) % 2**32 - 2**31
    return abs(h)


def make_rng(seed: Seed = None) -> random.Random:
    """Return a private random stream for one calculation.

    Never hands out the module-level generator, so two callers cannot end up
    drawing from the same stream.
    """
    if isinstance(seed, random.Random):
        return seed
    if isinstance(seed, str):
        return random.Random(seed_from_string(seed))
    return random.Random(seed)

