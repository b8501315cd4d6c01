from __future__ import annotations

import random
from typing import List, Optional

from .logstore import LogStore


def sample_failing(
    store: LogStore, count: int = 1, rng: Optional[random.Random] = None
) -> List[str]:
    if count < 0:
        raise ValueError("count must be >= 0")
    failing = sorted(set(store.failing()))
    if count == 0 or not failing:
        return []
    chooser = rng or random.SystemRandom()
    return chooser.sample(failing, min(count, len(failing)))
