# sdprompt/randomizer.py
from __future__ import annotations
import random
from typing import Dict, Iterable, List, Optional, Set

from .entities import AttributeDefinition, AttributeSelection


def random_selections(
    definitions: Iterable[AttributeDefinition],
    counts: Dict[str, int],
    default_count: int = 5,
    seed: Optional[int] = None,
    include_negative: bool = True,
) -> List[AttributeSelection]:
    """
    Draw attributes per category. Only the categories named in `counts` are
    visited, in that order; a count of 0 falls back to `default_count`.
    Negative attributes are drawn like any other unless `include_negative` is
    off. An attribute is never drawn twice.
    A fixed seed reproduces the same selections for the same catalog.
    """
    rng = random.Random(seed)
    pool = [d for d in definitions if include_negative or not d.is_negative]

    used: Set[str] = set()
    out: List[AttributeSelection] = []
    for category, count in counts.items():
        n = int(count) if count and count > 0 else default_count
        available = [d for d in pool if d.category == category and d.id not in used]
        if not available or n <= 0:
            continue
        for d in rng.sample(available, min(n, len(available))):
            out.append(AttributeSelection(attribute_id=d.id))
            used.add(d.id)
    return out
