# sdprompt/fragment_orderer.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from .entities import PromptFragment


@dataclass(frozen=True)
class OrderedFragments:
    positive: List[PromptFragment] = field(default_factory=list)
    negative: List[PromptFragment] = field(default_factory=list)


def _sort(items: List[Tuple[int, PromptFragment]]) -> List[PromptFragment]:
    # original index is an explicit second key, so ties keep selection order
    items.sort(key=lambda t: (t[1].semantic_priority, t[0]))
    return [f for _, f in items]


def order_fragments(fragments: Iterable[PromptFragment]) -> OrderedFragments:
    positive: List[Tuple[int, PromptFragment]] = []
    negative: List[Tuple[int, PromptFragment]] = []
    for i, frag in enumerate(fragments):
        (negative if frag.is_negative else positive).append((i, frag))
    return OrderedFragments(positive=_sort(positive), negative=_sort(negative))
