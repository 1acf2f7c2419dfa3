# sdprompt/fragment_processor.py
from __future__ import annotations
from dataclasses import replace
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .entities import WEIGHT_MAX, WEIGHT_MIN, Modifier, PromptFragment


def _honoured(fragments: Sequence[PromptFragment], modifiers: Iterable[Modifier]) -> Iterator[Tuple[int, Modifier]]:
    """Yield (fragment index, modifier) for every modifier that actually applies."""
    for mod in modifiers:
        # NaN fails both comparisons and is dropped with the out-of-range values
        if not (WEIGHT_MIN <= mod.value <= WEIGHT_MAX):
            continue
        idx = next(
            (i for i, f in enumerate(fragments) if f.source_attribute_id == mod.target_attribute_id),
            None,
        )
        if idx is None:
            continue
        if fragments[idx].is_negative:
            continue
        yield idx, mod


def apply_modifiers(fragments: Sequence[PromptFragment], modifiers: Iterable[Modifier]) -> List[PromptFragment]:
    """
    Returns a new list; a later modifier for the same attribute overwrites an
    earlier one. Negative fragments never carry a weight.
    """
    out = list(fragments)
    for idx, mod in _honoured(fragments, modifiers):
        out[idx] = replace(out[idx], weight=float(mod.value))
    return out


def applied_modifiers(fragments: Sequence[PromptFragment], modifiers: Iterable[Modifier]) -> List[Modifier]:
    """Modifiers whose weight ends up on a fragment: the last one per fragment, in input order."""
    last: Dict[int, Tuple[int, Modifier]] = {}
    for order, (idx, mod) in enumerate(_honoured(fragments, modifiers)):
        last[idx] = (order, mod)
    return [mod for _, mod in sorted(last.values(), key=lambda t: t[0])]
