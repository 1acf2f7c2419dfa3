# sdprompt/prompt_assembler.py
from __future__ import annotations
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from .entities import WEIGHT_SYNTAX_ATTENTION, ModelProfile, Prompt, PromptFragment
from .errors import TokenLimitExceeded
from .fragment_orderer import OrderedFragments

log = logging.getLogger(__name__)


def count_tokens(text: str) -> int:
    """
    Approximate token count: whitespace separated words. Separator commas stay
    attached to their words, so this is not what a CLIP tokenizer would report.
    """
    return len(text.split())


def format_weight(weight: float) -> str:
    # two decimals, ties rounded up (0.125 -> "0.13")
    return str(Decimal(weight).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def render_fragment(frag: PromptFragment, profile: ModelProfile) -> str:
    if frag.weight is not None and profile.weight_syntax == WEIGHT_SYNTAX_ATTENTION:
        return f"({frag.text}:{format_weight(frag.weight)})"
    return frag.text


def _split_parts(text: str, sep: str) -> List[str]:
    return text.split(sep) if sep else list(text)


def truncate(text: str, sep: str, limit: int) -> str:
    """Keep leading separator-delimited parts while the word count stays within limit."""
    kept: List[str] = []
    used = 0
    for part in _split_parts(text, sep):
        n = count_tokens(part)
        if used + n > limit:
            break
        kept.append(part)
        used += n
    return sep.join(kept)


def assemble_prompt(ordered: OrderedFragments, profile: ModelProfile) -> Prompt:
    sep = profile.token_separator
    positive = sep.join(render_fragment(f, profile) for f in ordered.positive)

    if ordered.negative:
        negative = sep.join(f.text for f in ordered.negative)
    else:
        negative = profile.default_negative_prompt or ""

    count = count_tokens(positive)
    if count > profile.token_limit:
        if profile.strict_token_limit:
            raise TokenLimitExceeded(count, profile.token_limit)
        positive = truncate(positive, sep, profile.token_limit)
        log.debug("positive prompt truncated from %d words to %d", count, count_tokens(positive))

    return Prompt(
        positive_tokens=positive,
        negative_tokens=negative,
        token_count=count_tokens(positive),
    )


def surviving_fragments(ordered: OrderedFragments, profile: ModelProfile, positive: str) -> List[PromptFragment]:
    """Positive fragments whose whole rendering is still inside the (possibly truncated) positive text."""
    sep = profile.token_separator
    out: List[PromptFragment] = []
    end = -len(sep)
    for frag in ordered.positive:
        # truncation keeps a prefix of the joined text
        end += len(sep) + len(render_fragment(frag, profile))
        if end > len(positive):
            break
        out.append(frag)
    return out
