# sdprompt/fragment_generator.py
from __future__ import annotations
from typing import Dict, Iterable, List

from .entities import AttributeDefinition, AttributeSelection, PromptFragment


def _fragment_text(base_text: str, extension: str | None) -> str:
    if extension:
        return f"{base_text} {extension}"
    return base_text


def generate_fragments(
    selections: Iterable[AttributeSelection],
    definitions: Iterable[AttributeDefinition],
) -> List[PromptFragment]:
    """
    One fragment per enabled selection whose attribute is in the catalog, in
    selection order. Dangling ids were already gated by validation, so they are
    skipped here rather than reported.
    """
    by_id: Dict[str, AttributeDefinition] = {d.id: d for d in definitions}

    out: List[PromptFragment] = []
    for sel in selections:
        if not sel.is_enabled:
            continue
        definition = by_id.get(sel.attribute_id)
        if definition is None:
            continue
        out.append(PromptFragment(
            text=_fragment_text(definition.base_text, sel.custom_extension),
            category=definition.category,
            semantic_priority=definition.semantic_priority,
            is_negative=definition.is_negative,
            source_attribute_id=sel.attribute_id,
        ))
    return out
