# sdprompt/engine.py
from __future__ import annotations
import logging
from dataclasses import replace

from .entities import EngineInput
from .errors import Err, Ok, Result, TokenLimitExceeded
from .fragment_generator import generate_fragments
from .fragment_orderer import order_fragments
from .fragment_processor import applied_modifiers, apply_modifiers
from .prompt_assembler import assemble_prompt, surviving_fragments
from .validator import validate_selection

log = logging.getLogger(__name__)


def generate_prompt(inp: EngineInput) -> Result:
    """
    Run the pipeline:
      1) validate every selection, stop at the first unknown attribute
      2) selections -> fragments
      3) apply weight modifiers
      4) order by semantic priority, split positive/negative
      5) render strings and enforce the token limit
    Returns Ok(prompt) or Err(validation_error).
    """
    definitions = list(inp.attribute_definitions)
    selections = list(inp.selections)
    modifiers = list(inp.modifiers)

    for sel in selections:
        res = validate_selection(sel.attribute_id, selections, definitions)
        if not res.valid:
            log.info("rejected selection %r: %s", sel.attribute_id, res.error.message)
            return Err(res.error)

    fragments = generate_fragments(selections, definitions)
    weighted = apply_modifiers(fragments, modifiers)
    ordered = order_fragments(weighted)

    try:
        prompt = assemble_prompt(ordered, inp.model_profile)
    except TokenLimitExceeded as exc:
        log.info("%s", exc)
        return Err(exc.to_validation_error())

    log.debug(
        "prompt assembled: fragments=%d positive=%d negative=%d tokens=%d",
        len(fragments), len(ordered.positive), len(ordered.negative), prompt.token_count,
    )
    kept_ids = {f.source_attribute_id for f in surviving_fragments(ordered, inp.model_profile, prompt.positive_tokens)}
    return Ok(replace(
        prompt,
        selected_attribute_ids=tuple(f.source_attribute_id for f in fragments),
        applied_modifiers=tuple(
            mod for mod in applied_modifiers(fragments, modifiers) if mod.target_attribute_id in kept_ids
        ),
    ))
