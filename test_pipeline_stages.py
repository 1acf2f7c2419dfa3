import math

import pytest

from conftest import defn
from sdprompt.entities import AttributeSelection, ModelProfile, Modifier, PromptFragment
from sdprompt.errors import CONFLICT, ERROR_TYPES, INVALID_ATTRIBUTE, TOKEN_LIMIT_EXCEEDED, TokenLimitExceeded
from sdprompt.fragment_generator import generate_fragments
from sdprompt.fragment_orderer import OrderedFragments, order_fragments
from sdprompt.fragment_processor import applied_modifiers, apply_modifiers
from sdprompt.prompt_assembler import assemble_prompt, count_tokens, format_weight, surviving_fragments, truncate
from sdprompt.validator import validate_selection


def frag(attr_id, text=None, priority=1, negative=False, weight=None):
    return PromptFragment(
        text=text or attr_id,
        category="subject",
        semantic_priority=priority,
        is_negative=negative,
        source_attribute_id=attr_id,
        weight=weight,
    )


# validator

def test_validator_rejects_unknown_attribute(definitions):
    res = validate_selection("does-not-exist", [], definitions)

    assert res.valid is False
    assert res.error.type == INVALID_ATTRIBUTE
    assert res.error.details == {"invalid_attribute_id": "does-not-exist"}
    assert "does-not-exist" in res.error.message


def test_validator_ignores_conflicts(definitions):
    selections = [AttributeSelection("character-male"), AttributeSelection("character-female")]

    res = validate_selection("character-female", selections, definitions)

    assert res.valid is True
    assert res.error is None


def test_error_taxonomy_covers_every_produced_type(definitions):
    produced = {
        validate_selection("does-not-exist", [], definitions).error.type,
        TokenLimitExceeded(3, 2).to_validation_error().type,
    }

    assert ERROR_TYPES == (INVALID_ATTRIBUTE, CONFLICT, TOKEN_LIMIT_EXCEEDED)
    assert produced <= set(ERROR_TYPES)


# fragment generator

def test_generator_keeps_order_and_skips_disabled_and_dangling(definitions):
    selections = [
        AttributeSelection("anime-style"),
        AttributeSelection("character-female", is_enabled=False),
        AttributeSelection("ghost"),
        AttributeSelection("character-male"),
    ]

    out = generate_fragments(selections, definitions)

    assert [f.source_attribute_id for f in out] == ["anime-style", "character-male"]
    assert all(f.weight is None for f in out)
    assert out[0].category == "style"
    assert out[0].semantic_priority == 3


def test_generator_appends_custom_extension(definitions):
    out = generate_fragments(
        [
            AttributeSelection("character-female", custom_extension="with red hair"),
            AttributeSelection("anime-style", custom_extension=""),
        ],
        definitions,
    )

    assert out[0].text == "female character with red hair"
    assert out[1].text == "anime style"


def test_generator_copies_negativity_and_does_not_deduplicate(definitions):
    out = generate_fragments(
        [AttributeSelection("bad-anatomy"), AttributeSelection("bad-anatomy")],
        definitions,
    )

    assert len(out) == 2
    assert all(f.is_negative for f in out)


def test_generator_uses_last_definition_for_duplicate_ids():
    defs = [defn("x", "first"), defn("x", "second")]

    out = generate_fragments([AttributeSelection("x")], defs)

    assert out[0].text == "second"


# fragment processor

def test_processor_applies_weight_without_mutating_input():
    fragments = [frag("a"), frag("b")]

    out = apply_modifiers(fragments, [Modifier("b", 1.2)])

    assert out[1].weight == 1.2
    assert out[0].weight is None
    assert fragments[1].weight is None
    assert out is not fragments


@pytest.mark.parametrize("value", [-0.01, 2.01, 5.0, math.nan])
def test_processor_drops_out_of_range_values(value):
    out = apply_modifiers([frag("a")], [Modifier("a", value)])

    assert out[0].weight is None


@pytest.mark.parametrize("value", [0.0, 2.0])
def test_processor_accepts_range_bounds(value):
    out = apply_modifiers([frag("a")], [Modifier("a", value)])

    assert out[0].weight == value


def test_processor_never_weights_negative_fragments():
    out = apply_modifiers([frag("neg", negative=True)], [Modifier("neg", 1.5)])

    assert out[0].weight is None


def test_processor_last_modifier_wins():
    out = apply_modifiers([frag("a")], [Modifier("a", 0.5), Modifier("a", 1.7)])

    assert out[0].weight == 1.7


def test_processor_only_weights_first_matching_fragment():
    out = apply_modifiers([frag("a", "one"), frag("a", "two")], [Modifier("a", 1.1)])

    assert out[0].weight == 1.1
    assert out[1].weight is None


def test_applied_modifiers_lists_only_honoured_ones():
    fragments = [frag("a"), frag("neg", negative=True)]
    mods = [Modifier("a", 1.5), Modifier("neg", 1.0), Modifier("missing", 1.0), Modifier("a", 3.0)]

    assert applied_modifiers(fragments, mods) == [Modifier("a", 1.5)]


def test_applied_modifiers_keeps_last_per_fragment():
    fragments = [frag("a"), frag("b")]
    mods = [Modifier("a", 0.5), Modifier("b", 1.1), Modifier("a", 1.7)]

    assert applied_modifiers(fragments, mods) == [Modifier("b", 1.1), Modifier("a", 1.7)]


# fragment orderer

def test_orderer_sorts_by_priority_then_input_order():
    fragments = [
        frag("quality", priority=6),
        frag("style-1", priority=3),
        frag("neg-late", priority=6, negative=True),
        frag("subject", priority=1),
        frag("style-2", priority=3),
        frag("neg-early", priority=2, negative=True),
    ]

    ordered = order_fragments(fragments)

    assert [f.source_attribute_id for f in ordered.positive] == ["subject", "style-1", "style-2", "quality"]
    assert [f.source_attribute_id for f in ordered.negative] == ["neg-early", "neg-late"]


def test_orderer_accepts_any_integer_priority():
    ordered = order_fragments([frag("b", priority=0), frag("a", priority=-3), frag("c", priority=40)])

    assert [f.source_attribute_id for f in ordered.positive] == ["a", "b", "c"]
    assert ordered.negative == []


# prompt assembler

def test_assembler_renders_attention_weights(profile):
    ordered = OrderedFragments(positive=[frag("a", "female character"), frag("b", "anime style", weight=1.5)])

    prompt = assemble_prompt(ordered, profile)

    assert prompt.positive_tokens == "female character, (anime style:1.50)"
    assert prompt.token_count == 4
    assert prompt.selected_attribute_ids == ()
    assert prompt.applied_modifiers == ()


def test_assembler_leaves_weights_raw_for_other_syntax():
    ordered = OrderedFragments(positive=[frag("a", "anime style", weight=1.5)])

    prompt = assemble_prompt(ordered, ModelProfile(weight_syntax="other"))

    assert prompt.positive_tokens == "anime style"


@pytest.mark.parametrize(
    "weight, expected",
    [(1.5, "1.50"), (1.0, "1.00"), (0.0, "0.00"), (2.0, "2.00"), (0.125, "0.13"), (1.234, "1.23")],
)
def test_format_weight_uses_two_decimals(weight, expected):
    assert format_weight(weight) == expected


def test_assembler_joins_negative_fragments_unweighted(profile):
    ordered = OrderedFragments(
        positive=[frag("a", "cat")],
        negative=[frag("n1", "bad anatomy", negative=True, weight=1.5), frag("n2", "blurry", negative=True)],
    )

    prompt = assemble_prompt(ordered, profile)

    assert prompt.negative_tokens == "bad anatomy, blurry"


def test_assembler_negative_fallbacks(profile):
    empty = OrderedFragments(positive=[frag("a", "cat")])

    assert assemble_prompt(empty, profile).negative_tokens == "deformed, low quality"
    assert assemble_prompt(empty, ModelProfile(default_negative_prompt=None)).negative_tokens == ""


def test_count_tokens_keeps_commas_attached():
    assert count_tokens("female character, anime style") == 4
    assert count_tokens("  ") == 0
    assert count_tokens("") == 0


def test_assembler_truncates_from_the_end():
    ordered = OrderedFragments(positive=[frag("a", "a b"), frag("b", "c d"), frag("c", "e")])

    prompt = assemble_prompt(ordered, ModelProfile(token_limit=3))

    assert prompt.positive_tokens == "a b"
    assert prompt.token_count == 2


def test_assembler_stops_at_first_overflowing_part():
    # "e" would still fit after "a b", but truncation stops at "c d e f"
    ordered = OrderedFragments(positive=[frag("a", "a b"), frag("b", "c d e f"), frag("c", "e")])

    prompt = assemble_prompt(ordered, ModelProfile(token_limit=4))

    assert prompt.positive_tokens == "a b"


def test_assembler_does_not_truncate_at_limit():
    ordered = OrderedFragments(positive=[frag("a", "a b"), frag("b", "c")])

    prompt = assemble_prompt(ordered, ModelProfile(token_limit=3))

    assert prompt.positive_tokens == "a b, c"
    assert prompt.token_count == 3


def test_truncate_with_empty_separator_splits_characters():
    assert truncate("a bc", "", 1) == "a "


def test_assembler_strict_limit_raises():
    ordered = OrderedFragments(positive=[frag("a", "one two three")])

    with pytest.raises(TokenLimitExceeded) as info:
        assemble_prompt(ordered, ModelProfile(token_limit=2, strict_token_limit=True))

    assert info.value.token_count == 3
    assert info.value.token_limit == 2


def test_surviving_fragments_after_truncation():
    # the first fragment's text contains the separator itself
    ordered = OrderedFragments(positive=[frag("a", "a, b"), frag("b", "c d")])
    profile = ModelProfile(token_limit=2)

    assert surviving_fragments(ordered, profile, "a, b") == [ordered.positive[0]]
    assert surviving_fragments(ordered, profile, "a") == []
    assert surviving_fragments(ordered, profile, "a, b, c d") == ordered.positive
