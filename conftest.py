import pathlib

import pytest

from sdprompt.entities import AttributeDefinition, ModelProfile

REPO_ROOT = pathlib.Path(__file__).resolve().parent


def defn(attr_id, text, priority=1, negative=False, category="subject", conflicts=()):
    return AttributeDefinition(
        id=attr_id,
        base_text=text,
        category=category,
        semantic_priority=priority,
        is_negative=negative,
        conflicts_with=tuple(conflicts),
    )


@pytest.fixture
def profile():
    return ModelProfile(
        token_limit=77,
        token_separator=", ",
        weight_syntax="attention",
        default_negative_prompt="deformed, low quality",
    )


@pytest.fixture
def definitions():
    return [
        defn("character-female", "female character", 1, conflicts=["character-male"]),
        defn("character-male", "male character", 1, conflicts=["character-female"]),
        defn("anime-style", "anime style", 3, category="style"),
        defn("golden-hour", "golden hour", 4, category="lighting"),
        defn("masterpiece", "masterpiece", 6, category="quality"),
        defn("bad-anatomy", "bad anatomy", 6, negative=True, category="quality"),
        defn("blurry", "blurry", 5, negative=True, category="quality"),
    ]


@pytest.fixture
def catalog_dir():
    return REPO_ROOT / "catalog"
