# sdprompt/entities.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Tuple

CATEGORIES = (
    "subject",
    "style",
    "lighting",
    "camera",
    "environment",
    "quality",
    "effects",
    "post-processing",
    "composition",
    # legacy tags still present in older catalog files
    "attribute",
    "effect",
)

WEIGHT_SYNTAX_ATTENTION = "attention"
WEIGHT_MIN = 0.0
WEIGHT_MAX = 2.0


@dataclass(frozen=True)
class AttributeDefinition:
    """
    Catalog entry. `semantic_priority` orders fragments (lower first, 1 = subject
    through 6 = quality by convention). `conflicts_with` is kept as data only.
    """
    id: str
    base_text: str
    category: str
    semantic_priority: int
    is_negative: bool = False
    conflicts_with: Tuple[str, ...] = ()


@dataclass(frozen=True)
class AttributeSelection:
    attribute_id: str
    is_enabled: bool = True
    custom_extension: Optional[str] = None


@dataclass(frozen=True)
class Modifier:
    target_attribute_id: str
    value: float


@dataclass(frozen=True)
class PromptFragment:
    text: str
    category: str
    semantic_priority: int
    is_negative: bool
    source_attribute_id: str
    weight: Optional[float] = None


@dataclass(frozen=True)
class ModelProfile:
    """
    Formatting rules of the target model. With `strict_token_limit` an overflowing
    positive prompt is reported instead of being truncated from the end.
    """
    token_limit: int = 77
    token_separator: str = ", "
    weight_syntax: str = WEIGHT_SYNTAX_ATTENTION
    default_negative_prompt: Optional[str] = None
    strict_token_limit: bool = False


@dataclass(frozen=True)
class Prompt:
    positive_tokens: str
    negative_tokens: str
    token_count: int
    selected_attribute_ids: Tuple[str, ...] = ()
    applied_modifiers: Tuple[Modifier, ...] = ()

    def to_payload(self) -> dict:
        return {
            "positive": self.positive_tokens,
            "negative": self.negative_tokens,
            "token_count": self.token_count,
            "selected": list(self.selected_attribute_ids),
            "modifiers": [
                {"target": m.target_attribute_id, "value": m.value} for m in self.applied_modifiers
            ],
        }


@dataclass(frozen=True)
class EngineInput:
    attribute_definitions: Tuple[AttributeDefinition, ...] = ()
    selections: Tuple[AttributeSelection, ...] = ()
    modifiers: Tuple[Modifier, ...] = ()
    model_profile: ModelProfile = field(default_factory=ModelProfile)
