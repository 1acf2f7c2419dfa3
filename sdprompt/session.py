# sdprompt/session.py
from __future__ import annotations
import math
from typing import Dict, Iterable, Optional, Tuple

from .entities import (
    WEIGHT_MAX,
    WEIGHT_MIN,
    AttributeDefinition,
    AttributeSelection,
    EngineInput,
    ModelProfile,
    Modifier,
)

DEFAULT_WEIGHT = 1.0


class SelectionSession:
    """
    Mutable selection state of an interactive caller, keyed by attribute id.
    Every selected attribute gets a weight (default 1.0) that only reaches the
    pipeline once its toggle is switched on. `snapshot()` is the boundary: it
    returns immutable sequences for one `generate_prompt` call.
    """

    def __init__(self):
        self._selections: Dict[str, AttributeSelection] = {}
        self._weights: Dict[str, float] = {}
        self._weight_enabled: Dict[str, bool] = {}

    def __contains__(self, attribute_id: str) -> bool:
        return attribute_id in self._selections

    def __len__(self) -> int:
        return len(self._selections)

    def select(self, attribute_id: str, custom_extension: Optional[str] = None) -> None:
        self._selections[attribute_id] = AttributeSelection(attribute_id, True, custom_extension)
        self._weights.setdefault(attribute_id, DEFAULT_WEIGHT)
        self._weight_enabled.setdefault(attribute_id, False)

    def deselect(self, attribute_id: str) -> None:
        self._selections.pop(attribute_id, None)
        self._weights.pop(attribute_id, None)
        self._weight_enabled.pop(attribute_id, None)

    def set_extension(self, attribute_id: str, text: Optional[str]) -> None:
        sel = self._selections.get(attribute_id)
        if sel is None:
            raise KeyError(attribute_id)
        self._selections[attribute_id] = AttributeSelection(attribute_id, sel.is_enabled, text or None)

    def set_weight(self, attribute_id: str, value: float) -> None:
        if attribute_id not in self._selections:
            raise KeyError(attribute_id)
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"weight for {attribute_id!r} must be finite, got {value!r}")
        self._weights[attribute_id] = min(WEIGHT_MAX, max(WEIGHT_MIN, value))
        self._weight_enabled[attribute_id] = True

    def enable_weight(self, attribute_id: str, enabled: bool = True) -> None:
        if attribute_id not in self._selections:
            raise KeyError(attribute_id)
        self._weight_enabled[attribute_id] = bool(enabled)

    def weight(self, attribute_id: str) -> Optional[float]:
        return self._weights.get(attribute_id)

    def clear(self) -> None:
        self._selections.clear()
        self._weights.clear()
        self._weight_enabled.clear()

    def snapshot(self) -> Tuple[Tuple[AttributeSelection, ...], Tuple[Modifier, ...]]:
        selections = tuple(self._selections.values())
        modifiers = tuple(
            Modifier(attr_id, self._weights[attr_id])
            for attr_id in self._selections
            if self._weight_enabled.get(attr_id)
        )
        return selections, modifiers

    def to_engine_input(self, definitions: Iterable[AttributeDefinition], profile: ModelProfile) -> EngineInput:
        selections, modifiers = self.snapshot()
        return EngineInput(
            attribute_definitions=tuple(definitions),
            selections=selections,
            modifiers=modifiers,
            model_profile=profile,
        )
