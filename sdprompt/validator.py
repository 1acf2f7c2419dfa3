# sdprompt/validator.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Optional

from .entities import AttributeDefinition, AttributeSelection
from .errors import INVALID_ATTRIBUTE, ValidationError


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[ValidationError] = None


def validate_selection(
    attribute_id: str,
    selections: Iterable[AttributeSelection],
    definitions: Iterable[AttributeDefinition],
) -> ValidationResult:
    """
    Only checks that the attribute exists. `selections` is accepted so callers can
    pass the whole request, but conflicting attributes are allowed to coexist.
    """
    if any(d.id == attribute_id for d in definitions):
        return ValidationResult(valid=True)
    return ValidationResult(
        valid=False,
        error=ValidationError(
            type=INVALID_ATTRIBUTE,
            message=f'Attribute "{attribute_id}" does not exist in attribute definitions',
            details={"invalid_attribute_id": attribute_id},
        ),
    )
