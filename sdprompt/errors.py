# sdprompt/errors.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Union

from .entities import Prompt

INVALID_ATTRIBUTE = "INVALID_ATTRIBUTE"
CONFLICT = "CONFLICT"  # reserved: conflicts are modelled in data but not enforced
TOKEN_LIMIT_EXCEEDED = "TOKEN_LIMIT_EXCEEDED"

ERROR_TYPES = (INVALID_ATTRIBUTE, CONFLICT, TOKEN_LIMIT_EXCEEDED)


@dataclass(frozen=True)
class ValidationError:
    type: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message, "details": dict(self.details)}


class TokenLimitExceeded(Exception):
    """Raised by the assembler only when the model profile asks for hard failure."""

    def __init__(self, token_count: int, token_limit: int):
        super().__init__(f"Prompt has {token_count} tokens, limit is {token_limit}")
        self.token_count = token_count
        self.token_limit = token_limit

    def to_validation_error(self) -> ValidationError:
        return ValidationError(
            type=TOKEN_LIMIT_EXCEEDED,
            message=str(self),
            details={"calculated_token_count": self.token_count, "token_limit": self.token_limit},
        )


@dataclass(frozen=True)
class Ok:
    prompt: Prompt
    is_ok = True


@dataclass(frozen=True)
class Err:
    error: ValidationError
    is_ok = False


Result = Union[Ok, Err]
