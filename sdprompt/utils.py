# sdprompt/utils.py
from __future__ import annotations
import pathlib
from typing import Any, Dict

import yaml

from .entities import WEIGHT_SYNTAX_ATTENTION, ModelProfile

DEFAULT_CATALOG_DIR = "catalog"


def load_yaml(path: str | bytes | pathlib.Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"config must be a YAML mapping: {path}")
    return data


def model_profile_from_cfg(cfg: Dict[str, Any]) -> ModelProfile:
    mp = (cfg or {}).get("model_profile") or {}
    defaults = ModelProfile()

    token_limit = mp.get("token_limit", defaults.token_limit)
    if isinstance(token_limit, bool) or not isinstance(token_limit, int) or token_limit <= 0:
        raise ValueError(f"model_profile.token_limit must be a positive integer (got {token_limit!r})")

    syntax = mp.get("weight_syntax", defaults.weight_syntax)
    if syntax != WEIGHT_SYNTAX_ATTENTION:
        raise ValueError(f"model_profile.weight_syntax must be '{WEIGHT_SYNTAX_ATTENTION}' (got {syntax!r})")

    default_negative = mp.get("default_negative_prompt", defaults.default_negative_prompt)
    return ModelProfile(
        token_limit=token_limit,
        token_separator=str(mp.get("token_separator", defaults.token_separator)),
        weight_syntax=syntax,
        default_negative_prompt=None if default_negative is None else str(default_negative),
        strict_token_limit=bool(mp.get("strict_token_limit", defaults.strict_token_limit)),
    )


def catalog_dir_from_cfg(cfg: Dict[str, Any], config_path: str | pathlib.Path | None = None) -> pathlib.Path:
    """Relative catalog paths resolve against the config file's directory."""
    raw = ((cfg or {}).get("paths") or {}).get("catalog_dir") or DEFAULT_CATALOG_DIR
    p = pathlib.Path(raw)
    if not p.is_absolute() and config_path is not None:
        p = pathlib.Path(config_path).resolve().parent / p
    return p
