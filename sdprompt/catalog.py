# sdprompt/catalog.py
from __future__ import annotations
import json
import logging
import pathlib
from collections import Counter
from typing import Any, Dict, Iterable, List, Optional

import yaml

from .entities import CATEGORIES, AttributeDefinition

log = logging.getLogger(__name__)

CATALOG_SUFFIXES = (".yaml", ".yml", ".json")

# snake_case name -> original camelCase spelling still found in exported data
_ALIASES = {
    "base_text": "baseText",
    "semantic_priority": "semanticPriority",
    "is_negative": "isNegative",
    "conflicts_with": "conflictsWith",
}


def _field(raw: Dict[str, Any], name: str, default: Any = None) -> Any:
    if name in raw:
        return raw[name]
    return raw.get(_ALIASES.get(name, name), default)


def _read(path: pathlib.Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def _to_definition(raw: Any, category: str) -> Optional[AttributeDefinition]:
    if not isinstance(raw, dict):
        return None
    attr_id = _field(raw, "id")
    base_text = _field(raw, "base_text")
    priority = _field(raw, "semantic_priority")
    negative = _field(raw, "is_negative")
    conflicts = _field(raw, "conflicts_with") or []

    if not isinstance(attr_id, str) or not attr_id.strip():
        return None
    if not isinstance(base_text, str) or not base_text:
        return None
    # bool is an int subclass; a priority of True is a data error
    if isinstance(priority, bool) or not isinstance(priority, int):
        return None
    if not isinstance(negative, bool):
        return None
    if not isinstance(conflicts, list):
        return None

    return AttributeDefinition(
        id=attr_id.strip(),
        base_text=base_text,
        category=category,
        semantic_priority=priority,
        is_negative=negative,
        conflicts_with=tuple(str(c) for c in conflicts),
    )


def load_category_file(path: str | pathlib.Path) -> List[AttributeDefinition]:
    """
    Read one `{category, attributes: [...]}` file. Every attribute inherits the
    wrapper's category. Malformed attributes are logged and skipped.
    """
    p = pathlib.Path(path)
    data = _read(p)
    if not isinstance(data, dict) or "category" not in data or "attributes" not in data:
        log.info("skipping %s: not a category file", p.name)
        return []

    category = str(data["category"])
    if category not in CATEGORIES:
        log.warning("%s: unknown category %r", p.name, category)

    raw_attrs = data.get("attributes") or []
    if not isinstance(raw_attrs, list):
        raise ValueError(f"{p}: 'attributes' must be a list")

    out: List[AttributeDefinition] = []
    for idx, raw in enumerate(raw_attrs):
        definition = _to_definition(raw, category)
        if definition is None:
            log.error("%s: attributes[%d] is invalid and was skipped: %r", p.name, idx, raw)
            continue
        out.append(definition)
    log.debug("loaded %d attributes for category %s from %s", len(out), category, p.name)
    return out


def find_duplicate_ids(definitions: Iterable[AttributeDefinition]) -> List[str]:
    counts = Counter(d.id for d in definitions)
    return [attr_id for attr_id, n in counts.items() if n > 1]


def summarize_catalog(definitions: Iterable[AttributeDefinition]) -> Dict[str, int]:
    """Attribute count per category, in first-seen order."""
    summary: Dict[str, int] = {}
    for d in definitions:
        summary[d.category] = summary.get(d.category, 0) + 1
    return summary


def load_attribute_definitions(catalog_dir: str | pathlib.Path) -> List[AttributeDefinition]:
    root = pathlib.Path(catalog_dir)
    if not root.is_dir():
        raise FileNotFoundError(f"catalog directory not found: {root}")

    definitions: List[AttributeDefinition] = []
    files = sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() in CATALOG_SUFFIXES)
    for p in files:
        try:
            definitions.extend(load_category_file(p))
        except (OSError, ValueError, yaml.YAMLError) as e:
            # json.JSONDecodeError is a ValueError
            log.warning("failed to load catalog file %s: %s", p.name, e)

    dupes = find_duplicate_ids(definitions)
    if dupes:
        log.error("duplicate attribute ids in catalog (ids must be unique): %s", ", ".join(dupes))
    log.info("catalog loaded: %d attributes from %d files", len(definitions), len(files))
    return definitions
