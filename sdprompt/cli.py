# sdprompt/cli.py
from __future__ import annotations
import json
import logging
import pathlib
from dataclasses import replace
from typing import Any, Dict, List, NoReturn, Optional, Tuple

import typer
import yaml

from .catalog import find_duplicate_ids, load_attribute_definitions, summarize_catalog
from .engine import generate_prompt
from .entities import AttributeDefinition, ModelProfile, Modifier
from .errors import Err
from .randomizer import random_selections
from .session import SelectionSession
from .utils import catalog_dir_from_cfg, load_yaml, model_profile_from_cfg

app = typer.Typer(add_completion=False)

DEFAULT_CONFIG = "config.yaml"


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _fail(payload: Dict[str, Any]) -> NoReturn:
    typer.echo(json.dumps({"ok": False, **payload}, ensure_ascii=False))
    raise typer.Exit(code=1)


def _load_cfg(config: str) -> Dict[str, Any]:
    p = pathlib.Path(config)
    if not p.exists():
        # the default config file is optional; an explicit one is not
        if config == DEFAULT_CONFIG:
            return {}
        raise typer.BadParameter(f"config file not found: {p}", param_hint="--config")
    try:
        return load_yaml(p)
    except (ValueError, yaml.YAMLError) as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e


def _load_context(config: str, catalog: Optional[pathlib.Path]) -> Tuple[List[AttributeDefinition], ModelProfile]:
    cfg = _load_cfg(config)
    try:
        profile = model_profile_from_cfg(cfg)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--config") from e

    config_path = config if pathlib.Path(config).exists() else None
    catalog_dir = catalog or catalog_dir_from_cfg(cfg, config_path)
    try:
        definitions = load_attribute_definitions(catalog_dir)
    except FileNotFoundError as e:
        _fail({"error": {"type": "CATALOG_NOT_FOUND", "message": str(e), "details": {}}})
    return definitions, profile


def _split_pair(raw: str, option: str) -> Tuple[str, str]:
    key, sep, value = raw.partition("=")
    if not sep or not key.strip():
        raise typer.BadParameter(f"expected ID=VALUE, got {raw!r}", param_hint=option)
    return key.strip(), value


def _parse_weights(raw: List[str]) -> List[Modifier]:
    out: List[Modifier] = []
    for item in raw:
        key, value = _split_pair(item, "--weight")
        try:
            out.append(Modifier(key, float(value)))
        except ValueError as e:
            raise typer.BadParameter(f"weight for {key!r} is not a number: {value!r}", param_hint="--weight") from e
    return out


def _run(session: SelectionSession, definitions, profile: ModelProfile,
         extra_modifiers: List[Modifier], verbose: bool) -> None:
    inp = session.to_engine_input(definitions, profile)
    if extra_modifiers:
        inp = replace(inp, modifiers=inp.modifiers + tuple(extra_modifiers))
    if verbose:
        typer.echo(json.dumps({
            "stage": "input",
            "selections": [s.attribute_id for s in inp.selections],
            "modifiers": len(inp.modifiers),
        }))

    result = generate_prompt(inp)
    if isinstance(result, Err):
        _fail({"error": result.error.to_payload()})
    typer.echo(json.dumps({"ok": True, **result.prompt.to_payload()}, ensure_ascii=False))


@app.command()
def generate(
    select: List[str] = typer.Option(..., "--select", "-s", help="Attribute id to include (repeatable)."),
    ext: Optional[List[str]] = typer.Option(None, "--ext", help="Custom extension as ID=TEXT (repeatable)."),
    weight: Optional[List[str]] = typer.Option(None, "--weight", "-w", help="Weight as ID=VALUE, 0.0-2.0 (repeatable)."),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to config YAML."),
    catalog: Optional[pathlib.Path] = typer.Option(None, help="Catalog directory (overrides paths.catalog_dir)."),
    verbose: bool = typer.Option(False, help="Extra JSON logging."),
):
    """Build a prompt from explicit attribute selections."""
    _setup_logging(verbose)
    definitions, profile = _load_context(config, catalog)

    extensions = dict(_split_pair(item, "--ext") for item in (ext or []))
    session = SelectionSession()
    for attr_id in select:
        session.select(attr_id, extensions.get(attr_id))

    _run(session, definitions, profile, _parse_weights(weight or []), verbose)


@app.command("random")
def random_prompt(
    count: int = typer.Option(5, min=1, help="Attributes to draw per category."),
    category: Optional[List[str]] = typer.Option(None, "--category", "-c", help="Category to draw from (repeatable, default all)."),
    seed: Optional[int] = typer.Option(None, help="Random seed for reproducible draws."),
    negative: bool = typer.Option(True, "--negative/--no-negative", help="Allow negative attributes in the draw."),
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to config YAML."),
    catalog: Optional[pathlib.Path] = typer.Option(None, help="Catalog directory (overrides paths.catalog_dir)."),
    verbose: bool = typer.Option(False, help="Extra JSON logging."),
):
    """Draw random attributes and build a prompt from them."""
    _setup_logging(verbose)
    definitions, profile = _load_context(config, catalog)

    categories = list(category or summarize_catalog(definitions).keys())
    picks = random_selections(definitions, {c: count for c in categories}, default_count=count, seed=seed,
                              include_negative=negative)
    if not picks:
        _fail({"error": {"type": "EMPTY_SELECTION", "message": "no attributes available for the requested categories", "details": {"categories": categories}}})

    session = SelectionSession()
    for sel in picks:
        session.select(sel.attribute_id)
    _run(session, definitions, profile, [], verbose)


@app.command("catalog")
def catalog_info(
    config: str = typer.Option(DEFAULT_CONFIG, help="Path to config YAML."),
    catalog: Optional[pathlib.Path] = typer.Option(None, help="Catalog directory (overrides paths.catalog_dir)."),
):
    """Summarize the attribute catalog."""
    _setup_logging(False)
    definitions, _ = _load_context(config, catalog)
    typer.echo(json.dumps({
        "ok": True,
        "total": len(definitions),
        "categories": summarize_catalog(definitions),
        "duplicates": find_duplicate_ids(definitions),
    }, ensure_ascii=False))
