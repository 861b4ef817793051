"""fieldpatch CLI: command-line interface for fieldpatch.

Commands:
    diff      Print the patch request that turns one document into another
    replay    Replay an edit script against a document and print the patch
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import click
import yaml
from pydantic import ValidationError

from fieldpatch import __version__
from fieldpatch.config import FieldPatchConfig, load_config
from fieldpatch.differ import compute_update
from fieldpatch.log import setup_logging
from fieldpatch.models import FieldOperation, PatchRequest
from fieldpatch.tracker import ChangeTracker, TrackerError


def _resolve_cfg() -> FieldPatchConfig:
    """Load config from fieldpatch.yaml (auto-discover, never error)."""
    try:
        return load_config()
    except (OSError, ValueError, yaml.YAMLError):
        return FieldPatchConfig()


def _load_document(path: str) -> Any:
    """Read a YAML or JSON file (JSON is parsed as YAML)."""
    try:
        return yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Cannot parse {path}: {exc}") from exc


def _load_mapping(path: str) -> dict[str, Any]:
    data = _load_document(path)
    if not isinstance(data, dict):
        raise click.ClickException(
            f"Expected a mapping in {path}, got {type(data).__name__}"
        )
    return data


def _load_script(path: str) -> list[FieldOperation]:
    data = _load_document(path) or []
    if isinstance(data, dict):
        data = data.get("operations", [])
    if not isinstance(data, list):
        raise click.ClickException(f"Expected a list of operations in {path}")
    try:
        return [FieldOperation.model_validate(item) for item in data]
    except ValidationError as exc:
        raise click.ClickException(f"Invalid operation in {path}: {exc}") from exc


def _echo_request(request: PatchRequest) -> None:
    click.echo(json.dumps(request.to_dict(), indent=2, sort_keys=True, default=str))


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """fieldpatch: turn document field edits into partial updates."""
    cfg = _resolve_cfg()
    setup_logging(cfg.log_level)
    ctx.obj = cfg


# --- diff command ---


@cli.command()
@click.argument("before", type=click.Path(exists=True, dir_okay=False))
@click.argument("after", type=click.Path(exists=True, dir_okay=False))
@click.option("--id-field", default=None, help="Identifier field (default: config or _id)")
@click.pass_obj
def diff(cfg: FieldPatchConfig, before: str, after: str, id_field: str | None) -> None:
    """Print the patch request that turns BEFORE into AFTER."""
    key_field = id_field or cfg.id_field
    before_doc = _load_mapping(before)
    after_doc = _load_mapping(after)

    if key_field not in before_doc:
        click.echo(f"Document {before} has no {key_field!r} field", err=True)
        sys.exit(1)

    request = PatchRequest(
        filter={key_field: before_doc[key_field]},
        update=compute_update(before_doc, after_doc).to_update(),
    )
    _echo_request(request)


# --- replay command ---


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option("--id-field", default=None, help="Identifier field (default: config or _id)")
@click.option("--clone", is_flag=True, help="Edit a copy of the document")
@click.option("--show-document", is_flag=True, help="Also print the edited document")
@click.pass_obj
def replay(
    cfg: FieldPatchConfig,
    document: str,
    script: str,
    id_field: str | None,
    clone: bool,
    show_document: bool,
) -> None:
    """Replay the edit SCRIPT against DOCUMENT and print the patch request."""
    doc = _load_mapping(document)
    operations = _load_script(script)
    tracker = ChangeTracker(
        doc,
        id_field=id_field or cfg.id_field,
        clone=clone or cfg.clone,
    )

    for index, operation in enumerate(operations, start=1):
        try:
            tracker.apply(operation)
        except TrackerError as exc:
            click.echo(f"Operation {index} ({operation.op.value}) failed: {exc}", err=True)
            sys.exit(1)

    _echo_request(tracker.patch_request)
    if show_document:
        click.echo(json.dumps(tracker.current, indent=2, sort_keys=True, default=str))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
