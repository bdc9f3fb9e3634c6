"""Command-line interface for bencodec.

Provides commands to inspect, validate and canonicalize bencoded files.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from bencodec.config.config import ConfigManager, init_config
from bencodec.core.decoder import BencodeDecoder
from bencodec.core.encoder import BencodeEncoder
from bencodec.core.values import ByteString, Dictionary, Integer, IntegerWidth, List, Value
from bencodec.models import LogLevel
from bencodec.utils.exceptions import BencodeDecodeError, BencodecError
from bencodec.utils.logging_config import LoggingContext, setup_logging

logger = logging.getLogger(__name__)

# Byte strings longer than this are summarized in tree output
PREVIEW_LIMIT = 64


def _describe_bytes(data: bytes) -> str:
    """Render bytes as text when they are printable UTF-8, else as hex."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None and text.isprintable():
        if len(text) > PREVIEW_LIMIT:
            return f"{text[:PREVIEW_LIMIT]!r}... ({len(data)} bytes)"
        return repr(text)
    if len(data) > PREVIEW_LIMIT // 2:
        return f"<{len(data)} bytes> {data[: PREVIEW_LIMIT // 2].hex()}..."
    return f"<{len(data)} bytes> {data.hex()}"


def _build_tree(value: Value, tree: Tree) -> None:
    """Attach the children of ``value`` to a Rich tree node."""
    if isinstance(value, Dictionary):
        for key, item in value.sorted_items():
            label = f"[cyan]{escape(_describe_bytes(key))}[/cyan]"
            if isinstance(item, (List, Dictionary)):
                _build_tree(item, tree.add(f"{label} {_container_label(item)}"))
            else:
                tree.add(f"{label}: {_leaf_label(item)}")
    elif isinstance(value, List):
        for index, item in enumerate(value.items):
            label = f"[magenta]{index}[/magenta]"
            if isinstance(item, (List, Dictionary)):
                _build_tree(item, tree.add(f"{label} {_container_label(item)}"))
            else:
                tree.add(f"{label}: {_leaf_label(item)}")


def _container_label(value: List | Dictionary) -> str:
    if isinstance(value, Dictionary):
        return f"[dim]dict ({len(value)})[/dim]"
    return f"[dim]list ({len(value)})[/dim]"


def _leaf_label(value: Value) -> str:
    if isinstance(value, Integer):
        suffix = " [dim]u64[/dim]" if value.width is IntegerWidth.UNSIGNED else ""
        return f"[green]{value.value}[/green]{suffix}"
    if isinstance(value, ByteString):
        return f"[yellow]{escape(_describe_bytes(value.data))}[/yellow]"
    return escape(repr(value))


def _to_json(value: Value) -> Any:
    """Convert a tree to JSON-compatible data.

    Byte strings that are not UTF-8 become ``{"hex": ...}`` objects, which a
    reader cannot tell apart from a dictionary holding a single ``hex`` key.
    Non-UTF-8 dictionary keys are rendered with backslash escapes.

    Raises:
        ValueError: Two distinct keys render to the same JSON key.

    """
    if isinstance(value, ByteString):
        try:
            return value.data.decode("utf-8")
        except UnicodeDecodeError:
            return {"hex": value.data.hex()}
    if isinstance(value, Integer):
        return value.value
    if isinstance(value, List):
        return [_to_json(item) for item in value.items]
    result: dict[str, Any] = {}
    for key, item in value.sorted_items():
        text = key.decode("utf-8", errors="backslashreplace")
        if text in result:
            msg = f"two dictionary keys render as JSON key {text!r}"
            raise ValueError(msg)
        result[text] = _to_json(item)
    return result


def _get_config_from_context(ctx: click.Context) -> ConfigManager:
    """Return the ConfigManager created by the group callback."""
    return ctx.obj["config_manager"]


def _decode_file(path: Path, cfg_mgr: ConfigManager) -> Dictionary:
    with open(path, "rb") as f:
        return BencodeDecoder.from_config(f, cfg_mgr.config.codec).decode()


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file path",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: info, -vv: debug)",
)
@click.version_option(package_name="bencodec")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: int) -> None:
    """Bencodec - inspect, validate and canonicalize bencoded data."""
    ctx.ensure_object(dict)
    try:
        cfg_mgr = init_config(config)
    except BencodecError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        observability = cfg_mgr.config.observability.model_copy()
        observability.log_level = LogLevel.DEBUG if verbose > 1 else LogLevel.INFO
        setup_logging(observability)
    ctx.obj["config_manager"] = cfg_mgr


@cli.command("decode")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help=(
        "Print JSON instead of a tree. Non-UTF-8 byte strings are shown as "
        '{"hex": ...}, which looks the same as a dictionary with one "hex" key'
    ),
)
@click.pass_context
def decode_cmd(ctx: click.Context, path: Path, as_json: bool) -> None:
    """Decode PATH and print its structure."""
    cfg_mgr = _get_config_from_context(ctx)
    with LoggingContext("decode", source=str(path)):
        try:
            value = _decode_file(path, cfg_mgr)
        except (BencodecError, OSError) as e:
            raise click.ClickException(f"{path}: {e}") from e

    if as_json:
        try:
            rendered = _to_json(value)
        except ValueError as e:
            raise click.ClickException(f"{path}: {e}") from e
        click.echo(json.dumps(rendered, indent=2, ensure_ascii=False))
        return

    console = Console()
    tree = Tree(f"[bold]{escape(path.name)}[/bold] {_container_label(value)}")
    _build_tree(value, tree)
    console.print(tree)


@cli.command("validate")
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.pass_context
def validate_cmd(ctx: click.Context, paths: tuple[Path, ...]) -> None:
    """Check that each of PATHS is well-formed bencode."""
    cfg_mgr = _get_config_from_context(ctx)
    invalid = 0
    for path in paths:
        try:
            _decode_file(path, cfg_mgr)
        except BencodeDecodeError as e:
            invalid += 1
            logger.debug("Validation of %s failed", path, exc_info=True)
            click.echo(f"{path}: INVALID: {e.kind.value}: {e.message}")
        except OSError as e:
            invalid += 1
            click.echo(f"{path}: INVALID: io_error: {e}")
        else:
            click.echo(f"{path}: VALID")
    if invalid:
        ctx.exit(1)


@cli.command("canonicalize")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write canonical bencode here instead of stdout",
)
@click.pass_context
def canonicalize_cmd(ctx: click.Context, path: Path, output: Path | None) -> None:
    """Re-encode PATH in canonical form."""
    cfg_mgr = _get_config_from_context(ctx)
    with LoggingContext("canonicalize", source=str(path)):
        try:
            original = path.read_bytes()
            value = BencodeDecoder.from_config(original, cfg_mgr.config.codec).decode()
            canonical = BencodeEncoder.from_config(cfg_mgr.config.codec).encode(value)
        except (BencodecError, OSError) as e:
            raise click.ClickException(f"{path}: {e}") from e

    if output is None:
        stdout = click.get_binary_stream("stdout")
        stdout.write(canonical)
        stdout.flush()
    else:
        output.write_bytes(canonical)

    status = "already canonical" if canonical == original else "rewritten"
    click.echo(f"{path}: {status} ({len(canonical)} bytes)", err=True)


def main() -> None:
    """Run the CLI."""
    cli(prog_name="bencodec")


if __name__ == "__main__":
    main()
