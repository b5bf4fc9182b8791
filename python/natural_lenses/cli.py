import json
import re
from typing import Any, IO

import click
from rich.console import Console
from rich.table import Table

from . import Lens, Settings, set_settings
from ._internal.maybe import NOTHING, Just
from ._internal.typing import is_hole

_INT_KEY_RE = re.compile(r"^-?\d+$")


def _parse_keys(doc: Any, raw_keys: tuple[str, ...]) -> tuple[Any, ...]:
    """
    Resolve KEY arguments against *doc*: within an object every key is a
    string, elsewhere integer-looking keys index arrays.
    """
    keys: list[Any] = []
    cur = doc
    for raw in raw_keys:
        key: Any = raw
        if not isinstance(cur, dict) and _INT_KEY_RE.match(raw):
            key = int(raw)
        keys.append(key)
        cur = Lens(key).get(cur)
    return tuple(keys)


def _json_default(value: Any) -> Any:
    if is_hole(value):
        return None
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _load_document(file: IO[str]) -> Any:
    try:
        return json.load(file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Failed to parse JSON from {file.name}: {e}")


def _emit(value: Any, output: IO[str] | None) -> None:
    if output is not None:
        json.dump(value, output, indent=2, default=_json_default)
        output.write("\n")
        return
    Console().print_json(data=value, default=_json_default)


def _path_label(keys: tuple[Any, ...]) -> str:
    return "".join(f"[{k!r}]" for k in keys) or "<root>"


@click.group()
@click.version_option(package_name="natural-lenses", message="%(prog)s version %(version)s")
@click.option(
    "--strict-presence/--no-strict-presence", default=None,
    help="Count an empty intermediate container as present. "
         "Defaults to NATURAL_LENSES_STRICT_PRESENCE.")
def cli(strict_presence: bool | None):
    """
    Read and edit JSON documents through lenses.

    Each KEY steps one level into the document. Within an object a KEY is
    always a member name, even if it looks like an integer; elsewhere keys
    that look like integers index arrays (negative ones from the end).
    """
    overrides: dict[str, Any] = {}
    if strict_presence is not None:
        overrides["strict_presence"] = strict_presence
    try:
        set_settings(Settings.from_env(**overrides))
    except ValueError as e:
        raise click.ClickException(f"Invalid settings: {e}")


@cli.command()
@click.argument("file", type=click.File("r"))
@click.argument("keys", nargs=-1)
def get(file: IO[str], keys: tuple[str, ...]):
    """
    Print the value at KEYS within FILE as JSON.
    """
    doc = _load_document(file)
    path = _parse_keys(doc, keys)
    match Lens(*path).get_maybe(doc):
        case Just(value=value):
            _emit(value, None)
        case _:
            raise click.ClickException(f"No value at {_path_label(path)}")


@cli.command()
@click.argument("file", type=click.File("r"))
@click.argument("keys", nargs=-1)
def present(file: IO[str], keys: tuple[str, ...]):
    """
    Print whether a value exists at KEYS within FILE.
    """
    doc = _load_document(file)
    found = Lens(*_parse_keys(doc, keys)).present(doc)
    click.echo("true" if found else "false")


@cli.command(name="ls")
@click.argument("file", type=click.File("r"))
@click.argument("keys", nargs=-1)
@click.option("--color/--no-color", default=True, help="Enable or disable colored output.")
def ls(file: IO[str], keys: tuple[str, ...], color: bool):
    """
    List the entries of the array or object at KEYS within FILE.
    """
    doc = _load_document(file)
    path = _parse_keys(doc, keys)
    value = Lens(*path).get(doc)
    if isinstance(value, dict):
        entries = list(value.items())
    elif isinstance(value, list):
        entries = list(enumerate(value))
    else:
        raise click.ClickException(f"No array or object at {_path_label(path)}")

    table = Table(
        title=f"Entries at {_path_label(path)}",
        title_style="cyan",
        header_style="bold magenta",
    )
    table.add_column("Key", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Value", style="yellow")
    for key, entry in entries:
        table.add_row(
            str(key),
            type(entry).__name__,
            json.dumps(entry, default=_json_default)[:60],
        )
    Console(no_color=not color).print(table)


@cli.command(name="set")
@click.argument("file", type=click.File("r"))
@click.argument("keys", nargs=-1)
@click.option("--value", "value_json", required=True, help="The new value, as JSON.")
@click.option(
    "-o", "--output", type=click.File("w"), required=False,
    help="Write the result to this file instead of the standard output.")
def set_(file: IO[str], keys: tuple[str, ...], value_json: str, output: IO[str] | None):
    """
    Set the value at KEYS within FILE and print the resulting document.
    Missing containers along the way are created.
    """
    try:
        value = json.loads(value_json)
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"Not valid JSON: {e}", param_hint="--value")
    doc = _load_document(file)
    try:
        result = Lens(*_parse_keys(doc, keys)).set_in_clone(doc, value)
    except (TypeError, IndexError) as e:
        raise click.ClickException(f"Cannot set value: {e}")
    _emit(result, output)


@cli.command()
@click.argument("file", type=click.File("r"))
@click.argument("keys", nargs=-1, required=True)
@click.option(
    "-o", "--output", type=click.File("w"), required=False,
    help="Write the result to this file instead of the standard output.")
def delete(file: IO[str], keys: tuple[str, ...], output: IO[str] | None):
    """
    Remove the value at KEYS within FILE and print the resulting document.
    Removing an array element other than the last leaves a null in its place.
    """
    doc = _load_document(file)
    result = Lens(*_parse_keys(doc, keys)).xform_in_clone_maybe(doc, lambda _: NOTHING)
    _emit(result, output)


if __name__ == "__main__":
    cli()
