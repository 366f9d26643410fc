"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import importlib
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.table import Table

from .appctx import CacheContext
from .config import SETTINGS_FILE_NAME
from .errors import InvalidKeyError, RefCacheError, SettingsError
from .settings import load_settings

app = typer.Typer(help="Inspect reference-cached type metadata")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (InvalidKeyError, SettingsError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except RefCacheError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _resolve_target(target: str) -> object:
    module_name, _, qualname = target.partition(":")
    if not module_name or not qualname:
        raise typer.BadParameter("expected MODULE:QUALNAME, e.g. collections:OrderedDict")
    try:
        obj: object = importlib.import_module(module_name)
    except ImportError as exc:
        raise typer.BadParameter(f"cannot import {module_name}: {exc}") from exc
    for part in qualname.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise typer.BadParameter(f"{module_name} has no attribute {qualname}") from exc
    return obj


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


@app.command()
@_handle_errors
def inspect(
    target: str = typer.Argument(..., help="Type to inspect as MODULE:QUALNAME"),
    settings: Optional[Path] = typer.Option(None, "--settings", "-s", exists=True, dir_okay=False),
    methods: bool = typer.Option(True, "--methods/--no-methods", help="Also list methods"),
) -> None:
    """Print the fields and methods declared by a type.

    Without --settings, a refcache.json in the working directory is used if present.
    """

    context = CacheContext(load_settings(settings or Path.cwd() / SETTINGS_FILE_NAME))
    cls = _resolve_target(target)

    fields_table = Table(title=f"Fields of {target}")
    for column in ("Name", "Annotation", "Default", "Declared in"):
        fields_table.add_column(column)
    for info in context.lookup.declared_fields(cls):
        fields_table.add_row(info.name, info.annotation or "", "yes" if info.has_default else "", info.declared_in)
    print(fields_table)

    if methods:
        methods_table = Table(title=f"Methods of {target}")
        for column in ("Name", "Kind", "Signature", "Declared in"):
            methods_table.add_column(column)
        for info in context.lookup.declared_methods(cls):
            methods_table.add_row(info.name, info.kind, info.signature, info.declared_in)
        print(methods_table)

    for name, stats in context.stats.all().items():
        print(f"[dim]{name}: {stats.hits} hit(s), {stats.misses} miss(es), {stats.computations} scan(s)")


@app.command("check-settings")
@_handle_errors
def check_settings(path: Path = typer.Argument(..., exists=True, dir_okay=False)) -> None:
    """Validate a settings file and print the effective values."""

    data = load_settings(path)
    print(f"[green]{path} is valid")
    print(data)


if __name__ == "__main__":  # pragma: no cover - manual invocation
    app()
