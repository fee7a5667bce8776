"""Inspection commands: typedstore show and typedstore config."""

from __future__ import annotations

import importlib
import importlib.util
import sys
from pathlib import Path
from typing import Any

import click
from rich import box
from rich.table import Table

from typedstore.accessors import FieldAccessor
from typedstore.cli.main import console
from typedstore.config import get_settings
from typedstore.schema import Schema


def load_host(target: str) -> type:
    """Import ``MODULE:CLASS`` or ``path/to/file.py:CLASS`` and return the class."""
    module_ref, sep, attr = target.partition(":")
    if not sep or not module_ref or not attr:
        raise click.BadParameter(f"expected MODULE:CLASS, got {target!r}")

    if module_ref.endswith(".py"):
        filepath = Path(module_ref).resolve()
        if not filepath.exists():
            raise click.BadParameter(f"file not found: {module_ref}")
        module_name = f"_typedstore_host_{filepath.stem}"
        spec = importlib.util.spec_from_file_location(module_name, filepath)
        if spec is None or spec.loader is None:
            raise click.BadParameter(f"cannot load module: {module_ref}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    else:
        module = importlib.import_module(module_ref)

    host_cls = getattr(module, attr, None)
    if host_cls is None:
        raise click.BadParameter(f"{module_ref} has no attribute {attr!r}")
    if not getattr(host_cls, "__typed_stores__", None):
        raise click.BadParameter(f"{attr} declares no typed stores")
    return host_cls


def _format_default(default: Any) -> str:
    if default is None:
        return "[dim]-[/dim]"
    if callable(default):
        return f"{getattr(default, '__name__', repr(default))}()"
    return repr(default)


def _schema_table(schema: Schema) -> Table:
    table = Table(
        title=f"Typed store: {schema.store_attribute}",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("Accessor", style="bold")
    table.add_column("Key")
    table.add_column("Caster")
    table.add_column("Default")

    for name, accessor in schema.build().items():
        if isinstance(accessor, FieldAccessor):
            key = accessor.key
        else:
            key = ".".join((*accessor.path, accessor.key))
        descriptor = accessor.descriptor
        table.add_row(
            name,
            key,
            repr(descriptor.caster),
            _format_default(descriptor.default),
        )
    return table


@click.command()
@click.argument("target")
def show(target: str):
    """Show the typed store fields declared on TARGET (MODULE:CLASS)."""
    host_cls = load_host(target)
    for schema in host_cls.__typed_stores__.values():
        console.print(_schema_table(schema))
        console.print(
            f"[dim]hash safety:[/dim] {schema.settings.hash_safety.value}"
        )


@click.command()
def config():
    """Show the effective typedstore settings."""
    settings = get_settings()
    table = Table(box=box.ROUNDED, show_header=False, padding=(0, 2))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, getattr(value, "value", str(value)))
    console.print(table)


