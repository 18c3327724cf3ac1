"""CLI commands for checking form input against the built-in schemas."""

from __future__ import annotations

import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()


def _parse_pairs(pairs: tuple[str, ...]) -> dict[str, object]:
    """Turn ``key=value`` arguments into a mapping.

    Repeated keys collect into a list, which is how list fields are given.
    """
    data: dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"Expected key=value, got {pair!r}")
        key, value = pair.split("=", 1)
        key = key.strip()
        if key in data:
            existing = data[key]
            data[key] = [*existing, value] if isinstance(existing, list) else [existing, value]
        else:
            data[key] = value
    return data


@click.group(name="forms")
def forms() -> None:
    """Validate user input against form schemas."""
    pass


@forms.command(name="schemas")
def list_schemas() -> None:
    """List the built-in form schemas and their fields."""
    from inkwell.forms.validator import SCHEMAS

    table = Table(title="Form Schemas")
    table.add_column("Schema", style="cyan")
    table.add_column("Field")
    table.add_column("Kind", style="dim")
    table.add_column("Required", justify="center")

    for name, schema in SCHEMAS.items():
        for i, rule in enumerate(schema.rules):
            table.add_row(name if i == 0 else "", rule.name, rule.kind, "yes" if rule.required else "")

    console.print(table)


@forms.command(name="check")
@click.argument("schema_name", metavar="SCHEMA")
@click.argument("pairs", nargs=-1, metavar="KEY=VALUE...")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def check_input(schema_name: str, pairs: tuple[str, ...], as_json: bool) -> None:
    """Validate KEY=VALUE pairs against SCHEMA.

    \b
    Examples:
        inkwell forms check newsletter email=reader@example.com
        inkwell forms check search q=python tags=web tags=api limit=20
    """
    from inkwell.forms.validator import SCHEMAS, validate_input

    schema = SCHEMAS.get(schema_name)
    if schema is None:
        console.print(f"[red]Unknown schema: {escape(schema_name)}[/red]")
        console.print(f"[dim]Available: {', '.join(SCHEMAS)}[/dim]")
        raise SystemExit(1)

    result = validate_input(schema, _parse_pairs(pairs))

    if as_json:
        click.echo(json_module.dumps(result.to_dict(), indent=2))
    elif result.success:
        console.print("[green]Valid input[/green]")
        for key, value in result.data.items():
            console.print(f"  {key}: {escape(repr(value))}")
    else:
        console.print(f"[red]Invalid input ({len(result.errors)} errors):[/red]")
        for message in result.errors:
            console.print(f"  [red]x[/red] {escape(message)}")

    if not result.success:
        raise SystemExit(1)
