"""
Main CLI dispatcher for inkwell.

Usage:
    inkwell posts [list|show|tag|search|tags|adjacent|validate|jsonld]
    inkwell forms [check|schemas]
    inkwell info
"""

import click
from rich.console import Console

from inkwell import __version__
from inkwell.core.logging_setup import configure_logging

console = Console()


class Context:
    """Shared context for all commands."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self.console = console


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """inkwell content tools.

    Validate, query and render the Markdown posts of a publishing site.
    """
    configure_logging(verbose)
    ctx.obj = Context(verbose=verbose)


@main.command()
@pass_context
def info(ctx: Context) -> None:
    """Show the resolved site root and configuration."""
    from inkwell.core.config import load_site_config
    from inkwell.core.errors import ConfigError

    try:
        site = load_site_config()
    except (FileNotFoundError, ConfigError) as e:
        ctx.console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    ctx.console.print(f"[bold]Site root:[/bold]   {site.root}")
    ctx.console.print(f"[bold]Content dir:[/bold] {site.content_dir}")
    ctx.console.print(f"[bold]Site URL:[/bold]    {site.site_url}")
    ctx.console.print(f"[bold]Site name:[/bold]   {site.site_name}")
    if ctx.verbose:
        ctx.console.print(f"[dim]words_per_minute={site.words_per_minute} workers={site.workers}[/dim]")
        ctx.console.print(
            f"[dim]body length {site.min_body_length}..{site.max_body_length}, "
            f"max tags {site.max_tags}[/dim]"
        )


# Import and register command groups (imports after main definition intentional)
from inkwell.content.commands import posts  # noqa: E402
from inkwell.forms.commands import forms  # noqa: E402

main.add_command(posts)
main.add_command(forms)


if __name__ == "__main__":
    main()
