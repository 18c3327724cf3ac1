"""CLI commands for querying and validating content.

Read-only layer over the content directory; every command builds a fresh
repository from the site configuration.
"""

from __future__ import annotations

import json as json_module

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from inkwell.content.models import ContentSummary
from inkwell.core.errors import ConfigError, ContentParseError, ContentValidationError

console = Console()


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def _load_site():
    """Load the site configuration or exit with a message."""
    from inkwell.core.config import load_site_config

    try:
        return load_site_config()
    except FileNotFoundError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
    except ConfigError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise SystemExit(1)


def _repository(site=None):
    from inkwell.content.repository import ContentRepository

    if site is None:
        site = _load_site()
    return ContentRepository(
        site.content_dir,
        context=site.validation_context(),
        words_per_minute=site.words_per_minute,
        workers=site.workers,
    )


def _print_summaries(summaries: list[ContentSummary], title: str, as_json: bool) -> None:
    if as_json:
        click.echo(json_module.dumps([s.to_dict() for s in summaries], indent=2))
        return

    if not summaries:
        console.print("[yellow]No posts found.[/yellow]")
        return

    table = Table(title=f"{title} ({len(summaries)})")
    table.add_column("Date", style="cyan", width=12)
    table.add_column("Slug", style="green")
    table.add_column("Title", no_wrap=False)
    table.add_column("Tags", style="dim")
    table.add_column("Min", justify="right")

    for s in summaries:
        tags_str = ", ".join(s.tags[:4])
        if len(s.tags) > 4:
            tags_str += f" +{len(s.tags) - 4}"
        title_cell = escape(s.title) if s.published else f"{escape(s.title)} [dim](unpublished)[/dim]"
        table.add_row(s.date.isoformat(), s.slug, title_cell, escape(tags_str), str(s.reading_time))

    console.print(table)


def _load_detail(repo, slug: str, include_unpublished: bool = False):
    """Fetch a detail or exit with the reason it is unavailable."""
    try:
        detail = repo.get_detail(slug, include_unpublished=include_unpublished)
    except ContentParseError as e:
        console.print(f"[red]Cannot read post {escape(slug)}:[/red] {escape(str(e))}")
        raise SystemExit(1)
    except ContentValidationError as e:
        console.print(f"[red]Post {escape(slug)} failed validation:[/red]")
        for issue in e.outcome.errors:
            console.print(f"  [red]x[/red] {issue.field}: {escape(issue.message)}")
        raise SystemExit(1)

    if detail is None:
        console.print(f"[red]Post not found: {escape(slug)}[/red]")
        raise SystemExit(1)
    return detail


# ---------------------------------------------------------------------------
# Click command group
# ---------------------------------------------------------------------------


@click.group(name="posts")
def posts() -> None:
    """Query and validate blog posts.

    Reads the Markdown files of the configured content directory.
    """
    pass


# ---------------------------------------------------------------------------
# inkwell posts list
# ---------------------------------------------------------------------------


@posts.command(name="list")
@click.option("--all", "include_unpublished", is_flag=True, help="Include unpublished posts")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON array")
def list_posts(include_unpublished: bool, as_json: bool) -> None:
    """List valid posts, newest first."""
    repo = _repository()
    summaries = repo.list_summaries(include_unpublished=include_unpublished)
    _print_summaries(summaries, "Posts", as_json)


# ---------------------------------------------------------------------------
# inkwell posts show
# ---------------------------------------------------------------------------


@posts.command(name="show")
@click.argument("slug")
@click.option("--html", "as_html", is_flag=True, help="Print the rendered HTML body")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--all", "include_unpublished", is_flag=True, help="Allow unpublished posts")
def show_post(slug: str, as_html: bool, as_json: bool, include_unpublished: bool) -> None:
    """Show one post with its outline."""
    repo = _repository()
    detail = _load_detail(repo, slug, include_unpublished)

    if as_json:
        click.echo(json_module.dumps(detail.to_dict(), indent=2))
        return

    if as_html:
        click.echo(detail.html)
        return

    s = detail.summary
    console.print(f"[bold]{escape(s.title)}[/bold]")
    console.print(f"[dim]{s.date.isoformat()} | {escape(s.author)} | {s.reading_time} min read | {s.word_count} words[/dim]")
    if s.tags:
        console.print(f"Tags: {escape(', '.join(s.tags))}")
    console.print()
    console.print(escape(s.description))

    if detail.headings:
        console.print()
        console.print("[bold]Outline[/bold]")
        for h in detail.headings:
            indent = "  " * (h.level - 1)
            console.print(f"{indent}- {escape(h.text)} [dim]#{h.anchor_id}[/dim]")


# ---------------------------------------------------------------------------
# inkwell posts tag / search / tags
# ---------------------------------------------------------------------------


@posts.command(name="tag")
@click.argument("tag")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON array")
def posts_by_tag(tag: str, as_json: bool) -> None:
    """List published posts carrying TAG (case-insensitive)."""
    repo = _repository()
    _print_summaries(repo.find_by_tag(tag), f"Tagged '{escape(tag)}'", as_json)


@posts.command(name="search")
@click.argument("query")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON array")
def search_posts(query: str, as_json: bool) -> None:
    """Search titles, descriptions and tags of published posts."""
    from inkwell.content.sanitizer import sanitize_line

    repo = _repository()
    cleaned = sanitize_line(query, max_length=200)
    _print_summaries(repo.search(cleaned), f"Results for '{escape(cleaned)}'", as_json)


@posts.command(name="tags")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON object")
def list_tags(as_json: bool) -> None:
    """List tags with the number of published posts using them."""
    repo = _repository()
    counts = repo.tag_counts()
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0].lower()))

    if as_json:
        click.echo(json_module.dumps(dict(ordered), indent=2))
        return

    if not ordered:
        console.print("[yellow]No tags found.[/yellow]")
        return

    table = Table(title=f"Tags ({len(ordered)})")
    table.add_column("Tag", style="cyan")
    table.add_column("Posts", justify="right")
    for tag, count in ordered:
        table.add_row(escape(tag), str(count))
    console.print(table)


# ---------------------------------------------------------------------------
# inkwell posts adjacent
# ---------------------------------------------------------------------------


@posts.command(name="adjacent")
@click.argument("slug")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def adjacent_posts(slug: str, as_json: bool) -> None:
    """Show the older and newer neighbours of a post."""
    repo = _repository()
    adjacency = repo.adjacent(slug)

    if as_json:
        click.echo(
            json_module.dumps(
                {
                    "previous": adjacency.previous.to_dict() if adjacency.previous else None,
                    "next": adjacency.next.to_dict() if adjacency.next else None,
                },
                indent=2,
            )
        )
        return

    for label, neighbour in (("Previous", adjacency.previous), ("Next", adjacency.next)):
        if neighbour is None:
            console.print(f"{label}: [dim]none[/dim]")
        else:
            console.print(f"{label}: [cyan]{neighbour.slug}[/cyan] {escape(neighbour.title)}")


# ---------------------------------------------------------------------------
# inkwell posts validate
# ---------------------------------------------------------------------------


@posts.command(name="validate")
@click.option("--strict", is_flag=True, help="Treat warnings as failures")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("-v", "--verbose", is_flag=True, help="Show warnings for every file")
def validate_posts(strict: bool, as_json: bool, verbose: bool) -> None:
    """Validate every post file in the content directory.

    Exits with status 1 when any file has errors (or warnings, with --strict).
    """
    repo = _repository()
    entries = repo.audit()

    error_count = sum(
        1 if e.error is not None else len(e.outcome.errors) for e in entries
    )
    warning_count = sum(len(e.outcome.warnings) for e in entries if e.outcome is not None)
    failed = error_count > 0 or (strict and warning_count > 0)

    if as_json:
        report = []
        for entry in entries:
            item: dict = {"file": entry.filename, "slug": entry.slug, "ok": entry.ok}
            if entry.error is not None:
                code = getattr(entry.error, "code", None)
                item["error"] = {"message": str(entry.error), "code": code.value if code else None}
            else:
                item.update(entry.outcome.to_dict())
            report.append(item)
        click.echo(json_module.dumps(report, indent=2))
        if failed:
            raise SystemExit(1)
        return

    if not entries:
        console.print("[yellow]No post files found.[/yellow]")
        return

    table = Table(title=f"Validation ({len(entries)} files)")
    table.add_column("File", style="cyan")
    table.add_column("Status", justify="center")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    for entry in entries:
        if entry.error is not None:
            table.add_row(entry.filename, "[red]unreadable[/red]", "1", "-")
            continue
        outcome = entry.outcome
        status = "[green]ok[/green]" if outcome.is_valid else "[red]invalid[/red]"
        if outcome.is_valid and outcome.warnings:
            status = "[yellow]warnings[/yellow]"
        table.add_row(entry.filename, status, str(len(outcome.errors)), str(len(outcome.warnings)))

    console.print(table)

    for entry in entries:
        if entry.error is not None:
            console.print(f"\n[red]{entry.filename}[/red]: {escape(str(entry.error))}")
            continue
        issues = list(entry.outcome.errors)
        if verbose or strict:
            issues += list(entry.outcome.warnings)
        if not issues:
            continue
        console.print(f"\n[bold]{entry.filename}[/bold]")
        for issue in issues:
            marker = "[red]x[/red]" if issue in entry.outcome.errors else "[yellow]![/yellow]"
            console.print(f"  {marker} {issue.field}: {escape(issue.message)}")

    console.print()
    console.print(f"Errors: {error_count}, warnings: {warning_count}")
    if failed:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# inkwell posts jsonld
# ---------------------------------------------------------------------------


@posts.command(name="jsonld")
@click.argument("slug")
def post_jsonld(slug: str) -> None:
    """Print schema.org JSON-LD (BlogPosting and BreadcrumbList) for a post."""
    from inkwell.content.structured_data import blog_posting, breadcrumbs

    site = _load_site()
    repo = _repository(site)
    detail = _load_detail(repo, slug)

    graphs = [blog_posting(detail.summary, site), breadcrumbs(detail.summary, site)]
    click.echo(json_module.dumps(graphs, indent=2))
