"""Console front end: ask for a title, check a site category, print verdicts."""
from __future__ import annotations

from typing import List, Optional

import typer

from .core.event_bus import Events
from .models.verdict import CategoryReport
from .sources.templating import expand_manual_urls
from .web.runtime import DvoraRuntime, build_runtime

BANNER = r"""
 ______          _______ _______ _______
(  __  \|\     /(  ___  |  ____ |  ___  )
| (  \  ) )   ( | (   ) | (    )| (   ) |
| |   ) | |   | | |   | | (____)| (___) |
| |   | ( (   ) ) |   | |     __)  ___  |
| |   ) |\ \_/ /| |   | | (\ (  | (   ) |
| (__/  ) \   / | (___) | ) \ \_| )   ( |
(______/   \_/  (_______)/   \__//     \|
"""

RULE = "=" * 60

app = typer.Typer(help="Check which configured sites carry a movie or show.", add_completion=False)


def _choose_categories(runtime: DvoraRuntime) -> List[str]:
    names = list(runtime.catalog.categories().keys())
    if not names:
        raise typer.BadParameter("No categories are configured.")
    while True:
        typer.echo("\nPlease choose an option:")
        for idx, name in enumerate(names, start=1):
            typer.echo(f"{idx}) Use {name.title()} File")
        raw = typer.prompt(f"Enter your choice (1-{len(names)})", default="", show_default=False)
        try:
            choice = int(str(raw).strip())
        except ValueError:
            typer.echo("Invalid input. Please enter a number.")
            continue
        if 1 <= choice <= len(names):
            return [names[choice - 1]]
        typer.echo(f"Invalid choice. Please enter a number between 1 and {len(names)}.")


def _attach_printer(runtime: DvoraRuntime, term: str) -> None:
    def on_started(data):
        typer.echo(f"\nSearching for '{term}' in {data.get('category')}:")

    def on_site_started(data):
        typer.echo(f"Checking: {data.get('url')}")

    def on_site(data):
        verdict = data["verdict"]
        if verdict.is_error:
            typer.echo(f"Error checking {verdict.url}: {verdict.error}")
        elif verdict.is_found:
            typer.echo(f"✓ Found '{term}' on this site!")
            if verdict.result_url:
                typer.echo(f"  → {verdict.result_url}")
        else:
            typer.echo(f"✗ '{term}' not found on this site.")

    def on_done(data):
        report: CategoryReport = data["report"]
        if not report.found_any:
            typer.echo(report.summary)

    def on_failed(data):
        typer.echo(f"Error: {data.get('error')}", err=True)

    runtime.event_bus.subscribe(Events.CHECK_STARTED, on_started)
    runtime.event_bus.subscribe(Events.SITE_STARTED, on_site_started)
    runtime.event_bus.subscribe(Events.SITE_CHECKED, on_site)
    runtime.event_bus.subscribe(Events.CATEGORY_COMPLETED, on_done)
    runtime.event_bus.subscribe(Events.CATEGORY_FAILED, on_failed)


def _print_manual_checks(runtime: DvoraRuntime, term: str) -> None:
    typer.echo("\n" + RULE)
    typer.echo("MANUAL CHECKS: \n")
    urls = expand_manual_urls(runtime.catalog.load_manual_checks(), term)
    for idx, url in enumerate(urls, start=1):
        typer.echo(f"{idx}. {url}")
    if not urls:
        typer.echo("No URLs found in manual checks file")
    typer.echo("\n" + RULE)


@app.command()
def check(
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Movie or show to search for."),
    category: Optional[List[str]] = typer.Option(
        None, "--category", "-c", help="Category to check (repeatable). Prompts when omitted."
    ),
    catalog_dir: Optional[str] = typer.Option(None, help="Directory holding the catalog files."),
    workers: Optional[int] = typer.Option(None, min=1, max=32, help="Sites checked at once."),
    manual: bool = typer.Option(True, "--manual/--no-manual", help="Print the manual-check URLs at the end."),
    banner: bool = typer.Option(True, "--banner/--no-banner", help="Show the greeting banner."),
) -> None:
    """Check every site of the chosen categories for TITLE."""

    runtime = build_runtime(catalog_dir=catalog_dir, max_workers=workers)

    if banner:
        typer.echo(BANNER)
        typer.echo("Welcome to Dvora, find your favorite movies and shows.")

    term = (title or "").strip()
    while not term:
        term = str(typer.prompt("Enter the movie or show to search for")).strip()

    categories = list(category or []) or _choose_categories(runtime)

    _attach_printer(runtime, term)
    reports = runtime.driver.run_categories(runtime.catalog, categories, term)

    if manual and runtime.settings.get("manual_checks_enabled", True):
        _print_manual_checks(runtime, term)

    if reports and all(r.config_error for r in reports):
        raise typer.Exit(code=2)


def main() -> None:
    app()
