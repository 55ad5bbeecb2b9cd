"""CLI entry point for gh-search."""

from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from gh_search import __version__
from gh_search.config import Config, load_config
from gh_search.github.auth import AuthenticationError, GitHubAuth
from gh_search.logging import setup_logging
from gh_search.search import (
    Error,
    FakeSearchRepository,
    GitHubSearchRepository,
    MainThreadScheduler,
    SchedulerProvider,
    ScreenState,
    SearchRepository,
    SearchResponse,
    SearchViewModel,
    ThreadPoolScheduler,
    Working,
)

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="gh-search")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Search GitHub repositories from the command line.

    \b
    Quick Start:
        gh-search search "httpx language:python"
        gh-search search "topic:cli" --limit 5
        gh-search search "anything" --fake
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging(verbose=verbose)


def _build_repository(cfg: Config, fake: bool) -> SearchRepository:
    if fake:
        return FakeSearchRepository(per_page=cfg.search.per_page)

    auth = GitHubAuth(token_env=cfg.github.auth.token_env, required=cfg.github.auth.required)
    return GitHubSearchRepository(
        auth=auth,
        base_url=cfg.github.base_url,
        timeout=cfg.github.timeout,
        per_page=cfg.search.per_page,
        sort=cfg.search.sort,
        order=cfg.search.order,
    )


def _render_results(response: SearchResponse, limit: int | None) -> None:
    items = response.items or []
    if limit is not None:
        items = items[:limit]

    table = Table(title=f"{response.total_count} repositories found")
    table.add_column("Repository", style="cyan", no_wrap=True)
    table.add_column("Stars", justify="right")
    table.add_column("Language")
    table.add_column("Description")

    for item in items:
        table.add_row(
            item.full_name,
            str(item.stargazers_count),
            item.language or "-",
            item.description or "",
        )

    console.print(table)


@main.command()
@click.argument("query")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to config.yaml file",
)
@click.option(
    "--fake",
    is_flag=True,
    default=False,
    help="Use generated offline results instead of the GitHub API",
)
@click.option("--limit", "-n", type=click.IntRange(min=1), default=None, help="Rows to show")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    config: Path | None,
    fake: bool,
    limit: int | None,
) -> None:
    """Search repositories matching QUERY.

    QUERY uses GitHub search syntax, e.g. "httpx language:python stars:>100".
    Exits with status 1 when the search ends in an error.
    """
    try:
        cfg = load_config(config) if config else Config()
        repository = _build_repository(cfg, fake)
    except (FileNotFoundError, ValidationError, AuthenticationError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise click.Abort() from e

    io = ThreadPoolScheduler(max_workers=cfg.scheduler.max_workers)
    ui = MainThreadScheduler()
    view_model = SearchViewModel(repository, SchedulerProvider(io=io, ui=ui))

    received: list[ScreenState] = []
    states = view_model.subscribe_to_state()
    observer = states.observe(received.append)

    try:
        view_model.search(query)
        # The repository future always settles: httpx bounds each request
        # phase and the gh CLI token lookup has its own timeout.
        ui.run_until(lambda: bool(received))
    finally:
        states.remove_observer(observer)
        io.shutdown(wait=False)
        if isinstance(repository, GitHubSearchRepository):
            repository.close()

    state = received[0]
    if isinstance(state, Error):
        console.print(f"[bold red]Error:[/bold red] {escape(state.message)}")
        ctx.exit(1)
    elif isinstance(state, Working):
        _render_results(state.data, limit)


if __name__ == "__main__":
    main()
