"""Command-line interface (``bt``).

Loads build files into the local store, lists and shows stored builds, and
renders size comparisons as Rich tables or JSON. The work itself is done
by the builds, compare and dashboard modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from sqlalchemy.orm import Session, sessionmaker

from build_tracker import __version__
from build_tracker.config import get_settings, print_settings_json
from build_tracker.db import (
    create_all_tables,
    get_engine,
    get_session,
    get_session_factory,
)

app = typer.Typer(
    name="bt",
    help="Build Tracker - track and compare build artifact sizes",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"build-tracker version {__version__}")
        raise typer.Exit()


def _print_json(data: Any) -> None:
    console.print(
        json.dumps(data, indent=2, allow_nan=False),
        soft_wrap=True,
        markup=False,
        highlight=False,
    )


def _open_store() -> sessionmaker[Session]:
    """Session factory for the local build store, creating tables if needed."""
    engine = get_engine()
    create_all_tables(engine)
    return get_session_factory(engine)


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Build Tracker - track and compare build artifact sizes."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings), soft_wrap=True, markup=False)
    else:
        filters = ", ".join(settings.artifact_filters) or "(none)"
        groups = ", ".join(settings.toggle_groups) or "(none)"
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Storage:[/bold]")
        console.print(f"  Database URL:        {settings.db_url}")
        console.print(f"  Log level:           {settings.log_level}")
        console.print()
        console.print("[bold]Dashboard:[/bold]")
        console.print(f"  Artifact filters:    {filters}", markup=False)
        console.print(f"  Toggle groups:       {groups}", markup=False)
        console.print(f"  Recent limit:        {settings.recent_limit}")
        console.print()
        console.print("[bold]Client:[/bold]")
        console.print(f"  API URL:             {settings.api_url}")
        console.print(f"  Request timeout:     {settings.request_timeout}")


builds_app = typer.Typer(help="Inspect and load builds")
app.add_typer(builds_app, name="builds")


@builds_app.command("list")
def builds_list(
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-l", help="Number of recent builds to list"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List the most recent builds."""
    from build_tracker.builds.service import list_recent_builds
    from build_tracker.compare.formatting import format_sha

    settings = get_settings()
    factory = _open_store()

    with factory() as session:
        builds = list_recent_builds(session, limit or settings.recent_limit)

    if json_output:
        _print_json([b.to_dict() for b in builds])
        return

    if not builds:
        console.print("[yellow]No builds found[/yellow]")
        return

    console.print(f"[bold]Found {len(builds)} build(s):[/bold]")
    console.print()
    for b in builds:
        console.print(f"  [green]{escape(format_sha(b.revision))}[/green]")
        console.print(f"    Revision: {b.revision}", markup=False)
        console.print(f"    Parent: {b.parent_revision or 'N/A'}", markup=False)
        console.print(f"    Timestamp: {b.timestamp}")
        console.print(f"    Artifacts: {len(b.artifacts)}")
        console.print()


@builds_app.command("show")
def builds_show(
    revision: Annotated[str, typer.Argument(help="Revision to show")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show a build and its artifact sizes."""
    from build_tracker.builds.service import BuildNotFoundError, get_build_by_revision
    from build_tracker.compare.formatting import format_bytes

    factory = _open_store()

    with factory() as session:
        try:
            build = get_build_by_revision(session, revision)
        except BuildNotFoundError:
            console.print(f"[red]Build not found: {escape(revision)}[/red]")
            raise typer.Exit(code=1) from None

    if json_output:
        _print_json(build.to_dict())
        return

    console.print(f"[bold]Build {escape(build.revision)}[/bold]")
    console.print()
    console.print(f"  Parent:    {build.parent_revision or 'N/A'}", markup=False)
    console.print(f"  Timestamp: {build.timestamp}")
    console.print()
    for artifact in build.artifacts:
        sizes = ", ".join(
            f"{kind}={format_bytes(size)}" for kind, size in sorted(artifact.sizes.items())
        )
        console.print(f"  {artifact.name}: {sizes}", markup=False)


@builds_app.command("load")
def builds_load(
    path: Annotated[str, typer.Argument(help="Build file (YAML/JSON) or directory")],
) -> None:
    """Load builds from YAML/JSON file(s) into the local database."""
    from build_tracker.builds.io import (
        BuildFileError,
        load_builds,
        load_builds_from_directory,
    )
    from build_tracker.builds.service import save_build

    file_path = Path(path)
    if not file_path.exists():
        console.print(f"[red]Path not found: {path}[/red]")
        raise typer.Exit(code=1)

    try:
        if file_path.is_dir():
            builds = load_builds_from_directory(file_path)
        else:
            builds = load_builds(file_path)
    except BuildFileError as e:
        console.print(f"[red]Failed: {escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    with get_session(_open_store()) as session:
        for build in builds:
            save_build(session, build)

    console.print(f"[green]Loaded {len(builds)} build(s)[/green]")


def _render_comparison(comparison: Any, kind: str) -> Table:
    from build_tracker.compare.formatting import describe_delta, format_bytes, format_sha
    from build_tracker.dashboard.colors import delta_color, delta_label

    # Artifact names and size kinds are data, never Rich markup
    table = Table(title=Text(f"Artifact sizes ({kind})"))
    table.add_column("Artifact")
    for revision in comparison.revisions:
        table.add_column(Text(format_sha(revision)), justify="right")
    for delta in comparison.total.deltas if comparison.total else []:
        baseline = format_sha(comparison.revisions[delta.baseline_index])
        current = format_sha(comparison.revisions[delta.current_index])
        table.add_column(Text(f"{baseline}..{current}"), justify="right")

    notes: list[str] = []
    rows = ([comparison.total] if comparison.total else []) + comparison.rows
    for row in rows:
        cells: list[Any] = [Text(row.name)]
        cells.extend(format_bytes(cell.size(kind)) for cell in row.cells)
        for delta in row.deltas:
            color = delta_color(delta, kind)
            cells.append(
                Text(delta_label(delta, kind), style=f"black on {color.to_hex()}")
            )
            if delta.hash_changed and delta.size(kind) == 0:
                pair = "..".join(
                    format_sha(comparison.revisions[i])
                    for i in (delta.baseline_index, delta.current_index)
                )
                notes.append(f"{row.name} {pair}: {describe_delta(delta, kind)}")
        table.add_row(*cells)
    if notes:
        table.caption = Text("\n".join(notes))
    return table


@app.command()
def compare(
    revisions: Annotated[
        list[str], typer.Argument(help="Revisions to compare, baseline first")
    ],
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="Size kind to show (e.g. gzip, stat)"),
    ] = "gzip",
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help="Pairing mode (baseline/consecutive)"),
    ] = "baseline",
    baseline: Annotated[
        int,
        typer.Option("--baseline", "-b", help="Index of the baseline build"),
    ] = 0,
    filters: Annotated[
        list[str] | None,
        typer.Option("--filter", "-f", help="Hide artifacts matching regex (repeatable)"),
    ] = None,
    api_url: Annotated[
        str | None,
        typer.Option("--api", help="Fetch builds from this API instead of the database"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Compare artifact sizes across builds."""
    from build_tracker.builds.service import list_builds_by_revisions
    from build_tracker.compare.comparator import Comparator
    from build_tracker.dashboard.client import ApiError, BuildTrackerClient, FetchRequest
    from build_tracker.dashboard.filters import (
        InvalidFilterError,
        compile_filters,
        filter_artifact_names,
    )
    from build_tracker.types import CompareMode

    try:
        compare_mode = CompareMode(mode)
    except ValueError:
        console.print(f"[red]Invalid mode: {mode}[/red]")
        console.print("Valid values: baseline, consecutive")
        raise typer.Exit(code=1) from None

    settings = get_settings()
    try:
        patterns = compile_filters(
            filters if filters is not None else settings.artifact_filters
        )
    except InvalidFilterError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1) from None

    if api_url:
        try:
            with BuildTrackerClient(api_url, timeout=settings.request_timeout) as client:
                builds = client.get_builds(FetchRequest(revisions=revisions)).builds
        except ApiError as e:
            console.print(f"[red]API error ({e.code}): {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from None
    else:
        factory = _open_store()
        with factory() as session:
            builds = list_builds_by_revisions(session, revisions)

    found = {b.revision for b in builds}
    missing = [r for r in revisions if r not in found]
    if missing:
        console.print(f"[red]Build not found: {escape(', '.join(missing))}[/red]")
        raise typer.Exit(code=1)

    # Keep the order given on the command line
    order = {r: i for i, r in enumerate(revisions)}
    builds = sorted(builds, key=lambda b: order[b.revision])

    comparator = Comparator(builds)
    comparator = Comparator(
        builds, filter_artifact_names(comparator.artifact_names, patterns)
    )
    try:
        comparison = comparator.compare(mode=compare_mode, baseline_index=baseline)
    except IndexError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        _print_json(comparison.to_dict())
    else:
        console.print(_render_comparison(comparison, kind))


if __name__ == "__main__":
    app()
