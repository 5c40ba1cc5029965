"""CLI interface for orgjekyll."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from orgjekyll.config import load_config, merge_cli_overrides
from orgjekyll.errors import OrgJekyllError, UserInputError
from orgjekyll.outline import OrgDocument
from orgjekyll.pipeline import export_to_blog, inspect_post

app = typer.Typer(
    name="orgjekyll",
    help="Export an Org-mode subtree as a Jekyll blog post.",
)

console = Console()

OrgFileArg = Annotated[
    Path,
    typer.Argument(
        help="Org file holding the post.",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]
LineOpt = Annotated[
    Optional[int],
    typer.Option("--line", "-l", help="Cursor line (1-based) inside the post.", min=1),
]
HeadingOpt = Annotated[
    Optional[str],
    typer.Option("--heading", "-H", help="Heading text of an entry inside the post."),
]
ConfigOpt = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to a .orgjekyll.toml file."),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from orgjekyll import __version__

        console.print(f"orgjekyll {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _fail(exc: OrgJekyllError) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(str(exc))}")
    raise typer.Exit(1 if isinstance(exc, UserInputError) else 2)


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """orgjekyll - publish Org subtrees to a Jekyll blog."""


@app.command(name="export")
def export_cmd(
    org_file: OrgFileArg,
    line: LineOpt = None,
    heading: HeadingOpt = None,
    dont_show: Annotated[
        bool,
        typer.Option("--dont-show", help="Do not open the written file afterwards."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Run the export but write nothing."),
    ] = False,
    blog_dir: Annotated[
        Optional[str],
        typer.Option("--blog-dir", help="Blog directory (overrides config)."),
    ] = None,
    base_url: Annotated[
        Optional[str],
        typer.Option("--base-url", help="Blog base URL (overrides config)."),
    ] = None,
    pandoc: Annotated[
        Optional[str],
        typer.Option("--pandoc", help="pandoc binary (overrides config)."),
    ] = None,
    spellcheck: Annotated[
        Optional[bool],
        typer.Option("--spellcheck/--no-spellcheck", help="Run aspell over the post."),
    ] = None,
    config_path: ConfigOpt = None,
    verbose: Annotated[bool, typer.Option("--verbose", help="Debug logging.")] = False,
) -> None:
    """Export the post around --line/--heading into the blog directory."""
    _setup_logging(verbose)
    config = merge_cli_overrides(
        load_config(config_path),
        blog_dir=blog_dir,
        base_url=base_url,
        pandoc=pandoc,
        spellcheck=spellcheck,
    )

    try:
        result = export_to_blog(
            org_file,
            config,
            line=line,
            heading=heading,
            dont_show=dont_show,
            dry_run=dry_run,
        )
    except OrgJekyllError as exc:
        _fail(exc)

    if result.written:
        console.print(f"[green]Exported[/green] {result.metadata.title!r} → {result.path}")
    else:
        console.print(f"[yellow]Dry run:[/yellow] would write {result.path}")
        console.print(result.html, markup=False, highlight=False)
    console.print("Commit messages:")
    for message in result.messages:
        console.print(f"  {message}", markup=False)


@app.command(name="inspect")
def inspect_cmd(
    org_file: OrgFileArg,
    line: LineOpt = None,
    heading: HeadingOpt = None,
    config_path: ConfigOpt = None,
) -> None:
    """Show the metadata the export would use, without writing anything."""
    config = load_config(config_path)
    try:
        metadata, path = inspect_post(
            OrgDocument.load(org_file), config, line=line, heading=heading
        )
    except OrgJekyllError as exc:
        _fail(exc)

    table = Table(title=metadata.title, show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("layout", metadata.layout)
    table.add_row("filename", metadata.name)
    table.add_row("date", metadata.timestamp.strftime("%Y-%m-%d %H:%M:%S"))
    table.add_row("categories", metadata.categories)
    table.add_row("series", metadata.series or "")
    table.add_row("meta_title", metadata.meta_title or "")
    table.add_row("output", str(path))
    console.print(table)


if __name__ == "__main__":
    app()
