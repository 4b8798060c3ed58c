"""Main CLI entry point for code-contractor."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from .analysis.languages import detect_language
from .config import Config
from .tools import (
    LocalFileBackend,
    extract_from_file,
    lint_file_content,
    outline_file,
    replace_in_file,
    smart_search,
)
from .tools.search import SEARCH_MODES

console = Console()

SEVERITY_STYLES = {"error": "bold red", "warning": "yellow", "info": "cyan"}


def _backend_for(path: str, config: Config) -> tuple[LocalFileBackend, str]:
    """Bind a backend to the file's directory and return the relative name."""
    target = Path(path).resolve()
    return LocalFileBackend(target.parent, set(config.ignored_dirs)), target.name


def _emit_json(data: dict) -> None:
    click.echo(json.dumps(data, indent=2))


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """code-contractor - outline, extract, patch, search and lint source code."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Config.from_env()


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the tool-shaped JSON result")
@click.pass_obj
def outline(config: Config, path: str, as_json: bool):
    """Show the declarations in a file.

    Example:
        code-contractor outline src/app.ts
    """
    backend, name = _backend_for(path, config)
    result = outline_file(backend, name, config)
    if as_json:
        _emit_json(result.model_dump())
    if result.error:
        _fail(result.error)
    if as_json:
        return

    table = Table(title=f"{path} ({result.language or 'unknown'})")
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Lines", justify="right")
    table.add_column("Signature", overflow="fold")
    for entry in result.outline:
        indent = "  " * entry["depth"]
        table.add_row(entry["kind"], indent + entry["name"], f"{entry['startLine']}-{entry['endLine']}", entry["signature"])
    console.print(table)
    if result.imports:
        console.print(f"[dim]Imports:[/dim] {', '.join(result.imports)}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.option("--type", "-t", "element_type", default="function", show_default=True, help="Element kind")
@click.option("--context", "-c", "context_lines", type=int, default=None, help="Lines of context around the element")
@click.option("--line", "line_hint", type=int, default=None, help="Prefer the element containing or nearest this line")
@click.option("--json", "as_json", is_flag=True, help="Print the tool-shaped JSON result")
@click.pass_obj
def extract(config: Config, path: str, name: str, element_type: str, context_lines, line_hint, as_json: bool):
    """Print a named function, class, method or type from a file."""
    backend, rel = _backend_for(path, config)
    result = extract_from_file(backend, rel, name, element_type, config, context_lines, line_hint)
    if as_json:
        _emit_json(result.model_dump(exclude_none=True))
    if result.error:
        _fail(result.error)
    if result.message:
        _fail(f"{element_type} '{name}' {result.message} in {path}")
    if as_json:
        return

    lexer = detect_language(path) or "text"
    for item in result.results:
        syntax = Syntax(item["content"], lexer, line_numbers=True, start_line=item["startLine"])
        console.print(Panel(syntax, title=f"{item['type']} {item['name']} ({item['location']})"))


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("name")
@click.option("--with", "replacement", type=click.File("r"), required=True, help="File with the new text, or - for stdin")
@click.option("--type", "-t", "element_type", default="function", show_default=True, help="Element kind")
@click.option("--line", "line_hint", type=int, default=None, help="Prefer the element containing or nearest this line")
@click.option("--write", is_flag=True, help="Write the result back to PATH instead of printing it")
@click.option("--json", "as_json", is_flag=True, help="Print the tool-shaped JSON result")
@click.pass_obj
def replace(config: Config, path: str, name: str, replacement, element_type: str, line_hint, write: bool, as_json: bool):
    """Replace a named element and print (or --write) the new source."""
    backend, rel = _backend_for(path, config)
    new_text = replacement.read().rstrip("\n")
    result = replace_in_file(backend, rel, name, element_type, new_text, config, line_hint)
    if as_json:
        _emit_json(result.model_dump(exclude_none=True))
    if result.error:
        _fail(result.error)

    if write:
        Path(path).write_text(result.content, encoding="utf-8")
        click.echo(f"Replaced {element_type} '{name}' in {path}", err=True)
    elif not as_json:
        click.echo(result.content, nl=False)


@cli.command()
@click.argument("term")
@click.argument("root", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--mode", "-m", type=click.Choice(SEARCH_MODES), default="smart", show_default=True)
@click.option("--group", is_flag=True, help="Group hits by classification")
@click.option("--regex", is_flag=True, help="Treat TERM as a regular expression")
@click.option("--case-sensitive", is_flag=True, help="Match case exactly")
@click.option("--max-results", type=int, default=None, help="Maximum number of hits")
@click.option("--json", "as_json", is_flag=True, help="Print the tool-shaped JSON result")
@click.pass_obj
def search(config: Config, term: str, root: str, mode: str, group: bool, regex: bool, case_sensitive: bool, max_results, as_json: bool):
    """Search files under ROOT and classify each hit."""
    backend = LocalFileBackend(root, set(config.ignored_dirs))
    result = smart_search(
        backend,
        term,
        mode=mode,
        group=group,
        regex=regex,
        case_sensitive=case_sensitive,
        max_results=max_results or config.max_search_results,
    )
    if as_json:
        _emit_json(result.model_dump(exclude_none=True))
    if result.error:
        _fail(result.error)
    if as_json:
        return

    table = Table(title=f"'{term}' ({result.total} hits in {result.files_searched} files)")
    table.add_column("Location", style="cyan", no_wrap=True)
    if mode != "fast":
        table.add_column("Class", style="magenta")
    table.add_column("Line", overflow="fold")
    hits = result.results
    if result.groups:
        hits = [h for group_hits in result.groups.values() for h in group_hits]
    for hit in hits:
        row = [f"{hit['file']}:{hit['line']}"]
        if mode != "fast":
            row.append(hit["classification"])
        row.append(hit["content"].strip())
        table.add_row(*row)
    console.print(table)
    if result.truncated:
        console.print("[yellow]Results truncated; raise --max-results to see more[/yellow]")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the tool-shaped JSON result")
@click.pass_obj
def lint(config: Config, path: str, as_json: bool):
    """Check a file for syntax errors and common bug patterns."""
    backend, rel = _backend_for(path, config)
    result = lint_file_content(backend, rel, config)
    if as_json:
        _emit_json(result.model_dump(exclude_none=True))
    if result.error:
        _fail(result.error)
    if not as_json:
        if not result.supported:
            console.print(f"[yellow]No lint rules for {path}[/yellow]")
            return
        table = Table(title=f"{path}: {result.summary['total']} issues")
        table.add_column("Line", justify="right")
        table.add_column("Severity")
        table.add_column("Rule", style="dim")
        table.add_column("Message", overflow="fold")
        for issue in result.errors + result.warnings + result.info:
            style = SEVERITY_STYLES.get(issue["severity"], "")
            table.add_row(str(issue["line"]), f"[{style}]{issue['severity']}[/{style}]", issue["rule"], issue["message"])
        console.print(table)

    if result.errors:
        sys.exit(1)


if __name__ == "__main__":
    cli()
