"""Command-line interface for impact-tree.

Builds the impact tree for an entry file from an explicit change set
(``analyze``) or from the last commit(s) of a git repository (``git``).
"""

import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.tree import Tree

from impact_tree import __version__
from impact_tree.config import get_settings
from impact_tree.core.analyzer import TreeBuilder
from impact_tree.core.changeset import load_changes, parse_changes, dump_changes
from impact_tree.core.exceptions import ChangeSetError, EntryUnreachableError
from impact_tree.core.models import FileChange, FileNode, NodeType, normalize_path
from impact_tree.tracing.file_filter import FileFilter
from impact_tree.vcs.git_changes import get_commit_changes


console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str):
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _display_path(path: str, root: Path) -> str:
    try:
        return str(Path(path).relative_to(root))
    except ValueError:
        return path


def _node_label(node: FileNode, root: Path) -> str:
    label = escape(_display_path(node.file, root))
    if node.type == NodeType.ASSET:
        label = f"[dim]{label}[/dim]"

    if node.is_affected:
        label = f"[bold red]{label}[/bold red] [red](affected)[/red]"
    elif node.change_type is not None:
        label = f"[yellow]{label}[/yellow] [yellow]({node.change_type.value})[/yellow]"

    if node.reason:
        reason = escape(node.reason.replace("\n", "; "))
        label = f"{label}\n[dim]{reason}[/dim]"
    return label


def render_tree(node: FileNode, root: Path, branch: Optional[Tree] = None) -> Tree:
    """Build a rich Tree mirroring the FileNode tree."""
    label = _node_label(node, root)
    current = Tree(label) if branch is None else branch.add(label)
    for child in node.children:
        render_tree(child, root, current)
    return current


def display_affected(tree: FileNode, root: Path):
    """Print only the affected files with their reasons."""
    affected = [node for node in tree.iter_nodes() if node.is_affected]
    if not affected:
        console.print("[green]No affected files.[/green]")
        return

    seen = set()
    console.print("[bold]Affected files:[/bold]")
    for node in affected:
        if node.file in seen:
            continue
        seen.add(node.file)
        console.print(f"  [red]{escape(_display_path(node.file, root))}[/red]")
        for line in (node.reason or "").splitlines():
            console.print(f"    [dim]{escape(line)}[/dim]")


def run_analysis(
    entry: str,
    changes: List[FileChange],
    root: str,
    output_format: str,
    output: Optional[str],
    affected_only: bool,
    workers: Optional[int],
):
    """Build the tree and emit it in the requested format."""
    settings = get_settings()
    root_path = Path(normalize_path(root))

    builder = TreeBuilder(
        changes,
        project_root=str(root_path),
        file_filter=FileFilter(settings.ignore_patterns, root=str(root_path)),
        max_workers=workers or settings.max_workers,
    )

    try:
        tree = builder.build(entry)
    except EntryUnreachableError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if output_format == "json":
        document = json.dumps(tree.to_dict(), indent=2)
        if output:
            Path(output).write_text(document + "\n", encoding="utf-8")
            err_console.print(f"[green]Wrote impact tree to {output}[/green]")
        else:
            click.echo(document)
    elif affected_only:
        display_affected(tree, root_path)
    else:
        console.print(render_tree(tree, root_path))

    if builder.warnings:
        err_console.print(f"[yellow]{len(builder.warnings)} warning(s) during analysis[/yellow]")


def _output_options(func):
    options = [
        click.option("--entry", "-e", help="Entry file path"),
        click.option(
            "--root",
            type=click.Path(file_okay=False, dir_okay=True),
            help="Project root for rooted imports and relative paths",
        ),
        click.option(
            "--format", "output_format",
            type=click.Choice(["tree", "json"]),
            default="tree",
            help="Output format",
        ),
        click.option("--output", "-o", type=click.Path(), help="Write JSON output to a file"),
        click.option("--affected-only", is_flag=True, help="List only affected files (tree format)"),
        click.option("--workers", type=click.IntRange(min=1), help="I/O worker threads"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(invoke_without_command=True)
@click.option("--version", "-v", is_flag=True, help="Show version")
@click.option("--log-level", help="Logging level (default from IMPACT_TREE_LOG_LEVEL)")
@click.pass_context
def cli(ctx, version, log_level):
    """impact-tree - which files does a change reach?

    Walks the import graph from an entry file and marks every file that is
    affected by a set of added, deleted or modified files.

    Examples:

        impact-tree analyze -e src/main.tsx -f '[{"changedFile": "src/a.ts", "changeType": "delete"}]'

        impact-tree analyze -e src/main.tsx --changes-file changes.json --format json

        impact-tree git -e src/main.tsx          # changes in the last commit
    """
    if version:
        console.print(f"impact-tree {__version__}")
        ctx.exit()

    configure_logging((log_level or get_settings().log_level).upper())

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@_output_options
@click.option("--changes", "-f", "changes_json", help="Change set as a JSON string")
@click.option(
    "--changes-file",
    type=click.Path(exists=True, dir_okay=False),
    help="Change set JSON file",
)
def analyze(entry, root, output_format, output, affected_only, workers, changes_json, changes_file):
    """Analyze the impact of an explicit change set."""
    settings = get_settings()
    root = root or settings.root

    try:
        if changes_file:
            changes = load_changes(changes_file, root)
        elif changes_json:
            changes = parse_changes(changes_json, root)
        else:
            raise ChangeSetError("Provide a change set with --changes or --changes-file")
    except ChangeSetError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    run_analysis(
        entry or settings.entry,
        changes,
        root,
        output_format,
        output,
        affected_only,
        workers,
    )


@cli.command(name="git")
@_output_options
@click.option("--base", default="HEAD^", show_default=True, help="Base revision")
@click.option("--head", default="HEAD", show_default=True, help="Head revision")
@click.option("--print-changes", is_flag=True, help="Print the computed change set and exit")
def git_command(entry, root, output_format, output, affected_only, workers, base, head, print_changes):
    """Analyze the impact of the changes between two git revisions."""
    settings = get_settings()
    root = root or settings.root

    try:
        changes = get_commit_changes(root, base=base, head=head)
    except ChangeSetError as e:
        err_console.print(f"[red]Error analyzing git changes:[/red] {e}")
        sys.exit(1)

    if print_changes:
        click.echo(dump_changes(changes))
        return

    if not changes:
        console.print("No relevant file changes found in the given revision range.")
        return

    run_analysis(
        entry or settings.entry,
        changes,
        root,
        output_format,
        output,
        affected_only,
        workers,
    )


if __name__ == "__main__":
    cli()
