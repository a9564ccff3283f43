import logging
from pathlib import Path

import rich
from rich.markup import escape
from rich.progress import Progress, TaskID

from .list_files import globalize_path, iter_eligible_files, scan_project
from .types import (
    DirectoryNode,
    Failed,
    FileEntry,
    Renamed,
    RenameConfig,
    RenameOutcome,
    RenameRequest,
    RenameSummary,
    Skipped,
)
from .utils import NamePatterns, normalize_name, resolve_patterns


class RenameError(Exception):
    """Exception raised when a single file can't be renamed."""

    def __init__(self, source: Path, destination: Path, reason: str):
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(reason)


def printable(text: str) -> str:
    """Replace characters that can't be encoded, such as undecodable bytes in file names."""
    return text.encode("utf-8", "backslashreplace").decode("utf-8")


def show(text: str) -> str:
    """Make text safe to print with rich."""
    return escape(printable(text))


def move_file(source: Path, destination: Path, *, claimed: set[Path], dry_run: bool) -> None:
    """Rename `source` to `destination` unless that would clobber another file.

    `claimed` holds destinations already taken earlier in the run; on success
    `destination` is added to it.

    Raises:
        RenameError: If the destination is taken or the rename fails
    """
    if destination in claimed:
        raise RenameError(source, destination, "another file in this run was already renamed to this name")
    if destination.exists() and not _is_same_file(source, destination):
        raise RenameError(source, destination, "destination already exists")
    if not dry_run:
        try:
            source.rename(destination)
        except OSError as e:
            raise RenameError(source, destination, e.strerror or str(e)) from e
    claimed.add(destination)


def _is_same_file(source: Path, destination: Path) -> bool:
    # A case-only rename on a case-insensitive file system
    try:
        return source.samefile(destination)
    except OSError:
        return False


def rename_entry(
    entry: FileEntry,
    *,
    patterns: NamePatterns,
    project_root: Path,
    claimed: set[Path],
    dry_run: bool,
) -> RenameOutcome:
    """Normalize the name of a single file."""
    new_name = normalize_name(entry.stem, entry.extension, patterns)
    if new_name == entry.name:
        logging.debug(f"{printable(entry.path)} is already normalized")
        return Skipped(entry.path, "already normalized")

    new_path = entry.directory + new_name
    verb = "Would rename" if dry_run else "Renaming"
    logging.info(f"{verb}: {printable(entry.path)} -> {printable(new_path)}")
    try:
        move_file(
            globalize_path(entry.path, project_root),
            globalize_path(new_path, project_root),
            claimed=claimed,
            dry_run=dry_run,
        )
    except RenameError as e:
        logging.error(f"Failed to rename {printable(entry.path)}: {e}")
        return Failed(entry.path, new_path, str(e))
    return Renamed(entry.path, new_path)


def rename_files(
    request: RenameRequest,
    *,
    tree: DirectoryNode | None = None,
    progress: Progress | None = None,
) -> RenameSummary:
    """Rename every eligible file in the project to its normalized name.

    A file that can't be renamed is recorded as failed and the run carries on.

    Args:
        request: The settings, project root and dry-run flag for this run
        tree: The project index to walk. Scanned from `request.project_root` if omitted
        progress: Optional progress display to report the current file on
    """
    config = request.config
    # Only well-formed entries take part in matching
    selection = RenameConfig(directories=config.valid_directories(), extensions=config.valid_extensions())
    patterns = resolve_patterns(config.camel_case_regex, config.separator_regex, config.custom_regex_enabled)

    if tree is None:
        tree = scan_project(request.project_root)

    summary = RenameSummary(dry_run=request.dry_run)
    claimed: set[Path] = set()
    task_id: TaskID | None = None
    if progress is not None:
        task_id = progress.add_task("Renaming files...", total=None)

    for entry in iter_eligible_files(tree, selection):
        if progress is not None and task_id is not None:
            progress.update(task_id, description=f"Processing {show(entry.name)}...")
        outcome = rename_entry(
            entry,
            patterns=patterns,
            project_root=request.project_root,
            claimed=claimed,
            dry_run=request.dry_run,
        )
        summary.outcomes.append(outcome)

    if progress is not None and task_id is not None:
        progress.update(task_id, visible=False)
    return summary


def print_summary(summary: RenameSummary) -> None:
    """Print each rename, the totals and any failures."""
    verb = "Would rename" if summary.dry_run else "Renamed"
    for outcome in summary.renamed:
        rich.print(f"{verb} {show(outcome.source)} → {show(outcome.destination)}")

    if not summary.outcomes:
        rich.print("[yellow]No matching files found[/yellow]")
        return

    rich.print(
        f"\n{verb} {len(summary.renamed)} files, "
        f"skipped {len(summary.skipped)}, "
        f"[{'red' if summary.failed else 'green'}]{len(summary.failed)} failed[/]"
    )
    if summary.failed:
        rich.print("[red]Failures:[/red]")
        for failure in summary.failed:
            rich.print(
                f"  [red]{show(failure.source)} → {show(failure.destination)}: {show(failure.error)}[/red]"
            )
