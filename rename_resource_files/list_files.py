import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

from .types import ROOT_MARKER, DirectoryNode, FileEntry, RenameConfig

# Directories containing this file are left out of the project index
IGNORE_MARKER = ".gdignore"


@dataclass
class ProjectDirectory:
    """A directory in the project index, with its files and subdirectories in name order."""

    path: str
    file_paths: list[str] = field(default_factory=list)
    subdirectories: list["ProjectDirectory"] = field(default_factory=list)


def globalize_path(res_path: str, project_root: Path) -> Path:
    """Map a `res://` path to a path on disk."""
    if not res_path.startswith(ROOT_MARKER):
        raise ValueError(f"Not a project path: {res_path}")
    relative = res_path[len(ROOT_MARKER) :].strip("/")
    return project_root / relative if relative else project_root


def localize_path(path: Path, project_root: Path) -> str:
    """Map a path on disk to its `res://` path."""
    relative = path.relative_to(project_root).as_posix()
    return ROOT_MARKER if relative == "." else ROOT_MARKER + relative


def _is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def scan_project(project_root: Path) -> ProjectDirectory:
    """Build the project index for the tree rooted at `project_root`."""
    return _scan_directory(project_root, project_root)


def _scan_directory(directory: Path, project_root: Path) -> ProjectDirectory:
    res_path = localize_path(directory, project_root)
    if not res_path.endswith("/"):
        res_path += "/"
    node = ProjectDirectory(path=res_path)
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        logging.warning(f"Can't read directory {directory}: {e}; indexing it as empty")
        return node
    for entry in entries:
        if _is_hidden(entry):
            continue
        if entry.is_dir():
            if entry.is_symlink() or (entry / IGNORE_MARKER).exists():
                logging.debug(f"Not indexing {entry}")
                continue
            node.subdirectories.append(_scan_directory(entry, project_root))
        elif entry.is_file():
            node.file_paths.append(res_path + entry.name)
    return node


def is_eligible(path: str, config: RenameConfig) -> bool:
    """Check whether a file is inside a configured directory and has a configured extension."""
    if not any(path.startswith(directory) for directory in config.directories):
        return False
    return FileEntry.from_path(path).extension.lower() in config.extensions


def iter_eligible_files(node: DirectoryNode, config: RenameConfig) -> Iterator[FileEntry]:
    """Yield eligible files depth-first, each directory's files before its subdirectories."""
    for path in node.file_paths:
        if not is_eligible(path, config):
            logging.debug(f"Skipping {path}: not selected by directory or extension")
            continue
        yield FileEntry.from_path(path)
    for child in node.subdirectories:
        yield from iter_eligible_files(child, config)
