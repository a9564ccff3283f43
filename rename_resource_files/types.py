import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Protocol

ROOT_MARKER: Final = "res://"

DEFAULT_DIRECTORIES: Final = ("res://assets/",)
DEFAULT_EXTENSIONS: Final = (".png", ".tscn", ".json")


def is_valid_directory(directory: str) -> bool:
    """Check that a directory prefix points inside the project tree."""
    return bool(directory) and directory.startswith(ROOT_MARKER)


def is_valid_extension(extension: str) -> bool:
    """Check that an extension looks like `.png`: a dot followed by at least one character."""
    return extension.startswith(".") and len(extension) > 1


def _append_unique(items: list[str], value: str) -> None:
    if value and value not in items:
        items.append(value)


@dataclass
class RenameConfig:
    """Settings for a rename run, as stored in the config file."""

    directories: list[str] = field(default_factory=list)
    extensions: list[str] = field(default_factory=list)
    camel_case_regex: str = ""
    separator_regex: str = ""
    custom_regex_enabled: bool = False

    @classmethod
    def default(cls) -> "RenameConfig":
        return cls(directories=list(DEFAULT_DIRECTORIES), extensions=list(DEFAULT_EXTENSIONS))

    def add_directory(self, directory: str) -> None:
        _append_unique(self.directories, directory.strip())

    def remove_directory(self, directory: str) -> None:
        directory = directory.strip()
        if directory in self.directories:
            self.directories.remove(directory)

    def add_extension(self, extension: str) -> None:
        _append_unique(self.extensions, extension.strip().lower())

    def remove_extension(self, extension: str) -> None:
        extension = extension.strip().lower()
        if extension in self.extensions:
            self.extensions.remove(extension)

    def valid_directories(self) -> list[str]:
        """Trimmed, de-duplicated directory prefixes that start with the root marker."""
        result: list[str] = []
        for directory in self.directories:
            directory = directory.strip()
            if is_valid_directory(directory):
                _append_unique(result, directory)
        return result

    def valid_extensions(self) -> list[str]:
        """Trimmed, lowercased, de-duplicated extensions of the form `.ext`."""
        result: list[str] = []
        for extension in self.extensions:
            extension = extension.strip().lower()
            if is_valid_extension(extension):
                _append_unique(result, extension)
        return result

    def with_defaults(self) -> "RenameConfig":
        """Return a copy whose empty directory or extension list is replaced by the defaults."""
        return RenameConfig(
            directories=list(self.directories) or list(DEFAULT_DIRECTORIES),
            extensions=list(self.extensions) or list(DEFAULT_EXTENSIONS),
            camel_case_regex=self.camel_case_regex,
            separator_regex=self.separator_regex,
            custom_regex_enabled=self.custom_regex_enabled,
        )


@dataclass(frozen=True)
class FileEntry:
    """A file in the project tree, addressed by its root-relative path."""

    path: str  # e.g. res://assets/ui/PlayButton.png
    name: str
    extension: str  # as found on disk, not lowercased

    @classmethod
    def from_path(cls, path: str) -> "FileEntry":
        name = path.rsplit("/", 1)[-1]
        return cls(path=path, name=name, extension=os.path.splitext(name)[1])

    @property
    def stem(self) -> str:
        return self.name[: len(self.name) - len(self.extension)]

    @property
    def directory(self) -> str:
        """The containing directory, with a trailing slash."""
        return self.path[: len(self.path) - len(self.name)]


class DirectoryNode(Protocol):
    """A read-only directory in the project index."""

    path: str
    file_paths: Sequence[str]
    subdirectories: Sequence["DirectoryNode"]


@dataclass(frozen=True)
class Renamed:
    source: str
    destination: str


@dataclass(frozen=True)
class Skipped:
    path: str
    reason: str


@dataclass(frozen=True)
class Failed:
    source: str
    destination: str
    error: str


RenameOutcome = Renamed | Skipped | Failed


@dataclass
class RenameRequest:
    """Everything a single rename run needs."""

    config: RenameConfig
    project_root: Path
    dry_run: bool = False


@dataclass
class RenameSummary:
    dry_run: bool
    outcomes: list[RenameOutcome] = field(default_factory=list)

    @property
    def renamed(self) -> list[Renamed]:
        return [o for o in self.outcomes if isinstance(o, Renamed)]

    @property
    def skipped(self) -> list[Skipped]:
        return [o for o in self.outcomes if isinstance(o, Skipped)]

    @property
    def failed(self) -> list[Failed]:
        return [o for o in self.outcomes if isinstance(o, Failed)]
