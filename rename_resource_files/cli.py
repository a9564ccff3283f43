#!/usr/bin/env python3


import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import rich
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import (
    ValidationError,
    default_config_path,
    load_config,
    reset_config,
    save_config,
    validate_config,
)
from .rename_resource_files import print_summary, rename_files
from .types import RenameConfig, RenameRequest

project_root_argument = click.argument(
    "project_root",
    required=False,
    default=".",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Config file (default: PROJECT_ROOT/addons/rename_tool/config.cfg)",
)


def settings_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Options that override the saved settings."""
    options = [
        click.option("-d", "--dir", "dirs", multiple=True, help="Directory prefix, e.g. res://assets/ (replaces saved)"),
        click.option("--add-dir", "add_dirs", multiple=True, help="Add a directory prefix"),
        click.option("--remove-dir", "remove_dirs", multiple=True, help="Remove a directory prefix"),
        click.option("-e", "--ext", "exts", multiple=True, help="Extension, e.g. .png (replaces saved)"),
        click.option("--add-ext", "add_exts", multiple=True, help="Add an extension"),
        click.option("--remove-ext", "remove_exts", multiple=True, help="Remove an extension"),
        click.option("--camel-regex", help="Pattern that splits camelCase words; needs two groups"),
        click.option("--separator-regex", help="Pattern for runs of separators to replace with _"),
        click.option(
            "--custom-regex/--no-custom-regex",
            "custom_regex",
            default=None,
            help="Use the custom patterns instead of the defaults",
        ),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def apply_overrides(
    config: RenameConfig,
    *,
    dirs: tuple[str, ...] = (),
    add_dirs: tuple[str, ...] = (),
    remove_dirs: tuple[str, ...] = (),
    exts: tuple[str, ...] = (),
    add_exts: tuple[str, ...] = (),
    remove_exts: tuple[str, ...] = (),
    camel_regex: str | None = None,
    separator_regex: str | None = None,
    custom_regex: bool | None = None,
) -> RenameConfig:
    """Apply command-line settings on top of the loaded config."""
    if dirs:
        config.directories = []
    for directory in (*dirs, *add_dirs):
        config.add_directory(directory)
    for directory in remove_dirs:
        config.remove_directory(directory)

    if exts:
        config.extensions = []
    for extension in (*exts, *add_exts):
        config.add_extension(extension)
    for extension in remove_exts:
        config.remove_extension(extension)

    if camel_regex is not None:
        config.camel_case_regex = camel_regex
    if separator_regex is not None:
        config.separator_regex = separator_regex
    if custom_regex is not None:
        config.custom_regex_enabled = custom_regex
    return config


def _save(config: RenameConfig, config_path: Path) -> RenameConfig:
    try:
        return save_config(config, config_path)
    except ValidationError as e:
        raise click.ClickException(f"Config not saved: {e}") from e
    except OSError as e:
        raise click.ClickException(f"Could not write {config_path}: {e}") from e


def _print_config(config: RenameConfig, config_path: Path) -> None:
    rich.print(f"[bold]{escape(str(config_path))}[/bold]")
    rich.print(f"  Directories: {escape(', '.join(config.directories)) or '[dim]none[/dim]'}")
    rich.print(f"  Extensions: {escape(', '.join(config.extensions)) or '[dim]none[/dim]'}")
    rich.print(f"  Custom regex: {'enabled' if config.custom_regex_enabled else 'disabled'}")
    rich.print(f"  Camel case regex: {escape(repr(config.camel_case_regex))}")
    rich.print(f"  Separator regex: {escape(repr(config.separator_regex))}")


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level (default: WARNING)",
)
def main(log_level: str) -> None:
    """Rename project resource files to snake_case."""
    # Set up logging
    level = getattr(logging, log_level.upper())
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    # When not in debug mode, only show our own debug messages
    if level != logging.DEBUG:
        # Set third-party loggers to WARNING
        for logger_name in logging.root.manager.loggerDict:
            if not logger_name.startswith("rename_resource_files"):
                logging.getLogger(logger_name).setLevel(logging.WARNING)


@main.command()
@project_root_argument
@config_option
@settings_options
@click.option("-n", "--dry-run", is_flag=True, help="Show changes without renaming")
@click.option("--save/--no-save", "save", default=True, help="Save the settings before renaming (default: save)")
def rename(
    project_root: Path,
    config_path: Path | None,
    dry_run: bool,
    save: bool,
    **overrides: Any,
) -> None:
    """Rename matching files under PROJECT_ROOT (default: current directory)."""
    project_root = project_root.resolve()
    config_path = config_path or default_config_path(project_root)
    config = apply_overrides(load_config(config_path), **overrides).with_defaults()

    if save and not dry_run:
        config = _save(config, config_path)
    else:
        try:
            config = validate_config(config)
        except ValidationError as e:
            raise click.ClickException(str(e)) from e

    progress = Progress(SpinnerColumn(), TextColumn("[progress.description]{task.description}"), transient=True)
    with progress:
        summary = rename_files(
            RenameRequest(config=config, project_root=project_root, dry_run=dry_run),
            progress=progress,
        )
    print_summary(summary)
    if summary.failed:
        sys.exit(1)


@main.command()
@project_root_argument
@config_option
@settings_options
def save(project_root: Path, config_path: Path | None, **overrides: Any) -> None:
    """Save settings to the config file."""
    config_path = config_path or default_config_path(project_root.resolve())
    config = _save(apply_overrides(load_config(config_path), **overrides), config_path)
    rich.print(f"[green]Saved config to {escape(str(config_path))}[/green]")
    _print_config(config, config_path)


@main.command()
@project_root_argument
@config_option
def show(project_root: Path, config_path: Path | None) -> None:
    """Show the saved settings."""
    config_path = config_path or default_config_path(project_root.resolve())
    _print_config(load_config(config_path), config_path)


@main.command()
@project_root_argument
@config_option
@click.option(
    "--save/--no-save", "save", default=True, help="Write the reset settings to the config file (default: save)"
)
def reset(project_root: Path, config_path: Path | None, save: bool) -> None:
    """Reset directories and extensions to the defaults.

    The config file is overwritten unless --no-save is given, in which case
    the default settings are only shown.
    """
    config_path = config_path or default_config_path(project_root.resolve())
    config = reset_config(load_config(config_path))
    if save:
        config = _save(config, config_path)
        rich.print(f"[green]Reset config at {escape(str(config_path))}[/green]")
    else:
        rich.print("[yellow]Not saved; run `save` to keep these settings[/yellow]")
    _print_config(config, config_path)


if __name__ == "__main__":
    main()
