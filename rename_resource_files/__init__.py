"""A command-line tool that renames project resource files to snake_case."""

from .config import load_config, save_config
from .rename_resource_files import rename_files
from .utils import normalize_filename, normalize_name

__all__ = ["load_config", "normalize_filename", "normalize_name", "rename_files", "save_config"]
