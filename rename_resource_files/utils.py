"""Filename normalization for rename-resource-files."""

import logging
import os
import re
from dataclasses import dataclass
from typing import Final

# A lowercase letter or digit immediately followed by an uppercase letter
DEFAULT_CAMEL_PATTERN: Final = re.compile(r"([a-z0-9])([A-Z])")
# Runs of whitespace and/or hyphens
DEFAULT_SEPARATOR_PATTERN: Final = re.compile(r"[\s\-]+")

CAMEL_REPLACEMENT: Final = r"\1_\2"
SEPARATOR_REPLACEMENT: Final = "_"


class PatternError(Exception):
    """Raised when a user-supplied regular expression can't be used."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid pattern {source!r}: {reason}")


@dataclass(frozen=True)
class NamePatterns:
    camel: re.Pattern[str]
    separator: re.Pattern[str]


DEFAULT_PATTERNS: Final = NamePatterns(camel=DEFAULT_CAMEL_PATTERN, separator=DEFAULT_SEPARATOR_PATTERN)


def compile_pattern(source: str, *, min_groups: int = 0) -> re.Pattern[str]:
    """Compile a user-supplied regular expression.

    Args:
        source: The regular expression text
        min_groups: Number of capture groups the replacement refers to

    Raises:
        PatternError: If the expression doesn't compile, or has too few groups
    """
    try:
        pattern = re.compile(source)
    except re.error as e:
        raise PatternError(source, str(e)) from e
    if pattern.groups < min_groups:
        raise PatternError(source, f"expected at least {min_groups} capture groups, found {pattern.groups}")
    return pattern


def resolve_patterns(camel_case_regex: str, separator_regex: str, enabled: bool) -> NamePatterns:
    """Choose the patterns for a run.

    Blank overrides keep the corresponding default. If either override is
    invalid, both defaults are used.
    """
    if not enabled:
        return DEFAULT_PATTERNS

    camel_case_regex = camel_case_regex.strip()
    separator_regex = separator_regex.strip()
    try:
        camel = compile_pattern(camel_case_regex, min_groups=2) if camel_case_regex else DEFAULT_CAMEL_PATTERN
        separator = compile_pattern(separator_regex) if separator_regex else DEFAULT_SEPARATOR_PATTERN
    except PatternError as e:
        logging.warning(f"{e}; falling back to the default patterns")
        return DEFAULT_PATTERNS
    return NamePatterns(camel=camel, separator=separator)


def normalize_name(name: str, extension: str, patterns: NamePatterns = DEFAULT_PATTERNS) -> str:
    """Convert a filename stem to snake_case and reattach its extension.

    Args:
        name: The filename without its extension
        extension: The extension, including the leading dot. May be empty
        patterns: The camel-boundary and separator patterns to apply

    Returns:
        The normalized filename, with the extension lowercased
    """
    name = patterns.camel.sub(CAMEL_REPLACEMENT, name)
    name = patterns.separator.sub(SEPARATOR_REPLACEMENT, name)
    return name.lower() + extension.lower()


def normalize_filename(filename: str, patterns: NamePatterns = DEFAULT_PATTERNS) -> str:
    """Normalize a filename, splitting the extension off at the last dot."""
    name, extension = os.path.splitext(filename)
    return normalize_name(name, extension, patterns)
