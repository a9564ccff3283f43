"""Tests for filename normalization."""

import logging

import pytest

from rename_resource_files.utils import (
    DEFAULT_PATTERNS,
    PatternError,
    compile_pattern,
    normalize_filename,
    normalize_name,
    resolve_patterns,
)


def test_normalize_filename() -> None:
    """Test conversion to snake_case."""
    # CamelCase boundaries
    assert normalize_filename("fooBarBaz.png") == "foo_bar_baz.png"
    assert normalize_filename("PlayerIdle.tscn") == "player_idle.tscn"
    assert normalize_filename("level2Boss.json") == "level2_boss.json"

    # Spaces and hyphens, with the extension lowercased
    assert normalize_filename("My Cool-File.TSCN") == "my_cool_file.tscn"
    assert normalize_filename("big  -  tree.png") == "big_tree.png"

    # Already normalized
    assert normalize_filename("already_snake.json") == "already_snake.json"

    # Consecutive capitals only split after a lowercase letter or digit
    assert normalize_filename("HTTPServer.json") == "httpserver.json"
    assert normalize_filename("myHTTPServer.json") == "my_httpserver.json"


def test_normalize_name_keeps_extension_characters() -> None:
    """Test that only the case of the extension changes."""
    assert normalize_name("IconSet", ".PnG") == "icon_set.png"
    assert normalize_name("Icon Set", ".tar-Gz") == "icon_set.tar-gz"
    assert normalize_name("README", "") == "readme"


@pytest.mark.parametrize(
    "filename",
    ["fooBarBaz.png", "My Cool-File.TSCN", "already_snake.json", "a - B - cDe.png", "X1Y2Z3.json", "Ünïcode Näme.png"],
)
def test_normalize_filename_is_idempotent(filename: str) -> None:
    """Test that normalizing twice gives the same result as normalizing once."""
    once = normalize_filename(filename)
    assert normalize_filename(once) == once


def test_compile_pattern() -> None:
    """Test compiling user patterns."""
    assert compile_pattern(r"([a-z])([A-Z])", min_groups=2).groups == 2

    with pytest.raises(PatternError) as exc_info:
        compile_pattern(r"([a-z]")
    assert "([a-z]" in str(exc_info.value)

    # The camel replacement refers to two groups
    with pytest.raises(PatternError):
        compile_pattern(r"[a-z][A-Z]", min_groups=2)


def test_resolve_patterns_disabled() -> None:
    """Test that overrides are ignored unless enabled."""
    assert resolve_patterns(r"(x)(y)", r"\.", enabled=False) is DEFAULT_PATTERNS


def test_resolve_patterns_overrides() -> None:
    """Test that valid overrides replace the defaults."""
    patterns = resolve_patterns(r"([a-zA-Z])([0-9])", r"[\s\-.]+", enabled=True)
    assert normalize_name("Level2 boss.final", ".png", patterns) == "level_2_boss_final.png"

    # A blank override keeps that default
    patterns = resolve_patterns("", r"\.+", enabled=True)
    assert patterns.camel is DEFAULT_PATTERNS.camel
    assert normalize_name("fooBar.baz", ".json", patterns) == "foo_bar_baz.json"


def test_resolve_patterns_falls_back_on_error(caplog: pytest.LogCaptureFixture) -> None:
    """Test that an invalid override falls back to both defaults."""
    with caplog.at_level(logging.WARNING):
        patterns = resolve_patterns(r"([a-z])([A-Z])", r"[unclosed", enabled=True)
    assert patterns is DEFAULT_PATTERNS
    assert "falling back to the default patterns" in caplog.text

    # Too few groups for the camel replacement
    assert resolve_patterns(r"[a-z][A-Z]", r"\.", enabled=True) is DEFAULT_PATTERNS
