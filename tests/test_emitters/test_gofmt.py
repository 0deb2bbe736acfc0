"""Tests for reqmorph.emitters.gofmt."""

from __future__ import annotations

import stat
from pathlib import Path
from unittest.mock import patch

import pytest

from reqmorph.emitters.gofmt import builtin_format, format_go_source
from reqmorph.exceptions import FormattingError


def _script(path: Path, body: str) -> str:
    path.write_text("#!/bin/sh\n" + body, encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR)
    return str(path)


class TestBuiltinFormat:
    def test_indents_by_depth(self) -> None:
        source = "package main\nfunc f() {\nif x {\ny()\n}\n}"
        assert builtin_format(source) == "package main\nfunc f() {\n\tif x {\n\t\ty()\n\t}\n}\n"

    def test_reindents_existing_whitespace(self) -> None:
        assert builtin_format("x := []int{\n        1,\n   }\n") == "x := []int{\n\t1,\n}\n"

    def test_collapses_blank_lines(self) -> None:
        assert builtin_format("\n\na\n\n\n\nb\n\n") == "a\n\nb\n"

    def test_brackets_in_literals_ignored(self) -> None:
        source = 'x := "{(["\ny := \'}\'\nz := "\\"{" // }\n'
        assert builtin_format(source) == source

    def test_raw_string_lines_verbatim(self) -> None:
        source = "x := `a\n   {keep\n`\ny := 1\n"
        assert builtin_format(source) == source

    def test_block_comment(self) -> None:
        assert builtin_format("/* {\n still */\nx\n") == "/* {\n still */\nx\n"

    @pytest.mark.parametrize(
        "source, message",
        [
            ("func f() {\n", "line 1: unclosed '{'"),
            ("x\n}\n", "line 2: unexpected '}'"),
            ("f(]\n", "line 1: ']' does not match '\\('"),
            ('x := "abc\n', "line 1: unterminated string literal"),
            ("x := 'a\n", "line 1: unterminated rune literal"),
            ("x := `abc\n", "unterminated raw string literal"),
            ("/* abc\n", "unterminated block comment"),
        ],
    )
    def test_malformed(self, source: str, message: str) -> None:
        with pytest.raises(FormattingError, match=message):
            builtin_format(source)


class TestFormatGoSource:
    def test_builtin(self) -> None:
        assert format_go_source("a {\nb\n}", "builtin") == "a {\n\tb\n}\n"

    def test_auto_without_gofmt_uses_builtin(self) -> None:
        with patch("reqmorph.emitters.gofmt.shutil.which", return_value=None):
            assert format_go_source("a {\nb\n}") == "a {\n\tb\n}\n"

    def test_external_binary(self, tmp_path: Path) -> None:
        binary = _script(tmp_path / "gofmt", "cat\n")
        assert format_go_source("a {\nb\n}", binary) == "a {\nb\n}"

    def test_auto_prefers_gofmt_on_path(self, tmp_path: Path) -> None:
        binary = _script(tmp_path / "gofmt", "echo formatted\n")
        with patch("reqmorph.emitters.gofmt.shutil.which", return_value=binary):
            assert format_go_source("a {") == "formatted\n"

    def test_external_failure(self, tmp_path: Path) -> None:
        binary = _script(tmp_path / "gofmt", "echo 'expected }' >&2\nexit 2\n")
        with pytest.raises(FormattingError, match="failed: expected }"):
            format_go_source("a {", binary)

    def test_missing_binary(self, tmp_path: Path) -> None:
        with pytest.raises(FormattingError, match="Failed to run"):
            format_go_source("a {", str(tmp_path / "missing"))
