"""Format generated Go source.

:func:`format_go_source` pipes the source through ``gofmt`` when one is
available, and otherwise through :func:`builtin_format`, a small
re-indenter that also checks the source is well-formed: brackets must
balance and pair up, and string, rune, and comment literals must be closed.

The formatter is selected by the ``render.gofmt`` setting:

* ``"auto"`` -- ``gofmt`` from ``PATH`` if present, else the built-in one.
* ``"builtin"`` -- always the built-in formatter.
* any other value -- the path of a ``gofmt`` binary to run.
"""

from __future__ import annotations

import shutil
import subprocess

from reqmorph.exceptions import FormattingError

_OPENERS = {"{": "}", "(": ")", "[": "]"}
_CLOSERS = frozenset(_OPENERS.values())


def format_go_source(source: str, gofmt: str = "auto") -> str:
    """Format *source*, raising :class:`FormattingError` if it is malformed."""
    if gofmt == "builtin":
        return builtin_format(source)
    binary = shutil.which("gofmt") if gofmt == "auto" else gofmt
    if not binary:
        return builtin_format(source)
    return _run_gofmt(binary, source)


def _run_gofmt(binary: str, source: str) -> str:
    try:
        result = subprocess.run(
            [binary],
            input=source,
            capture_output=True,
            text=True,
            timeout=60,
        )
    except subprocess.TimeoutExpired as exc:
        raise FormattingError(f"{binary} timed out") from exc
    except OSError as exc:
        raise FormattingError(f"Failed to run {binary}: {exc}") from exc

    if result.returncode != 0:
        raise FormattingError(f"{binary} failed: {result.stderr.strip()}")
    return result.stdout


def builtin_format(source: str) -> str:
    """Re-indent Go source with tabs by bracket depth.

    Each line is stripped and indented one tab per open bracket, lines that
    start with closing brackets are outdented, runs of blank lines collapse
    to one, and the result ends with exactly one newline. Lines inside raw
    string literals are kept verbatim.

    Raises:
        FormattingError: On an unmatched or mismatched bracket, or an
            unterminated string, rune, or block comment.
    """
    stack: list[tuple[str, int]] = []
    in_raw = False
    in_block_comment = False
    out: list[str] = []
    previous_blank = False

    for lineno, line in enumerate(source.splitlines(), start=1):
        if in_raw:
            out.append(line)
            previous_blank = False
            end = line.find("`")
            if end >= 0:
                in_raw, in_block_comment = _scan_line(
                    line[end + 1 :], lineno, stack, in_block_comment
                )
            continue

        text = line.strip()
        if not text:
            if not previous_blank and out:
                out.append("")
            previous_blank = True
            continue
        previous_blank = False

        leading_closers = 0
        for char in text:
            if char in _CLOSERS:
                leading_closers += 1
            elif char in " \t":
                continue
            else:
                break
        depth = max(len(stack) - leading_closers, 0)
        out.append("\t" * depth + text if not in_block_comment else line.rstrip())

        in_raw, in_block_comment = _scan_line(text, lineno, stack, in_block_comment)

    if in_raw:
        raise FormattingError("unterminated raw string literal")
    if in_block_comment:
        raise FormattingError("unterminated block comment")
    if stack:
        opener, lineno = stack[-1]
        raise FormattingError(f"line {lineno}: unclosed '{opener}'")

    while out and not out[-1]:
        out.pop()
    return "\n".join(out) + "\n"


def _scan_line(
    text: str, lineno: int, stack: list[tuple[str, int]], in_block_comment: bool
) -> tuple[bool, bool]:
    """Update *stack* from one line; return ``(in_raw, in_block_comment)`` at its end."""
    i = 0
    n = len(text)
    while i < n:
        char = text[i]
        if in_block_comment:
            end = text.find("*/", i)
            if end < 0:
                return False, True
            in_block_comment = False
            i = end + 2
            continue
        if text.startswith("//", i):
            break
        if text.startswith("/*", i):
            in_block_comment = True
            i += 2
            continue
        if char == "`":
            end = text.find("`", i + 1)
            if end < 0:
                return True, False
            i = end + 1
            continue
        if char in "\"'":
            i = _skip_quoted(text, i, lineno)
            continue
        if char in _OPENERS:
            stack.append((char, lineno))
        elif char in _CLOSERS:
            if not stack:
                raise FormattingError(f"line {lineno}: unexpected '{char}'")
            opener, _ = stack.pop()
            if _OPENERS[opener] != char:
                raise FormattingError(
                    f"line {lineno}: '{char}' does not match '{opener}'"
                )
        i += 1
    return False, in_block_comment


def _skip_quoted(text: str, start: int, lineno: int) -> int:
    """Return the index just past the literal opened at *start*."""
    quote = text[start]
    i = start + 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == quote:
            return i + 1
        i += 1
    kind = "string" if quote == '"' else "rune"
    raise FormattingError(f"line {lineno}: unterminated {kind} literal")

