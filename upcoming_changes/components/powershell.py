"""
Lexical helpers for PowerShell source text.

Covers only what is needed to read module manifests and the attribute and
param() declarations of script functions: comments, strings, bracket matching
and literal values. Nothing is evaluated; variables other than $true, $false
and $null are returned as their source text.
"""

import re
from typing import Any

from upcoming_changes.exceptions import ScriptParseError

_CLOSERS = {"(": ")", "[": "]", "{": "}"}
_COMMENT_PRECEDERS = set(" \t\r\n;({[,=|")
_HERE_STRING_START = re.compile(r"@(['\"])[ \t]*\r?\n")
_NUMBER = re.compile(r"-?(?:0x[0-9a-fA-F]+|\d+(?:\.\d+)?(?:[eE][-+]?\d+)?)(?![\w.])")
_VARIABLE = re.compile(r"\$(\w+)")
_BAREWORD = re.compile(r"[\w.\-:/\\*?]+")
_BACKTICK_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "a": "\a", "b": "\b"}


def _blank(text: str) -> str:
    return re.sub(r"[^\n]", " ", text)


def _is_string_start(text: str, pos: int) -> bool:
    return text[pos] in "'\"" or _HERE_STRING_START.match(text, pos) is not None


def skip_string(text: str, start: int) -> int:
    """
    Return the index just past the string literal starting at ``start``.

    Handles single- and double-quoted strings (with doubled-quote and backtick
    escapes) and both here-string forms. In double-quoted strings and
    expandable here-strings a ``$( ... )`` subexpression is skipped as code,
    so quotes nested inside it do not end the string.
    """
    here = _HERE_STRING_START.match(text, start)
    if here:
        quote = here.group(1)
        # Start on the opening line's newline so an empty body still terminates
        i = here.end() - 1
        while i < len(text):
            if quote == '"' and text[i] == "`":
                i += 2
            elif quote == '"' and text.startswith("$(", i):
                i = find_closing(text, i + 1) + 1
            elif text[i] == "\n" and text.startswith(quote + "@", i + 1):
                return i + 3
            else:
                i += 1
        raise ScriptParseError("unterminated here-string")

    quote = text[start]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if quote == '"' and ch == "`":
            i += 2
            continue
        if quote == '"' and text.startswith("$(", i):
            i = find_closing(text, i + 1) + 1
            continue
        if ch == quote:
            if i + 1 < len(text) and text[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    raise ScriptParseError(f"unterminated string starting with {text[start:start + 20]!r}")


def strip_comments(text: str) -> str:
    """
    Replace line and block comments with spaces.

    Newlines are kept so that line numbers stay valid; string literals are
    left untouched.
    """
    out = []
    i = 0
    while i < len(text):
        if text.startswith("<#", i):
            end = text.find("#>", i + 2)
            end = len(text) if end == -1 else end + 2
            out.append(_blank(text[i:end]))
            i = end
        elif text[i] == "#" and (i == 0 or text[i - 1] in _COMMENT_PRECEDERS):
            end = text.find("\n", i)
            end = len(text) if end == -1 else end
            out.append(" " * (end - i))
            i = end
        elif _is_string_start(text, i):
            end = skip_string(text, i)
            out.append(text[i:end])
            i = end
        else:
            out.append(text[i])
            i += 1
    return "".join(out)


def find_closing(text: str, start: int) -> int:
    """
    Return the index of the bracket closing the one at ``start``.

    Args:
        text: Comment-free source text
        start: Index of an opening ``(``, ``[`` or ``{``

    Returns:
        Index of the matching closing bracket

    Raises:
        ScriptParseError: If brackets are unbalanced
    """
    stack = [_CLOSERS[text[start]]]
    i = start + 1
    while i < len(text):
        ch = text[i]
        if _is_string_start(text, i):
            i = skip_string(text, i)
            continue
        if ch == "`":
            i += 2
            continue
        if ch in _CLOSERS:
            stack.append(_CLOSERS[ch])
        elif ch in ")]}":
            if ch != stack[-1]:
                raise ScriptParseError(f"unbalanced '{ch}' at offset {i}")
            stack.pop()
            if not stack:
                return i
        i += 1
    raise ScriptParseError(f"no closing '{_CLOSERS[text[start]]}' for offset {start}")


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """Split ``text`` on ``separator`` outside of strings and brackets."""
    parts = []
    current = 0
    i = 0
    while i < len(text):
        ch = text[i]
        if _is_string_start(text, i):
            i = skip_string(text, i)
            continue
        if ch in _CLOSERS:
            i = find_closing(text, i) + 1
            continue
        if ch == separator:
            parts.append(text[current:i])
            current = i + 1
        i += 1
    parts.append(text[current:])
    return parts


def _unescape_backticks(text: str) -> str:
    return re.sub(
        r"`(.)", lambda m: _BACKTICK_ESCAPES.get(m.group(1), m.group(1)), text, flags=re.S
    )


class LiteralReader:
    """Recursive-descent reader for PowerShell literal expressions."""

    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        self.skip_ws()
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def skip_ws(self, newlines: bool = True) -> None:
        chars = " \t\r\n" if newlines else " \t"
        while self.pos < len(self.text):
            ch = self.text[self.pos]
            if ch in chars:
                self.pos += 1
            elif ch == "`" and self.text[self.pos + 1 : self.pos + 2] in ("\n", "\r"):
                self.pos += 2
            else:
                break

    def _skip_separators(self, separators: str) -> None:
        while True:
            self.skip_ws()
            if self.peek() and self.peek() in separators:
                self.pos += 1
            else:
                return

    def read_expression(self) -> Any:
        """Read a value, or a comma-separated list of values."""
        value = self.read_value()
        items = [value]
        while True:
            saved = self.pos
            self.skip_ws(newlines=False)
            if self.peek() != ",":
                self.pos = saved
                break
            self.pos += 1
            self.skip_ws()
            items.append(self.read_value())
        return items if len(items) > 1 else value

    def read_value(self) -> Any:
        self.skip_ws()
        if self.pos >= len(self.text):
            raise ScriptParseError("unexpected end of input")

        text = self.text
        ch = text[self.pos]

        if text.startswith("@{", self.pos):
            return self._read_hashtable()
        if text.startswith("@(", self.pos):
            return self._read_array()
        if _is_string_start(text, self.pos):
            return self._read_string()
        if ch == "$":
            return self._read_variable()
        if ch == "[":
            return self._read_type_or_cast()
        if ch == "(":
            end = find_closing(text, self.pos)
            inner = LiteralReader(text[self.pos + 1 : end])
            value = inner.read_expression() if not inner.at_end() else None
            self.pos = end + 1
            return value
        if ch == "{":
            # Script blocks are kept as source text
            end = find_closing(text, self.pos)
            block = text[self.pos : end + 1]
            self.pos = end + 1
            return block

        number = _NUMBER.match(text, self.pos)
        if number:
            self.pos = number.end()
            literal = number.group(0)
            if "0x" in literal.lower():
                return int(literal, 16)
            if any(c in literal for c in ".eE"):
                return float(literal)
            return int(literal)

        bareword = _BAREWORD.match(text, self.pos)
        if bareword:
            self.pos = bareword.end()
            return bareword.group(0)

        raise ScriptParseError(f"unexpected character {ch!r} at offset {self.pos}")

    def _read_string(self) -> str:
        start = self.pos
        end = skip_string(self.text, start)
        raw = self.text[start:end]
        self.pos = end

        here = _HERE_STRING_START.match(raw)
        if here:
            body = raw[here.end() : len(raw) - 3]
            if body.endswith("\r"):
                body = body[:-1]
            return _unescape_backticks(body) if here.group(1) == '"' else body

        if raw[0] == "'":
            return raw[1:-1].replace("''", "'")
        return _unescape_backticks(raw[1:-1].replace('""', '"'))

    def _read_variable(self) -> Any:
        match = _VARIABLE.match(self.text, self.pos)
        if not match:
            raise ScriptParseError(f"invalid variable at offset {self.pos}")
        self.pos = match.end()
        name = match.group(1).lower()
        if name == "true":
            return True
        if name == "false":
            return False
        if name == "null":
            return None
        return match.group(0)

    def _read_type_or_cast(self) -> Any:
        end = find_closing(self.text, self.pos)
        type_name = self.text[self.pos + 1 : end].strip()
        self.pos = end + 1

        # [type] followed by a value is a cast; the cast itself is not applied
        saved = self.pos
        self.skip_ws(newlines=False)
        if self.peek() and (self.peek() in "'\"@$[(-" or self.peek().isdigit()):
            return self.read_value()
        self.pos = saved
        return type_name

    def _read_key(self) -> str:
        self.skip_ws()
        if _is_string_start(self.text, self.pos):
            return self._read_string()
        match = re.compile(r"[\w.\-]+").match(self.text, self.pos)
        if not match:
            raise ScriptParseError(f"expected hashtable key at offset {self.pos}")
        self.pos = match.end()
        return match.group(0)

    def _read_hashtable(self) -> dict[str, Any]:
        self.pos += 2
        result: dict[str, Any] = {}
        while True:
            self._skip_separators(";")
            if self.pos >= len(self.text):
                raise ScriptParseError("unterminated hashtable")
            if self.peek() == "}":
                self.pos += 1
                return result

            key = self._read_key()
            self.skip_ws(newlines=False)
            if self.peek() != "=":
                raise ScriptParseError(f"expected '=' after key {key!r}")
            self.pos += 1
            result[key] = self.read_expression()

    def _read_array(self) -> list[Any]:
        self.pos += 2
        items: list[Any] = []
        while True:
            self._skip_separators(",;")
            if self.pos >= len(self.text):
                raise ScriptParseError("unterminated array")
            if self.peek() == ")":
                self.pos += 1
                return items
            items.append(self.read_value())


def parse_literal(text: str) -> Any:
    """
    Parse a complete PowerShell literal expression.

    Example:
        >>> parse_literal("@('a', 'b')")
        ['a', 'b']
        >>> parse_literal("'It''s'")
        "It's"
    """
    reader = LiteralReader(text)
    value = reader.read_expression()
    if not reader.at_end():
        raise ScriptParseError(f"unexpected text after literal: {text[reader.pos:][:40]!r}")
    return value
