# leakgate — Pre-release Leak Gate for Script Repositories
# Copyright (C) 2026 leakgate Project Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""PowerShell tokenizer.

Turns script text into a flat token stream with enough structure for
command extraction:
- bare words, parameters (-Name), numbers, variables ($x, ${x}, @splat)
- single/double quoted strings and here-strings (@' '@, @" "@)
- sub-expressions $( ) inside expandable strings are tokenized
  recursively and emitted right after the string token
- grouping tokens ( $( @( { @{ [ and their closers, checked for balance
- operators: ; | & && || , = += . ! and redirections (>, >>, 2>&1)
- line and block comments are dropped, newlines are kept

Malformed input (unterminated strings, here-strings or block comments,
unbalanced brackets) raises ParseError with the offending line.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from leakgate.errors import ParseError


class TokenKind(str, Enum):
    WORD = "word"
    PARAM = "param"
    NUMBER = "number"
    VARIABLE = "variable"
    STRING = "string"
    OPEN = "open"
    CLOSE = "close"
    OPERATOR = "operator"
    NEWLINE = "newline"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    value: str = ""  # unescaped content for words and strings
    expandable: bool = False  # double-quoted string or here-string
    space_before: bool = False


CLOSERS = {"(": ")", "$(": ")", "@(": ")", "{": "}", "@{": "}", "[": "]"}

# Characters that end a bare word.
_WORD_STOP = set(" \t\r\n(){}[];,|&\"'=<>$")

_WHITESPACE = " \t\f\v\u00a0\ufeff"

_NUMBER = re.compile(
    r"""-?(?:0x[0-9a-f]+|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)"""
    r"""(?:ul|us|uy|l|d|u|n|y|s)?(?:kb|mb|gb|tb|pb)?""",
    re.IGNORECASE,
)
_RANGE_START = re.compile(r"""-?\d+\.\.""")

_VARIABLE = re.compile(r"""\$(?:[A-Za-z_]\w*:)?\w+|\$[$?^]""")
_SPLAT = re.compile(r"""@\w+""")
_REDIRECTION = re.compile(r"""[1-6*]?>>?(?:&[12])?|<""")
_ASSIGNMENT = re.compile(r"""[+\-*/%]?=""")
_PARAM = re.compile(r"""-[A-Za-z_?][^\s(){}\[\];,|&"'=<>$]*""")


def is_number(word: str) -> bool:
    """Return True for numeric literals and range starts (1..10)."""
    return bool(_NUMBER.fullmatch(word) or _RANGE_START.match(word))


class Tokenizer:
    """Single-use tokenizer over one script's text."""

    def __init__(self, text: str, path: str = "<script>") -> None:
        self.text = text.replace("\r\n", "\n").replace("\r", "\n")
        self.path = path
        self.pos = 0
        self.line = 1
        self._space = True

    # ── helpers ──

    def _error(self, message: str, line: Optional[int] = None) -> ParseError:
        return ParseError(self.path, message, line if line is not None else self.line)

    def _peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.text[idx] if idx < len(self.text) else ""

    def _advance(self, count: int = 1) -> str:
        chunk = self.text[self.pos:self.pos + count]
        self.line += chunk.count("\n")
        self.pos += count
        return chunk

    def _emit(self, out: list[Token], kind: TokenKind, text: str, line: int, **extra) -> None:
        out.append(Token(kind=kind, text=text, line=line, space_before=self._space, **extra))
        self._space = False

    # ── entry point ──

    def tokenize(self) -> list[Token]:
        out: list[Token] = []
        self._scan(out, closer=None)
        return out

    def _scan(self, out: list[Token], closer: Optional[str]) -> None:
        """Tokenize until end of text, or until an unmatched ``closer``.

        ``closer`` is set when scanning a $( ) embedded in a string; the
        scan returns after emitting the matching close token.
        """
        stack: list[Token] = []
        text = self.text

        while self.pos < len(text):
            ch = text[self.pos]
            start_line = self.line

            if ch in _WHITESPACE:
                self._advance()
                self._space = True
                continue

            if ch == "\n":
                self._advance()
                self._emit(out, TokenKind.NEWLINE, "\n", start_line)
                self._space = True
                continue

            if ch == "`" and self._peek(1) == "\n":
                # line continuation
                self._advance(2)
                self._space = True
                continue

            if ch == "<" and self._peek(1) == "#":
                end = text.find("#>", self.pos + 2)
                if end == -1:
                    raise self._error("Missing end of block comment '#>'", start_line)
                self._advance(end + 2 - self.pos)
                self._space = True
                continue

            if ch == "#":
                end = text.find("\n", self.pos)
                self._advance((end if end != -1 else len(text)) - self.pos)
                self._space = True
                continue

            if ch in ")}]":
                if not stack:
                    if closer is not None and ch == closer:
                        self._advance()
                        self._emit(out, TokenKind.CLOSE, ch, start_line)
                        return
                    raise self._error(f"Unexpected token '{ch}'")
                expected = CLOSERS[stack[-1].text]
                if ch != expected:
                    raise self._error(
                        f"Unexpected token '{ch}', expected '{expected}' to close "
                        f"'{stack[-1].text}' from line {stack[-1].line}"
                    )
                stack.pop()
                self._advance()
                self._emit(out, TokenKind.CLOSE, ch, start_line)
                continue

            if ch in "({[":
                self._advance()
                self._emit(out, TokenKind.OPEN, ch, start_line)
                stack.append(out[-1])
                continue

            if ch == "'":
                self._scan_single_quoted(out)
                continue

            if ch == '"':
                self._scan_double_quoted(out)
                continue

            if ch == "$":
                if self._peek(1) == "(":
                    self._advance(2)
                    self._emit(out, TokenKind.OPEN, "$(", start_line)
                    stack.append(out[-1])
                    continue
                if self._peek(1) == "{":
                    end = text.find("}", self.pos + 2)
                    if end == -1:
                        raise self._error("Missing '}' in variable reference", start_line)
                    var = self._advance(end + 1 - self.pos)
                    self._emit(out, TokenKind.VARIABLE, var, start_line, value=var[2:-1])
                    continue
                match = _VARIABLE.match(text, self.pos)
                if match:
                    var = self._advance(match.end() - self.pos)
                    self._emit(out, TokenKind.VARIABLE, var, start_line, value=var[1:])
                    continue
                self._scan_word(out)
                continue

            if ch == "@":
                nxt = self._peek(1)
                if nxt and nxt in "({":
                    self._advance(2)
                    self._emit(out, TokenKind.OPEN, "@" + nxt, start_line)
                    stack.append(out[-1])
                    continue
                if nxt and nxt in "'\"":
                    self._scan_here_string(out, nxt)
                    continue
                match = _SPLAT.match(text, self.pos)
                if match:
                    var = self._advance(match.end() - self.pos)
                    self._emit(out, TokenKind.VARIABLE, var, start_line, value=var[1:])
                    continue
                self._scan_word(out)
                continue

            if ch in ";,!":
                self._advance()
                self._emit(out, TokenKind.OPERATOR, ch, start_line)
                continue

            if ch in "&|":
                op = self._advance(2) if self._peek(1) == ch else self._advance()
                self._emit(out, TokenKind.OPERATOR, op, start_line)
                continue

            match = _REDIRECTION.match(text, self.pos)
            if match and (ch in "<>" or self._peek(1) == ">"):
                op = self._advance(match.end() - self.pos)
                self._emit(out, TokenKind.OPERATOR, op, start_line)
                continue

            match = _ASSIGNMENT.match(text, self.pos)
            if match and (ch == "=" or self._peek(1) == "="):
                op = self._advance(match.end() - self.pos)
                self._emit(out, TokenKind.OPERATOR, op, start_line)
                continue

            if ch == "." and (self._peek(1) in _WHITESPACE or self._peek(1) in ("", "\n")):
                self._advance()
                self._emit(out, TokenKind.OPERATOR, ".", start_line)
                continue

            if ch == "-":
                match = _PARAM.match(text, self.pos)
                if match:
                    param = self._advance(match.end() - self.pos)
                    self._emit(out, TokenKind.PARAM, param, start_line, value=param)
                    continue

            self._scan_word(out)

        if stack:
            opener = stack[-1]
            raise self._error(
                f"Missing closing '{CLOSERS[opener.text]}' for '{opener.text}'", opener.line
            )
        if closer is not None:
            raise self._error(f"Missing closing '{closer}' in sub-expression")

    # ── words ──

    def _scan_word(self, out: list[Token]) -> None:
        start = self.pos
        start_line = self.line
        value: list[str] = []
        text = self.text

        # The first character is always consumed, even if it is a stop char
        # that nothing else claimed ('$' alone, '@' alone, '=' edge cases).
        first = True
        while self.pos < len(text):
            ch = text[self.pos]
            if ch == "`":
                nxt = self._peek(1)
                if nxt == "":
                    self._advance()
                    break
                if nxt == "\n":
                    break
                value.append(nxt)
                self._advance(2)
                first = False
                continue
            if not first and ch in _WORD_STOP:
                break
            if first and ch in " \t\n":
                break
            value.append(ch)
            self._advance()
            first = False

        raw = text[start:self.pos]
        word = "".join(value)
        kind = TokenKind.NUMBER if is_number(word) else TokenKind.WORD
        self._emit(out, kind, raw, start_line, value=word)

    # ── strings ──

    def _scan_single_quoted(self, out: list[Token]) -> None:
        start = self.pos
        start_line = self.line
        value: list[str] = []
        self._advance()
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self._error("The string is missing the terminator: '", start_line)
            ch = text[self.pos]
            if ch == "'":
                if self._peek(1) == "'":
                    value.append("'")
                    self._advance(2)
                    continue
                self._advance()
                break
            value.append(ch)
            self._advance()
        self._emit(out, TokenKind.STRING, text[start:self.pos], start_line, value="".join(value))

    def _scan_double_quoted(self, out: list[Token]) -> None:
        start = self.pos
        start_line = self.line
        value: list[str] = []
        nested: list[Token] = []
        self._advance()
        text = self.text
        while True:
            if self.pos >= len(text):
                raise self._error('The string is missing the terminator: "', start_line)
            ch = text[self.pos]
            if ch == "`":
                value.append(self._peek(1))
                self._advance(2)
                continue
            if ch == '"':
                if self._peek(1) == '"':
                    value.append('"')
                    self._advance(2)
                    continue
                self._advance()
                break
            if ch == "$" and self._peek(1) == "(":
                self._scan_embedded_subexpression(nested)
                continue
            value.append(ch)
            self._advance()
        self._emit(
            out, TokenKind.STRING, text[start:self.pos], start_line,
            value="".join(value), expandable=True,
        )
        out.extend(nested)

    def _scan_here_string(self, out: list[Token], quote: str) -> None:
        start = self.pos
        start_line = self.line
        self._advance(2)
        text = self.text

        # Header must be followed only by whitespace up to the newline.
        while self.pos < len(text) and text[self.pos] in _WHITESPACE:
            self._advance()
        if self._peek() != "\n":
            raise self._error("No characters are allowed after a here-string header", start_line)
        self._advance()

        terminator = quote + "@"
        value: list[str] = []
        nested: list[Token] = []
        at_line_start = True
        while True:
            if self.pos >= len(text):
                raise self._error(
                    f"The here-string is missing the terminator: {terminator}", start_line
                )
            if at_line_start and text.startswith(terminator, self.pos):
                self._advance(2)
                break
            ch = text[self.pos]
            if quote == '"':
                if ch == "`" and self._peek(1) not in ("", "\n"):
                    value.append(self._peek(1))
                    self._advance(2)
                    at_line_start = False
                    continue
                if ch == "$" and self._peek(1) == "(":
                    self._scan_embedded_subexpression(nested)
                    at_line_start = False
                    continue
            value.append(ch)
            self._advance()
            at_line_start = ch == "\n"

        body = "".join(value)
        if body.endswith("\n"):
            body = body[:-1]
        self._emit(
            out, TokenKind.STRING, text[start:self.pos], start_line,
            value=body, expandable=quote == '"',
        )
        out.extend(nested)

    def _scan_embedded_subexpression(self, nested: list[Token]) -> None:
        line = self.line
        self._advance(2)
        saved_space = self._space
        self._space = False
        nested.append(Token(kind=TokenKind.OPEN, text="$(", line=line))
        self._scan(nested, closer=")")
        self._space = saved_space


def tokenize(text: str, path: str = "<script>") -> list[Token]:
    """Tokenize PowerShell source text. Raises ParseError on malformed input."""
    return Tokenizer(text, path).tokenize()
