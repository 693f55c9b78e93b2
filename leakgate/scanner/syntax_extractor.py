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

"""Syntax extractor — command invocations, declarations, and imports.

Two extraction strategies:

1. Token-stream walk (ps_tokenizer) for command invocations and
   function declarations. A command name is the first element of every
   command expression, recursively through script blocks, sub-expressions,
   pipelines, assignment right-hand sides, and $( ) inside strings.
2. Lexical regex over the raw text for import targets
   (Import-Module / ipmo / using module / #Requires -Modules), since
   imports are often built dynamically or live in comments.

Known limitation: the import patterns also match inside comments and
unrelated strings. This is not filtered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from leakgate.errors import ParseError
from leakgate.scanner.ps_tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)


# ── Language keywords (never command names) ──

KEYWORDS = frozenset({
    "begin", "break", "catch", "class", "configuration", "continue", "data",
    "define", "do", "dynamicparam", "else", "elseif", "end", "enum", "exit",
    "filter", "finally", "for", "foreach", "from", "function", "hidden", "if",
    "in", "inlinescript", "parallel", "param", "process", "return",
    "sequence", "static", "switch", "throw", "trap", "try", "until", "using",
    "var", "while", "workflow",
})

# Keywords followed by a declared function name.
DECLARATION_KEYWORDS = frozenset({"function", "filter", "workflow"})

# Keywords followed by a type/configuration name that is not a command.
NAMED_BLOCK_KEYWORDS = frozenset({"class", "enum", "configuration"})

# Keywords whose argument is a pipeline (a command may follow directly).
PIPELINE_KEYWORDS = frozenset({"return", "throw", "in"})

# Keywords that swallow the rest of the statement.
STATEMENT_KEYWORDS = frozenset({"using"})

_SCOPE_PREFIX = re.compile(r"""^(?:global|script|local|private):""", re.IGNORECASE)


# ── Import patterns (raw text) ──

_ARG = r"""[^\s,;|)]+"""

# Blanks within one statement, including backtick line continuations.
_WS = r"""(?:[ \t]|`\r?\n)+"""

# Import-Module parameters that take a value before the module name.
_VALUE_PARAMS = (
    r"""MinimumVersion|MaximumVersion|RequiredVersion|Version|Prefix|Scope|"""
    r"""Function|Cmdlet|Variable|Alias|ArgumentList|Args"""
)
_SWITCH = rf"""-(?:(?:{_VALUE_PARAMS}){_WS}{_ARG}|(?!Name\b)[A-Za-z]\w*(?::[^\s,;|)]+)?){_WS}"""

IMPORT_PATTERNS: list[re.Pattern] = [
    re.compile(
        rf"""\b(?:Import-Module|ipmo){_WS}(?:{_SWITCH})*(?:-Name{_WS})?"""
        rf"""(?P<args>{_ARG}(?:[ \t]*,[ \t]*{_ARG})*)""",
        re.IGNORECASE,
    ),
    re.compile(
        rf"""^[ \t]*using\s+module\s+(?P<args>{_ARG})""",
        re.IGNORECASE | re.MULTILINE,
    ),
]

REQUIRES_PATTERN = re.compile(
    r"""^[ \t]*#requires\b[^\r\n]*?-Modules?\s+(?P<args>[^\r\n]+)""",
    re.IGNORECASE | re.MULTILINE,
)
_REQUIRES_MODULE_NAME = re.compile(r"""ModuleName\s*=\s*['"]?(?P<name>[^'";}\s]+)""", re.IGNORECASE)
_TRAILING_PARAM = re.compile(r"""\s-[A-Za-z]\w*\b.*$""")

# Only plain module names count; paths and variables are local files.
_MODULE_NAME = re.compile(r"""^[A-Za-z_][\w.\-]*$""")


@dataclass(frozen=True)
class Invocation:
    """A command name as written in source, with its line."""

    name: str
    line: int


@dataclass
class SyntaxExtraction:
    """Raw references extracted from one file."""

    invocations: list[Invocation] = field(default_factory=list)
    declarations: list[str] = field(default_factory=list)
    imports: list[str] = field(default_factory=list)

    @property
    def invocation_names(self) -> list[str]:
        return [inv.name for inv in self.invocations]


# ── Token walk ──


class _Frame:
    """One grouping level in the token walk.

    kinds:
      block      script block or top level: statements are commands
      paren      ( $( @( : pipelines
      hash       @{ }: statement heads are keys
      switch     switch body: statement heads are clause labels
      typebody   class/enum body: statement heads are members
      type       [ ]: type literal or attribute
      attrargs   ( ) inside an attribute: named arguments

    in_arguments is set once the current command has been named; from
    there on "=" is part of an argument (key=value), not an assignment.
    """

    __slots__ = ("kind", "in_arguments")

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.in_arguments = False


_KEYLIKE_FRAMES = frozenset({"hash", "switch", "typebody"})
_NO_COMMAND_FRAMES = frozenset({"type", "attrargs"})


class _CommandWalker:
    """Walk a token stream and collect invocations and declarations."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.invocations: list[Invocation] = []
        self.declarations: list[str] = []

        self.frames: list[_Frame] = [_Frame("block")]
        self.statement_start = True
        self.command_position = True
        self.after_pipe = False
        self.invoke_next = False
        self.expect_declaration = False
        self.expect_block_name = False
        self.skip_statement = False
        # (frame kind, depth) for the next "{" of a switch or class/enum
        self.pending_body: Optional[tuple[str, int]] = None

    @property
    def frame(self) -> str:
        return self.frames[-1].kind

    def _begin_statement(self) -> None:
        self.frames[-1].in_arguments = False
        self.statement_start = True
        self.command_position = True
        self.after_pipe = False
        self.invoke_next = False
        self.skip_statement = False

    def _begin_command(self, after_pipe: bool = False) -> None:
        self.frames[-1].in_arguments = False
        self.statement_start = False
        self.command_position = True
        self.after_pipe = after_pipe

    def _end_command_position(self) -> None:
        self.statement_start = False
        self.command_position = False
        self.after_pipe = False

    def walk(self) -> None:
        for token in self.tokens:
            self._step(token)

    def _step(self, token: Token) -> None:
        kind = token.kind

        if kind == TokenKind.NEWLINE or (kind == TokenKind.OPERATOR and token.text == ";"):
            if self.frame not in _NO_COMMAND_FRAMES:
                self._begin_statement()
            return

        if self.skip_statement:
            if kind == TokenKind.OPEN:
                self._open(token)
            elif kind == TokenKind.CLOSE:
                self._close()
            return

        if kind == TokenKind.OPEN:
            self._handle_invoke_target(None)
            self._open(token)
            return

        if kind == TokenKind.CLOSE:
            self._close()
            self._end_command_position()
            return

        if kind == TokenKind.OPERATOR:
            self._operator(token)
            return

        if self.expect_declaration:
            self.expect_declaration = False
            if kind == TokenKind.WORD:
                name = _SCOPE_PREFIX.sub("", token.value)
                if name:
                    self.declarations.append(name)
            self._end_command_position()
            return

        if self.expect_block_name:
            self.expect_block_name = False
            self._end_command_position()
            return

        if self.invoke_next:
            self._handle_invoke_target(token)
            return

        if kind == TokenKind.WORD and self.command_position and self.frame not in _NO_COMMAND_FRAMES:
            self._word_at_command_position(token)
            return

        if (
            kind == TokenKind.WORD
            and self.frame == "paren"
            and not self.frames[-1].in_arguments
            and token.value.lower() == "in"
        ):
            # foreach ($item in <pipeline>)
            self._begin_command()
            return

        self._end_command_position()

    def _word_at_command_position(self, token: Token) -> None:
        word = token.value
        lowered = word.lower()

        if self.statement_start and self.frame in _KEYLIKE_FRAMES:
            # hashtable key, switch label, or class member name
            self._end_command_position()
            return

        is_keyword = lowered in KEYWORDS and not (self.after_pipe and lowered == "foreach")
        if is_keyword:
            self._keyword(lowered)
            return

        self.invocations.append(Invocation(name=word, line=token.line))
        self.frames[-1].in_arguments = True
        self._end_command_position()

    def _keyword(self, keyword: str) -> None:
        if keyword in DECLARATION_KEYWORDS:
            self._end_command_position()
            self.expect_declaration = True
        elif keyword in NAMED_BLOCK_KEYWORDS:
            self._end_command_position()
            self.expect_block_name = True
            if keyword != "configuration":
                self.pending_body = ("typebody", len(self.frames))
        elif keyword == "switch":
            self._end_command_position()
            self.pending_body = ("switch", len(self.frames))
        elif keyword in STATEMENT_KEYWORDS:
            self._end_command_position()
            self.skip_statement = True
        elif keyword in PIPELINE_KEYWORDS:
            self._begin_command()
        else:
            self._end_command_position()

    def _handle_invoke_target(self, token: Token | None) -> None:
        """Name the command after a call (&) or dot-source (.) operator."""
        if not self.invoke_next:
            return
        self.invoke_next = False
        if token is not None:
            constant = token.kind == TokenKind.WORD or (
                token.kind == TokenKind.STRING
                and (not token.expandable or "$" not in token.text)
            )
            if constant and token.value:
                self.invocations.append(Invocation(name=token.value, line=token.line))
        self.frames[-1].in_arguments = True
        self._end_command_position()

    def _operator(self, token: Token) -> None:
        op = token.text
        if self.frame in _NO_COMMAND_FRAMES:
            return
        if op in ("&", ".") and self.command_position:
            self.invoke_next = True
            self.statement_start = False
            return
        if op == "|":
            self._begin_command(after_pipe=True)
        elif op in ("&&", "||"):
            self._begin_command()
        elif op.endswith("=") and not self.frames[-1].in_arguments:
            self._begin_command()
        else:
            self._end_command_position()

    def _open(self, token: Token) -> None:
        text = token.text
        current = self.frame
        if text == "[":
            kind = "type"
        elif text == "@{":
            kind = "hash"
        elif text == "{":
            kind = "block"
            if self.pending_body and self.pending_body[1] == len(self.frames):
                kind = self.pending_body[0]
                self.pending_body = None
        elif current in _NO_COMMAND_FRAMES:
            kind = "attrargs"
        else:
            kind = "paren"
        self.frames.append(_Frame(kind))

        if kind in _NO_COMMAND_FRAMES:
            self._end_command_position()
        else:
            self._begin_statement()

    def _close(self) -> None:
        # balance is already checked by the tokenizer
        if len(self.frames) > 1:
            self.frames.pop()
        self.skip_statement = False


def _split_module_args(args: str) -> list[str]:
    names = []
    for raw in args.split(","):
        name = raw.strip().strip("'\"")
        if _MODULE_NAME.match(name):
            names.append(name)
    return names


def extract_imports(text: str) -> list[str]:
    """Find import-statement targets in raw text, in order of appearance."""
    found: list[tuple[int, str]] = []

    for pattern in IMPORT_PATTERNS:
        for match in pattern.finditer(text):
            for name in _split_module_args(match.group("args")):
                found.append((match.start(), name))

    for match in REQUIRES_PATTERN.finditer(text):
        args = match.group("args")
        spec_names = [m.group("name") for m in _REQUIRES_MODULE_NAME.finditer(args)]
        if spec_names:
            names = [n for n in spec_names if _MODULE_NAME.match(n)]
        else:
            names = _split_module_args(_TRAILING_PARAM.sub("", args))
        for name in names:
            found.append((match.start(), name))

    seen: set[str] = set()
    imports = []
    for _, name in sorted(found, key=lambda item: item[0]):
        key = name.lower()
        if key not in seen:
            seen.add(key)
            imports.append(name)
    return imports


def extract_syntax(text: str, path: str = "<script>") -> SyntaxExtraction:
    """Extract invocations, declarations and imports from script text.

    Raises:
        ParseError: if the text cannot be tokenized.
    """
    tokens = tokenize(text, path)
    walker = _CommandWalker(tokens)
    walker.walk()
    return SyntaxExtraction(
        invocations=walker.invocations,
        declarations=walker.declarations,
        imports=extract_imports(text),
    )


def read_script(file_path: Path, relative_name: str) -> str:
    """Read a script file as text. Unreadable files raise ParseError."""
    try:
        return file_path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        logger.warning("Could not read %s: %s", file_path, e)
        raise ParseError(relative_name, f"could not read file: {e}") from e
