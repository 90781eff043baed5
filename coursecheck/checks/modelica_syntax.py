"""Minimal Modelica tokenizer and definition/``end`` balance scanner.

Only structure is checked: class definitions must be closed by a matching
``end Name;`` and ``if``/``for``/``when``/``while`` statements by their
``end <keyword>;``. Expressions, modifiers and equations are not parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal

TokenKind = Literal["ident", "qident", "string", "number", "op"]

CLASS_KEYWORDS = frozenset({
    "model", "block", "connector", "package", "function", "record", "type", "class", "operator",
})
CONTROL_KEYWORDS = frozenset({"if", "for", "when", "while"})
# Tokens after which an if/for/when/while begins a new statement or equation
_STATEMENT_LEADERS = frozenset({";", "equation", "algorithm", "then", "else", "loop"})
_OPEN_BRACKETS = "([{"
_CLOSE_BRACKETS = ")]}"

_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    value: str
    line: int


@dataclass(frozen=True)
class BlockProblem:
    """A structural problem in Modelica source."""

    code: Literal["MO001", "MO002", "MO003", "MO004"]
    line: int
    message: str


class TokenizeError(Exception):
    def __init__(self, message: str, line: int) -> None:
        self.line = line
        super().__init__(message)


def tokenize(source: str) -> list[Token]:
    """Split Modelica source into tokens, dropping whitespace and comments."""
    tokens: list[Token] = []
    pos = 0
    line = 1
    n = len(source)

    while pos < n:
        ch = source[pos]

        if ch == "\n":
            line += 1
            pos += 1
        elif ch.isspace():
            pos += 1
        elif source.startswith("//", pos):
            end = source.find("\n", pos)
            pos = n if end == -1 else end
        elif source.startswith("/*", pos):
            end = source.find("*/", pos + 2)
            if end == -1:
                raise TokenizeError("Unterminated block comment", line)
            line += source.count("\n", pos, end)
            pos = end + 2
        elif ch in "\"'":
            start_line = line
            i = pos + 1
            while i < n and source[i] != ch:
                if source[i] == "\\":
                    i += 1
                if i < n and source[i] == "\n":
                    line += 1
                i += 1
            if i >= n:
                what = "string" if ch == '"' else "quoted identifier"
                raise TokenizeError(f"Unterminated {what}", start_line)
            kind: TokenKind = "string" if ch == '"' else "qident"
            tokens.append(Token(kind, source[pos:i + 1], start_line))
            pos = i + 1
        elif m := _IDENT_RE.match(source, pos):
            tokens.append(Token("ident", m.group(0), line))
            pos = m.end()
        elif m := _NUMBER_RE.match(source, pos):
            tokens.append(Token("number", m.group(0), line))
            pos = m.end()
        else:
            tokens.append(Token("op", ch, line))
            pos += 1

    return tokens


@dataclass
class _Open:
    kind: str  # "class" or a control keyword
    name: str
    line: int
    keyword: str = ""


@dataclass
class _Scanner:
    tokens: list[Token]
    problems: list[BlockProblem] = field(default_factory=list)
    stack: list[_Open] = field(default_factory=list)
    depth: int = 0
    # Expression-level ifs open in the current statement
    expr_ifs: int = 0
    pos: int = 0

    def peek(self, offset: int = 0) -> Token | None:
        i = self.pos + offset
        return self.tokens[i] if i < len(self.tokens) else None

    def prev_value(self) -> str | None:
        return self.tokens[self.pos - 1].value if self.pos > 0 else None

    def run(self) -> list[BlockProblem]:
        while self.pos < len(self.tokens):
            tok = self.tokens[self.pos]
            value = tok.value

            if tok.kind == "op":
                self._on_op(value)
                self.pos += 1
            elif tok.kind != "ident":
                self.pos += 1
            elif value == "end" and self.depth == 0:
                self._on_end(tok)
            elif value in CLASS_KEYWORDS and self.depth == 0:
                self._on_class_keyword(tok)
            elif value in CONTROL_KEYWORDS:
                self._on_control(tok)
                self.pos += 1
            else:
                self.pos += 1

        for still_open in reversed(self.stack):
            label = still_open.keyword or still_open.kind
            what = f"{label} {still_open.name!r}" if still_open.kind == "class" else f"'{label}'"
            self.problems.append(BlockProblem(
                "MO001", still_open.line, f"{what} opened on line {still_open.line} is never closed",
            ))
        return sorted(self.problems, key=lambda p: p.line)

    # ------------------------------------------------------------------

    def _on_op(self, value: str) -> None:
        if value in _OPEN_BRACKETS:
            self.depth += 1
        elif value in _CLOSE_BRACKETS:
            self.depth = max(0, self.depth - 1)
        elif value == ";" and self.depth == 0:
            self.expr_ifs = 0

    def _at_statement_start(self) -> bool:
        if self.depth != 0:
            return False
        prev = self.prev_value()
        if prev is None:
            return True
        if prev in ("then", "else") and self.expr_ifs > 0:
            return False
        return prev in _STATEMENT_LEADERS

    def _on_control(self, tok: Token) -> None:
        if tok.value in ("when", "while") and self.depth == 0:
            self.stack.append(_Open(tok.value, tok.value, tok.line))
        elif self._at_statement_start():
            self.stack.append(_Open(tok.value, tok.value, tok.line))
        elif tok.value == "if":
            self.expr_ifs += 1

    def _on_class_keyword(self, tok: Token) -> None:
        keyword = tok.value
        self.pos += 1
        if keyword == "operator":
            nxt = self.peek()
            if nxt is not None and nxt.value in ("record", "function"):
                keyword = f"operator {nxt.value}"
                self.pos += 1

        name_tok = self.peek()
        if name_tok is not None and name_tok.value == "extends":
            self.pos += 1
            name_tok = self.peek()
        if name_tok is None or name_tok.kind not in ("ident", "qident"):
            return
        self.pos += 1

        after = self.peek()
        if after is not None and after.value == "=":
            # Short class definition: type T = Real(unit="m");
            return
        self.stack.append(_Open("class", name_tok.value, tok.line, keyword))

    def _on_end(self, tok: Token) -> None:
        nxt = self.peek(1)
        self.pos += 1

        if nxt is not None and nxt.value in CONTROL_KEYWORDS:
            self.pos += 1
            self._close(tok.line, kind=nxt.value, name=nxt.value, shown=f"end {nxt.value}")
        elif nxt is not None and nxt.kind in ("ident", "qident"):
            self.pos += 1
            self._close(tok.line, kind="class", name=nxt.value, shown=f"end {nxt.value}")
        else:
            if not self.stack:
                self.problems.append(BlockProblem("MO003", tok.line, "'end' with no open definition"))
                return
            top = self.stack.pop()
            expected = f"end {top.name}" if top.kind == "class" else f"end {top.kind}"
            self.problems.append(BlockProblem(
                "MO002", tok.line, f"Bare 'end' should be '{expected};' (opened on line {top.line})",
            ))

    def _close(self, line: int, kind: str, name: str, shown: str) -> None:
        if not self.stack:
            self.problems.append(BlockProblem("MO003", line, f"'{shown}' with no open definition"))
            return

        top = self.stack[-1]
        if top.kind == kind and top.name == name:
            self.stack.pop()
            return

        expected = f"end {top.name}" if top.kind == "class" else f"end {top.kind}"
        self.problems.append(BlockProblem(
            "MO002", line, f"'{shown}' does not match '{expected}' (opened on line {top.line})",
        ))
        # Recover by unwinding to the matching opener when there is one
        for i in range(len(self.stack) - 1, -1, -1):
            entry = self.stack[i]
            if entry.kind == kind and entry.name == name:
                del self.stack[i:]
                return
        # Misspelled class name: treat the end as closing the top definition
        if top.kind == kind:
            self.stack.pop()


def check_balance(source: str) -> list[BlockProblem]:
    """Return structural problems in *source* (empty list when balanced)."""
    try:
        tokens = tokenize(source)
    except TokenizeError as exc:
        return [BlockProblem("MO004", exc.line, str(exc))]
    return _Scanner(tokens).run()
