"""Statement classification for rsrb.

A block's text is turned into a flat list of statement objects. Classification
is line-oriented and regex based, tried in this order:

    let NAME = EXPR          -> Let
    fn NAME(PARAMS) {        -> FnDef   (body captured with extract_block)
    if COND {                -> If      (optional else block after it)
    print!(EXPR)             -> Print
    return [EXPR]            -> Return
    NAME(ARGS)               -> Call
    anything else            -> ExprStmt

Blank lines and lines starting with ``//`` are skipped. Several statements may
share a line when separated by ``;``.

Bodies of `fn`, `if` and `else` are kept as `Block` objects holding their raw
text; a block is parsed the first time its statements are needed and the
result is cached, so a function body is parsed once however often it is
called.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Union

from .blocks import LineSource, extract_block, split_top_level
from .evaluator import match_call

COMMENT = "//"

LET_RE = re.compile(r"^let\s+(\w+)\s*=\s*(.+)$")
FN_RE = re.compile(r"^fn\s+(\w+)\s*\(([^)]*)\)\s*\{(.*)$")
IF_RE = re.compile(r"^if\s+(.+?)\s*\{(.*)$")
ELSE_RE = re.compile(r"^else\b(.*)$")
PRINT_RE = re.compile(r"^print!\((.*)\)$")
RETURN_RE = re.compile(r"^return(?:\s+(.*))?$")


class Block:
    """Raw text of a `{ ... }` body with its statements parsed on first use."""

    def __init__(self, text: str):
        self.text = text
        self._statements: Optional[List["Statement"]] = None

    @property
    def statements(self) -> List["Statement"]:
        if self._statements is None:
            self._statements = parse(self.text)
        return self._statements

    def __repr__(self) -> str:
        return f"Block({self.text!r})"


@dataclass
class Let:
    name: str
    expr: str


@dataclass
class FnDef:
    name: str
    params: List[str]
    body: Block


@dataclass
class If:
    cond: str
    then: Block
    otherwise: Optional[Block] = None


@dataclass
class Print:
    expr: str


@dataclass
class Return:
    expr: Optional[str] = None


@dataclass
class Call:
    name: str
    args: str


@dataclass
class ExprStmt:
    expr: str


Statement = Union[Let, FnDef, If, Print, Return, Call, ExprStmt]


def _is_skipped(line: str) -> bool:
    return not line or line.startswith(COMMENT)


def _open_body(source: LineSource, rest: str) -> Block:
    """Capture the block whose opening brace ended a header line.

    `rest` is whatever followed the brace on the header line; it is read as the
    first line of the body.
    """
    if rest.strip():
        source.push(rest)
    return Block(extract_block(source))


def _parse_else(source: LineSource) -> Optional[Block]:
    """Look past blank and comment lines for an `else` belonging to an `if`."""
    while True:
        line = source.next_line()
        if line is None:
            return None
        stripped = line.strip()
        if _is_skipped(stripped):
            continue
        m = ELSE_RE.match(stripped)
        if not m:
            source.push(line)
            return None
        rest = m.group(1)
        brace = rest.find("{")
        return _open_body(source, rest[brace + 1:] if brace >= 0 else "")


def parse_params(raw: str) -> List[str]:
    return [p.strip() for p in raw.split(",") if p.strip()]


def parse_statement(line: str, source: LineSource) -> Statement:
    """Classify one trimmed statement, consuming any block it opens from `source`."""
    m = LET_RE.match(line)
    if m:
        return Let(m.group(1), m.group(2))

    m = FN_RE.match(line)
    if m:
        name, params, rest = m.groups()
        return FnDef(name, parse_params(params), _open_body(source, rest))

    m = IF_RE.match(line)
    if m:
        cond, rest = m.groups()
        then = _open_body(source, rest)
        return If(cond, then, _parse_else(source))

    m = PRINT_RE.match(line)
    if m:
        return Print(m.group(1))

    m = RETURN_RE.match(line)
    if m:
        return Return(m.group(1))

    call = match_call(line)
    if call is not None:
        return Call(*call)

    return ExprStmt(line)


def parse(text: str) -> List[Statement]:
    """Parse source text into a statement list (nested blocks stay unparsed)."""
    source = LineSource(text)
    statements: List[Statement] = []
    while True:
        line = source.next_line()
        if line is None:
            break
        line = line.strip()
        if _is_skipped(line):
            continue
        first, *rest = split_top_level(line, ";")
        # remaining statements on this line are read next
        for piece in reversed(rest):
            if piece.strip():
                source.push(piece)
        first = first.strip()
        if _is_skipped(first):
            continue
        statements.append(parse_statement(first, source))
    return statements
