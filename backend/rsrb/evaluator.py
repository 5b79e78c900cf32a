"""Expression evaluation for rsrb.

The expression grammar is deliberately tiny. Evaluation happens in two steps:

1. identifier substitution: every word token outside a string literal that is
   bound in the environment is replaced by the source form of its value
   (Text quoted, Integer as digits). Unbound tokens are left untouched, which
   is why an unknown bare identifier evaluates to itself as Text.
2. pattern matching against the substituted string, first match wins:

   ``"A" + "B"``, ``"A" + N``, ``N + "A"``, ``N + M``, ``"A"``, ``N``

   Anything else is returned as raw Text.

An expression that is exactly a call, ``name(args)``, is handed to the call
handler supplied by the interpreter instead, so calls can produce values for
``print!`` and ``let``. An expression that is exactly a bound identifier
yields the bound value directly; inside larger expressions NIL substitutes
as ``""``.
"""

import re
from typing import Callable, Optional, Tuple

from .blocks import matching_paren
from .environment import Environment
from .values import Value, quote


class EvalError(Exception):
    """Raised when an expression cannot be evaluated.

    The interpreter never lets this escape a run: it is downgraded to a
    warning and the expression yields NIL.

    Attributes:
        text: optional original expression text
    """

    def __init__(self, message: str, *, text: Optional[str] = None):
        super().__init__(message)
        self.text = text


# call handler signature: (name, raw argument string) -> Value
CallHandler = Callable[[str, str], Value]

_INT = r"(-?[0-9]+)"
_TEXT = r'"([^"]*)"'
_PLUS = r"\s*\+\s*"

TEXT_PLUS_TEXT = re.compile(rf"^{_TEXT}{_PLUS}{_TEXT}$")
TEXT_PLUS_INT = re.compile(rf"^{_TEXT}{_PLUS}{_INT}$")
INT_PLUS_TEXT = re.compile(rf"^{_INT}{_PLUS}{_TEXT}$")
INT_PLUS_INT = re.compile(rf"^{_INT}{_PLUS}{_INT}$")
TEXT_ONLY = re.compile(rf"^{_TEXT}$")
INT_ONLY = re.compile(rf"^{_INT}$")

_CALL_HEAD = re.compile(r"^([A-Za-z_]\w*)\(")
_WORD = re.compile(r"\b\w+\b")
_STRING_LITERAL = re.compile(r'("[^"]*")')


def match_call(text: str) -> Optional[Tuple[str, str]]:
    """Return (name, raw_args) if `text` is exactly one call expression."""
    m = _CALL_HEAD.match(text)
    if not m:
        return None
    open_idx = m.end() - 1
    if matching_paren(text, open_idx) != len(text) - 1:
        return None
    return m.group(1), text[open_idx + 1:-1]


def strip_expr(expr: str) -> str:
    """Trim whitespace and a single trailing statement terminator."""
    expr = expr.strip()
    if expr.endswith(";"):
        expr = expr[:-1].rstrip()
    return expr


def substitute(expr: str, env: Environment) -> str:
    """Replace bound identifiers outside string literals by their source form."""

    def _sub_word(m):
        word = m.group(0)
        if word in env:
            return quote(env[word])
        return word

    # odd indices are quoted literals, which are kept verbatim
    pieces = _STRING_LITERAL.split(expr)
    for idx in range(0, len(pieces), 2):
        pieces[idx] = _WORD.sub(_sub_word, pieces[idx])
    return "".join(pieces)


def _reduce(text: str) -> Value:
    m = TEXT_PLUS_TEXT.match(text)
    if m:
        return m.group(1) + m.group(2)
    m = TEXT_PLUS_INT.match(text)
    if m:
        return m.group(1) + str(int(m.group(2)))
    m = INT_PLUS_TEXT.match(text)
    if m:
        return str(int(m.group(1))) + m.group(2)
    m = INT_PLUS_INT.match(text)
    if m:
        return int(m.group(1)) + int(m.group(2))
    m = TEXT_ONLY.match(text)
    if m:
        return m.group(1)
    m = INT_ONLY.match(text)
    if m:
        return int(m.group(1))
    # raw passthrough
    return text


def evaluate(expr: str, env: Environment, call: Optional[CallHandler] = None) -> Value:
    """Evaluate a single expression string against `env`.

    Args:
        expr: expression source text (e.g. ``a + 3`` or ``"n=" + n``).
        env: bindings used for identifier substitution.
        call: handler invoked when the whole expression is a call.

    Returns:
        The resulting Value.

    Raises:
        EvalError: if evaluation fails.
    """
    text = strip_expr(expr)
    if call is not None:
        parsed = match_call(text)
        if parsed is not None:
            return call(*parsed)
    if text in env:
        # a bare bound identifier keeps its value as is (NIL stays NIL)
        return env[text]
    try:
        return _reduce(substitute(text, env).strip())
    except EvalError:
        raise
    except Exception as e:
        # anything unexpected (bad regex input, conversion failures) becomes an EvalError
        raise EvalError(str(e), text=text) from e
