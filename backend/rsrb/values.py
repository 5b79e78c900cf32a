"""Runtime values for the rsrb language.

rsrb only knows two value types: Integer (a Python ``int``) and Text (a Python
``str``). Evaluation that fails, calls to undefined functions and calls that
finish without ``return`` produce ``NIL``, a singleton that is distinct from
both ``0`` and ``""``.
"""

from typing import Union


class _Nil:
    """Absent value. Falsy, renders as an empty string, equal only to itself."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NIL"


NIL = _Nil()

Value = Union[int, str, _Nil]


def is_truthy(value: Value) -> bool:
    """Truth-value rule used by ``if``: 0, "" and NIL are false."""
    if value is NIL:
        return False
    if isinstance(value, int):
        return value != 0
    return value != ""


def render(value: Value) -> str:
    """Textual form used by ``print!``."""
    if value is NIL:
        return ""
    return str(value)


def quote(value: Value) -> str:
    """Source form of a value, used when substituting identifiers into an expression."""
    if isinstance(value, int):
        return str(value)
    return '"' + render(value) + '"'
