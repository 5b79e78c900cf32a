"""Variable bindings and the function table.

An `Environment` belongs to exactly one call frame. Calls receive a copy of the
caller's environment, so bindings made inside a function never leak back to
the caller or to sibling calls.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional

from .values import Value

if TYPE_CHECKING:
    from .parser import Block


class Environment:
    """Mapping of identifier -> Value for one statement run."""

    def __init__(self, bindings: Optional[Dict[str, Value]] = None):
        self._bindings: Dict[str, Value] = dict(bindings) if bindings else {}

    def copy(self) -> "Environment":
        # values are immutable, a shallow copy is a full copy
        return Environment(self._bindings)

    def set(self, name: str, value: Value) -> None:
        self._bindings[name] = value

    def as_dict(self) -> Dict[str, Value]:
        return dict(self._bindings)

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __getitem__(self, name: str) -> Value:
        return self._bindings[name]

    def __repr__(self) -> str:
        return f"Environment({self._bindings!r})"


@dataclass
class FunctionDefinition:
    """A registered `fn`.

    `body` is the raw block text; `block` holds the same text together with its
    lazily parsed statements so the body is only parsed on the first call.
    """

    name: str
    params: List[str]
    block: "Block" = field(repr=False)

    @property
    def body(self) -> str:
        return self.block.text


# name -> FunctionDefinition, shared by every frame of one run
FunctionTable = Dict[str, FunctionDefinition]
