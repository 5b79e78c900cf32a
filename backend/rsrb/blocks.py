"""Line source and block extraction.

Source text is consumed one line at a time through a `LineSource`. Compound
statements (`fn`, `if`, `else`) call `extract_block` right after their header
line to capture the raw text of their body, which is parsed later, when the
body first runs.

Blocks are matched by brace depth. Braces inside double-quoted literals do not
count. When the closing brace shares its line with other text, the text before
the brace stays in the block and the text after it is pushed back onto the
line source, so `} else {` and one-line bodies such as `fn f() { return 1 }`
are read the same way as their multi-line spelling.
"""

from collections import deque
from typing import Deque, List, Optional


class LineSource:
    """Iterator over source lines that supports pushing text back."""

    def __init__(self, text: str):
        self._lines: Deque[str] = deque(text.splitlines(keepends=True))

    def next_line(self) -> Optional[str]:
        """Return the next line, or None once the source is exhausted."""
        if not self._lines:
            return None
        return self._lines.popleft()

    def push(self, text: str) -> None:
        """Make `text` the next line returned by `next_line`."""
        self._lines.appendleft(text)


def _as_line(text: str) -> str:
    return text if text.endswith("\n") else text + "\n"


def extract_block(source: LineSource) -> str:
    """Consume lines up to the brace closing the current block (depth starts at 1).

    Returns the block's raw text. If the source runs out before the block is
    closed, whatever was accumulated is returned.
    """
    block: List[str] = []
    depth = 1
    while True:
        line = source.next_line()
        if line is None:
            # unterminated block: return the partial body
            return "".join(block)
        in_string = False
        for idx, ch in enumerate(line):
            if ch == '"':
                in_string = not in_string
            elif in_string:
                continue
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    before, after = line[:idx], line[idx + 1:]
                    if before.strip():
                        block.append(_as_line(before))
                    if after.strip():
                        source.push(after)
                    return "".join(block)
        block.append(_as_line(line))


def split_top_level(text: str, sep: str) -> List[str]:
    """Split `text` on `sep` characters outside double quotes and parentheses.

    Used to split `a; b` statement runs and `f(a, g(b, c))` argument lists.
    """
    parts: List[str] = []
    depth = 0
    in_string = False
    start = 0
    for idx, ch in enumerate(text):
        if ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        elif ch == sep and depth == 0:
            parts.append(text[start:idx])
            start = idx + 1
    parts.append(text[start:])
    return parts


def matching_paren(text: str, open_idx: int) -> int:
    """Index of the ')' closing the '(' at `open_idx`, or -1 if it is never closed."""
    depth = 0
    in_string = False
    for idx in range(open_idx, len(text)):
        ch = text[idx]
        if ch == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return idx
    return -1
