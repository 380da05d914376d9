"""Directory-listing style tree output.

Each line below the root is prefixed by one column per ancestor level (a
vertical bar when that ancestor still has siblings below it, blank padding
when it was the last of its siblings) and a tee or ell connector for the line
itself::

    serde
    ├── serde::Serialize
    │   ├── src/lib.rs:10:1
    │   └── src/lib.rs:22:5
    └── serde::de::DeserializeOwned
        └── src/lib.rs:40:1
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, TypeVar

from . import config

T = TypeVar("T")


@dataclass(frozen=True)
class Symbols:
    down: str = "│"
    tee: str = "├"
    ell: str = "└"
    right: str = "─"


SYMBOLS = Symbols()


@dataclass(frozen=True)
class TreeNode:
    """A label with children; ``truncate_after`` caps how many children are shown."""
    label: str
    children: Sequence[TreeNode] = ()
    truncate_after: Optional[int] = None


@dataclass(frozen=True)
class Cursor:
    """Position of one line in the tree.

    ``ancestors_last`` holds, for every level between the root and this line,
    whether the node on that level was the last of its siblings.  A cursor is
    only valid while its sibling list is being written.
    """
    indent: int
    level: int = 0
    last: bool = False
    ancestors_last: Tuple[bool, ...] = field(default_factory=tuple)

    def prefix(self) -> str:
        if self.level == 0:
            return ""
        columns = [
            " " * self.indent if ancestor_last else SYMBOLS.down + " " * (self.indent - 1)
            for ancestor_last in self.ancestors_last
        ]
        connector = SYMBOLS.ell if self.last else SYMBOLS.tee
        return "".join(columns) + f"{connector}{SYMBOLS.right}{SYMBOLS.right} "

    def iter(self, items: Iterable[T]) -> Iterator[Tuple[Cursor, T]]:
        """Yield a child cursor for each item, one level below this one."""
        ancestors = self.ancestors_last + (self.last,) if self.level > 0 else ()
        for item, last in with_last(items):
            yield Cursor(self.indent, self.level + 1, last, ancestors), item


def with_last(items: Iterable[T]) -> Iterator[Tuple[T, bool]]:
    """Pair each item with whether it is the final one."""
    iterator = iter(items)
    try:
        current = next(iterator)
    except StopIteration:
        return
    for upcoming in iterator:
        yield current, False
        current = upcoming
    yield current, True


def truncated(children: Sequence[TreeNode], limit: Optional[int]) -> List[TreeNode]:
    """Keep the first *limit* children and summarize the rest in one node."""
    if limit is None or len(children) <= limit:
        return list(children)
    hidden = len(children) - limit
    return list(children[:limit]) + [TreeNode(f"and {hidden} more...")]


class TreeWriter:
    """Writes :class:`TreeNode` structures to a text stream."""

    def __init__(self, out: TextIO, indent: int = config.TREE_INDENT) -> None:
        self.out = out
        self.indent = indent

    def write_line(self, cursor: Cursor, text: str) -> None:
        self.out.write(f"{cursor.prefix()}{text}\n")

    def write_tree(self, root: TreeNode) -> None:
        """Write *root* without a connector, then its subtree."""
        cursor = Cursor(self.indent)
        self.write_line(cursor, root.label)
        self._write_children(cursor, root.children, root.truncate_after)

    def write_forest(self, nodes: Sequence[TreeNode], truncate_after: Optional[int] = None) -> None:
        """Write *nodes* as siblings on the first connector level."""
        self._write_children(Cursor(self.indent), nodes, truncate_after)

    def _write_children(
        self,
        parent: Cursor,
        children: Sequence[TreeNode],
        truncate_after: Optional[int],
    ) -> None:
        for cursor, child in parent.iter(truncated(children, truncate_after)):
            self.write_line(cursor, child.label)
            self._write_children(cursor, child.children, child.truncate_after)


def render(
    nodes: Sequence[TreeNode],
    indent: int = config.TREE_INDENT,
    truncate_after: Optional[int] = None,
) -> str:
    buf = io.StringIO()
    TreeWriter(buf, indent).write_forest(nodes, truncate_after)
    return buf.getvalue()


def render_tree(root: TreeNode, indent: int = config.TREE_INDENT) -> str:
    buf = io.StringIO()
    TreeWriter(buf, indent).write_tree(root)
    return buf.getvalue()
