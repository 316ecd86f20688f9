"""Headless widgets that hold what the views display."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any

_TAG = re.compile(r"\[(?:[A-Za-z]+|-)?(?::(?:[A-Za-z]*|-))*\]")


def _strip_tags(text: str) -> str:
    return _TAG.sub("", text)


class Key(Enum):
    """Keys a view can receive."""

    RUNE = auto()
    ENTER = auto()
    CTRL_C = auto()
    ESCAPE = auto()
    TAB = auto()
    UP = auto()
    DOWN = auto()


@dataclass(frozen=True)
class KeyEvent:
    """A key press; ``rune`` holds the character for ``Key.RUNE``."""

    key: Key
    rune: str = ""


@dataclass(eq=False)
class TreeNode:
    """A node of a tree view carrying markup text."""

    text: str
    reference: Any = None
    selectable: bool = True
    expanded: bool = True
    children: list[TreeNode] = field(default_factory=list)

    def add_child(self, child: TreeNode) -> TreeNode:
        """Append a child node and return it."""
        self.children.append(child)
        return child

    def toggle(self) -> None:
        """Flip the expanded state."""
        self.expanded = not self.expanded

    def walk(self) -> Iterator[TreeNode]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def texts(self) -> str:
        """Return the texts of the subtree, one per line, in pre-order."""
        return "\n".join(node.text for node in self.walk())

    def find(self, target: str) -> TreeNode | None:
        """Return the first node whose text without colour tags contains ``target``."""
        return next((node for node in self.walk() if target in _strip_tags(node.text)), None)


@dataclass(eq=False)
class TreeView:
    """A tree with a current (selected) node."""

    root: TreeNode | None = None
    current: TreeNode | None = None

    def __post_init__(self) -> None:
        if self.current is None:
            self.current = self.root


@dataclass(eq=False)
class TextView:
    """A block of markup text."""

    text: str = ""
    title: str = ""


@dataclass(frozen=True)
class Column:
    """A table column; width 0 means it takes the remaining space."""

    title: str
    width: int = 0
    align: str = "left"


class Table:
    """Rows of string cells under fixed columns, with per-row colours."""

    def __init__(self, columns: list[Column]) -> None:
        self.columns = list(columns)
        self.rows: list[list[str]] = []
        self.row_colors: dict[int, str] = {}

    def add_row(self, *args: str) -> None:
        """Append a data row; missing cells are left empty."""
        if len(args) > len(self.columns):
            raise ValueError(f"row has {len(args)} cells but table has {len(self.columns)} columns")
        self.rows.append([str(cell) for cell in args] + [""] * (len(self.columns) - len(args)))

    def clear_data(self) -> None:
        """Remove all data rows and their colours."""
        self.rows.clear()
        self.row_colors.clear()

    def set_row_color(self, row: int, color: str) -> None:
        """Colour an existing data row."""
        if not 0 <= row < len(self.rows):
            raise IndexError(f"row {row} out of range")
        self.row_colors[row] = color

    def data_row_count(self) -> int:
        """Return the number of data rows."""
        return len(self.rows)