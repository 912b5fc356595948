"""Nodes of the intrusive doubly linked lists used by cache policies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class CacheRegion(Enum):
    """The list a node belongs to."""

    WINDOW = auto()
    MAIN_PROBATION = auto()
    MAIN_PROTECTED = auto()
    WRITE_ORDER = auto()


@dataclass(eq=False)
class DeqNode(Generic[T]):
    """An element together with its links inside a deque of one region.

    Nodes compare by identity: two nodes holding equal elements are still
    different positions in a list.
    """

    region: CacheRegion
    element: T
    prev: Optional["DeqNode[T]"] = field(default=None, repr=False)
    next: Optional["DeqNode[T]"] = field(default=None, repr=False)

    def next_node(self) -> Optional["DeqNode[T]"]:
        """Return the node that follows this one, or None at the tail."""
        return self.next

    def __repr__(self) -> str:
        return (
            f"DeqNode(region={self.region.name}, "
            f"has_prev={self.prev is not None}, has_next={self.next is not None})"
        )