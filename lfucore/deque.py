"""A doubly linked list of nodes with a resumable iteration cursor."""

from __future__ import annotations

from typing import Generic, Iterator, Optional, TypeVar, Union

from lfucore.node import CacheRegion, DeqNode

T = TypeVar("T")


class _Done:
    """Cursor marker: iteration has passed the last node."""


_DONE = _Done()

_Cursor = Union[None, DeqNode, _Done]


class Deque(Generic[T]):
    """A doubly linked list of ``DeqNode`` objects belonging to one region.

    Iterating the deque walks its elements from front to back. The position
    is kept between calls to ``next()``; once the end has been reported the
    next call starts again from the front. Nodes removed or moved while an
    iteration is in progress are stepped over correctly.
    """

    def __init__(self, region: CacheRegion) -> None:
        self.region = region
        self._len = 0
        self._head: Optional[DeqNode[T]] = None
        self._tail: Optional[DeqNode[T]] = None
        self._cursor: _Cursor = None

    def __len__(self) -> int:
        return self._len

    def __repr__(self) -> str:
        return f"Deque(region={self.region.name}, len={self._len})"

    def contains(self, node: DeqNode[T]) -> bool:
        """Return True if ``node`` is linked into this deque."""
        return self.region == node.region and (
            node.prev is not None or self.is_head(node)
        )

    def is_head(self, node: DeqNode[T]) -> bool:
        return self._head is not None and self._head is node

    def is_tail(self, node: DeqNode[T]) -> bool:
        return self._tail is not None and self._tail is node

    def peek_front(self) -> Optional[DeqNode[T]]:
        return self._head

    def peek_back(self) -> Optional[DeqNode[T]]:
        return self._tail

    def pop_front(self) -> Optional[DeqNode[T]]:
        """Remove and return the node at the front, or None if empty."""
        node = self._head
        if node is None:
            return None
        if self._is_at_cursor(node):
            self._advance_cursor()
        self._head = node.next
        if self._head is None:
            self._tail = None
        else:
            self._head.prev = None
        self._len -= 1
        node.prev = None
        node.next = None
        return node

    def push_back(self, node: DeqNode[T]) -> DeqNode[T]:
        """Append ``node`` to the back and return it."""
        node.next = None
        node.prev = self._tail
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        self._len += 1
        return node

    def move_to_back(self, node: DeqNode[T]) -> None:
        """Move a node already in this deque to the back."""
        if self.is_tail(node):
            return
        if self._is_at_cursor(node):
            self._advance_cursor()

        following = node.next
        if node.prev is None:
            self._head = following
        else:
            node.prev.next = following

        if following is not None:
            following.prev = node.prev
            tail = self._tail
            if tail is None:
                raise RuntimeError("deque has a head but no tail")
            node.prev = tail
            node.next = None
            tail.next = node
            self._tail = node

    def unlink(self, node: DeqNode[T]) -> None:
        """Detach ``node`` from this deque.

        Raises ValueError if the node belongs to another region.
        """
        if node.region != self.region:
            raise ValueError(
                f"node of region {node.region.name} cannot be unlinked "
                f"from a deque of region {self.region.name}"
            )
        if self._is_at_cursor(node):
            self._advance_cursor()

        if node.prev is None:
            self._head = node.next
        else:
            node.prev.next = node.next

        if node.next is None:
            self._tail = node.prev
        else:
            node.next.prev = node.prev

        node.prev = None
        node.next = None
        self._len -= 1

    def unlink_and_drop(self, node: DeqNode[T]) -> None:
        """Detach ``node`` from this deque and discard it."""
        self.unlink(node)

    def reset_cursor(self) -> None:
        """Forget the iteration position so the next ``next()`` starts over."""
        self._cursor = None

    def clear(self) -> None:
        """Remove every node, front to back."""
        while self.pop_front() is not None:
            pass
        self._cursor = None

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._cursor is None and self._head is not None:
            self._cursor = self._head
        cursor = self._cursor
        self._advance_cursor()
        if isinstance(cursor, DeqNode):
            return cursor.element
        raise StopIteration

    def _is_at_cursor(self, node: DeqNode[T]) -> bool:
        return isinstance(self._cursor, DeqNode) and self._cursor is node

    def _advance_cursor(self) -> None:
        cursor = self._cursor
        if cursor is None:
            return
        if isinstance(cursor, DeqNode):
            self._cursor = cursor.next if cursor.next is not None else _DONE
        else:
            self._cursor = None