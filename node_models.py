from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Iterator, List, Optional


class NodeTreeError(Exception):
    """Base class for recoverable tree errors."""


class NotFound(NodeTreeError, LookupError):
    def __init__(self, node_id: object) -> None:
        super().__init__(f"node {node_id!r} not found")
        self.node_id = node_id


class InvalidAnchor(NodeTreeError):
    def __init__(self, node_id: object, reason: str) -> None:
        super().__init__(f"cannot insert relative to {node_id!r}: {reason}")
        self.node_id = node_id


class RootDeletionForbidden(NodeTreeError):
    def __init__(self) -> None:
        super().__init__("the root node cannot be deleted")


class TreeCorrupted(NodeTreeError):
    pass


@dataclass
class Node:
    id: int
    content: Optional[str] = None
    children: List[int] = field(default_factory=list)
    # Lookup only; the arena owns every node.
    parent: Optional[int] = None

    @property
    def is_note(self) -> bool:
        return bool(self.content)


def _normalize_content(text: Optional[str]) -> Optional[str]:
    return text if text else None


class NodeTree:
    """Arena of nodes keyed by id.

    Parent/child links are id references, so deleting a subtree is a walk over
    ids plus one edit of the parent's child list. All mutations validate their
    arguments before touching the store: an operation either succeeds or
    leaves the tree unchanged.
    """

    def __init__(self, root_content: Optional[str] = None) -> None:
        self._ids = count()
        self._nodes: dict[int, Node] = {}
        self.root_id = self._create(None, root_content).id

    # ------------------------------------------------------------------ internals

    def _create(self, parent_id: Optional[int], content: Optional[str]) -> Node:
        node = Node(next(self._ids), _normalize_content(content), parent=parent_id)
        self._nodes[node.id] = node
        return node

    def _require(self, node_id: int) -> Node:
        try:
            return self._nodes[node_id]
        except (KeyError, TypeError):
            raise NotFound(node_id) from None

    # ------------------------------------------------------------------ mutations

    def add_sibling(self, anchor_id: int, content: Optional[str] = None) -> int:
        if anchor_id == self.root_id:
            raise InvalidAnchor(anchor_id, "the root has no siblings")
        if anchor_id not in self._nodes:
            raise InvalidAnchor(anchor_id, "no such node")
        anchor = self._nodes[anchor_id]
        parent = self._nodes[anchor.parent]
        position = parent.children.index(anchor_id) + 1
        node = self._create(parent.id, content)
        parent.children.insert(position, node.id)
        return node.id

    def add_child(self, anchor_id: int, content: Optional[str] = None) -> int:
        if anchor_id not in self._nodes:
            raise InvalidAnchor(anchor_id, "no such node")
        node = self._create(anchor_id, content)
        self._nodes[anchor_id].children.append(node.id)
        return node.id

    def delete(self, node_id: int) -> int:
        """Remove ``node_id`` and its whole subtree; return the number of nodes removed."""
        if node_id == self.root_id:
            raise RootDeletionForbidden()
        node = self._require(node_id)
        doomed = self.subtree_ids(node_id)
        self._nodes[node.parent].children.remove(node_id)
        for doomed_id in doomed:
            del self._nodes[doomed_id]
        return len(doomed)

    def set_content(self, node_id: int, text: Optional[str]) -> None:
        self._require(node_id).content = _normalize_content(text)

    rename = set_content

    # ------------------------------------------------------------------ queries

    def node_count(self) -> int:
        return len(self._nodes)

    def contains(self, node_id: int) -> bool:
        return node_id in self._nodes

    def content_of(self, node_id: int) -> Optional[str]:
        return self._require(node_id).content

    def is_note(self, node_id: int) -> bool:
        return self._require(node_id).is_note

    def parent_of(self, node_id: int) -> Optional[int]:
        return self._require(node_id).parent

    def children_of(self, node_id: int) -> tuple[int, ...]:
        return tuple(self._require(node_id).children)

    def _siblings(self, node_id: int) -> tuple[list[int], int]:
        node = self._require(node_id)
        if node.parent is None:
            return [node_id], 0
        siblings = self._nodes[node.parent].children
        return siblings, siblings.index(node_id)

    def next_sibling(self, node_id: int) -> Optional[int]:
        siblings, index = self._siblings(node_id)
        return siblings[index + 1] if index + 1 < len(siblings) else None

    def previous_sibling(self, node_id: int) -> Optional[int]:
        siblings, index = self._siblings(node_id)
        return siblings[index - 1] if index > 0 else None

    def first_child(self, node_id: int) -> Optional[int]:
        children = self._require(node_id).children
        return children[0] if children else None

    def last_descendant(self, node_id: int) -> int:
        """Follow the last child at every level, returning the deepest one reached."""
        current = self._require(node_id)
        while current.children:
            current = self._nodes[current.children[-1]]
        return current.id

    def depth(self, node_id: int) -> int:
        depth = 0
        current = self._require(node_id)
        while current.parent is not None:
            depth += 1
            current = self._nodes[current.parent]
        return depth

    def is_ancestor(self, ancestor_id: int, node_id: int) -> bool:
        """True when ``ancestor_id`` is ``node_id`` itself or one of its ancestors."""
        self._require(ancestor_id)
        current: Optional[int] = node_id
        while current is not None:
            if current == ancestor_id:
                return True
            current = self._require(current).parent
        return False

    def subtree_ids(self, node_id: int) -> list[int]:
        ids: list[int] = []
        stack = [self._require(node_id).id]
        while stack:
            current = stack.pop()
            ids.append(current)
            stack.extend(reversed(self._nodes[current].children))
        return ids

    def walk(self, node_id: Optional[int] = None) -> Iterator[tuple[int, int]]:
        """Yield ``(id, depth)`` pairs in display (pre-order) order."""
        start = self.root_id if node_id is None else node_id
        stack = [(self._require(start).id, self.depth(start))]
        while stack:
            current, depth = stack.pop()
            yield current, depth
            stack.extend((child, depth + 1) for child in reversed(self._nodes[current].children))

    def validate(self) -> None:
        seen: set[int] = set()
        stack = [self.root_id]
        if self._nodes[self.root_id].parent is not None:
            raise TreeCorrupted("root has a parent")
        while stack:
            current = stack.pop()
            if current in seen:
                raise TreeCorrupted(f"node {current} reachable twice")
            seen.add(current)
            for child_id in self._nodes[current].children:
                child = self._nodes.get(child_id)
                if child is None:
                    raise TreeCorrupted(f"node {current} lists missing child {child_id}")
                if child.parent != current:
                    raise TreeCorrupted(f"node {child_id} does not point back to {current}")
                stack.append(child_id)
        unreachable = set(self._nodes) - seen
        if unreachable:
            raise TreeCorrupted(f"unreachable nodes: {sorted(unreachable)}")
