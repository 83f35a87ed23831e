from __future__ import annotations

from node_models import NodeTree, NotFound


class Cursor:
    """The selected node of a ``NodeTree``.

    Holds only an id, so it survives any restructuring of the tree; call
    ``relocate_for_deletion`` before removing a subtree and the selection is
    moved somewhere that will still exist afterwards.
    """

    def __init__(self, tree: NodeTree) -> None:
        self._tree = tree
        self._selected = tree.root_id

    @property
    def selected(self) -> int:
        return self._selected

    def select(self, node_id: int) -> None:
        if not self._tree.contains(node_id):
            raise NotFound(node_id)
        self._selected = node_id

    def _move(self, node_id: int | None) -> bool:
        if node_id is None or node_id == self._selected:
            return False
        self.select(node_id)
        return True

    def fallback_for(self, node_id: int) -> int:
        """Previous sibling, else parent, else root."""
        tree = self._tree
        previous = tree.previous_sibling(node_id)
        if previous is not None:
            return previous
        parent = tree.parent_of(node_id)
        return parent if parent is not None else tree.root_id

    def relocate_for_deletion(self, node_id: int) -> bool:
        self.revalidate()
        if not self._tree.is_ancestor(node_id, self._selected):
            return False
        self._selected = self.fallback_for(node_id)
        return True

    def revalidate(self) -> bool:
        if self._tree.contains(self._selected):
            return False
        self._selected = self._tree.root_id
        return True

    def next_sibling(self) -> bool:
        return self._move(self._tree.next_sibling(self._selected))

    def previous_sibling(self) -> bool:
        return self._move(self._tree.previous_sibling(self._selected))

    def first(self) -> bool:
        tree = self._tree
        first = tree.first_child(tree.root_id)
        return self._move(tree.root_id if first is None else first)

    def last(self) -> bool:
        return self._move(self._tree.last_descendant(self._tree.root_id))
