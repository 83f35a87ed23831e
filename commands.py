from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from activity_log import log_event
from cursor import Cursor
from modes import Mode, ModeController
from node_models import NodeTree, NodeTreeError


class Outcome(Enum):
    NO_OP = "NoOp"
    TREE_MUTATED = "TreeMutated"
    CURSOR_MOVED = "CursorMoved"
    MODE_CHANGED = "ModeChanged"
    QUIT_REQUESTED = "QuitRequested"


@dataclass
class EditorState:
    """The single tree/cursor/mode aggregate driven by one control loop."""

    tree: NodeTree = field(default_factory=NodeTree)
    cursor: Cursor = field(init=False)
    modes: ModeController = field(default_factory=ModeController)

    def __post_init__(self) -> None:
        self.cursor = Cursor(self.tree)

    @property
    def mode(self) -> Mode:
        return self.modes.mode

    def delete_node(self, node_id: int) -> int:
        """Delete a subtree, moving the selection out of it first."""
        tree = self.tree
        if node_id == tree.root_id or not tree.contains(node_id):
            # Let the tree raise the matching error before the cursor moves.
            return tree.delete(node_id)
        self.cursor.relocate_for_deletion(node_id)
        removed = tree.delete(node_id)
        self.cursor.revalidate()
        return removed


Action = Callable[[EditorState], Outcome]


def _add_sibling(state: EditorState) -> Outcome:
    new_id = state.tree.add_sibling(state.cursor.selected)
    state.cursor.select(new_id)
    log_event("added", f"sibling {new_id}")
    return Outcome.TREE_MUTATED


def _add_child(state: EditorState) -> Outcome:
    new_id = state.tree.add_child(state.cursor.selected)
    state.cursor.select(new_id)
    log_event("added", f"child {new_id}")
    return Outcome.TREE_MUTATED


def _delete_node(state: EditorState) -> Outcome:
    target = state.cursor.selected
    removed = state.delete_node(target)
    log_event("deleted", f"node {target} ({removed} nodes)")
    return Outcome.TREE_MUTATED


def _quit(state: EditorState) -> Outcome:
    log_event("quit")
    return Outcome.QUIT_REQUESTED


def _moved(changed: bool) -> Outcome:
    return Outcome.CURSOR_MOVED if changed else Outcome.NO_OP


def _transition(trigger: str) -> Action:
    def fire(state: EditorState) -> Outcome:
        if not state.modes.fire(trigger):
            return Outcome.NO_OP
        log_event("mode", state.mode.label)
        return Outcome.MODE_CHANGED

    return fire


ACTIONS: dict[str, Action] = {
    "add_sibling": _add_sibling,
    "add_child": _add_child,
    "delete_node": _delete_node,
    "quit": _quit,
    "select_next_sibling": lambda state: _moved(state.cursor.next_sibling()),
    "select_previous_sibling": lambda state: _moved(state.cursor.previous_sibling()),
    "select_first": lambda state: _moved(state.cursor.first()),
    "select_last": lambda state: _moved(state.cursor.last()),
    "enter_normal": _transition("edit"),
    "enter_insert": _transition("insert"),
    "escape": _transition("escape"),
}

KeySequence = tuple[str, ...]

GLOBAL_BINDINGS: dict[KeySequence, str] = {
    ("q",): "quit",
}

DEFAULT_BINDINGS: dict[Mode, dict[KeySequence, str]] = {
    Mode.TREE: {
        ("a",): "add_sibling",
        ("A",): "add_child",
        ("j",): "select_next_sibling",
        ("k",): "select_previous_sibling",
        ("g", "g"): "select_first",
        ("G",): "select_last",
    },
    Mode.NORMAL: {},
    Mode.INSERT: {},
}

# Held for navigation, rename and delete bindings; they resolve to NoOp until bound.
RESERVED_KEYS: dict[Mode, frozenset[str]] = {
    Mode.TREE: frozenset({"h", "l", "r", "d", "x", "i"}),
}


class CommandDispatcher:
    """Turns key names into actions on an ``EditorState``.

    Lookup order is the global table, then the table of the current mode.
    A key that only starts a longer sequence (``g`` of ``gg``) is buffered;
    if the next key does not complete a sequence the buffer is dropped and
    that key is looked up on its own.
    """

    def __init__(
        self,
        state: EditorState,
        bindings: Optional[dict[Mode, dict[KeySequence, str]]] = None,
        global_bindings: Optional[dict[KeySequence, str]] = None,
        actions: Optional[dict[str, Action]] = None,
    ) -> None:
        self.state = state
        source = DEFAULT_BINDINGS if bindings is None else bindings
        self._bindings = {mode: dict(table) for mode, table in source.items()}
        self._global = dict(GLOBAL_BINDINGS if global_bindings is None else global_bindings)
        self._actions = dict(ACTIONS if actions is None else actions)
        self._pending: KeySequence = ()

    @property
    def pending(self) -> KeySequence:
        return self._pending

    def bind(self, mode: Mode, keys: str | KeySequence, action: str) -> None:
        if action not in self._actions:
            raise KeyError(f"unknown action {action!r}")
        sequence = (keys,) if isinstance(keys, str) else tuple(keys)
        self._bindings.setdefault(mode, {})[sequence] = action

    def register_action(self, name: str, action: Action) -> None:
        self._actions[name] = action

    def is_reserved(self, key: str) -> bool:
        return key in RESERVED_KEYS.get(self.state.mode, frozenset())

    def _tables(self) -> tuple[dict[KeySequence, str], ...]:
        return (self._global, self._bindings.get(self.state.mode, {}))

    def _lookup(self, sequence: KeySequence) -> Optional[str]:
        for table in self._tables():
            if sequence in table:
                return table[sequence]
        return None

    def _is_prefix(self, sequence: KeySequence) -> bool:
        size = len(sequence)
        return any(
            len(bound) > size and bound[:size] == sequence
            for table in self._tables()
            for bound in table
        )

    def _resolve(self, key: str) -> Optional[str]:
        if self._pending:
            sequence = self._pending + (key,)
            self._pending = ()
            action = self._lookup(sequence)
            if action is not None:
                return action
            if self._is_prefix(sequence):
                self._pending = sequence
                return None
        sequence = (key,)
        action = self._lookup(sequence)
        if action is None and self._is_prefix(sequence):
            self._pending = sequence
        return action

    def handle_key(self, key: str) -> Outcome:
        name = self._resolve(key)
        if name is None:
            return Outcome.NO_OP
        action = self._actions[name]
        try:
            return action(self.state)
        except NodeTreeError as exc:
            log_event("rejected", f"{name}: {exc}")
            return Outcome.NO_OP
