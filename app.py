from __future__ import annotations

import sys
from dataclasses import replace
from typing import Optional

import regex
from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Tree
from textual.widgets._tree import TextType, TreeNode

import activity_log
from commands import CommandDispatcher, EditorState, Outcome
from config import Settings
from md_io import glyph_for, load_tree, save_tree
from modes import Mode

_GRAPHEME_RE = regex.compile(r"\X")
LABEL_WIDTH = 40


def preview_text(content: Optional[str], width: int = LABEL_WIDTH) -> str:
    """First line of ``content``, cut on grapheme boundaries."""
    if not content:
        return ""
    first_line = content.split("\n", 1)[0].strip()
    graphemes = _GRAPHEME_RE.findall(first_line)
    if len(graphemes) <= width:
        return first_line
    return "".join(graphemes[: width - 1]) + "…"


def status_text(state: EditorState, message: str | None = None) -> str:
    composed = f"{state.mode.label} Mode · {state.tree.node_count()} nodes"
    return f"{composed} · {message}" if message else composed


class NotesTree(Tree[int]):
    """Tree widget whose node data is a ``NodeTree`` id."""

    def process_label(self, label: TextType) -> Text:
        if isinstance(label, str):
            return Text(label, justify="left")
        return label


class NotesApp(App[None]):
    """Textual front end: paints the node tree and feeds every key to the dispatcher."""

    TITLE = "nodetree"

    CSS = """
    #notes-tree {
        width: 1fr;
    }
    """

    def __init__(self, settings: Settings | None = None, state: EditorState | None = None) -> None:
        super().__init__()
        self.settings = settings or Settings.from_env(environ={})
        self.state = state or EditorState()
        self.dispatcher = CommandDispatcher(self.state)
        self.state.modes.subscribe(self._on_mode_change)
        self.quit_requested = False
        self.load_error: Optional[str] = None
        self._tree_widget: Optional[NotesTree] = None
        self._tree_nodes: dict[int, TreeNode[int]] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        tree = NotesTree(Text(self.settings.title), id="notes-tree")
        tree.show_root = True
        tree.auto_expand = False
        self._tree_widget = tree
        yield tree
        yield Footer()

    def on_mount(self) -> None:
        path = self.settings.document_path
        if path.exists():
            self._load(path)
        self.rebuild_tree()
        self.show_status(f"Failed to load {self.load_error}" if self.load_error else None)

    def require_tree(self) -> NotesTree:
        if self._tree_widget is None:
            raise RuntimeError("Tree widget not initialised")
        return self._tree_widget

    def _format_node_label(self, node_id: int) -> Text:
        nodes = self.state.tree
        if node_id == nodes.root_id:
            return Text(self.settings.title, style="bold")
        label = Text(f"{glyph_for(nodes, node_id)} ")
        preview = preview_text(nodes.content_of(node_id))
        if preview:
            label.append(preview)
        else:
            label.append("(empty)", style="dim italic")
        return label

    def populate_tree(self, tree_node: TreeNode[int], node_id: int) -> None:
        tree_node.set_label(self._format_node_label(node_id))
        tree_node.data = node_id
        self._tree_nodes[node_id] = tree_node
        for child_id in self.state.tree.children_of(node_id):
            child_node = tree_node.add(self._format_node_label(child_id), data=child_id, expand=True)
            self.populate_tree(child_node, child_id)

    def rebuild_tree(self) -> None:
        tree = self.require_tree()
        tree.clear()
        self._tree_nodes = {}
        self.populate_tree(tree.root, self.state.tree.root_id)
        tree.root.expand()
        tree.refresh(layout=True)
        tree.call_after_refresh(self.sync_cursor)

    def sync_cursor(self) -> None:
        tree_node = self._tree_nodes.get(self.state.cursor.selected)
        if tree_node is not None:
            self.require_tree().select_node(tree_node)

    def show_status(self, message: str | None = None) -> None:
        self.sub_title = status_text(self.state, message)

    def _on_mode_change(self, previous: Mode, current: Mode) -> None:
        self.show_status(f"{previous.label} → {current.label}")

    def _load(self, path) -> bool:
        try:
            tree, title = load_tree(path)
        except (OSError, ValueError) as exc:
            self.bell()
            self.load_error = f"{path}: {exc}"
            activity_log.log_event("load_failed", self.load_error)
            return False
        self.state = EditorState(tree=tree, modes=self.state.modes)
        self.dispatcher = CommandDispatcher(self.state)
        if title:
            self.settings = replace(self.settings, title=title)
        activity_log.log_event("loaded", str(path))
        return True

    def action_save(self) -> None:
        if self.load_error is not None:
            # The file on disk was never read; writing would replace it.
            self.bell()
            self.show_status(f"Not saving over unreadable {self.settings.document_path}")
            return
        try:
            path = save_tree(self.settings.document_path, self.state.tree, self.settings.title)
        except OSError as exc:
            self.bell()
            activity_log.log_event("save_failed", str(exc))
            self.show_status(f"Save failed: {exc}")
            return
        activity_log.log_event("saved", str(path))
        self.show_status(f"Saved to {path}")

    @staticmethod
    def _key_for(event: events.Key) -> str:
        character = event.character
        if event.is_printable and character and len(character) == 1:
            return character
        return event.key

    async def on_event(self, event: events.Event) -> None:  # noqa: D401
        if isinstance(event, events.Key):
            event.stop()
            if event.key == "ctrl+s":
                self.action_save()
                return
            outcome = self.dispatcher.handle_key(self._key_for(event))
            self.apply_outcome(outcome)
            return
        await super().on_event(event)

    def apply_outcome(self, outcome: Outcome) -> None:
        if outcome is Outcome.QUIT_REQUESTED:
            self.quit_requested = True
            self.exit()
        elif outcome is Outcome.TREE_MUTATED:
            self.rebuild_tree()
            self.show_status()
        elif outcome in (Outcome.CURSOR_MOVED, Outcome.MODE_CHANGED):
            self.sync_cursor()


def main(argv: list[str] | None = None) -> None:
    settings = Settings.from_env(sys.argv[1:] if argv is None else argv)
    activity_log.configure(settings.log_path)
    activity_log.reset_activity_log()
    NotesApp(settings).run()


if __name__ == "__main__":
    main()
