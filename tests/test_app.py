import asyncio

from app import NotesApp, preview_text, status_text
from commands import EditorState
from config import Settings
from md_io import load_tree


def make_app(tmp_path) -> NotesApp:
    settings = Settings(document_path=tmp_path / "notes.md", log_path=None)
    return NotesApp(settings)


def test_preview_text_cuts_on_graphemes() -> None:
    assert preview_text(None) == ""
    assert preview_text("first\nsecond") == "first"
    assert preview_text("👍🏽" * 5, width=3) == "👍🏽👍🏽…"


def test_status_text_reports_mode_and_count() -> None:
    state = EditorState()
    state.tree.add_child(state.tree.root_id)
    assert status_text(state) == "Tree Mode · 2 nodes"
    assert status_text(state, "Saved") == "Tree Mode · 2 nodes · Saved"


def test_keys_drive_the_tree_and_quit(tmp_path) -> None:
    async def scenario() -> NotesApp:
        app = make_app(tmp_path)
        async with app.run_test() as pilot:
            assert app.state.tree.node_count() == 1
            await pilot.press("A")
            assert app.state.tree.node_count() == 2
            await pilot.press("a")
            assert app.state.tree.node_count() == 3
            assert app.sub_title == "Tree Mode · 3 nodes"
            await pilot.press("q")
        return app

    app = asyncio.run(scenario())
    assert app.quit_requested
    assert app.state.tree.node_count() == 3


def test_ctrl_s_saves_and_next_start_loads(tmp_path) -> None:
    async def save_session() -> None:
        app = make_app(tmp_path)
        async with app.run_test() as pilot:
            await pilot.press("A", "A", "ctrl+s")

    async def load_session() -> NotesApp:
        app = make_app(tmp_path)
        async with app.run_test():
            pass
        return app

    asyncio.run(save_session())
    saved, _ = load_tree(tmp_path / "notes.md")
    assert saved.node_count() == 3
    assert asyncio.run(load_session()).state.tree.node_count() == 3


def test_bracketed_title_is_plain_text(tmp_path) -> None:
    async def scenario() -> NotesApp:
        settings = Settings(document_path=tmp_path / "notes.md", log_path=None, title="Plans [/draft]")
        app = NotesApp(settings)
        async with app.run_test() as pilot:
            await pilot.press("A")
        return app

    app = asyncio.run(scenario())
    assert str(app.require_tree().root.label) == "Plans [/draft]"
    assert app.state.tree.node_count() == 2


def test_unreadable_document_is_never_overwritten(tmp_path) -> None:
    path = tmp_path / "notes.md"
    original = b"not an outline\nstray text\n"
    path.write_bytes(original)

    async def scenario() -> NotesApp:
        app = make_app(tmp_path)
        async with app.run_test() as pilot:
            assert app.sub_title.startswith("Tree Mode · 1 nodes · Failed to load")
            await pilot.press("A", "ctrl+s")
            assert app.state.tree.node_count() == 2
            assert "Not saving" in app.sub_title
        return app

    app = asyncio.run(scenario())
    assert app.load_error is not None
    assert path.read_bytes() == original
