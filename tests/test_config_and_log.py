from pathlib import Path

import pytest

import activity_log
from commands import CommandDispatcher, EditorState, Outcome
from config import DEFAULT_DOCUMENT, DEFAULT_LOG, Settings


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "activity.log"
    activity_log.configure(path)
    yield path
    activity_log.configure(None)


def test_settings_defaults() -> None:
    settings = Settings.from_env(environ={})
    assert settings.document_path == Path(DEFAULT_DOCUMENT)
    assert settings.log_path == Path(DEFAULT_LOG)
    assert settings.title == "Notes"


def test_settings_from_environment_and_argv() -> None:
    env = {"NODETREE_FILE": "env.md", "NODETREE_LOG": "", "NODETREE_TITLE": "Work"}
    settings = Settings.from_env(environ=env)
    assert settings.document_path == Path("env.md")
    assert settings.log_path is None
    assert settings.title == "Work"
    assert Settings.from_env(["cli.md"], environ=env).document_path == Path("cli.md")


def test_log_is_silent_until_configured(tmp_path) -> None:
    activity_log.configure(None)
    activity_log.log_event("added", "nothing")
    assert activity_log.get_log_path() is None
    assert list(tmp_path.iterdir()) == []


def test_dispatcher_activity_is_logged(log_file) -> None:
    dispatcher = CommandDispatcher(EditorState())
    dispatcher.handle_key("a")
    dispatcher.handle_key("A")
    dispatcher.handle_key("q")
    lines = log_file.read_text(encoding="utf-8").splitlines()
    statuses = [line.split("\t")[1] for line in lines]
    assert statuses == ["REJECTED", "ADDED", "QUIT"]
    assert "root has no siblings" in lines[0]


def test_reset_truncates(log_file) -> None:
    activity_log.log_event("saved", "x")
    activity_log.reset_activity_log()
    assert log_file.read_text(encoding="utf-8") == ""


def test_unwritable_log_never_breaks_a_command(tmp_path) -> None:
    activity_log.configure(tmp_path)
    try:
        state = EditorState()
        dispatcher = CommandDispatcher(state)
        assert dispatcher.handle_key("A") is Outcome.TREE_MUTATED
        assert dispatcher.handle_key("a") is Outcome.TREE_MUTATED
        assert dispatcher.handle_key("a") is Outcome.TREE_MUTATED
        assert state.tree.node_count() == 4
        activity_log.reset_activity_log()
        assert activity_log.last_error() is not None
    finally:
        activity_log.configure(None)
