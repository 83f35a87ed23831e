from modes import Mode, ModeController


def test_starts_in_tree_mode() -> None:
    assert ModeController().mode is Mode.TREE


def test_default_edges_cycle_through_modes() -> None:
    controller = ModeController()
    assert controller.fire("edit")
    assert controller.mode is Mode.NORMAL
    assert controller.fire("insert")
    assert controller.mode is Mode.INSERT
    assert controller.fire("escape")
    assert controller.mode is Mode.NORMAL
    assert controller.fire("escape")
    assert controller.mode is Mode.TREE


def test_unknown_trigger_is_ignored() -> None:
    controller = ModeController()
    assert not controller.fire("insert")
    assert controller.mode is Mode.TREE


def test_transitions_extend_as_data() -> None:
    controller = ModeController(transitions={})
    assert controller.triggers() == []
    controller.add_transition(Mode.TREE, "jump", Mode.INSERT)
    assert controller.triggers() == ["jump"]
    assert controller.fire("jump")
    assert controller.mode is Mode.INSERT


def test_listeners_see_each_change() -> None:
    seen = []
    controller = ModeController()
    controller.subscribe(lambda previous, current: seen.append((previous, current)))
    controller.fire("edit")
    controller.fire("bogus")
    assert seen == [(Mode.TREE, Mode.NORMAL)]


def test_mode_labels() -> None:
    assert [mode.label for mode in Mode] == ["Tree", "Normal", "Insert"]
