from __future__ import annotations

from enum import Enum
from typing import Callable, Optional


class Mode(Enum):
    TREE = "Tree"
    NORMAL = "Normal"
    INSERT = "Insert"

    @property
    def label(self) -> str:
        return self.value


# Edges are data: (current mode, trigger) -> next mode.
DEFAULT_TRANSITIONS: dict[tuple[Mode, str], Mode] = {
    (Mode.TREE, "edit"): Mode.NORMAL,
    (Mode.NORMAL, "insert"): Mode.INSERT,
    (Mode.INSERT, "escape"): Mode.NORMAL,
    (Mode.NORMAL, "escape"): Mode.TREE,
}

ModeListener = Callable[[Mode, Mode], None]


class ModeController:
    """Finite state machine over editing modes. Starts in ``Mode.TREE`` and never terminates."""

    def __init__(
        self,
        transitions: Optional[dict[tuple[Mode, str], Mode]] = None,
        initial: Mode = Mode.TREE,
    ) -> None:
        self._transitions = dict(DEFAULT_TRANSITIONS if transitions is None else transitions)
        self._mode = initial
        self._listeners: list[ModeListener] = []

    @property
    def mode(self) -> Mode:
        return self._mode

    def add_transition(self, source: Mode, trigger: str, target: Mode) -> None:
        self._transitions[(source, trigger)] = target

    def target_for(self, trigger: str) -> Optional[Mode]:
        return self._transitions.get((self._mode, trigger))

    def triggers(self) -> list[str]:
        """Triggers legal in the current mode."""
        return sorted(trigger for (source, trigger) in self._transitions if source is self._mode)

    def subscribe(self, listener: ModeListener) -> None:
        self._listeners.append(listener)

    def fire(self, trigger: str) -> bool:
        target = self.target_for(trigger)
        if target is None:
            return False
        previous, self._mode = self._mode, target
        for listener in list(self._listeners):
            listener(previous, target)
        return True
