from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

logger = logging.getLogger(__name__)


class EditTarget(Protocol):
    def insert_char(self, char: str) -> bool:
        ...

    def split_line(self) -> bool:
        ...

    def delete_left(self) -> bool:
        ...


class InputState(Enum):
    IDLE = "idle"
    COMPOSING = "composing"


@dataclass
class ReconcileResult:
    inserted: int = 0
    deleted: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.deleted)


class InputReconciler:
    """Replays changes of an external, accumulating input value as primitive edits.

    Only lengths are compared: a longer value appends its new suffix, a shorter one deletes
    the difference from the left of the caret, and an equal length is ignored, so a
    same-length substitution made by an IME goes unnoticed.
    """

    def __init__(self, target: EditTarget) -> None:
        self.target = target
        self.previous = ""
        self.state = InputState.IDLE

    @property
    def composing(self) -> bool:
        return self.state is InputState.COMPOSING

    def composition_start(self) -> None:
        logger.debug("Composition started")
        self.state = InputState.COMPOSING

    def composition_end(self, current: str) -> ReconcileResult:
        logger.debug(f"Composition ended with {current!r}")
        self.state = InputState.IDLE
        return self.reconcile(current)

    def input_changed(self, current: str) -> ReconcileResult:
        if self.composing:
            return ReconcileResult()
        return self.reconcile(current)

    def reconcile(self, current: str) -> ReconcileResult:
        previous = self.previous
        result = ReconcileResult()
        if len(current) > len(previous):
            for char in current[len(previous) :]:
                if char == "\n":
                    self.target.split_line()
                else:
                    self.target.insert_char(char)
                result.inserted += 1
        elif len(current) < len(previous):
            for _ in range(len(previous) - len(current)):
                self.target.delete_left()
                result.deleted += 1
        self.previous = current
        return result

    def reset(self) -> None:
        self.previous = ""
