"""Draw selection across the active and challenged pools."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Callable

from ..questions import shuffle_choices
from ..state import Question, SessionState

Checkpoint = Callable[[], None]


@dataclass(frozen=True)
class DrawnQuestion:
    """A drawn question together with the choice order to present."""

    question: Question
    choices: list[str]


class PoolManager:
    """Select the next question from whichever pool the mode calls for."""

    def __init__(
        self,
        state: SessionState,
        *,
        rng: random.Random | None = None,
        checkpoint: Checkpoint | None = None,
    ) -> None:
        self._state = state
        self._rng = rng or random.Random()
        self._checkpoint = checkpoint

    def current_pool(self) -> list[Question]:
        if self._state.is_in_challenge_mode:
            return self._state.challenged
        return self._state.active

    def eligible(self) -> list[Question]:
        """Questions that may be drawn right now.

        In challenge mode, questions already remastered are skipped.
        """

        pool = self.current_pool()
        if not self._state.is_in_challenge_mode:
            return list(pool)
        progress = self._state.challenge_progress
        return [
            question
            for question in pool
            if not (
                question.id in progress and progress[question.id].remastered
            )
        ]

    def get_next(self) -> DrawnQuestion | None:
        """Draw uniformly from the eligible set, or None when exhausted.

        The drawn question stays in its pool and can be drawn again until
        it is promoted out.
        """

        candidates = self.eligible()
        if not candidates:
            return None
        question = self._rng.choice(candidates)
        choices = shuffle_choices(question.choices, self._rng)
        self._state.current_question = question
        self._state.current_choices = choices
        if self._checkpoint is not None:
            self._checkpoint()
        return DrawnQuestion(question=question, choices=choices)
