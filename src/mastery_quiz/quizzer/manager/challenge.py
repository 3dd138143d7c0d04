"""Challenge mode: re-quiz challenged questions until each is remastered."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ..state import ChallengeProgress, SessionState

Checkpoint = Callable[[], None]


@dataclass(frozen=True)
class ChallengeStats:
    total: int
    completed: int
    remaining: int


class ChallengeModeController:
    """Enter, track and leave challenge mode on a session state."""

    def __init__(
        self,
        state: SessionState,
        *,
        checkpoint: Checkpoint | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = state
        self._checkpoint = checkpoint
        self._logger = logger or logging.getLogger(__name__)

    def start(self) -> None:
        """Enter challenge mode with fresh progress for every challenger.

        Starting while already in challenge mode restarts the progress.
        """

        state = self._state
        state.is_in_challenge_mode = True
        state.challenge_progress = {}
        for question in state.challenged:
            question.stats.current_streak = 0
            state.challenge_progress[question.id] = ChallengeProgress()
        self._logger.info(
            "Challenge mode started",
            extra={"challenged_count": len(state.challenged)},
        )
        self._save()

    def exit(self) -> None:
        self._state.is_in_challenge_mode = False
        self._state.challenge_progress = {}
        self._logger.info("Challenge mode exited")
        self._save()

    def is_completed(self) -> bool:
        if not self._state.is_in_challenge_mode:
            return False
        return all(
            progress.remastered
            for progress in self._state.challenge_progress.values()
        )

    def stats(self) -> ChallengeStats:
        total = len(self._state.challenged)
        completed = sum(
            1
            for progress in self._state.challenge_progress.values()
            if progress.remastered
        )
        return ChallengeStats(
            total=total, completed=completed, remaining=total - completed
        )

    def _save(self) -> None:
        if self._checkpoint is not None:
            self._checkpoint()
