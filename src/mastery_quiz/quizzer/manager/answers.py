"""Answer processing: streak tracking and mastery/challenger promotion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from ..state import Question, SessionState

DEFAULT_TARGET_STREAK = 3
DEFAULT_CHALLENGE_THRESHOLD = 5

Checkpoint = Callable[[], None]


class QuizStateError(RuntimeError):
    """Raised when an operation is called in a state that forbids it."""


@dataclass(frozen=True)
class AnswerOutcome:
    """Result of a single submitted answer.

    ``streak`` is the challenge progress streak in challenge mode and the
    question's own streak otherwise. ``attempts`` is the question's
    ``attempts_before_mastery``, frozen once it is mastered.
    """

    is_correct: bool
    streak: int
    is_mastered: bool
    attempts: int


class AnswerProcessor:
    """Apply submitted answers to the current question and its pools."""

    def __init__(
        self,
        state: SessionState,
        *,
        target_streak: int = DEFAULT_TARGET_STREAK,
        challenge_threshold: int = DEFAULT_CHALLENGE_THRESHOLD,
        checkpoint: Checkpoint | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._state = state
        self.target_streak = target_streak
        self.challenge_threshold = challenge_threshold
        self._checkpoint = checkpoint
        self._logger = logger or logging.getLogger(__name__)

    def submit(self, selected_answer: str) -> AnswerOutcome:
        question = self._state.current_question
        if question is None:
            raise QuizStateError("No current question; draw one first.")

        stats = question.stats
        stats.total_attempts += 1
        if not stats.is_mastered:
            stats.attempts_before_mastery += 1

        is_correct = question.is_correct(selected_answer)
        if self._state.is_in_challenge_mode:
            streak = self._apply_challenge(question, is_correct)
        else:
            streak = self._apply_normal(question, is_correct)

        if self._checkpoint is not None:
            self._checkpoint()

        return AnswerOutcome(
            is_correct=is_correct,
            streak=streak,
            is_mastered=stats.is_mastered,
            attempts=stats.attempts_before_mastery,
        )

    def _apply_normal(self, question: Question, is_correct: bool) -> int:
        stats = question.stats
        if not is_correct:
            stats.current_streak = 0
            return 0

        stats.correct_attempts += 1
        stats.current_streak += 1
        if stats.is_mastered:
            return stats.current_streak
        if stats.current_streak >= self.target_streak:
            self._promote(question)
        return stats.current_streak

    def _promote(self, question: Question) -> None:
        stats = question.stats
        stats.is_mastered = True
        if stats.attempts_before_mastery >= self.challenge_threshold:
            stats.is_challenger = True
            self._state.challenged.append(question)
        self._state.mastered.append(question)
        self._state.active = [
            candidate
            for candidate in self._state.active
            if candidate is not question
        ]
        self._logger.info(
            "Question mastered",
            extra={
                "question_id": question.id,
                "attempts_before_mastery": stats.attempts_before_mastery,
                "challenger": stats.is_challenger,
            },
        )

    def _apply_challenge(self, question: Question, is_correct: bool) -> int:
        if is_correct:
            question.stats.correct_attempts += 1
        progress = self._state.challenge_progress.get(question.id)
        if progress is None:
            return 0
        if not is_correct:
            progress.streak = 0
            return 0
        progress.streak += 1
        if progress.streak >= self.target_streak and not progress.remastered:
            progress.remastered = True
            self._logger.info(
                "Question remastered", extra={"question_id": question.id}
            )
        return progress.streak
