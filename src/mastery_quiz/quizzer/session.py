"""Quiz session facade consumed by presentation layers.

``QuizSession`` wires the question store, the pool/answer/challenge
managers and the persistence codec around a single ``SessionState``. Every
call that changes pools, stats, mode or the current draw writes the session
through to the store before returning.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import Optional

from .config import QuizConfig
from .manager import (
    DEFAULT_CHALLENGE_THRESHOLD,
    DEFAULT_TARGET_STREAK,
    AnswerOutcome,
    AnswerProcessor,
    ChallengeModeController,
    ChallengeStats,
    DrawnQuestion,
    PoolManager,
    QuizStateError,
)
from .persistence import JsonFileStore, PersistenceCodec
from .questions import QuestionStore, json_file_provider, shuffle_choices
from .state import Question, SessionState


@dataclass(frozen=True)
class SessionStats:
    """Session-level progress counters."""

    total_questions: int
    mastered_questions: int
    remaining_questions: int
    challenged_questions: int
    mastery_percent: int
    is_in_challenge_mode: bool
    challenge: Optional[ChallengeStats] = None


class QuizSession:
    """Public API over one learner's quiz session."""

    def __init__(
        self,
        question_store: QuestionStore,
        codec: PersistenceCodec,
        *,
        rng: random.Random | None = None,
        target_streak: int = DEFAULT_TARGET_STREAK,
        challenge_threshold: int = DEFAULT_CHALLENGE_THRESHOLD,
        logger: logging.Logger | None = None,
    ) -> None:
        self._question_store = question_store
        self._codec = codec
        self._rng = rng or random.Random()
        self.target_streak = target_streak
        self.challenge_threshold = challenge_threshold
        self._logger = logger or logging.getLogger(__name__)
        self._state: SessionState | None = None
        self._pools: PoolManager | None = None
        self._answers: AnswerProcessor | None = None
        self._challenge: ChallengeModeController | None = None
        self.restored = False

    @classmethod
    def from_config(
        cls, config: QuizConfig, *, logger: logging.Logger | None = None
    ) -> "QuizSession":
        return cls(
            QuestionStore(json_file_provider(config.bank_path), logger=logger),
            PersistenceCodec(
                JsonFileStore(config.state_dir),
                key=config.session_key,
                logger=logger,
            ),
            rng=random.Random(config.seed),
            target_streak=config.target_streak,
            challenge_threshold=config.challenge_threshold,
            logger=logger,
        )

    def load(self) -> SessionState:
        """Load the bank, then resume the saved session if there is one.

        A missing or malformed record silently yields a fresh session.
        Raises ``LoadError`` when the bank itself cannot be loaded.
        """

        questions = self._question_store.load()
        record = self._codec.load()
        if record is None:
            state = SessionState.fresh(questions)
            self.restored = False
            self._logger.info("Started fresh session")
        else:
            state = self._codec.restore(record, questions)
            if state.current_question is not None:
                state.current_choices = shuffle_choices(
                    state.current_question.choices, self._rng
                )
            self.restored = True
            self._logger.info(
                "Restored saved session",
                extra={
                    "active": len(state.active),
                    "mastered": len(state.mastered),
                    "challenged": len(state.challenged),
                    "challenge_mode": state.is_in_challenge_mode,
                },
            )
        self._bind(state)
        return state

    def _bind(self, state: SessionState) -> None:
        self._state = state
        self._pools = PoolManager(state, rng=self._rng, checkpoint=self.save)
        self._answers = AnswerProcessor(
            state,
            target_streak=self.target_streak,
            challenge_threshold=self.challenge_threshold,
            checkpoint=self.save,
            logger=self._logger,
        )
        self._challenge = ChallengeModeController(
            state, checkpoint=self.save, logger=self._logger
        )

    @property
    def state(self) -> SessionState:
        if self._state is None:
            raise QuizStateError("Session is not loaded; call load() first.")
        return self._state

    @property
    def current_question(self) -> Question | None:
        return self.state.current_question

    @property
    def current_choices(self) -> list[str] | None:
        return self.state.current_choices

    @property
    def is_in_challenge_mode(self) -> bool:
        return self.state.is_in_challenge_mode

    def get_next(self) -> DrawnQuestion | None:
        return self._require(self._pools).get_next()

    def submit(self, answer: str) -> AnswerOutcome:
        return self._require(self._answers).submit(answer)

    def start_challenge_mode(self) -> None:
        self._require(self._challenge).start()

    def exit_challenge_mode(self) -> None:
        self._require(self._challenge).exit()

    def is_challenge_completed(self) -> bool:
        return self._require(self._challenge).is_completed()

    def challenge_stats(self) -> ChallengeStats:
        return self._require(self._challenge).stats()

    def stats(self) -> SessionStats:
        state = self.state
        total = len(state.questions)
        mastered = len(state.mastered)
        percent = math.floor(mastered / total * 100 + 0.5) if total else 0
        return SessionStats(
            total_questions=total,
            mastered_questions=mastered,
            remaining_questions=len(state.active),
            challenged_questions=len(state.challenged),
            mastery_percent=percent,
            is_in_challenge_mode=state.is_in_challenge_mode,
            challenge=(
                self.challenge_stats()
                if state.is_in_challenge_mode
                else None
            ),
        )

    def reset_session(self) -> None:
        """Leave challenge mode and return every question to active."""

        self.exit_challenge_mode()
        self.state.reset()
        self._logger.info("Session reset")
        self.save()

    def clear_saved_state(self) -> None:
        """Erase the stored record; in-memory state is left as is."""

        self._codec.clear()
        self.restored = False
        self._logger.info("Cleared saved session")

    def save(self) -> bool:
        return self._codec.save(self.state)

    def _require(self, component):
        if component is None:
            raise QuizStateError("Session is not loaded; call load() first.")
        return component
