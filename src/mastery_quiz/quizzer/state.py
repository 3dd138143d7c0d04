"""Mutable session state shared by the quiz engine components.

Questions carry fixed identity fields plus a mutable ``QuestionStats``
block. Pools hold references to the same ``Question`` objects, so a
question promoted out of ``active`` is the very object appended to
``mastered``. Serialized forms use the camelCase keys of the persisted
session record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, MutableMapping, Sequence


@dataclass
class QuestionStats:
    """Per-question attempt counters and promotion flags."""

    current_streak: int = 0
    total_attempts: int = 0
    attempts_before_mastery: int = 0
    correct_attempts: int = 0
    is_mastered: bool = False
    is_challenger: bool = False

    def to_dict(self) -> MutableMapping[str, Any]:
        return {
            "currentStreak": self.current_streak,
            "totalAttempts": self.total_attempts,
            "attemptsBeforeMastery": self.attempts_before_mastery,
            "correctAttempts": self.correct_attempts,
            "isMastered": self.is_mastered,
            "isChallenger": self.is_challenger,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "QuestionStats":
        """Build stats from a saved record; raises ValueError on bad types."""

        return cls(
            current_streak=_count(payload, "currentStreak"),
            total_attempts=_count(payload, "totalAttempts"),
            attempts_before_mastery=_count(payload, "attemptsBeforeMastery"),
            correct_attempts=_count(payload, "correctAttempts"),
            is_mastered=_flag(payload, "isMastered"),
            is_challenger=_flag(payload, "isChallenger"),
        )


# eq=False keeps identity semantics: pools compare and remove by reference.
@dataclass(eq=False)
class Question:
    """A bank question with its live statistics."""

    id: str
    text: str
    choices: tuple[str, ...]
    correct_answer: str
    stats: QuestionStats = field(default_factory=QuestionStats)

    def is_correct(self, answer: str) -> bool:
        return answer == self.correct_answer


@dataclass
class ChallengeProgress:
    """Challenge-mode bookkeeping for one challenged question."""

    streak: int = 0
    remastered: bool = False

    def to_dict(self) -> MutableMapping[str, Any]:
        return {"streak": self.streak, "remastered": self.remastered}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ChallengeProgress":
        return cls(
            streak=_count(payload, "streak"),
            remastered=_flag(payload, "remastered"),
        )


@dataclass
class SessionState:
    """One learner's pools, current draw and challenge progress."""

    questions: list[Question]
    active: list[Question] = field(default_factory=list)
    mastered: list[Question] = field(default_factory=list)
    challenged: list[Question] = field(default_factory=list)
    current_question: Question | None = None
    current_choices: list[str] | None = None
    is_in_challenge_mode: bool = False
    challenge_progress: dict[str, ChallengeProgress] = field(
        default_factory=dict
    )

    @classmethod
    def fresh(cls, questions: Sequence[Question]) -> "SessionState":
        """Return a state with every question active."""

        ordered = list(questions)
        return cls(questions=ordered, active=list(ordered))

    def reset(self) -> None:
        """Zero every question's stats and move them all back to active."""

        for question in self.questions:
            question.stats = QuestionStats()
        self.active = list(self.questions)
        self.mastered = []
        self.challenged = []
        self.current_question = None
        self.current_choices = None
        self.is_in_challenge_mode = False
        self.challenge_progress = {}

    def question_by_id(self) -> dict[str, Question]:
        return {question.id: question for question in self.questions}


def _count(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key, 0)
    # bool is an int subclass; a saved flag is never a valid counter.
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"'{key}' must be a non-negative integer")
    return value


def _flag(payload: Mapping[str, Any], key: str) -> bool:
    value = payload.get(key, False)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be a boolean")
    return value
