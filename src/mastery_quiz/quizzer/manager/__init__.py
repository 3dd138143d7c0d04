from .answers import (
    DEFAULT_CHALLENGE_THRESHOLD,
    DEFAULT_TARGET_STREAK,
    AnswerOutcome,
    AnswerProcessor,
    QuizStateError,
)
from .challenge import ChallengeModeController, ChallengeStats
from .pools import DrawnQuestion, PoolManager

__all__ = [
    "DEFAULT_CHALLENGE_THRESHOLD",
    "DEFAULT_TARGET_STREAK",
    "AnswerOutcome",
    "AnswerProcessor",
    "QuizStateError",
    "ChallengeModeController",
    "ChallengeStats",
    "DrawnQuestion",
    "PoolManager",
]
