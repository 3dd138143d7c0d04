from ._main import build_arg_parser, main
from .manager import AnswerOutcome, ChallengeStats, DrawnQuestion
from .persistence import (
    JsonFileStore,
    KeyValueStore,
    MemoryStore,
    PersistenceCodec,
)
from .questions import LoadError, QuestionStore, shuffle_choices
from .session import QuizSession, QuizStateError, SessionStats
from .state import ChallengeProgress, Question, QuestionStats, SessionState

__all__ = [
    "build_arg_parser",
    "main",
    "AnswerOutcome",
    "ChallengeStats",
    "DrawnQuestion",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceCodec",
    "LoadError",
    "QuestionStore",
    "shuffle_choices",
    "QuizSession",
    "QuizStateError",
    "SessionStats",
    "ChallengeProgress",
    "Question",
    "QuestionStats",
    "SessionState",
]
