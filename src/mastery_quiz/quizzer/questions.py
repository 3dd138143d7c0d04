"""Question bank loading and choice shuffling."""

from __future__ import annotations

import json
import logging
import random
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from .state import Question, QuestionStats

__all__ = [
    "BankProvider",
    "LoadError",
    "QuestionStore",
    "json_file_provider",
    "shuffle_choices",
]

BankProvider = Callable[[], Mapping[str, Any]]

_ID_PREFIX = "question-"


class LoadError(RuntimeError):
    """Raised when the question bank cannot be fetched or parsed."""


def json_file_provider(path: Path) -> BankProvider:
    """Return a provider that reads a JSON question bank from ``path``."""

    def _provide() -> Mapping[str, Any]:
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except OSError as exc:
            raise LoadError(f"Unable to read question bank: {path}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError as exc:
            raise LoadError(
                f"Question bank is not valid JSON: {path} ({exc})"
            ) from exc

    return _provide


class QuestionStore:
    """Materialize bank entries into addressable ``Question`` records."""

    def __init__(
        self,
        provider: BankProvider,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._provider = provider
        self._logger = logger or logging.getLogger(__name__)
        self._questions: list[Question] | None = None

    @property
    def questions(self) -> list[Question]:
        if self._questions is None:
            raise LoadError("Question bank has not been loaded.")
        return self._questions

    def load(self) -> list[Question]:
        """Fetch the bank and assign ``question-<index>`` ids in bank order.

        Nothing is kept when any entry fails validation.
        """

        try:
            document = self._provider()
        except LoadError:
            raise
        except Exception as exc:
            raise LoadError(f"Question bank provider failed: {exc}") from exc

        entries = document.get("questions") if isinstance(
            document, Mapping
        ) else None
        if not isinstance(entries, list):
            raise LoadError("Question bank must contain a 'questions' list.")

        questions = [
            _build_question(entry, index)
            for index, entry in enumerate(entries)
        ]
        self._questions = questions
        self._logger.info(
            "Question bank loaded", extra={"question_count": len(questions)}
        )
        return questions


def _build_question(entry: object, index: int) -> Question:
    if not isinstance(entry, Mapping):
        raise LoadError(f"Question #{index} must be an object.")
    text = entry.get("text")
    choices = entry.get("choices")
    answer = entry.get("correctAnswer")
    if not isinstance(text, str):
        raise LoadError(f"Question #{index} is missing 'text'.")
    if not isinstance(choices, list) or not all(
        isinstance(choice, str) for choice in choices
    ):
        raise LoadError(
            f"Question #{index} 'choices' must be a list of strings."
        )
    if not isinstance(answer, str) or answer not in choices:
        raise LoadError(
            f"Question #{index} 'correctAnswer' must be one of its choices."
        )
    return Question(
        id=f"{_ID_PREFIX}{index}",
        text=text,
        choices=tuple(choices),
        correct_answer=answer,
        stats=QuestionStats(),
    )


def shuffle_choices(
    choices: Sequence[str], rng: random.Random | None = None
) -> list[str]:
    """Return a shuffled copy of ``choices``; the input is left untouched."""

    shuffled = list(choices)
    (rng or random).shuffle(shuffled)
    return shuffled
