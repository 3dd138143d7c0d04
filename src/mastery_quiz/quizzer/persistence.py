"""Session persistence: flatten state into a record and rebuild it.

The record layout mirrors what the browser build of the quiz kept in local
storage, so a saved file can be inspected by hand::

    {
      "activeQuestionIds": [...],
      "masteredQuestionIds": [...],
      "challengedQuestionIds": [...],
      "currentQuestionId": "question-3" | null,
      "isInChallengeMode": false,
      "challengeModeProgress": [{"key": id, "value": {...}}],
      "questions": [{"id": id, "stats": {...}}]
    }
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, MutableMapping, Protocol, Sequence

from .state import ChallengeProgress, Question, QuestionStats, SessionState

__all__ = [
    "DEFAULT_SESSION_KEY",
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "PersistenceCodec",
    "encode_state",
]

DEFAULT_SESSION_KEY = "quizState"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store, handy for tests and embedding."""

    def __init__(self, initial: Mapping[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStore:
    """Store each key as ``<key>.json`` under ``root``."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        _atomic_write_text(self.path_for(key), value)

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class PersistenceCodec:
    """Save, load and restore a session under a single key."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = DEFAULT_SESSION_KEY,
        logger: logging.Logger | None = None,
    ) -> None:
        self._store = store
        self.key = key
        self._logger = logger or logging.getLogger(__name__)

    def save(self, state: SessionState) -> bool:
        """Overwrite the stored record; write failures are logged only."""

        payload = json.dumps(encode_state(state))
        try:
            self._store.set(self.key, payload)
        except OSError:
            self._logger.exception(
                "Failed to write session record", extra={"key": self.key}
            )
            return False
        return True

    def load(self) -> MutableMapping[str, Any] | None:
        """Return the stored record, or None when absent or unreadable."""

        try:
            raw = self._store.get(self.key)
        except UnicodeDecodeError:
            self._logger.warning(
                "Ignoring session record that is not UTF-8",
                extra={"key": self.key},
            )
            return None
        except OSError:
            self._logger.exception(
                "Failed to read session record", extra={"key": self.key}
            )
            return None
        if raw is None:
            return None
        try:
            record = json.loads(raw)
        except ValueError:
            self._logger.warning(
                "Ignoring malformed session record", extra={"key": self.key}
            )
            return None
        if not isinstance(record, dict):
            self._logger.warning(
                "Ignoring session record that is not an object",
                extra={"key": self.key},
            )
            return None
        return record

    def restore(
        self,
        record: Mapping[str, Any],
        questions: Sequence[Question],
    ) -> SessionState:
        """Rebuild a state from ``record`` on top of freshly loaded questions.

        Only stats are taken from the record. Ids no longer in the bank are
        dropped from every pool, and entries of the wrong type are
        skipped, so a damaged record degrades to fresh values.
        """

        lookup = {question.id: question for question in questions}

        for saved in _as_list(record.get("questions")):
            if not isinstance(saved, Mapping):
                continue
            saved_id = saved.get("id")
            if not isinstance(saved_id, str):
                continue
            question = lookup.get(saved_id)
            stats = saved.get("stats")
            if question is None or not isinstance(stats, Mapping):
                continue
            try:
                question.stats = QuestionStats.from_dict(stats)
            except ValueError:
                self._logger.warning(
                    "Ignoring unreadable stats on restore",
                    extra={"question_id": question.id},
                )

        state = SessionState(questions=list(questions))
        dropped = 0
        for pool_name, field_name in (
            ("active", "activeQuestionIds"),
            ("mastered", "masteredQuestionIds"),
            ("challenged", "challengedQuestionIds"),
        ):
            ids = _as_list(record.get(field_name))
            pool = [
                lookup[qid]
                for qid in ids
                if isinstance(qid, str) and qid in lookup
            ]
            dropped += len(ids) - len(pool)
            setattr(state, pool_name, pool)
        if dropped:
            self._logger.debug(
                "Dropped stale question ids on restore",
                extra={"dropped": dropped},
            )

        current_id = record.get("currentQuestionId")
        if isinstance(current_id, str):
            state.current_question = lookup.get(current_id)

        state.is_in_challenge_mode = record.get("isInChallengeMode") is True
        for item in _as_list(record.get("challengeModeProgress")):
            if not isinstance(item, Mapping):
                continue
            key = item.get("key")
            value = item.get("value")
            if not isinstance(key, str) or key not in lookup:
                continue
            if not isinstance(value, Mapping):
                continue
            try:
                progress = ChallengeProgress.from_dict(value)
            except ValueError:
                continue
            state.challenge_progress[key] = progress
        return state

    def clear(self) -> None:
        self._store.delete(self.key)


def encode_state(state: SessionState) -> MutableMapping[str, Any]:
    current = state.current_question
    return {
        "activeQuestionIds": [question.id for question in state.active],
        "masteredQuestionIds": [question.id for question in state.mastered],
        "challengedQuestionIds": [
            question.id for question in state.challenged
        ],
        "currentQuestionId": current.id if current is not None else None,
        "isInChallengeMode": state.is_in_challenge_mode,
        "challengeModeProgress": [
            {"key": key, "value": progress.to_dict()}
            for key, progress in state.challenge_progress.items()
        ],
        "questions": [
            {"id": question.id, "stats": question.stats.to_dict()}
            for question in state.questions
        ],
    }


def _as_list(value: object) -> list[Any]:
    return value if isinstance(value, list) else []


def _atomic_write_text(path: Path, payload: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    handle = tempfile.NamedTemporaryFile(
        "w",
        delete=False,
        encoding="utf-8",
        dir=str(path.parent),
        suffix=".tmp",
    )
    try:
        with handle:
            handle.write(payload)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(handle.name, path)
    except BaseException:
        Path(handle.name).unlink(missing_ok=True)
        raise
    try:
        path.chmod(0o600)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
