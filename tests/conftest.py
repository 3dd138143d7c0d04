from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import pytest

TESTS_DIR = Path(__file__).resolve().parent
ROOT = TESTS_DIR.parent
for extra in (TESTS_DIR, ROOT / "src"):
    path_str = str(extra)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)

from fixtures import (  # noqa: E402
    FirstPickRandom,
    WorkspaceBuilder,
    make_bank,
)

from mastery_quiz.quizzer import (  # noqa: E402
    MemoryStore,
    PersistenceCodec,
    QuestionStore,
    QuizSession,
)


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    """Provide a helper bound to pytest's per-test tmp directory."""

    return WorkspaceBuilder(tmp_path)


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def make_session(
    memory_store: MemoryStore,
) -> Callable[..., QuizSession]:
    """Build a loaded ``QuizSession`` over an in-memory bank and store."""

    def _factory(
        count: int = 1,
        *,
        store: MemoryStore | None = None,
        rng=None,
        load: bool = True,
        **kwargs,
    ) -> QuizSession:
        bank = make_bank(count)
        session = QuizSession(
            QuestionStore(lambda: bank),
            PersistenceCodec(store if store is not None else memory_store),
            rng=rng if rng is not None else FirstPickRandom(),
            **kwargs,
        )
        if load:
            session.load()
        return session

    return _factory


@pytest.fixture(autouse=True)
def _reset_cli_logger():
    yield
    import logging

    logger = logging.getLogger("mastery_quiz.quizzer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
