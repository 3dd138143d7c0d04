"""Configuration loader for quiz sessions."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

from mastery_quiz.core import config as core_config
from mastery_quiz.core import workspace as workspace_mod

from .manager import DEFAULT_CHALLENGE_THRESHOLD, DEFAULT_TARGET_STREAK
from .persistence import DEFAULT_SESSION_KEY

CONFIG_FILENAME = "mastery_quiz.toml"
CONFIG_ENV = "MASTERY_QUIZ_CONFIG"
ENV_PREFIX = "MASTERY_QUIZ_"

_DEFAULT_BANK = "questions.json"
_DEFAULT_LOG_LEVEL = "INFO"

SCHEMA: core_config.Schema = {
    "quiz": {
        "bank": core_config.Option(
            "path",
            default=_DEFAULT_BANK,
            env="BANK",
            help=(
                "Question bank JSON; relative paths resolve against the "
                "workspace root."
            ),
        ),
        "target_streak": core_config.Option(
            "positive_int",
            default=DEFAULT_TARGET_STREAK,
            help="Consecutive correct answers needed to master a question.",
        ),
        "challenge_threshold": core_config.Option(
            "positive_int",
            default=DEFAULT_CHALLENGE_THRESHOLD,
            help=(
                "Attempts before mastery at or above which a question "
                "becomes a challenger."
            ),
        ),
        "seed": core_config.Option(
            "int",
            env="SEED",
            help="Fix draws and shuffles for a repeatable run.",
            example=1234,
        ),
    },
    "storage": {
        "state_dir": core_config.Option(
            "path",
            env="STATE_DIR",
            help="Saved session directory (defaults to workspace sessions/).",
            example="sessions",
        ),
        "session_key": core_config.Option(
            "str", default=DEFAULT_SESSION_KEY
        ),
    },
    "logging": {
        "level": core_config.Option(
            "str", default=_DEFAULT_LOG_LEVEL, env="LOG_LEVEL"
        ),
        "verbose": core_config.Option("bool", default=False),
    },
}

CONFIG_TEMPLATE = core_config.render_template(
    SCHEMA, title="mastery-quiz configuration"
)


class QuizConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class QuizConfig:
    """Fully resolved configuration for a quiz session."""

    bank_path: Path
    target_streak: int
    challenge_threshold: int
    seed: Optional[int]
    state_dir: Path
    session_key: str
    log_level: str
    verbose: bool


@dataclass(frozen=True)
class ConfigOverrides:
    """CLI-sourced overrides applied on top of file/env options."""

    bank_path: Optional[Path] = None
    seed: Optional[int] = None
    state_dir: Optional[Path] = None
    log_level: Optional[str] = None
    verbose: Optional[bool] = None


@dataclass(frozen=True)
class LoadResult:
    config: QuizConfig
    layout: workspace_mod.WorkspaceLayout
    config_path: Optional[Path]


def load_config(
    *,
    config_path: Optional[Path] = None,
    overrides: Optional[ConfigOverrides] = None,
    env: Optional[Mapping[str, str]] = None,
    workspace_path: Optional[Path] = None,
) -> LoadResult:
    """Load configuration applying precedence CLI > env > TOML > defaults."""

    overrides = overrides or ConfigOverrides()
    env_map = os.environ if env is None else env

    layout = workspace_mod.ensure_workspace(env=env_map, path=workspace_path)
    requested_path = _resolve_config_path(
        config_path=config_path,
        env_map=env_map,
        default_path=layout.path_for("config") / CONFIG_FILENAME,
    )

    document: Mapping[str, Any] = {}
    loaded_path: Optional[Path] = None
    if requested_path.exists():
        loaded_path = requested_path
    elif config_path is not None or env_map.get(CONFIG_ENV, "").strip():
        raise QuizConfigError(f"Config file not found: {requested_path}")

    try:
        if loaded_path is not None:
            document = core_config.load_toml(loaded_path)
        values = core_config.resolve_options(
            SCHEMA,
            document=document,
            env=env_map,
            env_prefix=ENV_PREFIX,
            overrides={
                "quiz.bank": overrides.bank_path,
                "quiz.seed": overrides.seed,
                "storage.state_dir": overrides.state_dir,
                "logging.level": overrides.log_level,
                "logging.verbose": overrides.verbose,
            },
        )
    except core_config.TomlConfigError as exc:
        raise QuizConfigError(str(exc)) from exc

    bank = values["quiz.bank"]
    if bank is None:
        raise QuizConfigError("'quiz.bank' must point at a question bank.")
    state_dir = values["storage.state_dir"]

    config = QuizConfig(
        bank_path=_resolve_path(bank, layout=layout),
        target_streak=values["quiz.target_streak"],
        challenge_threshold=values["quiz.challenge_threshold"],
        seed=values["quiz.seed"],
        state_dir=(
            layout.path_for("sessions")
            if state_dir is None
            else _resolve_path(state_dir, layout=layout)
        ),
        session_key=values["storage.session_key"],
        log_level=values["logging.level"].upper(),
        verbose=values["logging.verbose"],
    )
    return LoadResult(config=config, layout=layout, config_path=loaded_path)


def _resolve_config_path(
    *,
    config_path: Optional[Path],
    env_map: Mapping[str, str],
    default_path: Path,
) -> Path:
    if config_path is not None:
        return config_path.expanduser()
    env_candidate = env_map.get(CONFIG_ENV, "").strip()
    if env_candidate:
        return Path(env_candidate).expanduser()
    return default_path


def _resolve_path(
    candidate: Path, *, layout: workspace_mod.WorkspaceLayout
) -> Path:
    candidate = candidate.expanduser()
    if not candidate.is_absolute():
        return (layout.home / candidate).resolve()
    return candidate.resolve()

