"""Layered TOML configuration for mastery_quiz commands.

Callers describe their settings once as a schema of ``Option`` entries
grouped by TOML table. ``resolve_options`` then picks each value from the
first layer that sets it (explicit overrides, environment, TOML document,
schema default) and checks it against the option's kind. The same schema
renders the starter file written by ``init``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

import tomllib

__all__ = [
    "Option",
    "Schema",
    "TomlConfigError",
    "load_toml",
    "render_template",
    "resolve_options",
    "write_toml_template",
]

OptionKind = Literal["positive_int", "int", "str", "path", "bool"]

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


class TomlConfigError(RuntimeError):
    """Raised when TOML config IO or validation fails."""


@dataclass(frozen=True)
class Option:
    """One setting: its kind, default, env suffix and template text.

    ``example`` is shown commented out in the template when there is no
    default to write.
    """

    kind: OptionKind
    default: Any = None
    env: Optional[str] = None
    help: str = ""
    example: Any = None


Schema = Mapping[str, Mapping[str, Option]]


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document, surfacing failures as ``TomlConfigError``."""

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise TomlConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise TomlConfigError(f"Failed to parse config TOML: {exc}") from exc


def resolve_options(
    schema: Schema,
    *,
    document: Optional[Mapping[str, Any]] = None,
    env: Optional[Mapping[str, str]] = None,
    env_prefix: str = "",
    overrides: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Return validated values keyed by dotted name (``"quiz.seed"``).

    Precedence is overrides > env > document > default; ``None`` in a
    layer means "not set". Unknown tables or keys in ``document`` are
    rejected so typos do not pass silently.
    """

    document = document or {}
    env = env or {}
    overrides = overrides or {}
    _check_known_keys(schema, document)

    values: dict[str, Any] = {}
    for table, options in schema.items():
        section = document.get(table, {})
        for key, option in options.items():
            dotted = f"{table}.{key}"
            value = overrides.get(dotted)
            if value is None and option.env:
                value = _read_env(option, env, f"{env_prefix}{option.env}")
            if value is None:
                value = section.get(key)
            if value is None:
                value = option.default
            values[dotted] = _coerce(option, value, dotted)
    return values


def render_template(schema: Schema, *, title: str) -> str:
    """Render a commented TOML starter file from ``schema`` defaults."""

    lines = [f"# {title}"]
    for table, options in schema.items():
        lines.extend(["", f"[{table}]"])
        for key, option in options.items():
            if option.help:
                lines.append(f"# {option.help}")
            if option.default is not None:
                lines.append(f"{key} = {_toml_literal(option.default)}")
            elif option.example is not None:
                lines.append(f"# {key} = {_toml_literal(option.example)}")
    return "\n".join(lines) + "\n"


def write_toml_template(
    path: Path,
    *,
    template: str,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write ``template`` to ``path``; refuse to clobber unless asked."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise TomlConfigError(f"Config already exists: {path}")
    path.write_text(template, encoding="utf-8")
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path


def _check_known_keys(schema: Schema, document: Mapping[str, Any]) -> None:
    for table, section in document.items():
        if table not in schema:
            raise TomlConfigError(f"Unknown configuration key '{table}'.")
        if not isinstance(section, Mapping):
            raise TomlConfigError(
                f"Expected table for '{table}', "
                f"found {type(section).__name__}."
            )
        for key in section:
            if key not in schema[table]:
                raise TomlConfigError(
                    f"Unknown configuration key '{table}.{key}'."
                )


def _read_env(option: Option, env: Mapping[str, str], name: str) -> Any:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return None
    raw = raw.strip()
    if option.kind in ("int", "positive_int"):
        try:
            return int(raw)
        except ValueError as exc:
            raise TomlConfigError(
                f"{name} must be an integer, got '{raw}'."
            ) from exc
    if option.kind == "bool":
        word = raw.lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
        raise TomlConfigError(f"{name} must be a boolean, got '{raw}'.")
    if option.kind == "path":
        return Path(raw).expanduser()
    return raw


def _coerce(option: Option, value: Any, dotted: str) -> Any:
    kind = option.kind
    if kind == "path":
        if value is None or isinstance(value, Path):
            return value
        if isinstance(value, str):
            return Path(value.strip()).expanduser() if value.strip() else None
        raise TomlConfigError(f"'{dotted}' must be a string when provided.")
    if kind == "int":
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise TomlConfigError(f"'{dotted}' must be an integer.")
        return value
    if kind == "positive_int":
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise TomlConfigError(f"'{dotted}' must be a positive integer.")
        return value
    if kind == "bool":
        if not isinstance(value, bool):
            raise TomlConfigError(f"'{dotted}' must be true or false.")
        return value
    if not isinstance(value, str) or not value.strip():
        raise TomlConfigError(f"'{dotted}' must be a non-empty string.")
    return value.strip()


def _toml_literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    # JSON string escapes are valid TOML basic-string escapes.
    return json.dumps(str(value))
