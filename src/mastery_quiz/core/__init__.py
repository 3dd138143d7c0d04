"""Core shared helpers for mastery_quiz."""

from __future__ import annotations

from .config import (
    Option,
    Schema,
    TomlConfigError,
    load_toml,
    render_template,
    resolve_options,
    write_toml_template,
)
from .logging import JsonLogFormatter, configure_logger
from .workspace import (
    WORKSPACE_ENV,
    WorkspaceError,
    WorkspaceLayout,
    ensure_workspace,
)

__all__ = [
    "TomlConfigError",
    "Option",
    "Schema",
    "load_toml",
    "render_template",
    "resolve_options",
    "write_toml_template",
    "configure_logger",
    "JsonLogFormatter",
    "ensure_workspace",
    "WorkspaceLayout",
    "WorkspaceError",
    "WORKSPACE_ENV",
]
