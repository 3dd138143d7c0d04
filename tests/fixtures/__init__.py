"""Shared testing fixtures for the mastery_quiz test suite."""

from .bank import FirstPickRandom, make_bank, write_bank  # noqa: F401
from .workspace import WorkspaceBuilder, build_tree  # noqa: F401

__all__ = [
    "FirstPickRandom",
    "WorkspaceBuilder",
    "build_tree",
    "make_bank",
    "write_bank",
]
