"""Adaptive mastery quiz engine with challenge-mode replay."""

__version__ = "0.1.0"
