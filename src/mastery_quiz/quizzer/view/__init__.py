from .console import (
    SessionCommand,
    parse_answer_command,
    parse_menu_command,
    run_quiz_session,
)

__all__ = [
    "SessionCommand",
    "parse_answer_command",
    "parse_menu_command",
    "run_quiz_session",
]
