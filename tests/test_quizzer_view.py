from __future__ import annotations

from rich.console import Console

from mastery_quiz.quizzer.view import (
    SessionCommand,
    parse_answer_command,
    parse_menu_command,
    run_quiz_session,
)


def make_provider(commands: list[str]):
    iterator = iter(commands)

    def _provider() -> str:
        return next(iterator)

    return _provider


def _console() -> Console:
    return Console(record=True, width=100, force_terminal=True)


def test_parse_answer_command_variants():
    assert parse_answer_command("2", 4) == SessionCommand("answer", 1)
    assert parse_answer_command(" 4 ", 4) == SessionCommand("answer", 3)
    assert parse_answer_command("q", 4) == SessionCommand("quit")
    assert parse_answer_command("0", 4) is None
    assert parse_answer_command("5", 4) is None
    assert parse_answer_command("abc", 4) is None
    assert parse_answer_command(None, 4) is None


def test_parse_menu_command_variants():
    assert parse_menu_command("c") == SessionCommand("challenge")
    assert parse_menu_command("Reset") == SessionCommand("reset")
    assert parse_menu_command("x") == SessionCommand("exit")
    assert parse_menu_command("quit") == SessionCommand("quit")
    assert parse_menu_command("?") is None
    assert parse_menu_command(None) is None


def test_quick_mastery_then_summary_and_quit(make_session):
    session = make_session(1)
    console = _console()
    # FirstPickRandom reverses choices, so the correct answer is listed last.
    provider = make_provider(["4", "4", "4", "c", "q"])

    action = run_quiz_session(session, console, provider)

    assert action == "finished"
    rendered = console.export_text()
    assert "Correct!" in rendered
    assert "Current streak: 3" in rendered
    assert "Session Summary" in rendered
    assert "Mastery rate" in rendered
    assert "practice challenging" not in rendered
    assert "Unrecognized command" in rendered
    assert session.state.mastered == session.state.questions


def test_challenge_flow_through_console(make_session):
    session = make_session(1)
    console = _console()
    misses = ["1"] * 4
    hits = ["4"] * 3
    provider = make_provider(
        misses + hits + ["c"] + hits + ["x", "q"]
    )

    action = run_quiz_session(session, console, provider)

    assert action == "finished"
    rendered = console.export_text()
    assert "Incorrect!" in rendered
    assert "practice challenging questions" in rendered
    assert "Challenge Progress: 0/1" in rendered
    assert "Challenge Mode Completed" in rendered
    assert session.is_in_challenge_mode is False
    assert session.state.challenged == session.state.questions


def test_invalid_choice_reprompts_same_question(make_session):
    session = make_session(1)
    console = _console()
    provider = make_provider(["9", "4", "q"])

    action = run_quiz_session(session, console, provider)

    assert action == "quit"
    assert "Enter a choice number between 1 and 4" in console.export_text()
    assert session.state.questions[0].stats.total_attempts == 1


def test_input_exhaustion_interrupts(make_session):
    session = make_session(1)
    console = _console()

    action = run_quiz_session(session, console, make_provider(["4"]))

    assert action == "quit"
    assert "Session interrupted" in console.export_text()


def test_reset_from_summary_restarts_play(make_session):
    session = make_session(1)
    console = _console()
    provider = make_provider(["4", "4", "4", "r", "q"])

    action = run_quiz_session(session, console, provider)

    assert action == "quit"
    assert "Session reset." in console.export_text()
    assert session.state.active == session.state.questions
    assert session.state.questions[0].stats.total_attempts == 0


def test_resumed_session_starts_with_a_fresh_draw(make_session, memory_store):
    first = make_session(2)
    drawn = first.get_next()
    first.submit(drawn.question.correct_answer)

    resumed = make_session(2)
    assert resumed.restored is True
    assert resumed.current_question.id == drawn.question.id
    restored_choices = resumed.current_choices
    console = _console()

    action = run_quiz_session(resumed, console, make_provider(["q"]))

    assert action == "quit"
    assert resumed.current_choices is not restored_choices
    assert resumed.current_question.stats.total_attempts == 1
    assert "Session paused." in console.export_text()
