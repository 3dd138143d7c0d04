"""Rich-powered console driver for a ``QuizSession``.

The loop only talks to the session's public API: it draws, renders the
shuffled choices, submits the learner's pick and renders the outcome. Menus
appear when the active pool runs dry (summary, optional challenge practice)
and when a challenge run is complete. A resumed session starts with a
fresh draw; the restored current question may already have been answered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..manager import AnswerOutcome, DrawnQuestion
from ..session import QuizSession, SessionStats

InputProvider = Callable[[], str]
ExitAction = Literal["quit", "finished"]


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: Literal["answer", "quit", "challenge", "exit", "reset"]
    index: int | None = None


def parse_answer_command(
    raw: str | None, choice_count: int
) -> SessionCommand | None:
    """Parse a 1-based choice number or a quit command."""

    if raw is None:
        return None
    text = raw.strip().lower()
    if text in {"q", "quit", "exit"}:
        return SessionCommand("quit")
    if text.isdigit():
        number = int(text)
        if 1 <= number <= choice_count:
            return SessionCommand("answer", number - 1)
    return None


def parse_menu_command(raw: str | None) -> SessionCommand | None:
    if raw is None:
        return None
    text = raw.strip().lower()
    if text in {"q", "quit"}:
        return SessionCommand("quit")
    if text in {"c", "challenge"}:
        return SessionCommand("challenge")
    if text in {"x", "exit"}:
        return SessionCommand("exit")
    if text in {"r", "reset"}:
        return SessionCommand("reset")
    return None


def run_quiz_session(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
) -> ExitAction:
    """Drive ``session`` until the learner quits or input runs out."""

    while True:
        try:
            if session.is_challenge_completed():
                command = _challenge_complete_menu(console, input_provider)
                if command.type == "exit":
                    session.exit_challenge_mode()
                    continue
            else:
                drawn = session.get_next()
                if drawn is not None:
                    if not _ask(session, drawn, console, input_provider):
                        console.print("\n[bold yellow]Session paused.[/]")
                        return "quit"
                    continue
                command = _summary_menu(session, console, input_provider)
                if command.type == "challenge":
                    session.start_challenge_mode()
                    continue
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return "quit"

        if command.type == "reset":
            session.reset_session()
            console.print("[bold]Session reset.[/]")
            continue
        return "finished"


def _ask(
    session: QuizSession,
    drawn: DrawnQuestion,
    console: Console,
    input_provider: InputProvider,
) -> bool:
    _render_question(console, session, drawn)
    while True:
        command = parse_answer_command(input_provider(), len(drawn.choices))
        if command is None:
            console.print(
                "[red]Enter a choice number between 1 and %d, or q.[/red]"
                % len(drawn.choices)
            )
            continue
        if command.type == "quit" or command.index is None:
            return False
        selected = drawn.choices[command.index]
        outcome = session.submit(selected)
        _render_feedback(console, drawn, selected, outcome)
        return True


def _summary_menu(
    session: QuizSession,
    console: Console,
    input_provider: InputProvider,
) -> SessionCommand:
    stats = session.stats()
    _render_summary(console, stats)
    allowed = {"reset", "quit"}
    hint = "r (reset), q (quit)"
    if stats.challenged_questions > 0:
        allowed.add("challenge")
        hint = "c (practice challenging questions), " + hint
    return _prompt_menu(console, input_provider, allowed, hint)


def _challenge_complete_menu(
    console: Console, input_provider: InputProvider
) -> SessionCommand:
    console.print(
        Panel(
            "You have re-mastered every challenging question.",
            title="Challenge Mode Completed",
            border_style="green",
        )
    )
    return _prompt_menu(
        console,
        input_provider,
        {"exit", "reset", "quit"},
        "x (exit challenge mode), r (start new session), q (quit)",
    )


def _prompt_menu(
    console: Console,
    input_provider: InputProvider,
    allowed: set[str],
    hint: str,
) -> SessionCommand:
    while True:
        console.print(Text(f"Commands: {hint}", style="dim"))
        command = parse_menu_command(input_provider())
        if command is not None and command.type in allowed:
            return command
        console.print("[red]Unrecognized command. Try again.[/]")


def _render_question(
    console: Console, session: QuizSession, drawn: DrawnQuestion
) -> None:
    console.print()
    console.rule(_progress_text(session.stats()))
    console.print(Text(drawn.question.text, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Choice")
    for number, choice in enumerate(drawn.choices, start=1):
        table.add_row(str(number), choice)
    console.print(table)


def _progress_text(stats: SessionStats) -> Text:
    if stats.challenge is not None:
        challenge = stats.challenge
        return Text.assemble(
            ("Challenge Progress: ", "bold magenta"),
            f"{challenge.completed}/{challenge.total}",
            (f"  Remaining: {challenge.remaining}", "dim"),
        )
    return Text.assemble(
        ("Question Progress: ", "bold cyan"),
        f"{stats.mastered_questions}/{stats.total_questions}",
        (f"  Mastered: {stats.mastery_percent}%", "dim"),
    )


def _render_feedback(
    console: Console,
    drawn: DrawnQuestion,
    selected: str,
    outcome: AnswerOutcome,
) -> None:
    if outcome.is_correct:
        console.print("[bold green]Correct![/]")
    else:
        console.print(
            Text.assemble(
                ("Incorrect! ", "bold red"),
                f"You chose '{selected}'. The answer is ",
                (drawn.question.correct_answer, "bold"),
                ".",
            )
        )
    console.print(Text(f"Current streak: {outcome.streak}", style="dim"))


def _render_summary(console: Console, stats: SessionStats) -> None:
    console.print()
    console.rule(Text("Session Summary", style="bold magenta"))
    overview = Table(
        show_header=False,
        box=box.MINIMAL_DOUBLE_HEAD,
        expand=False,
    )
    overview.add_column("Metric", style="bold")
    overview.add_column("Value", justify="right")
    overview.add_row("Total questions", str(stats.total_questions))
    overview.add_row("Questions mastered", str(stats.mastered_questions))
    overview.add_row("Mastery rate", f"{stats.mastery_percent}%")
    overview.add_row("Challenging questions", str(stats.challenged_questions))
    console.print(overview)
