"""Command line entry point for ``mastery-quiz``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table

from mastery_quiz.core import config as core_config
from mastery_quiz.core.logging import configure_logger
from mastery_quiz.core.workspace import WorkspaceError, ensure_workspace

from .config import (
    CONFIG_FILENAME,
    CONFIG_TEMPLATE,
    ConfigOverrides,
    LoadResult,
    QuizConfigError,
    load_config,
)
from .persistence import JsonFileStore, PersistenceCodec
from .questions import LoadError
from .session import QuizSession
from .view import run_quiz_session

LOGGER_NAME = "mastery_quiz.quizzer"


def build_arg_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        help=(
            "Path to a TOML config file (defaults to the workspace config "
            "directory)."
        ),
    )
    common.add_argument(
        "--workspace",
        type=Path,
        help="Override the workspace root (MASTERY_QUIZ_DATA_HOME).",
    )

    session_opts = argparse.ArgumentParser(add_help=False)
    session_opts.add_argument("--bank", type=Path, help="Question bank JSON.")
    session_opts.add_argument(
        "--state-dir",
        type=Path,
        help="Directory holding the saved session record.",
    )
    session_opts.add_argument(
        "--seed",
        type=int,
        help="Seed draws and shuffles for a repeatable run.",
    )
    session_opts.add_argument("--log-level", help="Log file level.")
    session_opts.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Echo log records to stderr.",
    )

    parser = argparse.ArgumentParser(
        prog="mastery-quiz",
        description=(
            "Practice a question bank until every question is mastered, then "
            "replay the ones that took the most attempts."
        ),
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser(
        "init",
        parents=[common],
        help=f"Write a {CONFIG_FILENAME} template",
    )
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing config."
    )
    sub.add_parser(
        "play",
        parents=[common, session_opts],
        help="Start or resume the quiz session",
    )
    sub.add_parser(
        "stats",
        parents=[common, session_opts],
        help="Show progress of the saved session",
    )
    sub.add_parser(
        "reset",
        parents=[common, session_opts],
        help="Return every question to the active pool",
    )
    sub.add_parser(
        "clear",
        parents=[common, session_opts],
        help="Erase the saved session record",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    console = Console()

    if args.command == "init":
        return _cmd_init(args, console)

    try:
        result = load_config(
            config_path=args.config,
            overrides=ConfigOverrides(
                bank_path=args.bank,
                seed=args.seed,
                state_dir=args.state_dir,
                log_level=args.log_level,
                verbose=args.verbose,
            ),
            workspace_path=args.workspace,
        )
    except (QuizConfigError, WorkspaceError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        return 2

    if args.command == "clear":
        return _cmd_clear(result, console)

    logger, _ = configure_logger(
        LOGGER_NAME,
        log_dir=result.layout.path_for("logs"),
        level=result.config.log_level,
        verbose=result.config.verbose,
    )
    session = QuizSession.from_config(result.config, logger=logger)
    try:
        session.load()
    except LoadError as exc:
        logger.error("Question bank failed to load", extra={"error": str(exc)})
        console.print(f"[red]Failed to load questions:[/] {exc}")
        console.print("Fix the bank file and run the command again.")
        return 1

    if args.command == "play":
        return _cmd_play(session, console)
    if args.command == "stats":
        return _cmd_stats(session, console)
    if args.command == "reset":
        session.reset_session()
        console.print("Session reset; every question is active again.")
        return 0
    parser.print_help()  # pragma: no cover - argparse enforces commands
    return 2


def _cmd_init(args: argparse.Namespace, console: Console) -> int:
    if args.config is not None:
        target = args.config.expanduser()
    else:
        try:
            layout = ensure_workspace(path=args.workspace)
        except WorkspaceError as exc:
            console.print(f"[red]Error:[/] {exc}")
            return 2
        target = layout.path_for("config") / CONFIG_FILENAME
    try:
        core_config.write_toml_template(
            target, template=CONFIG_TEMPLATE, overwrite=args.force
        )
    except core_config.TomlConfigError as exc:
        console.print(f"{exc}. Use --force to overwrite.")
        return 1
    console.print(f"Created template {target}")
    return 0


def _cmd_play(session: QuizSession, console: Console) -> int:
    if session.restored:
        console.print(
            "[dim]Resuming saved session. Run `mastery-quiz clear` to "
            "start over.[/]"
        )
    run_quiz_session(session, console, lambda: console.input("> "))
    return 0


def _cmd_stats(session: QuizSession, console: Console) -> int:
    stats = session.stats()
    table = Table(show_header=False, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")
    table.add_row("Total questions", str(stats.total_questions))
    table.add_row("Mastered", str(stats.mastered_questions))
    table.add_row("Remaining", str(stats.remaining_questions))
    table.add_row("Challenging", str(stats.challenged_questions))
    table.add_row("Mastery rate", f"{stats.mastery_percent}%")
    if stats.challenge is not None:
        table.add_row("Challenge completed", str(stats.challenge.completed))
        table.add_row("Challenge remaining", str(stats.challenge.remaining))
    console.print(table)
    return 0


def _cmd_clear(result: LoadResult, console: Console) -> int:
    codec = PersistenceCodec(
        JsonFileStore(result.config.state_dir),
        key=result.config.session_key,
    )
    codec.clear()
    console.print("Saved session cleared.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
