from __future__ import annotations

import json
from pathlib import Path

import pytest

from fixtures import write_bank
from mastery_quiz.quizzer import _main as cli
from mastery_quiz.quizzer.config import CONFIG_FILENAME


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    for name in (
        "MASTERY_QUIZ_CONFIG",
        "MASTERY_QUIZ_BANK",
        "MASTERY_QUIZ_SEED",
        "MASTERY_QUIZ_STATE_DIR",
        "MASTERY_QUIZ_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


def _feed(monkeypatch, answers: list[str]) -> None:
    iterator = iter(answers)
    monkeypatch.setattr("builtins.input", lambda *args: next(iterator))


def _record(workspace_root: Path) -> dict:
    path = workspace_root / "sessions" / "quizState.json"
    return json.loads(path.read_text(encoding="utf-8"))


def test_init_writes_template_and_refuses_overwrite(tmp_path, capsys):
    root = tmp_path / "ws"

    assert cli.main(["init", "--workspace", str(root)]) == 0
    target = root / "config" / CONFIG_FILENAME
    assert "[quiz]" in target.read_text(encoding="utf-8")

    assert cli.main(["init", "--workspace", str(root)]) == 1
    assert "--force" in capsys.readouterr().out
    assert cli.main(["init", "--workspace", str(root), "--force"]) == 0


def test_play_then_stats_reads_saved_session(tmp_path, monkeypatch, capsys):
    root = tmp_path / "ws"
    bank = write_bank(tmp_path / "bank.json", 1, choices=1)
    _feed(monkeypatch, ["1", "1", "1", "q"])

    code = cli.main(
        ["play", "--workspace", str(root), "--bank", str(bank), "--seed", "3"]
    )

    assert code == 0
    record = _record(root)
    assert record["masteredQuestionIds"] == ["question-0"]
    assert record["challengedQuestionIds"] == []
    assert (root / "logs" / "quizzer.log").is_file()
    capsys.readouterr()

    code = cli.main(
        ["stats", "--workspace", str(root), "--bank", str(bank)]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Mastery rate" in out
    assert "100%" in out


def test_play_resumes_saved_session(tmp_path, monkeypatch, capsys):
    root = tmp_path / "ws"
    bank = write_bank(tmp_path / "bank.json", 1, choices=1)
    args = ["play", "--workspace", str(root), "--bank", str(bank)]

    _feed(monkeypatch, ["1", "q"])
    assert cli.main(args) == 0
    capsys.readouterr()

    _feed(monkeypatch, ["1", "q"])
    assert cli.main(args) == 0

    assert "Resuming saved session" in capsys.readouterr().out
    stats = _record(root)["questions"][0]["stats"]
    assert stats["currentStreak"] == 2


def test_reset_and_clear(tmp_path, monkeypatch):
    root = tmp_path / "ws"
    bank = write_bank(tmp_path / "bank.json", 1, choices=1)
    base = ["--workspace", str(root), "--bank", str(bank)]
    _feed(monkeypatch, ["1", "1", "1", "q"])
    assert cli.main(["play", *base]) == 0
    assert _record(root)["masteredQuestionIds"] != []

    assert cli.main(["reset", *base]) == 0
    record = _record(root)
    assert record["masteredQuestionIds"] == []
    assert record["activeQuestionIds"] == ["question-0"]

    assert cli.main(["clear", *base]) == 0
    assert not (root / "sessions" / "quizState.json").exists()


def test_missing_bank_reports_load_error(tmp_path, capsys):
    root = tmp_path / "ws"
    code = cli.main(
        ["play", "--workspace", str(root), "--bank", str(tmp_path / "no.json")]
    )
    assert code == 1
    assert "Failed to load questions" in capsys.readouterr().out


def test_invalid_config_is_usage_error(tmp_path, capsys):
    root = tmp_path / "ws"
    config = tmp_path / "quiz.toml"
    config.write_text("[quiz]\ntarget_streak = 0\n", encoding="utf-8")

    code = cli.main(
        ["stats", "--workspace", str(root), "--config", str(config)]
    )

    assert code == 2
    assert "target_streak" in capsys.readouterr().out
