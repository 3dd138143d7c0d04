from __future__ import annotations

import tomllib
from pathlib import Path

import pytest

from mastery_quiz.core import config as core_config
from mastery_quiz.core.config import Option

SCHEMA = {
    "quiz": {
        "bank": Option("path", default="bank.json", env="BANK"),
        "streak": Option("positive_int", default=3, help="Streak target."),
        "seed": Option("int", env="SEED", example=42),
    },
    "logging": {
        "level": Option("str", default="INFO", env="LEVEL"),
        "verbose": Option("bool", default=False, env="VERBOSE"),
    },
}


def test_load_toml_reads_tables(tmp_path):
    path = tmp_path / "quiz.toml"
    path.write_text("[quiz]\nstreak = 4\n", encoding="utf-8")
    assert core_config.load_toml(path) == {"quiz": {"streak": 4}}


def test_load_toml_errors(tmp_path):
    with pytest.raises(core_config.TomlConfigError, match="not found"):
        core_config.load_toml(tmp_path / "missing.toml")
    bad = tmp_path / "bad.toml"
    bad.write_text("[quiz\n", encoding="utf-8")
    with pytest.raises(core_config.TomlConfigError, match="parse"):
        core_config.load_toml(bad)


def test_resolve_options_uses_defaults():
    values = core_config.resolve_options(SCHEMA)

    assert values == {
        "quiz.bank": Path("bank.json"),
        "quiz.streak": 3,
        "quiz.seed": None,
        "logging.level": "INFO",
        "logging.verbose": False,
    }


def test_resolve_options_layers_override_env_document():
    document = {"quiz": {"seed": 1, "streak": 5}, "logging": {"level": "x"}}
    env = {"APP_SEED": "2", "APP_LEVEL": " debug ", "APP_VERBOSE": "yes"}

    values = core_config.resolve_options(
        SCHEMA,
        document=document,
        env=env,
        env_prefix="APP_",
        overrides={"quiz.seed": 3, "logging.verbose": None},
    )

    assert values["quiz.seed"] == 3
    assert values["quiz.streak"] == 5
    assert values["logging.level"] == "debug"
    assert values["logging.verbose"] is True


def test_resolve_options_ignores_blank_environment_values():
    values = core_config.resolve_options(
        SCHEMA,
        document={"quiz": {"seed": 7}},
        env={"APP_SEED": "  "},
        env_prefix="APP_",
    )
    assert values["quiz.seed"] == 7


@pytest.mark.parametrize(
    "document, message",
    [
        ({"quiz": {"extra": 1}}, "quiz.extra"),
        ({"other": {}}, "'other'"),
        ({"quiz": 3}, "Expected table for 'quiz'"),
        ({"quiz": {"streak": 0}}, "'quiz.streak' must be a positive"),
        ({"quiz": {"streak": True}}, "'quiz.streak' must be a positive"),
        ({"quiz": {"seed": "x"}}, "'quiz.seed' must be an integer"),
        ({"quiz": {"bank": 3}}, "'quiz.bank' must be a string"),
        ({"logging": {"level": " "}}, "'logging.level' must be a non-empty"),
        ({"logging": {"verbose": "on"}}, "'logging.verbose' must be true"),
    ],
)
def test_resolve_options_rejects_bad_documents(document, message):
    with pytest.raises(core_config.TomlConfigError, match=message):
        core_config.resolve_options(SCHEMA, document=document)


@pytest.mark.parametrize(
    "env, message",
    [
        ({"APP_SEED": "abc"}, "APP_SEED must be an integer"),
        ({"APP_VERBOSE": "maybe"}, "APP_VERBOSE must be a boolean"),
    ],
)
def test_resolve_options_rejects_bad_environment(env, message):
    with pytest.raises(core_config.TomlConfigError, match=message):
        core_config.resolve_options(SCHEMA, env=env, env_prefix="APP_")


def test_blank_path_resolves_to_none():
    values = core_config.resolve_options(
        SCHEMA, document={"quiz": {"bank": "  "}}
    )
    assert values["quiz.bank"] is None


def test_render_template_round_trips_defaults():
    text = core_config.render_template(SCHEMA, title="demo settings")

    assert text.startswith("# demo settings\n")
    assert "# Streak target.\nstreak = 3\n" in text
    assert "# seed = 42\n" in text
    parsed = tomllib.loads(text)
    assert parsed == {
        "quiz": {"bank": "bank.json", "streak": 3},
        "logging": {"level": "INFO", "verbose": False},
    }
    assert core_config.resolve_options(SCHEMA, document=parsed) == (
        core_config.resolve_options(SCHEMA)
    )


def test_write_toml_template_respects_overwrite(tmp_path):
    target = tmp_path / "nested" / "quiz.toml"
    core_config.write_toml_template(target, template="a = 1\n")
    assert target.read_text(encoding="utf-8") == "a = 1\n"
    assert oct(target.stat().st_mode & 0o777) == oct(0o600)

    with pytest.raises(core_config.TomlConfigError, match="already exists"):
        core_config.write_toml_template(target, template="a = 2\n")

    core_config.write_toml_template(
        target, template="a = 2\n", overwrite=True
    )
    assert target.read_text(encoding="utf-8") == "a = 2\n"
