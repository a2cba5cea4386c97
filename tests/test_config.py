"""Tests for loading the run configuration from the environment."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from txn_categoriser.config import CategoriserConfiguration, ConfigurationError

ENV_VARS = [
    "CATEGORISER_PROVIDER",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
    "GEMINI_API_KEY",
    "OPENAI_MODEL",
    "GEMINI_MODEL",
    "CATEGORISER_BATCH_SIZE",
    "CATEGORISER_MAX_REFERENCES",
    "CATEGORISER_REFERENCE_ORDER",
    "CATEGORISER_UPDATE_DESCRIPTIONS",
    "CATEGORISER_REPAIR_JSON",
]


@pytest.fixture
def clean_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # setenv first so teardown also removes values loaded from .env files
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    dotenv = tmp_path / ".env"
    dotenv.write_text("", encoding="utf-8")
    return dotenv


def test_defaults(clean_env: Path) -> None:
    config = CategoriserConfiguration.from_env(dotenv_path=clean_env)

    assert config.provider == "gemini"
    assert config.openai_model == "gpt-4o-mini"
    assert config.gemini_model == "gemini-2.5-flash"
    assert config.max_batch_size == 50
    assert config.max_reference_transactions == 2000
    assert config.reference_order == "source"
    assert config.update_descriptions is False
    assert config.repair_json is False


def test_reads_environment(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORISER_PROVIDER", " OpenAI ")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("GEMINI_API_KEY", "g-test")
    monkeypatch.setenv("CATEGORISER_BATCH_SIZE", "10")
    monkeypatch.setenv("CATEGORISER_MAX_REFERENCES", "250")
    monkeypatch.setenv("CATEGORISER_REFERENCE_ORDER", "recent")
    monkeypatch.setenv("CATEGORISER_UPDATE_DESCRIPTIONS", "yes")

    config = CategoriserConfiguration.from_env(dotenv_path=clean_env)

    assert config.provider == "openai"
    assert config.api_key_for() == "sk-test"
    assert config.api_key_for("gemini") == "g-test"
    assert config.model_for() == "gpt-4o-mini"
    assert config.max_batch_size == 10
    assert config.max_reference_transactions == 250
    assert config.reference_order == "recent"
    assert config.update_descriptions is True


def test_dotenv_file_is_loaded(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    clean_env.write_text("GOOGLE_API_KEY=from-dotenv\nGEMINI_MODEL=gemini-2.0-flash\n", encoding="utf-8")

    config = CategoriserConfiguration.from_env(dotenv_path=clean_env)

    assert config.gemini_api_key == "from-dotenv"
    assert config.model_for("gemini") == "gemini-2.0-flash"


def test_overrides_win_and_none_is_ignored(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORISER_BATCH_SIZE", "10")

    config = CategoriserConfiguration.from_env(
        dotenv_path=clean_env, max_batch_size=5, provider=None
    )

    assert config.max_batch_size == 5
    assert config.provider == "gemini"


def test_unparseable_number_raises(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORISER_BATCH_SIZE", "fifty")

    with pytest.raises(ConfigurationError, match="CATEGORISER_BATCH_SIZE"):
        CategoriserConfiguration.from_env(dotenv_path=clean_env)


@pytest.mark.parametrize("value, expected", [("Yes", True), (" on ", True), ("0", False), ("off", False)])
def test_boolean_flags_accept_common_spellings(
    clean_env: Path, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
) -> None:
    monkeypatch.setenv("CATEGORISER_REPAIR_JSON", value)

    config = CategoriserConfiguration.from_env(dotenv_path=clean_env)

    assert config.repair_json is expected


def test_unrecognised_boolean_raises(clean_env: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORISER_UPDATE_DESCRIPTIONS", "maybe")

    with pytest.raises(ConfigurationError, match="CATEGORISER_UPDATE_DESCRIPTIONS"):
        CategoriserConfiguration.from_env(dotenv_path=clean_env)


@pytest.mark.parametrize(
    "overrides",
    [
        {"provider": "claude"},
        {"reference_order": "random"},
        {"max_batch_size": 0},
        {"max_reference_transactions": -1},
    ],
)
def test_validate_rejects_bad_settings(overrides) -> None:
    config = CategoriserConfiguration(**overrides)
    with pytest.raises(ConfigurationError):
        config.validate()


def test_with_overrides_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError):
        CategoriserConfiguration().with_overrides(temperature=0.9)
