"""Run configuration for the transaction categoriser.

A :class:`CategoriserConfiguration` is built once (usually from the
environment) and passed explicitly into every run. Nothing in the pipeline
reads provider credentials or limits from module-level state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .models.enums import ProviderName, ReferenceOrder

DEFAULT_MAX_BATCH_SIZE = 50
DEFAULT_MAX_REFERENCE_TRANSACTIONS = 2000
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"", "0", "false", "no", "off"}


class ConfigurationError(Exception):
    """Raised when a run cannot start because its inputs are misconfigured.

    Covers missing tables or columns in the record source, invalid limits and
    missing provider credentials. Always fatal for the run; never retried.
    """


@dataclass
class CategoriserConfiguration:
    """Settings for a single categorisation run."""

    # Provider selection
    provider: str = ProviderName.GEMINI.value
    openai_api_key: str = ""
    gemini_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    gemini_model: str = DEFAULT_GEMINI_MODEL

    # Batch limits
    max_batch_size: int = DEFAULT_MAX_BATCH_SIZE
    max_reference_transactions: int = DEFAULT_MAX_REFERENCE_TRANSACTIONS
    reference_order: str = ReferenceOrder.SOURCE.value

    # Content settings
    update_descriptions: bool = False

    # Response parsing
    repair_json: bool = False

    def validate(self) -> "CategoriserConfiguration":
        """Raise :class:`ConfigurationError` when a setting is out of range."""
        if self.provider not in ProviderName.all_values():
            raise ConfigurationError(
                f"Unknown LLM provider '{self.provider}'. "
                f"Expected one of: {', '.join(ProviderName.all_values())}"
            )
        if self.reference_order not in ReferenceOrder.all_values():
            raise ConfigurationError(
                f"Unknown reference order '{self.reference_order}'. "
                f"Expected one of: {', '.join(ReferenceOrder.all_values())}"
            )
        if self.max_batch_size < 1:
            raise ConfigurationError("max_batch_size must be at least 1")
        if self.max_reference_transactions < 1:
            raise ConfigurationError("max_reference_transactions must be at least 1")
        return self

    def api_key_for(self, provider: str | None = None) -> str:
        name = provider or self.provider
        if name == ProviderName.OPENAI.value:
            return self.openai_api_key
        return self.gemini_api_key

    def model_for(self, provider: str | None = None) -> str:
        name = provider or self.provider
        if name == ProviderName.OPENAI.value:
            return self.openai_model
        return self.gemini_model

    def with_overrides(self, **overrides: Any) -> "CategoriserConfiguration":
        """Return a copy with every non-``None`` override applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise TypeError(f"Unknown configuration fields: {sorted(unknown)}")
        applied = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **applied)

    @classmethod
    def from_env(
        cls,
        dotenv_path: str | Path | None = None,
        **overrides: Any,
    ) -> "CategoriserConfiguration":
        """Build a configuration from environment variables and a ``.env`` file.

        Explicit keyword overrides take precedence over the environment. Values
        already present in the process environment are not replaced by the
        ``.env`` file.
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path=Path(dotenv_path))
        else:
            load_dotenv()

        env = os.environ
        config = cls(
            provider=(env.get("CATEGORISER_PROVIDER") or ProviderName.GEMINI.value)
            .strip()
            .lower(),
            openai_api_key=env.get("OPENAI_API_KEY", "").strip(),
            gemini_api_key=(
                env.get("GOOGLE_API_KEY") or env.get("GEMINI_API_KEY") or ""
            ).strip(),
            openai_model=env.get("OPENAI_MODEL", "").strip() or DEFAULT_OPENAI_MODEL,
            gemini_model=env.get("GEMINI_MODEL", "").strip() or DEFAULT_GEMINI_MODEL,
            max_batch_size=_read_int_env(
                "CATEGORISER_BATCH_SIZE", DEFAULT_MAX_BATCH_SIZE
            ),
            max_reference_transactions=_read_int_env(
                "CATEGORISER_MAX_REFERENCES", DEFAULT_MAX_REFERENCE_TRANSACTIONS
            ),
            reference_order=(
                env.get("CATEGORISER_REFERENCE_ORDER") or ReferenceOrder.SOURCE.value
            )
            .strip()
            .lower(),
            update_descriptions=_read_bool_env("CATEGORISER_UPDATE_DESCRIPTIONS"),
            repair_json=_read_bool_env("CATEGORISER_REPAIR_JSON"),
        )
        return config.with_overrides(**overrides).validate()


def _read_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _read_bool_env(name: str) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ConfigurationError(
        f"{name} must be one of true/false, yes/no, on/off or 1/0, got {raw!r}"
    )
