"""Categorise spreadsheet transactions with an LLM."""

from __future__ import annotations

from .categoriser import CategoriserRunner
from .config import CategoriserConfiguration, ConfigurationError
from .diagnostics import DiagnosticsRecorder, get_last_api_interaction
from .models import RunResult
from .sources import CsvWorkbook, InMemoryWorkbook

__all__ = [
    "CategoriserConfiguration",
    "CategoriserRunner",
    "ConfigurationError",
    "CsvWorkbook",
    "DiagnosticsRecorder",
    "InMemoryWorkbook",
    "RunResult",
    "get_last_api_interaction",
]
