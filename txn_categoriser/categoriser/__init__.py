"""LLM categoriser for spreadsheet transactions.

This package selects uncategorised rows, pairs them with already categorised
reference rows, asks an LLM for a category per row and writes the validated
answers back.

Main entry point:
    python -m txn_categoriser

Key modules:
    - cells: Cell normalisation (identity, amounts, dates)
    - batcher: Select the pending batch
    - references: Build the reference corpus
    - registry: Load the category registry
    - prompt_factory: Compose the request and render instructions
    - client: Ask the provider for suggestions
    - reconciler: Validate suggestions into row decisions
    - write_back: Apply decisions to the record source
    - runner: Orchestrate one run
    - cli: Command-line interface
"""

from __future__ import annotations

from .runner import CategoriserRunner

__all__ = ["CategoriserRunner"]
