"""Command-line interface for the transaction categoriser.

Reads a transactions CSV and a categories CSV, asks the configured LLM for a
category per uncategorised row and writes the results back into the
transactions file.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from ..config import CategoriserConfiguration, ConfigurationError
from ..diagnostics import get_last_api_interaction
from ..models import ProviderName, ReferenceOrder
from ..sources import CsvWorkbook
from .runner import CategoriserRunner


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Categorise spreadsheet transactions using LLMs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Categorise pending rows with the default provider
  python -m txn_categoriser --transactions data/transactions.csv --categories data/categories.csv

  # Use OpenAI and also clean up descriptions
  python -m txn_categoriser --transactions t.csv --categories c.csv --provider openai --update-descriptions

  # Write the request that would be sent and exit
  python -m txn_categoriser --transactions t.csv --categories c.csv --emit-request request.json

Environment Variables:
  CATEGORISER_PROVIDER             LLM provider: openai or gemini (default: gemini)
  OPENAI_API_KEY                   OpenAI API key
  GOOGLE_API_KEY / GEMINI_API_KEY  Gemini API key
  OPENAI_MODEL / GEMINI_MODEL      Model overrides
  CATEGORISER_BATCH_SIZE           Max pending rows per run (default: 50)
  CATEGORISER_MAX_REFERENCES       Max reference rows per run (default: 2000)
  CATEGORISER_REFERENCE_ORDER      source or recent (default: source)
  CATEGORISER_UPDATE_DESCRIPTIONS  Write cleaned descriptions back (default: off)
  CATEGORISER_REPAIR_JSON          Attempt to repair malformed replies (default: off)
        """,
    )

    # Input options
    parser.add_argument(
        "--transactions",
        type=Path,
        required=True,
        help="Path to the transactions CSV (updated in place)",
    )
    parser.add_argument(
        "--categories",
        type=Path,
        required=True,
        help="Path to the categories CSV (first column, header row skipped)",
    )

    # Provider options
    parser.add_argument(
        "--provider",
        choices=ProviderName.all_values(),
        help="LLM provider (default: gemini or CATEGORISER_PROVIDER)",
    )
    parser.add_argument(
        "--model",
        help="Model name for the selected provider",
    )
    parser.add_argument(
        "--dotenv",
        type=Path,
        help="Path to .env file for API keys",
    )

    # Batch configuration
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Maximum pending transactions per run (default: 50 or CATEGORISER_BATCH_SIZE)",
    )
    parser.add_argument(
        "--max-references",
        type=int,
        help="Maximum reference transactions per run (default: 2000 or CATEGORISER_MAX_REFERENCES)",
    )
    parser.add_argument(
        "--reference-order",
        choices=ReferenceOrder.all_values(),
        help="Which categorised rows to use as references (default: source)",
    )

    # Content settings
    parser.add_argument(
        "--update-descriptions",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Write the cleaned description back as well as the category",
    )
    parser.add_argument(
        "--repair-json",
        action="store_true",
        default=None,
        help="Attempt to repair malformed JSON replies before giving up",
    )

    # Special modes
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Read and compose the request only (don't call LLM)",
    )
    parser.add_argument(
        "--emit-request",
        type=Path,
        metavar="PATH",
        help="Write the instructions and request payload to PATH and exit",
    )
    parser.add_argument(
        "--show-diagnostics",
        action="store_true",
        help="Print the last API request/response after the run",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(args)


def build_config(parsed_args: argparse.Namespace) -> CategoriserConfiguration:
    """Load configuration from the environment with CLI overrides applied."""
    config = CategoriserConfiguration.from_env(
        dotenv_path=parsed_args.dotenv,
        provider=parsed_args.provider,
        max_batch_size=parsed_args.batch_size,
        max_reference_transactions=parsed_args.max_references,
        reference_order=parsed_args.reference_order,
        update_descriptions=parsed_args.update_descriptions,
        repair_json=parsed_args.repair_json,
    )
    if parsed_args.model:
        config = config.with_overrides(**{f"{config.provider}_model": parsed_args.model})
    return config


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parsed_args = parse_args(args)
    logging.basicConfig(
        level=getattr(logging, parsed_args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(parsed_args)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    source = CsvWorkbook(parsed_args.transactions, parsed_args.categories)
    runner = CategoriserRunner(source, config)

    if parsed_args.emit_request:
        return emit_request(runner, parsed_args.emit_request)

    result = runner.run(dry_run=parsed_args.dry_run)

    if parsed_args.show_diagnostics:
        record = get_last_api_interaction()
        if record is None:
            print("No API interaction recorded")
        else:
            print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False, default=str))

    if not result.success:
        print(f"Error: {result.message}", file=sys.stderr)
        if result.error_details:
            print(result.error_details, file=sys.stderr)
        return 1

    print(result.message)
    return 0


def emit_request(runner: CategoriserRunner, output_path: Path) -> int:
    """Write the composed request to ``output_path`` without calling the LLM."""
    try:
        composed = runner.compose_request()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if composed is None:
        print("No uncategorized transactions found")
        return 0

    request, instructions = composed
    payload = {
        "instructions": instructions,
        "request": request.to_payload(),
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    print(
        f"Wrote request with {len(request.transactions)} transaction(s) "
        f"to {output_path}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
