#!/usr/bin/env python3
"""
Validate a transceiver compatibility dataset before deploying it.

Loads the JSON document the same way the server does, prints row counts and
data-quality findings, and optionally resolves one or more switch models.

Usage:
    python scripts/validate_database.py [--source PATH_OR_URL] [--query MODEL ...]

Exit status is 1 if the dataset cannot be loaded or a query fails.
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports when running as script
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from transceiver_compat.config import DEFAULT_DATA_SOURCE
from transceiver_compat.engine import search
from transceiver_compat.errors import LoadError
from transceiver_compat.loader import load_snapshot
from transceiver_compat.stats import get_stats


def print_stats(stats: dict) -> None:
    print(f"Products:              {stats['products']:,}")
    print(f"Compatibility entries: {stats['compatibility_entries']:,}")
    print(f"Switch bays:           {stats['switch_bays']:,}")
    print(f"Switch models:         {stats['switch_models']:,}")

    skipped = {k: v for k, v in stats["skipped_rows"].items() if v}
    malformed = {k: v for k, v in stats["malformed_rows"].items() if v}
    if skipped:
        print(f"Non-object rows dropped: {skipped}")
    if malformed:
        print(f"Rows with missing keys:  {malformed}")

    if stats["slots_without_compatibility"]:
        print(f"Warning: {stats['slots_without_compatibility']} slot ids have no compatibility entries")
    if stats["parts_without_product"]:
        print(f"Warning: {stats['parts_without_product']} compatible OEM parts have no catalog product")


def main():
    parser = argparse.ArgumentParser(description="Validate compatibility dataset")
    parser.add_argument(
        "--source", "-s",
        default=DEFAULT_DATA_SOURCE,
        help=f"Dataset file or URL (default: {DEFAULT_DATA_SOURCE})",
    )
    parser.add_argument(
        "--query", "-q",
        action="append",
        default=[],
        help="Switch model to resolve (repeatable)",
    )
    args = parser.parse_args()

    try:
        snapshot = load_snapshot(args.source)
    except LoadError as e:
        print(f"Error: {e}")
        return 1

    print_stats(get_stats(snapshot))

    status = 0
    for query in args.query:
        outcome = search(snapshot, query)
        print()
        if outcome.status == "failed":
            print(f"{query}: FAILED - {outcome.message}")
            status = 1
        elif outcome.status == "empty":
            print(f"{outcome.searched_term}: no compatible products")
        else:
            print(f"{outcome.searched_term}: {outcome.total_products} products in {len(outcome.groups)} groups")
            for group in outcome.groups:
                print(f"  {group.slot.heading}")
                for product in group.products:
                    print(f"    {product.sku_id or '-':<24} {product.oem_part_number:<20} {product.description}")

    return status


if __name__ == "__main__":
    exit(main())
