import sys
import json
import math
import logging
from decimal import Decimal, ROUND_HALF_UP

import pandas as pd

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 5

_COLUMNS = ("index", "size_bytes", "size_gb", "shards", "balance_ratio", "recommended_shards")


def _top(records, key, limit):
    # sorted() is stable with reverse=True, equal keys keep input order
    return sorted(records, key=key, reverse=True)[:max(limit, 0)]


def _balance_key(record):
    # nan ranks first, then inf, finite ratios, -inf last
    ratio = record.balance_ratio
    if math.isnan(ratio):
        return (1, 0.0)
    return (0, ratio)


def _format_gb(size_gb):
    # Half-up on the shortest decimal form, so 0.125 prints as 0.13
    return str(Decimal(repr(size_gb)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _format_ratio(ratio):
    # Truncated toward zero, not rounded
    if math.isfinite(ratio):
        return str(int(ratio))
    return str(ratio)


def print_largest_indexes(records, limit=DEFAULT_LIMIT, out=None):
    out = sys.stdout if out is None else out
    print("\nPrinting largest indexes by storage size", file=out)
    for record in _top(records, lambda r: r.size_bytes, limit):
        print(f"Index: {record.name}", file=out)
        print(f"Size: {_format_gb(record.size_gb)} GB", file=out)


def print_most_shards(records, limit=DEFAULT_LIMIT, out=None):
    out = sys.stdout if out is None else out
    print("\nPrinting largest indexes by shard count", file=out)
    for record in _top(records, lambda r: r.shards, limit):
        print(f"Index: {record.name}", file=out)
        print(f"Shards: {record.shards}", file=out)


def print_least_balanced(records, limit=DEFAULT_LIMIT, out=None):
    """Print the indexes with the most GB per primary shard and a recommended shard count."""
    out = sys.stdout if out is None else out
    print("\nPrinting least balanced indexes", file=out)
    for record in _top(records, _balance_key, limit):
        if record.shards == 0:
            logger.warning(f"Index '{record.name}' reports zero primary shards")
        print(f"Index: {record.name}", file=out)
        print(f"Size: {_format_gb(record.size_gb)} GB", file=out)
        print(f"Shards: {record.shards}", file=out)
        print(f"Balance Ratio: {_format_ratio(record.balance_ratio)}", file=out)
        print(f"Recommended shard count is {record.recommended_shards}", file=out)


def print_reports(records, limit=DEFAULT_LIMIT, out=None):
    print_largest_indexes(records, limit, out)
    print_most_shards(records, limit, out)
    print_least_balanced(records, limit, out)


def export_records(records, json_path=None, csv_path=None):
    """Write every record with its derived metrics to JSON and/or CSV."""
    rows = [record.as_row() for record in records]

    if json_path:
        try:
            with open(json_path, "w") as f:
                # nan/inf ratios are written as JSON null
                json.dump([_json_safe(row) for row in rows], f, indent=2)
            logger.info(f"Results written to {json_path}")
        except OSError as e:
            logger.error(f"Error writing to JSON file '{json_path}': {e}")

    if csv_path:
        try:
            df = pd.DataFrame(rows, columns=list(_COLUMNS))
            df.to_csv(csv_path, index=False)
            logger.info(f"Results written to {csv_path}")
        except OSError as e:
            logger.error(f"Error writing to CSV file '{csv_path}': {e}")


def _json_safe(row):
    return {
        key: None if isinstance(value, float) and not math.isfinite(value) else value
        for key, value in row.items()
    }
