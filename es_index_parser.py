import re
import math
import logging
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Decimal gigabytes, matching bytes=b output of _cat/indices
BYTES_PER_GB = 1_000_000_000.0
# Target primary shard size used for recommendations
TARGET_SHARD_SIZE_GB = 30.0

OBJECT_SEPARATOR = re.compile(r"\},\s*\{")
BRACES = re.compile(r"[{}]")
INTEGER = re.compile(r"[+-]?[0-9]+")

INT64_RANGE = (-2**63, 2**63 - 1)
INT32_RANGE = (-2**31, 2**31 - 1)


@dataclass(frozen=True)
class IndexRecord:
    """One row of _cat/indices: index name, primary store size and primary shard count."""

    name: str = ""
    size_bytes: int = 0
    shards: int = 0

    @property
    def size_gb(self):
        return self.size_bytes / BYTES_PER_GB

    @property
    def balance_ratio(self):
        """Gigabytes per primary shard. Zero shards gives a signed inf (or nan for an empty index)."""
        if self.shards == 0:
            return math.nan if self.size_gb == 0 else math.copysign(math.inf, self.size_gb)
        return self.size_gb / self.shards

    @property
    def recommended_shards(self):
        return max(1, int(self.size_gb / TARGET_SHARD_SIZE_GB))

    def as_row(self):
        return {
            "index": self.name,
            "size_bytes": self.size_bytes,
            "size_gb": self.size_gb,
            "shards": self.shards,
            "balance_ratio": self.balance_ratio,
            "recommended_shards": self.recommended_shards,
        }


@dataclass(frozen=True)
class ParseResult:
    records: list = field(default_factory=list)
    error: str = None
    exception: Exception = None

    @property
    def ok(self):
        return self.error is None


# Function to split text and drop empty trailing pieces
def _split(pattern, text):
    parts = pattern.split(text) if isinstance(pattern, re.Pattern) else text.split(pattern)
    while len(parts) > 1 and parts[-1] == "":
        parts.pop()
    if parts == [""] and text != "":
        return []
    return parts


def _parse_integer(key, value, bounds):
    if not INTEGER.fullmatch(value):
        raise ValueError(f"Invalid number '{value}' for key '{key}'")
    number = int(value)
    low, high = bounds
    if not low <= number <= high:
        raise ValueError(f"Number '{value}' for key '{key}' is out of range")
    return number


def _parse_object(chunk):
    name, size_bytes, shards = "", 0, 0

    for pair in _split(",", BRACES.sub("", chunk)):
        kv = _split(":", pair)
        if len(kv) != 2:
            continue

        key = kv[0].strip().replace('"', "")
        value = kv[1].strip().replace('"', "")

        if key == "index":
            name = value
        elif key == "pri.store.size":
            size_bytes = _parse_integer(key, value, INT64_RANGE)
        elif key == "pri":
            shards = _parse_integer(key, value, INT32_RANGE)

    return IndexRecord(name, size_bytes, shards)


def parse_indices(text):
    """
    Parse the JSON array returned by _cat/indices?format=json into IndexRecords.

    This is a plain string splitter, not a JSON parser: the outer brackets are
    dropped by position, objects are split on "},{" and fields on "," and ":".
    Values holding commas, colons or braces are not supported. A malformed
    number for a recognized key fails the whole parse.

    Returns a ParseResult; records are in input order.
    """
    body = text.strip()[1:-1]
    if not body.strip():
        logger.info("No index objects found in input")
        return ParseResult(records=[])

    try:
        records = [_parse_object(chunk) for chunk in _split(OBJECT_SEPARATOR, body)]
    except ValueError as e:
        return ParseResult(error=str(e), exception=e)

    logger.info(f"Parsed {len(records)} index records")
    return ParseResult(records=records)
