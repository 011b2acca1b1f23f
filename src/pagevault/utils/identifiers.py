"""
Snapshot Identifier Utilities

Identifiers name snapshot directories in the archive:

    identifier = base ["-dup" N]

``base`` is an ISO-8601 UTC timestamp with ``:`` and ``.`` replaced by ``-``
(e.g. ``2024-01-02T12-00-00-000Z``), so identifiers sort lexicographically
by capture time. ``N`` counts earlier captures that resolved to the same base.
"""

import re
from datetime import datetime, timezone
from typing import Optional, Tuple


DUPLICATE_MARKER = "-dup"

_IDENTIFIER_RE = re.compile(r'(.*?)(?:-dup(\d+))?', re.DOTALL)


def format_timestamp(moment: datetime) -> str:
    """
    Format an instant as a filesystem-safe identifier base.

    Args:
        moment: The instant to format; naive datetimes are taken as UTC

    Returns:
        Sortable identifier base string
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    iso = f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"
    return re.sub(r'[:.]', '-', iso)


def get_timestamp(base_timestamp: Optional[str] = None) -> str:
    """
    Return the identifier base for a new capture.

    Args:
        base_timestamp: Explicit override (deterministic tests, reruns)

    Returns:
        The override when given, else the current UTC instant formatted
    """
    if base_timestamp:
        return base_timestamp
    return format_timestamp(datetime.now(timezone.utc))


def make_identifier(base: str, duplicate: int) -> str:
    """Build the identifier for the given collision count at ``base``."""
    if duplicate <= 0:
        return base
    return f"{base}{DUPLICATE_MARKER}{duplicate}"


def parse_identifier(identifier: str) -> Tuple[str, int]:
    """
    Split an identifier into its base and duplicate count.

    Args:
        identifier: Identifier or metadata timestamp string

    Returns:
        Tuple of (base, duplicate_count); the count is 0 without a suffix
    """
    base, duplicate = _IDENTIFIER_RE.fullmatch(identifier).groups()
    return base, int(duplicate) if duplicate else 0


def sort_key(identifier: str) -> Tuple[str, int]:
    """Ordering key over identifiers: base first, then duplicate count."""
    return parse_identifier(identifier)
