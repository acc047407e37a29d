# utils/ulid.py
"""
ULID helpers (Universally Unique Lexicographically Sortable Identifier).

- 26 characters, Crockford base32, case-insensitive
- first 10 chars: millisecond timestamp, last 16 chars: randomness
- sorts lexicographically by creation time
"""
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from ulid import ULID

ULID_LENGTH = 26

_ULID_RE = re.compile(r"^[0123456789ABCDEFGHJKMNPQRSTVWXYZ]{26}$", re.IGNORECASE)


def generate_ulid() -> str:
    """New ULID for the current time. Used as the ORM default for primary keys."""
    return str(ULID())


def is_valid_ulid(value: object) -> bool:
    if not value or not isinstance(value, str):
        return False
    return bool(_ULID_RE.match(value))


def ulid_timestamp(value: str) -> Optional[datetime]:
    """Creation time encoded in a ULID, or None if the string is not a ULID."""
    if not is_valid_ulid(value):
        return None
    try:
        return ULID.from_str(value.upper()).datetime
    except ValueError:
        return None


class MonotonicUlidGenerator:
    """
    Issues ULIDs that never go backwards within one millisecond.

    Two values requested for the same millisecond would otherwise be
    ordered by their random suffix; here the second one is the first plus
    one, so issue order == sort order for equal timestamps. Passing `at`
    embeds that instant instead of "now" (used to carry a row's createdAt
    into its new identifier).

    Instances are meant to be short-lived (one migration run).
    """

    def __init__(self) -> None:
        self._last: Optional[ULID] = None

    def generate(self, at: Optional[datetime] = None) -> str:
        value = ULID.from_datetime(at) if at is not None else ULID()
        last = self._last
        if (
            last is not None
            and value.milliseconds == last.milliseconds
            and int(value) <= int(last)
        ):
            value = ULID.from_int(int(last) + 1)
        self._last = value
        return str(value)
