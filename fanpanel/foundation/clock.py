"""Timezone-aware clock utilities.

Export stamps and confirmation expiry read "now" from here so tests can
monkey-patch it trivially.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def monotonic() -> float:
    """Seconds from a clock that never goes backwards (cooldowns, expiry)."""
    return time.monotonic()
