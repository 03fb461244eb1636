"""Identity-related value types."""

from __future__ import annotations

from enum import Enum
from typing import NewType

BearerToken = NewType("BearerToken", str)

# 24 lower-case hex characters (a 12-byte identifier)
UserId = NewType("UserId", str)


class SessionOutcome(str, Enum):
    """Terminal states of session validation for a request that was not rejected."""

    PASSED = "passed"
    BYPASSED = "bypassed"
