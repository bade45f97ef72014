from __future__ import annotations

import secrets

MIN_IDENTIFIER = 1
MAX_IDENTIFIER = 9999


class IdentifierGenerator:
    """
    Per-notification identifiers echoed back by the gateway in error responses.

    Values are random in [1, 9999]. Within one batch, next() avoids values it has
    already handed out until reset() so an error response maps to a single device.
    Once the whole range is used up, values are reused.
    """

    __slots__ = ("_used",)

    def __init__(self) -> None:
        self._used: set[int] = set()

    def reset(self) -> None:
        self._used.clear()

    def next(self) -> int:
        span = MAX_IDENTIFIER - MIN_IDENTIFIER + 1
        if len(self._used) >= span:
            self._used.clear()
        while True:
            value = MIN_IDENTIFIER + secrets.randbelow(span)
            if value not in self._used:
                self._used.add(value)
                return value


def random_identifier() -> int:
    return MIN_IDENTIFIER + secrets.randbelow(MAX_IDENTIFIER - MIN_IDENTIFIER + 1)
