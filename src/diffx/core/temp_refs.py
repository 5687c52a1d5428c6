"""Temporary ref namespace for staging fetched commits.

Every resolution gets its own prefix under ``refs/diffx/tmp``, so concurrent
invocations against one repository never touch each other's refs, and never
touch branches or tags.
"""

from __future__ import annotations

import os
import time
from typing import Callable

DEFAULT_TEMP_REF_ROOT = "refs/diffx/tmp"

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def to_base36(number: int) -> str:
    if number < 0:
        raise ValueError("base36 encoding requires a non-negative integer")
    if number == 0:
        return "0"
    digits: list[str] = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def create_temp_ref_prefix(now_ms: int, token: bytes, root: str = DEFAULT_TEMP_REF_ROOT) -> str:
    """Build ``<root>/<base36-millis>-<hex-token>`` from explicit inputs."""
    return f"{root}/{to_base36(now_ms)}-{token.hex()}"


class TempRefAllocator:
    """Hands out unique temp ref prefixes.

    The clock and random source are injectable so tests can pin both.
    """

    TOKEN_BYTES = 8

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.time,
        random_bytes: Callable[[int], bytes] = os.urandom,
        root: str = DEFAULT_TEMP_REF_ROOT,
    ) -> None:
        self._clock = clock
        self._random_bytes = random_bytes
        self.root = root.rstrip("/")

    def new_prefix(self) -> str:
        now_ms = int(self._clock() * 1000)
        return create_temp_ref_prefix(now_ms, self._random_bytes(self.TOKEN_BYTES), self.root)
