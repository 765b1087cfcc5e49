from __future__ import annotations

import secrets

from ..core.constants import TOKEN_BYTES


class TokenGenerator:
    """Unpredictable check-in tokens (160 bits from the OS CSPRNG, hex encoded)."""

    def __init__(self, nbytes: int = TOKEN_BYTES):
        self._nbytes = int(nbytes)

    def generate(self) -> str:
        return secrets.token_hex(self._nbytes)
