"""RC4 keystream engine.

RC4 is broken; treat the output as obfuscation, not encryption.
"""

from __future__ import annotations

from rc4crypt.core.constants import MAX_KEY_LEN, MIN_KEY_LEN
from rc4crypt.core.crypto.xor import xor_into
from rc4crypt.core.errors import InvalidKeyLength


class KeystreamEngine:
    """Stateful RC4 generator; one instance per stream."""

    def __init__(self, key: bytes):
        key = bytes(key)
        if not MIN_KEY_LEN <= len(key) <= MAX_KEY_LEN:
            raise InvalidKeyLength(len(key), MIN_KEY_LEN, MAX_KEY_LEN)

        table = bytearray(range(256))
        keylen = len(key)
        j = 0
        for i in range(256):
            j = (j + table[i] + key[i % keylen]) % 256
            table[i], table[j] = table[j], table[i]

        self._table = table
        self._i = 0
        self._j = 0

    def keystream(self, num_bytes: int) -> bytes:
        """Return the next ``num_bytes`` keystream bytes and advance the state."""
        table = self._table
        i, j = self._i, self._j
        out = bytearray(num_bytes)
        for n in range(num_bytes):
            i = (i + 1) % 256
            j = (j + table[i]) % 256
            table[i], table[j] = table[j], table[i]
            out[n] = table[(table[i] + table[j]) % 256]
        self._i, self._j = i, j
        return bytes(out)

    def apply_inplace(self, buffer: bytearray | memoryview) -> None:
        """Encrypt/decrypt a writable buffer in place."""
        xor_into(buffer, self.keystream(len(buffer)))

    def apply(self, data: bytes) -> bytes:
        out = bytearray(data)
        self.apply_inplace(out)
        return bytes(out)
