from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from rc4crypt.core.cipher.rc4 import KeystreamEngine
from rc4crypt.core.constants import CHUNK_SIZE
from rc4crypt.core.errors import ReadFailure, WriteFailure
from rc4crypt.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PumpStats:
    """Totals for a completed pump run."""

    bytes_processed: int
    chunks: int


def build_engine(key: bytes) -> KeystreamEngine:
    logger.debug("Setting up RC4 with key_len=%d", len(key))
    return KeystreamEngine(key)


def pump(
    engine: KeystreamEngine,
    source: BinaryIO,
    sink: BinaryIO,
    capacity: int = CHUNK_SIZE,
) -> PumpStats:
    """
    Read, crypt and write ``source`` to ``sink`` one chunk at a time.

    A clean end of stream (a zero-byte read) is the only successful exit.
    Bytes already written before a failure are left in the sink.
    """
    if capacity < 1:
        raise ValueError("capacity must be >= 1")

    buffer = bytearray(capacity)
    view = memoryview(buffer)
    total = 0
    chunks = 0
    while True:
        try:
            n = source.readinto(view)
        except (OSError, ValueError) as exc:
            raise ReadFailure(f"Read error: {exc}", bytes_processed=total) from exc
        if n is None:
            raise ReadFailure("Read error: source would block", bytes_processed=total)
        if n == 0:
            break

        chunk = view[:n]
        engine.apply_inplace(chunk)
        try:
            written = sink.write(chunk)
        except (OSError, ValueError) as exc:
            raise WriteFailure(f"Write error: {exc}", bytes_processed=total) from exc
        if written is None:
            raise WriteFailure("Write error: sink would block", bytes_processed=total)
        if written != n:
            raise WriteFailure(
                f"Write error: short write ({written} of {n} bytes)",
                bytes_processed=total + max(written, 0),
            )
        total += n
        chunks += 1
        logger.debug("Chunk %d: %d bytes", chunks, n)

    try:
        sink.flush()
    except (OSError, ValueError) as exc:
        raise WriteFailure(f"Write error: {exc}", bytes_processed=total) from exc

    return PumpStats(bytes_processed=total, chunks=chunks)


def crypt_bytes(data: bytes, key: bytes) -> bytes:
    """Encrypt or decrypt ``data`` in one pass with a fresh engine."""
    return build_engine(key).apply(data)


def generate_keystream(key: bytes, num_bytes: int) -> bytes:
    logger.debug("Generating keystream nbytes=%d", num_bytes)
    return build_engine(key).keystream(num_bytes)
