from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

from rc4crypt.core.constants import ENCODING, KEY_LITERAL_PREFIX
from rc4crypt.core.errors import KeySourceUnavailable
from rc4crypt.utils.logging import get_logger

logger = get_logger(__name__)

LITERAL = "literal"
FILE = "file"


@dataclass(frozen=True)
class KeySource:
    """Where the key comes from: an inline literal or a key file."""

    kind: str
    value: str


def parse_key_source(key_arg: str) -> KeySource:
    """``@secret`` is the literal key ``secret``; anything else names a key file."""
    if key_arg.startswith(KEY_LITERAL_PREFIX):
        return KeySource(kind=LITERAL, value=key_arg[len(KEY_LITERAL_PREFIX):])
    return KeySource(kind=FILE, value=key_arg)


def resolve_key(source: KeySource) -> bytes:
    if source.kind == LITERAL:
        logger.info("Got key from command line")
        # argv bytes that are not valid UTF-8 arrive as surrogate escapes
        return source.value.encode(ENCODING, "surrogateescape")

    try:
        key = Path(source.value).read_bytes()
    except OSError as exc:
        raise KeySourceUnavailable(source.value, exc) from exc
    logger.info("Read key from %s", source.value)
    return key


def load_key(key_arg: str) -> bytes:
    return resolve_key(parse_key_source(key_arg))


def key_fingerprint(key: bytes) -> str:
    return hashlib.sha256(key).hexdigest()
