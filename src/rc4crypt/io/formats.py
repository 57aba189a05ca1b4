from __future__ import annotations

import base64
import hashlib
import json
from pathlib import Path
from typing import Any


def encode_base64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def render_keystream(keystream: bytes, fmt: str) -> str:
    """Render keystream bytes as ``hex``, ``base64`` or ``sha256`` text."""
    if fmt == "hex":
        return keystream.hex()
    if fmt == "base64":
        return encode_base64(keystream)
    if fmt == "sha256":
        return hashlib.sha256(keystream).hexdigest()
    raise ValueError(f"Unknown keystream format '{fmt}'")


def write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
