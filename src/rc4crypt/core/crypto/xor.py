from __future__ import annotations

import numpy as np


def xor_into(buffer: bytearray | memoryview, keystream: bytes) -> None:
    """XOR keystream into a writable buffer in place."""
    size = len(buffer)
    if len(keystream) < size:
        raise ValueError("keystream too short")
    if size == 0:
        return
    data = np.frombuffer(buffer, dtype=np.uint8)
    ks = np.frombuffer(keystream, dtype=np.uint8, count=size)
    np.bitwise_xor(data, ks, out=data)
