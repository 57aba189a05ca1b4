from __future__ import annotations

import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from rc4crypt.core.constants import STDIO_PATH
from rc4crypt.core.errors import InputUnavailable, OutputUnavailable
from rc4crypt.utils.logging import get_logger

logger = get_logger(__name__)


def _is_stdio(path: Path | str | None) -> bool:
    return path is None or str(path) == STDIO_PATH


@contextmanager
def open_input(path: Path | str | None) -> Iterator[BinaryIO]:
    """Yield a binary reader for ``path``; stdin when unset or ``-``."""
    if _is_stdio(path):
        yield sys.stdin.buffer
        return
    try:
        stream = open(path, "rb")
    except OSError as exc:
        raise InputUnavailable(str(path), exc) from exc
    logger.info("Reading input from %s", path)
    with stream:
        yield stream


@contextmanager
def open_output(path: Path | str | None) -> Iterator[BinaryIO]:
    """Yield a binary writer for ``path`` (created/truncated); stdout when unset or ``-``."""
    if _is_stdio(path):
        yield sys.stdout.buffer
        return
    try:
        stream = open(path, "wb")
    except OSError as exc:
        raise OutputUnavailable(str(path), exc) from exc
    logger.info("Writing output to %s", path)
    with stream:
        yield stream
