import io

import pytest

from rc4crypt.core.cipher.rc4 import KeystreamEngine
from rc4crypt.core.constants import CHUNK_SIZE
from rc4crypt.core.errors import ReadFailure, WriteFailure
from rc4crypt.orchestrator.pipeline import crypt_bytes, pump

KEY = b"pump-key"


class CountingSource(io.RawIOBase):
    """Readable stream that counts readinto calls."""

    def __init__(self, data: bytes):
        self._inner = io.BytesIO(data)
        self.reads = 0

    def readable(self):
        return True

    def readinto(self, b):
        self.reads += 1
        return self._inner.readinto(b)


class FailingSink(io.RawIOBase):
    """Accepts ``ok_writes`` writes, then raises."""

    def __init__(self, ok_writes: int):
        self.ok_writes = ok_writes
        self.data = bytearray()

    def writable(self):
        return True

    def write(self, b):
        if self.ok_writes == 0:
            raise OSError("disk full")
        self.ok_writes -= 1
        self.data.extend(b)
        return len(b)


class ShortSink(io.RawIOBase):
    def writable(self):
        return True

    def write(self, b):
        return len(b) - 1


class NoneSink(io.RawIOBase):
    """Non-blocking sink that accepts nothing."""

    def writable(self):
        return True

    def write(self, b):
        return None


class FailingSource(io.RawIOBase):
    def readable(self):
        return True

    def readinto(self, b):
        raise OSError("device gone")


class BlockingSource(io.RawIOBase):
    def readable(self):
        return True

    def readinto(self, b):
        return None


def _run(data: bytes, capacity: int = CHUNK_SIZE):
    sink = io.BytesIO()
    stats = pump(KeystreamEngine(KEY), io.BytesIO(data), sink, capacity=capacity)
    return sink.getvalue(), stats


def test_pump_empty_input():
    output, stats = _run(b"")
    assert output == b""
    assert stats.bytes_processed == 0
    assert stats.chunks == 0


@pytest.mark.parametrize("length", [CHUNK_SIZE - 1, CHUNK_SIZE, CHUNK_SIZE + 1, 3 * CHUNK_SIZE])
def test_pump_chunk_boundaries(length):
    data = bytes(i % 251 for i in range(length))
    output, stats = _run(data)
    assert output == crypt_bytes(data, KEY)
    assert stats.bytes_processed == length
    assert stats.chunks == -(-length // CHUNK_SIZE)


@pytest.mark.parametrize("capacity", [1, 7, 64, 5000])
def test_pump_capacity_does_not_change_output(capacity):
    data = bytes(range(256)) * 10
    output, _ = _run(data, capacity=capacity)
    assert output == crypt_bytes(data, KEY)


def test_pump_roundtrip():
    data = b"attack at dawn" * 200
    ciphertext, _ = _run(data)
    plaintext, _ = _run(ciphertext)
    assert plaintext == data


def test_pump_write_failure_halts_reads():
    data = bytes(3 * CHUNK_SIZE)
    source = CountingSource(data)
    sink = FailingSink(ok_writes=1)
    with pytest.raises(WriteFailure) as excinfo:
        pump(KeystreamEngine(KEY), source, sink)
    assert source.reads == 2
    assert excinfo.value.bytes_processed == CHUNK_SIZE
    assert isinstance(excinfo.value.__cause__, OSError)
    assert "disk full" in str(excinfo.value)
    assert bytes(sink.data) == crypt_bytes(data[:CHUNK_SIZE], KEY)


def test_pump_short_write_is_failure():
    with pytest.raises(WriteFailure):
        pump(KeystreamEngine(KEY), io.BytesIO(b"abc"), ShortSink())


def test_pump_read_failure():
    with pytest.raises(ReadFailure) as excinfo:
        pump(KeystreamEngine(KEY), FailingSource(), io.BytesIO())
    assert "device gone" in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, OSError)


def test_pump_nonblocking_source_is_read_failure():
    with pytest.raises(ReadFailure):
        pump(KeystreamEngine(KEY), BlockingSource(), io.BytesIO())


def test_pump_rejects_zero_capacity():
    with pytest.raises(ValueError):
        pump(KeystreamEngine(KEY), io.BytesIO(b"x"), io.BytesIO(), capacity=0)


def test_pump_sink_accepting_nothing_is_failure():
    with pytest.raises(WriteFailure) as excinfo:
        pump(KeystreamEngine(KEY), io.BytesIO(b"abcdef"), NoneSink())
    assert excinfo.value.bytes_processed == 0


def test_pump_closed_source_is_read_failure():
    source = io.BytesIO(b"data")
    source.close()
    with pytest.raises(ReadFailure) as excinfo:
        pump(KeystreamEngine(KEY), source, io.BytesIO())
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_pump_closed_sink_is_write_failure():
    sink = io.BytesIO()
    sink.close()
    with pytest.raises(WriteFailure) as excinfo:
        pump(KeystreamEngine(KEY), io.BytesIO(b"data"), sink)
    assert isinstance(excinfo.value.__cause__, ValueError)
