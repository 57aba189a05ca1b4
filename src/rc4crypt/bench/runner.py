from __future__ import annotations

import csv
import hashlib
import io
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import partial
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
import yaml

from rc4crypt.core import constants
from rc4crypt.core.errors import InvalidKeyLength
from rc4crypt.io.formats import encode_base64, write_json
from rc4crypt.io.keysource import key_fingerprint
from rc4crypt.orchestrator.pipeline import build_engine, crypt_bytes, generate_keystream, pump
from rc4crypt.utils.logging import get_logger

logger = get_logger(__name__)


# -------------------------
# Config structures
# -------------------------


@dataclass(frozen=True)
class BenchConfig:
    key: str
    nbytes: int
    repeats: int


@dataclass(frozen=True)
class MatrixConfig:
    chunk_size: Sequence[int]


@dataclass(frozen=True)
class MetricsConfig:
    include_batch_time: bool


@dataclass(frozen=True)
class OutputConfig:
    include_timestamp_utc: bool
    include_keystream_preview: bool
    keystream_preview_bytes: int


@dataclass(frozen=True)
class ValidateConfig:
    assert_streaming_equals_batch: bool
    assert_roundtrip: bool


@dataclass(frozen=True)
class FullConfig:
    bench: BenchConfig
    matrix: MatrixConfig
    metrics: MetricsConfig
    output: OutputConfig
    validate: ValidateConfig


# -------------------------
# Config parsing/validation
# -------------------------


class ConfigError(Exception):
    """Raised when the benchmark config is invalid."""


def _require(mapping: Dict[str, Any], key: str, expected_type: Tuple[type, ...]):
    if key not in mapping:
        raise ConfigError(f"Missing required key '{key}'")
    val = mapping[key]
    if not isinstance(val, expected_type):
        raise ConfigError(f"Key '{key}' must be of type {expected_type}, got {type(val)}")
    return val


def parse_config(path: Path) -> FullConfig:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Failed to read YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping.")

    bench = _require(data, "bench", (dict,))
    matrix = _require(data, "matrix", (dict,))
    metrics = data.get("metrics") or {}
    output = data.get("output") or {}
    validate = data.get("validate") or {}

    bench_cfg = BenchConfig(
        key=_require(bench, "key", (str,)),
        nbytes=int(_require(bench, "nbytes", (int, float))),
        repeats=int(bench.get("repeats", 1)),
    )
    key_len = len(bench_cfg.key.encode(constants.ENCODING))
    if not constants.MIN_KEY_LEN <= key_len <= constants.MAX_KEY_LEN:
        raise ConfigError(
            f"bench.key must be {constants.MIN_KEY_LEN}..{constants.MAX_KEY_LEN} bytes, got {key_len}"
        )
    if bench_cfg.nbytes < 0:
        raise ConfigError("bench.nbytes must be >= 0")
    if bench_cfg.repeats < 1:
        raise ConfigError("bench.repeats must be >= 1")

    matrix_cfg = MatrixConfig(
        chunk_size=[int(x) for x in _require(matrix, "chunk_size", (list, tuple))],
    )
    if not matrix_cfg.chunk_size:
        raise ConfigError("matrix.chunk_size must not be empty")
    if any(size < 1 for size in matrix_cfg.chunk_size):
        raise ConfigError("matrix.chunk_size values must be >= 1")

    metrics_cfg = MetricsConfig(
        include_batch_time=bool(metrics.get("include_batch_time", True)),
    )

    output_cfg = OutputConfig(
        include_timestamp_utc=bool(output.get("include_timestamp_utc", True)),
        include_keystream_preview=bool(output.get("include_keystream_preview", False)),
        keystream_preview_bytes=int(output.get("keystream_preview_bytes", 16)),
    )

    validate_cfg = ValidateConfig(
        assert_streaming_equals_batch=bool(validate.get("assert_streaming_equals_batch", True)),
        assert_roundtrip=bool(validate.get("assert_roundtrip", True)),
    )

    return FullConfig(
        bench=bench_cfg,
        matrix=matrix_cfg,
        metrics=metrics_cfg,
        output=output_cfg,
        validate=validate_cfg,
    )


# -------------------------
# Benchmark internals
# -------------------------


def _deterministic_plaintext(nbytes: int) -> bytes:
    return (np.arange(nbytes, dtype=np.uint32) % 256).astype(np.uint8).tobytes()


def _measure_time(func):
    start = time.perf_counter()
    result = func()
    end = time.perf_counter()
    return result, end - start


def _pump_bytes(key: bytes, data: bytes, chunk_size: int) -> Tuple[bytes, int]:
    source = io.BytesIO(data)
    sink = io.BytesIO()
    stats = pump(build_engine(key), source, sink, capacity=chunk_size)
    return sink.getvalue(), stats.chunks


def _run_single_variant(config: FullConfig, task: Tuple[int, int]) -> Dict[str, Any]:
    chunk_size, repeat_index = task
    bench = config.bench
    key = bench.key.encode(constants.ENCODING)
    plaintext = _deterministic_plaintext(bench.nbytes)

    (ciphertext, chunks), t_pump = _measure_time(lambda: _pump_bytes(key, plaintext, chunk_size))

    t_batch = None
    if config.metrics.include_batch_time or config.validate.assert_streaming_equals_batch:
        batch, t_batch = _measure_time(lambda: crypt_bytes(plaintext, key))
        if config.validate.assert_streaming_equals_batch and batch != ciphertext:
            raise RuntimeError(f"Streaming output differs from batch output at chunk_size={chunk_size}.")
        if not config.metrics.include_batch_time:
            t_batch = None

    if config.validate.assert_roundtrip:
        recovered, _ = _pump_bytes(key, ciphertext, chunk_size)
        if recovered != plaintext:
            raise RuntimeError(f"Roundtrip check failed at chunk_size={chunk_size}.")

    record: Dict[str, Any] = {
        "cipher": constants.CIPHER,
        "nbytes": bench.nbytes,
        "repeats": bench.repeats,
        "repeat_index": repeat_index,
        "chunk_size": chunk_size,
        "chunks": chunks,
        "key_length": len(key),
        "key_fingerprint": key_fingerprint(key),
        "t_pump_s": t_pump,
        "t_batch_s": t_batch,
        "throughput_pump_bps": bench.nbytes / t_pump if t_pump else None,
        "throughput_batch_bps": bench.nbytes / t_batch if t_batch else None,
        "ciphertext_sha256": hashlib.sha256(ciphertext).hexdigest(),
        "keystream_preview_base64": None,
    }
    if config.output.include_keystream_preview:
        preview = generate_keystream(key, config.output.keystream_preview_bytes)
        record["keystream_preview_base64"] = encode_base64(preview)
    if config.output.include_timestamp_utc:
        record["timestamp_utc"] = datetime.now(timezone.utc).isoformat()
    return record


def run_benchmark(config: FullConfig, jobs: int = 1) -> List[Dict[str, Any]]:
    try:
        build_engine(config.bench.key.encode(constants.ENCODING))
    except InvalidKeyLength as exc:
        raise ConfigError(str(exc)) from exc

    tasks: List[Tuple[int, int]] = []
    for chunk_size in config.matrix.chunk_size:
        for repeat_index in range(config.bench.repeats):
            tasks.append((chunk_size, repeat_index))
    logger.info("Running %d benchmark variants (jobs=%d)", len(tasks), jobs)

    runner = partial(_run_single_variant, config)
    if jobs and jobs > 1:
        with ProcessPoolExecutor(max_workers=jobs) as ex:
            results = list(ex.map(runner, tasks))
    else:
        results = [runner(task) for task in tasks]

    # Sort deterministically
    def sort_key(rec: Dict[str, Any]):
        return (rec["chunk_size"], rec["repeat_index"])

    return sorted(results, key=sort_key)


# -------------------------
# Output helpers
# -------------------------


CSV_FIELDS = [
    "timestamp_utc",
    "cipher",
    "nbytes",
    "repeats",
    "repeat_index",
    "chunk_size",
    "chunks",
    "key_length",
    "t_pump_s",
    "t_batch_s",
    "throughput_pump_bps",
    "throughput_batch_bps",
    "ciphertext_sha256",
    "key_fingerprint",
    "keystream_preview_base64",
]


def write_csv(path: Path, records: List[Dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for rec in records:
            writer.writerow(rec)


def write_json_output(path: Path, records: List[Dict[str, Any]]) -> None:
    write_json(path, records)
