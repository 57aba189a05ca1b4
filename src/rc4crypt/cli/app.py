from __future__ import annotations

import json
from pathlib import Path

import typer

from rc4crypt.core import constants
from rc4crypt.core.errors import (
    InputUnavailable,
    InvalidKeyLength,
    KeySourceUnavailable,
    OutputUnavailable,
    RC4CryptError,
    ReadFailure,
    WriteFailure,
)
from rc4crypt.io.formats import render_keystream
from rc4crypt.io.keysource import load_key
from rc4crypt.io.streams import open_input, open_output
from rc4crypt.bench.runner import (
    ConfigError,
    parse_config,
    run_benchmark,
    write_csv,
    write_json_output,
)
from rc4crypt.orchestrator.pipeline import (
    build_engine,
    crypt_bytes,
    generate_keystream,
    pump,
)
from rc4crypt.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

app = typer.Typer(
    help=(
        "Encrypt/decrypt a stream with RC4. "
        "RC4 is broken: consider the output obfuscation rather than encryption."
    )
)

EXIT_CODES = {
    KeySourceUnavailable: constants.EXIT_KEY_SOURCE,
    OutputUnavailable: constants.EXIT_OUTPUT_OPEN,
    InputUnavailable: constants.EXIT_INPUT_OPEN,
    InvalidKeyLength: constants.EXIT_CIPHER_SETUP,
    ReadFailure: constants.EXIT_READ,
    WriteFailure: constants.EXIT_WRITE,
}

KEY_HELP = "Name of file from which to read key, or key itself prefixed with '@'"


def exit_code_for(exc: RC4CryptError) -> int:
    for exc_type, code in EXIT_CODES.items():
        if isinstance(exc, exc_type):
            return code
    return 1


def _fail(exc: RC4CryptError) -> typer.Exit:
    typer.secho(str(exc), fg=typer.colors.RED, err=True)
    return typer.Exit(code=exit_code_for(exc))


@app.command()
def crypt(
    input_path: Path | None = typer.Option(None, "--in", "-i", help="Read from file instead of stdin"),
    output_path: Path | None = typer.Option(None, "--out", "-o", help="Write to file instead of stdout"),
    key: str = typer.Option(constants.DEFAULT_KEY_SOURCE, "--key", "-k", help=KEY_HELP),
    chunk_size: int = typer.Option(constants.CHUNK_SIZE, "--chunk-size", min=1, help="Read/write buffer size"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print informative messages"),
    debug: bool = typer.Option(False, "--debug", help="Print per-chunk debug messages"),
):
    """
    Encrypt or decrypt a stream (the operation is its own inverse).

    Putting the key on the command line is generally a bad idea, as is using RC4.
    """
    setup_logging("crypt", verbose=verbose, debug=debug)
    try:
        engine = build_engine(load_key(key))
        with open_input(input_path) as source, open_output(output_path) as sink:
            stats = pump(engine, source, sink, capacity=chunk_size)
    except RC4CryptError as exc:
        raise _fail(exc) from exc

    logger.info("Done. bytes=%d chunks=%d", stats.bytes_processed, stats.chunks)


@app.command()
def keystream(
    key: str = typer.Option(constants.DEFAULT_KEY_SOURCE, "--key", "-k", help=KEY_HELP),
    nbytes: int = typer.Option(..., "--nbytes", "-n", help="Number of keystream bytes to generate"),
    out: Path | None = typer.Option(None, "--out", "-o", help="Write raw keystream bytes to file"),
    hex_out: bool = typer.Option(False, "--hex", help="Write hex to stdout"),
    base64_out: bool = typer.Option(False, "--base64", help="Write base64 to stdout"),
    hash_out: bool = typer.Option(False, "--hash", help="Write SHA-256 hash (hex) to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print informative messages"),
):
    """
    Generate the raw keystream for a key (for analysis) without encrypting data.
    """
    setup_logging("keystream", verbose=verbose)
    if nbytes < 0:
        typer.secho("nbytes must be >= 0", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    selected = sum(1 for flag in (out is not None, hex_out, base64_out, hash_out) if flag)
    if selected == 0:
        hash_out = True  # default
    elif selected > 1:
        typer.secho("Choose exactly one output option.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        ks = generate_keystream(load_key(key), nbytes)
    except RC4CryptError as exc:
        raise _fail(exc) from exc

    if out:
        try:
            out.write_bytes(ks)
        except OSError as exc:
            raise _fail(OutputUnavailable(str(out), exc)) from exc
        typer.secho(f"Wrote keystream bytes → {out}", fg=typer.colors.GREEN)
        return

    if hex_out:
        typer.echo(render_keystream(ks, "hex"))
    elif base64_out:
        typer.echo(render_keystream(ks, "base64"))
    else:
        typer.echo(render_keystream(ks, "sha256"))


@app.command()
def selftest():
    """
    Run the built-in golden vectors and a roundtrip check (no filesystem writes).
    """
    failures = 0
    for key_hex, plain_hex, cipher_hex in constants.GOLDEN_VECTORS:
        key = bytes.fromhex(key_hex)
        plaintext = bytes.fromhex(plain_hex)
        ciphertext = crypt_bytes(plaintext, key)
        if ciphertext.hex() != cipher_hex:
            typer.secho(
                f"Vector key={key_hex} FAILED: got {ciphertext.hex()}, want {cipher_hex}",
                fg=typer.colors.RED,
            )
            failures += 1
        elif crypt_bytes(ciphertext, key) != plaintext:
            typer.secho(f"Vector key={key_hex} FAILED roundtrip", fg=typer.colors.RED)
            failures += 1

    if failures:
        typer.secho(f"Selftest FAILED ({failures} vector(s)).", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.secho(
        f"Selftest passed ({len(constants.GOLDEN_VECTORS)} golden vectors).",
        fg=typer.colors.GREEN,
    )


@app.command()
def benchmark(
    config: Path = typer.Option(..., "--config", "-c", exists=True, readable=True, help="YAML benchmark config"),
    out: Path = typer.Option(..., "--out", "-o", help="CSV output path"),
    out_json: Path | None = typer.Option(None, "--out-json", help="Optional JSON output path"),
    jobs: int = typer.Option(1, "--jobs", "-j", help="Parallel jobs (variants), default 1"),
    json_summary: bool = typer.Option(False, "--json", help="Print summary JSON to stdout"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Print informative messages"),
):
    """
    Run pump throughput variants from YAML config and export CSV/JSON.
    """
    setup_logging("benchmark", verbose=verbose)
    try:
        cfg = parse_config(config)
        records = run_benchmark(cfg, jobs=jobs)
    except ConfigError as exc:
        typer.secho(f"Config error: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    except RuntimeError as exc:
        typer.secho(f"Benchmark failed: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    try:
        write_csv(out, records)
        if out_json:
            write_json_output(out_json, records)
    except OSError as exc:
        typer.secho(f"Failed to write outputs: {exc}", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.secho(f"Benchmark complete. CSV → {out}", fg=typer.colors.GREEN)
    if out_json:
        typer.secho(f"JSON → {out_json}", fg=typer.colors.GREEN)

    if json_summary:
        summary = {
            "runs": len(records),
            "csv": str(out),
            "json": str(out_json) if out_json else None,
            "chunk_sizes": sorted({rec["chunk_size"] for rec in records}),
        }
        typer.echo(json.dumps(summary))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
