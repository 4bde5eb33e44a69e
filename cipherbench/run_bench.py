"""
Unified CLI entrypoint for the cipherbench encryption benchmark.

Supports subcommands:
- list: Show registered encryption variants
- run: Benchmark a suite of variants (default: AES CBC / CBC+HMAC / raw CBC / GCM at 128 and 256 bits)
- sweep: Benchmark one variant across an ascending ladder of payload sizes
- inspect: Encrypt once and hex-dump the AAD / IV / ciphertext / tag regions

Exit status: 0 when every result passed, 1 when any result failed, 2 on bad arguments or config.
"""

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from cipherbench.config import CONFIG, ConfigError, validate_config
from cipherbench.errors import CipherBenchError, InvalidArgument
from cipherbench.logging_utils import configure_file_logger, get_logger
from cipherbench.registry import SuiteEntry, list_variants, parse_selection
from cipherbench.report import (
    build_payload,
    describe_message,
    render_report,
    write_csv_report,
    write_json_report,
)
from cipherbench.runner import BenchmarkConfig, BenchmarkRunner, make_plaintext, verify_round_trip

logger = get_logger("cipherbench")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def _parse_sizes(raw: str) -> List[int]:
    try:
        sizes = [int(part.replace("_", "")) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid size list: {raw}")
    if not sizes or any(size < 0 for size in sizes):
        raise argparse.ArgumentTypeError("sizes must be non-negative integers")
    return sizes


def list_command(args) -> int:
    for key, meta in list_variants().items():
        bits = "/".join(str(b) for b in meta["key_bits"])
        iv = "external IV" if meta["external_iv"] else "internal IV"
        print(f"- {key:<20} {meta['display_name']:<20} keys {bits:<12} {iv:<12} {meta['description']}")
    return EXIT_OK


def run_command(args) -> int:
    config = BenchmarkConfig(
        payload_size=CONFIG["PAYLOAD_SIZE"] if args.size is None else args.size,
        aad_size=CONFIG["AAD_SIZE"] if args.aad is None else args.aad,
        iterations=CONFIG["ITERATIONS"] if args.iterations is None else args.iterations,
    )
    selection = parse_selection(args.variants)
    seed = CONFIG["RNG_SEED"] if args.seed is None else args.seed
    runner = BenchmarkRunner(seed=seed)

    if CONFIG["WARMUP"] and not args.no_warmup:
        if not args.quiet:
            print("Performing a warmup run...")
        runner.warmup(selection)

    results = runner.run_suite(config, selection)

    title = (
        f"Benchmark test is : Encrypt=>Decrypt {config.payload_size} bytes "
        f"(+{config.aad_size} AAD) {config.iterations} times"
    )
    print(render_report(results, title=title))

    settings = {
        "payload_size": config.payload_size,
        "aad_size": config.aad_size,
        "iterations": config.iterations,
        "variants": [entry.label for entry in selection],
        "seed": seed,
    }
    write_json_report(args.json_out, build_payload(results, mode="suite", settings=settings), quiet=args.quiet)
    write_csv_report(args.csv_out, results, quiet=args.quiet)
    return EXIT_OK if all(r.passed for r in results) else EXIT_FAILED


def sweep_command(args) -> int:
    entry = SuiteEntry(CONFIG["SWEEP_VARIANT"] if args.variant is None else args.variant,
                       CONFIG["SWEEP_KEY_BITS"] if args.key_bits is None else args.key_bits)
    sizes = list(CONFIG["SWEEP_SIZES"]) if args.sizes is None else args.sizes
    if sizes != sorted(set(sizes)):
        raise InvalidArgument(f"sizes must be strictly ascending, got {','.join(map(str, sizes))}")
    iterations = CONFIG["SWEEP_ITERATIONS"] if args.iterations is None else args.iterations
    if iterations < 1:
        raise InvalidArgument(f"iterations must be >= 1, got {iterations}")
    aad_size = args.aad
    if aad_size < 0:
        raise InvalidArgument(f"aad size must be >= 0, got {aad_size}")

    seed = CONFIG["RNG_SEED"] if args.seed is None else args.seed
    runner = BenchmarkRunner(seed=seed)
    results = runner.size_sweep(entry, sizes, iterations, aad_size=aad_size)

    title = f"Size sweep : {entry.display_name}, {iterations} iterations per size"
    print(render_report(results, title=title))

    settings = {"variant": entry.label, "sizes": sizes, "iterations": iterations,
                "aad_size": aad_size, "seed": seed}
    write_json_report(args.json_out, build_payload(results, mode="sweep", settings=settings), quiet=args.quiet)
    write_csv_report(args.csv_out, results, quiet=args.quiet)
    return EXIT_OK if all(r.passed for r in results) else EXIT_FAILED


def inspect_command(args) -> int:
    entry = SuiteEntry(args.variant, args.key_bits)
    runner = BenchmarkRunner(seed=args.seed)
    key = runner.key_material()[entry.key_bits]
    iv = runner.random_bytes(16) if entry.external_iv else None
    aad = runner.random_bytes(args.aad) or None

    variant = entry.factory()().init(key)
    message = verify_round_trip(variant, make_plaintext(args.size), iv, aad)

    print(f"{variant.name()} : {args.size} plaintext bytes, {args.aad} AAD bytes -> {len(message)} bytes")
    print(describe_message(message, args.aad, variant.IV_LEN, variant.TAG_LEN))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Symmetric encryption variant benchmark")
    parser.add_argument("--quiet", action="store_true",
                        help="Suppress informational prints and INFO logs")
    parser.add_argument("--log-file",
                        help="Also write JSON log lines to this file")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List registered encryption variants")

    run_parser = subparsers.add_parser("run", help="Benchmark a suite of variants")
    run_parser.add_argument("--size", type=int,
                            help=f"Plaintext size in bytes (default: {CONFIG['PAYLOAD_SIZE']})")
    run_parser.add_argument("--aad", type=int,
                            help=f"AAD size in bytes (default: {CONFIG['AAD_SIZE']})")
    run_parser.add_argument("--iterations", type=int,
                            help=f"Encrypt/decrypt cycles per variant (default: {CONFIG['ITERATIONS']})")
    run_parser.add_argument("--variants",
                            help="Comma separated name[:bits] list, e.g. aes-gcm:128,aes-cbc-hmac (default: full suite)")
    run_parser.add_argument("--seed", type=int,
                            help="Seed for key/IV/AAD generation")
    run_parser.add_argument("--no-warmup", action="store_true",
                            help="Skip the warmup pass")
    run_parser.add_argument("--json-out", help="Optional path to write results JSON")
    run_parser.add_argument("--csv-out", help="Optional path to write results CSV")

    sweep_parser = subparsers.add_parser("sweep", help="Benchmark one variant across payload sizes")
    sweep_parser.add_argument("--variant", help=f"Variant name (default: {CONFIG['SWEEP_VARIANT']})")
    sweep_parser.add_argument("--key-bits", type=int, help=f"Key size (default: {CONFIG['SWEEP_KEY_BITS']})")
    sweep_parser.add_argument("--sizes", type=_parse_sizes,
                              help="Comma separated ascending payload sizes (default: 1..1000000 decades)")
    sweep_parser.add_argument("--iterations", type=int,
                              help=f"Cycles per size (default: {CONFIG['SWEEP_ITERATIONS']})")
    sweep_parser.add_argument("--aad", type=int, default=0, help="AAD size in bytes (default: 0)")
    sweep_parser.add_argument("--seed", type=int, help="Seed for key/IV/AAD generation")
    sweep_parser.add_argument("--json-out", help="Optional path to write results JSON")
    sweep_parser.add_argument("--csv-out", help="Optional path to write results CSV")

    inspect_parser = subparsers.add_parser("inspect", help="Encrypt once and dump the wire layout")
    inspect_parser.add_argument("--variant", default="aes-gcm", help="Variant name (default: aes-gcm)")
    inspect_parser.add_argument("--key-bits", type=int, default=256, help="Key size (default: 256)")
    inspect_parser.add_argument("--size", type=int, default=15, help="Plaintext size in bytes (default: 15)")
    inspect_parser.add_argument("--aad", type=int, default=0, help="AAD size in bytes (default: 0)")
    inspect_parser.add_argument("--seed", type=int, help="Seed for key/IV/AAD generation")

    return parser


_COMMANDS = {
    "list": list_command,
    "run": run_command,
    "sweep": sweep_command,
    "inspect": inspect_command,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entrypoint with subcommands."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_USAGE

    try:
        validate_config(CONFIG)
    except ConfigError as e:
        print(f"Error: {e}")
        return EXIT_USAGE

    if args.quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(CONFIG["LOG_LEVEL"].upper())
    if args.log_file:
        log_path = configure_file_logger(args.log_file, logger)
        if not args.quiet:
            print(f"Log file: {log_path}")

    try:
        return _COMMANDS[args.command](args)
    except CipherBenchError as e:
        print(f"Error: {e}")
        return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
