"""
Benchmark runner for encryption variants.

Drives one variant at a time through N init/encrypt/decrypt cycles, times the
cycles on a monotonic clock, verifies every round trip and reduces the run to
a BenchmarkResult. Suite and size-sweep helpers isolate failures so a broken
variant shows up as a failed row instead of aborting the remaining runs.
"""

from __future__ import annotations

import random
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .config import CONFIG
from .errors import (
    AuthenticationFailure,
    CipherBenchError,
    CorruptFraming,
    InvalidArgument,
    RoundTripMismatch,
)
from .framing import BLOCK_SIZE
from .logging_utils import METRICS, get_logger
from .registry import DEFAULT_SUITE, SuiteEntry
from .variants import Variant

logger = get_logger("cipherbench")

WARMUP_PAYLOAD_SIZE = 10
KEY_SIZES_BITS = (128, 192, 256)


@dataclass(frozen=True)
class BenchmarkConfig:
    payload_size: int = 10
    aad_size: int = 0
    iterations: int = 100

    def __post_init__(self):
        for field_name, minimum in (("payload_size", 0), ("aad_size", 0), ("iterations", 1)):
            value = getattr(self, field_name)
            if not isinstance(value, int) or isinstance(value, bool) or value < minimum:
                raise InvalidArgument(f"{field_name} must be int >= {minimum}, got {value!r}")

    @classmethod
    def from_config(cls, cfg: Optional[Dict[str, Any]] = None) -> "BenchmarkConfig":
        cfg = CONFIG if cfg is None else cfg
        return cls(
            payload_size=cfg["PAYLOAD_SIZE"],
            aad_size=cfg["AAD_SIZE"],
            iterations=cfg["ITERATIONS"],
        )

    def replace(self, **changes) -> "BenchmarkConfig":
        """Return a copy with ``changes`` applied; configs never change mid-run."""
        return replace(self, **changes)


@dataclass(frozen=True)
class BenchmarkResult:
    name: str
    plain_size: int
    aad_size: int
    encrypted_size: int
    overhead_ratio: Optional[float]
    avg_duration: float  # seconds per iteration
    passed: bool
    iterations: int = 0
    error: Optional[str] = None

    @property
    def avg_ms(self) -> float:
        return self.avg_duration * 1e3

    @classmethod
    def failure(cls, name: str, plain_size: int, aad_size: int, error: str) -> "BenchmarkResult":
        """Result for a variant that could not complete a single cycle."""
        return cls(
            name=name,
            plain_size=plain_size,
            aad_size=aad_size,
            encrypted_size=0,
            overhead_ratio=None,
            avg_duration=0.0,
            passed=False,
            iterations=0,
            error=error,
        )


def overhead_ratio(encrypted_size: int, plain_size: int, aad_size: int = 0) -> Optional[float]:
    """(encrypted - plain - aad) / (plain + aad); None when the denominator is zero."""
    denominator = plain_size + aad_size
    if denominator == 0:
        return None
    return (encrypted_size - plain_size - aad_size) / denominator


def make_plaintext(size: int) -> bytes:
    """Deterministic i % 256 byte pattern of ``size`` bytes."""
    if size < 0:
        raise InvalidArgument(f"size must be >= 0, got {size}")
    pattern = bytes(range(256))
    reps, rem = divmod(size, 256)
    return pattern * reps + pattern[:rem]


def verify_round_trip(variant: Variant, plaintext: bytes, iv: Optional[bytes] = None,
                      aad: Optional[bytes] = None) -> bytes:
    """Encrypt then decrypt once; raise RoundTripMismatch if the output differs.

    Returns the encrypted message so callers can inspect its layout.
    """
    plaintext = bytes(plaintext or b"")
    encrypted = variant.encrypt(plaintext, iv, aad)
    recovered = variant.decrypt(encrypted, len(iv) if iv is not None else 0, len(aad) if aad else 0)
    if recovered != plaintext:
        raise RoundTripMismatch(f"{variant.name()}: decrypted {len(recovered)} bytes differ from the original {len(plaintext)}")
    return encrypted


class BenchmarkRunner:
    """Owns the run RNG and the clock; strictly sequential.

    The RNG only produces benchmark inputs (keys, external IVs, AAD). Nonces
    and internal IVs are drawn by the variants from the OS CSPRNG.
    """

    def __init__(self, seed: Optional[int] = None, clock: Callable[[], int] = time.perf_counter_ns):
        self.seed = seed
        self._rng = random.Random(seed)
        self._clock = clock

    def random_bytes(self, size: int) -> bytes:
        if size <= 0:
            return b""
        return self._rng.randbytes(size)

    def key_material(self) -> Dict[int, bytes]:
        return {bits: self.random_bytes(bits // 8) for bits in KEY_SIZES_BITS}

    def run(
        self,
        factory: Callable[[], Variant],
        key: bytes,
        iv: Optional[bytes],
        plaintext: bytes,
        aad: Optional[bytes],
        iterations: int,
        *,
        rekey_each_iteration: bool = True,
    ) -> BenchmarkResult:
        """Benchmark one variant.

        The variant is instantiated once. With ``rekey_each_iteration`` every
        cycle calls ``init(key)`` so key setup lands inside the timing;
        otherwise the key is bound once before the loop. A failed round trip
        marks the result failed but the remaining iterations still run.
        InvalidKeyLength / InvalidArgument propagate to the caller.
        """
        if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations < 1:
            raise InvalidArgument(f"iterations must be int >= 1, got {iterations!r}")

        plaintext = bytes(plaintext or b"")
        aad = bytes(aad) if aad else None
        aad_len = len(aad) if aad else 0
        iv_len = len(iv) if iv is not None else 0

        variant = factory()
        if not rekey_each_iteration:
            variant.init(key)

        logger.debug(
            "Benchmark run start",
            extra={"variant": variant.name(), "plain_size": len(plaintext), "aad_size": aad_len,
                   "iterations": iterations, "rekey_each_iteration": rekey_each_iteration},
        )

        passed = True
        failures = 0
        last_error: Optional[str] = None
        encrypted_size = 0
        elapsed_ns = 0

        for index in range(iterations):
            start = self._clock()
            if rekey_each_iteration:
                variant.init(key)
            encrypted = variant.encrypt(plaintext, iv, aad)
            try:
                recovered = variant.decrypt(encrypted, iv_len, aad_len)
            except (AuthenticationFailure, CorruptFraming) as exc:
                recovered = None
                last_error = f"{type(exc).__name__}: {exc}"
            elapsed_ns += self._clock() - start

            encrypted_size = len(encrypted)
            if recovered is None or recovered != plaintext:
                if recovered is not None:
                    last_error = f"RoundTripMismatch: iteration {index} returned different plaintext"
                if passed:
                    logger.warning(
                        "Round trip failed",
                        extra={"variant": variant.name(), "iteration": index, "error": last_error},
                    )
                passed = False
                failures += 1

        METRICS.counter("iterations").inc(iterations)
        if failures:
            METRICS.counter("roundtrip_failures").inc(failures)

        result = BenchmarkResult(
            name=variant.name(),
            plain_size=len(plaintext),
            aad_size=aad_len,
            encrypted_size=encrypted_size,
            overhead_ratio=overhead_ratio(encrypted_size, len(plaintext), aad_len),
            avg_duration=elapsed_ns / iterations / 1e9,
            passed=passed,
            iterations=iterations,
            error=None if passed else f"{failures}/{iterations} iterations failed; last: {last_error}",
        )
        METRICS.gauge("last_avg_ms").set(result.avg_ms)
        METRICS.gauge("last_encrypted_size").set(encrypted_size)
        logger.debug(
            "Benchmark run done",
            extra={"variant": result.name, "avg_ms": result.avg_ms, "passed": result.passed},
        )
        return result

    def run_entry(
        self,
        entry: SuiteEntry,
        key: bytes,
        iv: Optional[bytes],
        plaintext: bytes,
        aad: Optional[bytes],
        iterations: int,
        *,
        rekey_each_iteration: bool = True,
    ) -> BenchmarkResult:
        """Run a suite entry; any exception becomes a failed result for that entry only."""
        entry_iv = iv if entry.external_iv else None
        try:
            return self.run(
                entry.factory(), key, entry_iv, plaintext, aad, iterations,
                rekey_each_iteration=rekey_each_iteration,
            )
        except CipherBenchError as exc:
            METRICS.counter("variant_errors").inc()
            logger.warning("Variant run aborted", extra={"variant": entry.label, "error": str(exc)})
            error = f"{type(exc).__name__}: {exc}"
        except Exception as exc:  # a broken variant must not stop the suite
            METRICS.counter("variant_errors").inc()
            logger.exception("Variant raised unexpected error", extra={"variant": entry.label})
            error = f"{type(exc).__name__}: {exc}"
        return BenchmarkResult.failure(
            name=entry.display_name,
            plain_size=len(plaintext or b""),
            aad_size=len(aad) if aad else 0,
            error=error,
        )

    def run_suite(
        self,
        config: BenchmarkConfig,
        selection: Optional[Iterable[SuiteEntry]] = None,
        *,
        rekey_each_iteration: bool = True,
    ) -> List[BenchmarkResult]:
        """Benchmark every entry of ``selection`` (DEFAULT_SUITE when None) in order."""
        entries = list(DEFAULT_SUITE if selection is None else selection)
        keys = self.key_material()
        iv = self.random_bytes(BLOCK_SIZE)
        plaintext = make_plaintext(config.payload_size)
        aad = self.random_bytes(config.aad_size) or None

        logger.info(
            "Suite start",
            extra={"variants": [e.label for e in entries], "payload_size": config.payload_size,
                   "aad_size": config.aad_size, "iterations": config.iterations},
        )
        results = [
            self.run_entry(entry, keys[entry.key_bits], iv, plaintext, aad, config.iterations,
                           rekey_each_iteration=rekey_each_iteration)
            for entry in entries
        ]
        logger.info(
            "Suite done",
            extra={"passed": sum(r.passed for r in results), "failed": sum(not r.passed for r in results)},
        )
        return results

    def size_sweep(
        self,
        entry: SuiteEntry,
        sizes: Sequence[int],
        iterations: int,
        aad_size: int = 0,
    ) -> List[BenchmarkResult]:
        """One result per payload size for a single variant, key bound once per run."""
        key = self.key_material()[entry.key_bits]
        iv = self.random_bytes(BLOCK_SIZE)
        aad = self.random_bytes(aad_size) or None

        results = []
        for size in sizes:
            results.append(
                self.run_entry(entry, key, iv, make_plaintext(size), aad, iterations,
                               rekey_each_iteration=False)
            )
        logger.info("Size sweep done", extra={"variant": entry.label, "sizes": list(sizes)})
        return results

    def warmup(self, selection: Optional[Iterable[SuiteEntry]] = None) -> None:
        """Run the suite once with a tiny payload and discard the results."""
        self.run_suite(BenchmarkConfig(payload_size=WARMUP_PAYLOAD_SIZE, aad_size=0, iterations=1), selection)
