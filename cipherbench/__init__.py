"""Symmetric encryption variant benchmark: uniform variants, runner and reporter."""

from .errors import (
    AuthenticationFailure,
    CipherBenchError,
    CorruptFraming,
    InvalidArgument,
    InvalidKeyLength,
    RoundTripMismatch,
)
from .variants import AesCbc, AesCbcExternalIv, AesCbcHmac, AesGcm, ChaCha20Poly1305Variant, Variant
from .registry import DEFAULT_SUITE, SuiteEntry, get_variant, list_variants, parse_selection
from .runner import BenchmarkConfig, BenchmarkResult, BenchmarkRunner
from .report import render_report

__all__ = [
    "AuthenticationFailure",
    "CipherBenchError",
    "CorruptFraming",
    "InvalidArgument",
    "InvalidKeyLength",
    "RoundTripMismatch",
    "Variant",
    "AesCbc",
    "AesCbcHmac",
    "AesCbcExternalIv",
    "AesGcm",
    "ChaCha20Poly1305Variant",
    "DEFAULT_SUITE",
    "SuiteEntry",
    "get_variant",
    "list_variants",
    "parse_selection",
    "BenchmarkConfig",
    "BenchmarkResult",
    "BenchmarkRunner",
    "render_report",
]
