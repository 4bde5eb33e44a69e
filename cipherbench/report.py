"""
Result reporting: console table, JSON/CSV export and wire-layout hex dumps.

Rendering never raises on a failed result; failures get their own flagged
line and the following rows are still produced.
"""

from __future__ import annotations

import csv
import json
import platform
import time
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import cryptography
import psutil

from .framing import split
from .logging_utils import METRICS, get_logger
from .runner import BenchmarkResult

logger = get_logger("cipherbench")

ROW_FORMAT = "{name:<26}{time:>14}{plain:>12}{aad:>8}{encrypted:>14}{overhead:>11}"
CSV_FIELDS = (
    "name", "plain_size", "aad_size", "encrypted_size", "overhead_ratio",
    "avg_duration", "avg_ms", "iterations", "passed", "error",
)


def _format_overhead(ratio: Optional[float]) -> str:
    return "n/a" if ratio is None else f"{ratio:.0%}"


def format_header() -> str:
    return ROW_FORMAT.format(
        name="Name", time="avg time (ms)", plain="plain(*)", aad="AAD(*)",
        encrypted="encrypted(*)", overhead="overhead",
    )


def format_footer() -> str:
    return "\n".join((
        " *  = Size in bytes",
        "AAD = Additional Authenticated (but not encrypted) Data",
    ))


def format_result(result: BenchmarkResult) -> str:
    """One table row, or a flagged failure line in place of the numbers."""
    if not result.passed:
        line = f">>> {result.name}: ERROR! Decrypting encrypted data doesn't return original information! <<<"
        if result.error:
            line += f"\n    {result.error}"
        return line
    return ROW_FORMAT.format(
        name=result.name,
        time=f"{result.avg_ms:.4f}",
        plain=f"{result.plain_size:,}",
        aad=f"{result.aad_size:,}",
        encrypted=f"{result.encrypted_size:,}",
        overhead=_format_overhead(result.overhead_ratio),
    )


def render_report(results: Sequence[BenchmarkResult], *, title: Optional[str] = None,
                  with_header: bool = True) -> str:
    """Render results in the given order; never sorted."""
    lines: List[str] = []
    if title:
        lines.append(title)
        lines.append("")
    if with_header:
        lines.append(format_header())
    for result in results:
        lines.append(format_result(result))
    if with_header:
        lines.append(format_footer())
    return "\n".join(lines)


def result_to_dict(result: BenchmarkResult) -> Dict[str, Any]:
    payload = asdict(result)
    payload["avg_ms"] = result.avg_ms
    return payload


def environment_snapshot() -> Dict[str, Any]:
    """Host details recorded next to the numbers they influence."""
    info: Dict[str, Any] = {
        "python_version": platform.python_version(),
        "python_implementation": platform.python_implementation(),
        "platform": platform.platform(),
        "machine": platform.machine(),
        "cryptography_version": cryptography.__version__,
        "cpu_count_logical": psutil.cpu_count(logical=True),
        "cpu_count_physical": psutil.cpu_count(logical=False),
        "memory_total_bytes": psutil.virtual_memory().total,
    }
    try:
        freq = psutil.cpu_freq()
    except (OSError, NotImplementedError):
        freq = None
    info["cpu_freq_mhz"] = freq.current if freq else None
    try:
        info["process_rss_bytes"] = psutil.Process().memory_info().rss
    except psutil.Error:
        info["process_rss_bytes"] = None
    return info


def build_payload(results: Iterable[BenchmarkResult], *, mode: str,
                  settings: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {
        "mode": mode,
        "ts_ns": time.time_ns(),
        "settings": dict(settings or {}),
        "environment": environment_snapshot(),
        "metrics": METRICS.snapshot(),
        "results": [result_to_dict(r) for r in results],
    }


def write_json_report(json_path: Optional[str], payload: dict, *, quiet: bool = False) -> Optional[Path]:
    """Persist a report payload to JSON if a path is provided."""

    if not json_path:
        return None

    path = Path(json_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    except OSError as exc:
        logger.warning("Failed to write JSON report", extra={"path": str(path), "error": str(exc)})
        return None
    if not quiet:
        print(f"Wrote JSON report to {path}")
    return path


def write_csv_report(csv_path: Optional[str], results: Iterable[BenchmarkResult], *,
                     quiet: bool = False) -> Optional[Path]:
    if not csv_path:
        return None

    path = Path(csv_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=CSV_FIELDS)
            writer.writeheader()
            for result in results:
                row = result_to_dict(result)
                writer.writerow({k: row.get(k) for k in CSV_FIELDS})
    except OSError as exc:
        logger.warning("Failed to write CSV report", extra={"path": str(path), "error": str(exc)})
        return None
    if not quiet:
        print(f"Wrote CSV report to {path}")
    return path


def hexdump_rows(data: Optional[bytes], width: int = 16) -> List[str]:
    """Split ``data`` into dash-separated hex rows of ``width`` bytes."""
    if data is None:
        return [">> null <<"]
    if len(data) == 0:
        return [">> zero byte <<"]
    return [
        "-".join(f"{b:02X}" for b in data[offset:offset + width])
        for offset in range(0, len(data), width)
    ]


def format_hexdump(label: str, data: Optional[bytes], width: int = 16) -> str:
    rows = hexdump_rows(data, width)
    lines = [f"{label:>15} : {rows[0]}"]
    lines.extend(f"{'':>15} : {row}" for row in rows[1:])
    return "\n".join(lines)


def describe_message(message: bytes, aad_len: int, iv_len: int, tag_len: int = 0) -> str:
    """Hex dump of each wire region: AAD, IV/nonce, ciphertext, tag."""
    frame = split(message, aad_len, iv_len, tag_len)
    sections = [
        format_hexdump("AAD", frame.aad),
        format_hexdump("IV/nonce", frame.iv),
        format_hexdump("ciphertext", frame.body),
    ]
    if tag_len:
        sections.append(format_hexdump("tag", frame.tag))
    return "\n".join(sections)
