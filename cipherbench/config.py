"""
Benchmark configuration defaults for cipherbench.

Single source of truth for payload/AAD sizes, iteration counts, the size-sweep
ladder and logging level. Scalar keys may be overridden through environment
variables named CIPHERBENCH_<KEY>.
"""

import os
from typing import Any, Dict, Tuple


class ConfigError(ValueError):
    """Configuration value missing, mistyped or out of range."""
    pass


ENV_PREFIX = "CIPHERBENCH_"

# Default configuration - all required keys with correct types
CONFIG = {
    # Size of the plaintext buffer encrypted on each iteration (bytes)
    "PAYLOAD_SIZE": 10,
    # Additional authenticated data prepended to every message (bytes)
    "AAD_SIZE": 0,
    # Encrypt->decrypt cycles per variant; the report shows the per-iteration average
    "ITERATIONS": 100,

    # Run the suite once with a tiny payload before measuring
    "WARMUP": True,
    # Seed for the runner RNG that produces keys/IV/AAD (None -> fresh OS entropy)
    "RNG_SEED": None,

    # --- Size sweep mode ---
    "SWEEP_VARIANT": "aes-gcm",
    "SWEEP_KEY_BITS": 256,
    # Ascending payload ladder, 1 B up to 1 MB
    "SWEEP_SIZES": (1, 10, 100, 1_000, 10_000, 100_000, 1_000_000),
    "SWEEP_ITERATIONS": 10,

    # JSON log lines share stdout with the report table
    "LOG_LEVEL": "WARNING",
}


# Required keys with their expected types
_REQUIRED_KEYS = {
    "PAYLOAD_SIZE": int,
    "AAD_SIZE": int,
    "ITERATIONS": int,
    "WARMUP": bool,
    "SWEEP_VARIANT": str,
    "SWEEP_KEY_BITS": int,
    "SWEEP_SIZES": tuple,
    "SWEEP_ITERATIONS": int,
    "LOG_LEVEL": str,
}

# Keys that can be overridden by environment variables
_ENV_OVERRIDABLE = {
    "PAYLOAD_SIZE",
    "AAD_SIZE",
    "ITERATIONS",
    "WARMUP",
    "RNG_SEED",
    "SWEEP_VARIANT",
    "SWEEP_KEY_BITS",
    "SWEEP_SIZES",
    "SWEEP_ITERATIONS",
    "LOG_LEVEL",
}

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def validate_config(cfg: Dict[str, Any]) -> None:
    """
    Ensure all required keys exist with correct types/ranges.
    Raise ConfigError("<reason>") on any violation.
    No return value on success.
    """
    missing_keys = set(_REQUIRED_KEYS.keys()) - set(cfg.keys())
    if missing_keys:
        raise ConfigError(f"CONFIG missing required keys: {', '.join(sorted(missing_keys))}")

    for key, expected_type in _REQUIRED_KEYS.items():
        value = cfg[key]
        # bool is an int subclass; keep it out of the integer fields
        if expected_type is int and isinstance(value, bool):
            raise ConfigError(f"CONFIG[{key}] must be int, got bool")
        if not isinstance(value, expected_type):
            raise ConfigError(f"CONFIG[{key}] must be {expected_type.__name__}, got {type(value).__name__}")

    for key in ("PAYLOAD_SIZE", "AAD_SIZE"):
        if cfg[key] < 0:
            raise ConfigError(f"CONFIG[{key}] must be >= 0, got {cfg[key]}")

    for key in ("ITERATIONS", "SWEEP_ITERATIONS"):
        if cfg[key] < 1:
            raise ConfigError(f"CONFIG[{key}] must be >= 1, got {cfg[key]}")

    if cfg["SWEEP_KEY_BITS"] not in (128, 192, 256):
        raise ConfigError(f"CONFIG[SWEEP_KEY_BITS] must be 128, 192 or 256, got {cfg['SWEEP_KEY_BITS']}")

    sizes = cfg["SWEEP_SIZES"]
    if not sizes:
        raise ConfigError("CONFIG[SWEEP_SIZES] must not be empty")
    if any(not isinstance(s, int) or isinstance(s, bool) or s < 0 for s in sizes):
        raise ConfigError("CONFIG[SWEEP_SIZES] entries must be non-negative ints")
    if list(sizes) != sorted(set(sizes)):
        raise ConfigError("CONFIG[SWEEP_SIZES] must be strictly ascending")

    seed = cfg.get("RNG_SEED")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigError(f"CONFIG[RNG_SEED] must be int or None, got {type(seed).__name__}")

    if cfg["LOG_LEVEL"].upper() not in _LOG_LEVELS:
        raise ConfigError(f"CONFIG[LOG_LEVEL] must be one of {', '.join(sorted(_LOG_LEVELS))}")


def _parse_bool(raw: str) -> bool:
    lowered = str(raw).strip().lower()
    if lowered in {"1", "true", "yes", "on"}:
        return True
    if lowered in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"invalid boolean literal: {raw}")


def _parse_sizes(raw: str) -> Tuple[int, ...]:
    return tuple(int(part.replace("_", "")) for part in raw.split(",") if part.strip())


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply environment variable overrides to config."""
    result = cfg.copy()

    for key in _ENV_OVERRIDABLE:
        env_var = ENV_PREFIX + key
        if env_var not in os.environ:
            continue
        env_value = os.environ[env_var]
        expected_type = _REQUIRED_KEYS.get(key, int)

        try:
            if key == "RNG_SEED":
                result[key] = None if env_value.strip().lower() in {"", "none"} else int(env_value)
            elif expected_type == bool:
                result[key] = _parse_bool(env_value)
            elif expected_type == int:
                result[key] = int(env_value)
            elif expected_type == tuple:
                result[key] = _parse_sizes(env_value)
            else:
                result[key] = str(env_value)
        except ValueError:
            raise ConfigError(f"Invalid {expected_type.__name__} value for {env_var}: {env_value}")

    return result


# Apply environment overrides; callers run validate_config before a benchmark
CONFIG = _apply_env_overrides(CONFIG)
