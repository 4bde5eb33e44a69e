"""Encryption variant registry and benchmark suite definitions.

Maps case- and punctuation-insensitive aliases onto the concrete Variant
classes and builds the ordered suites the runner iterates over.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .errors import InvalidArgument
from .variants import AesCbc, AesCbcExternalIv, AesCbcHmac, AesGcm, ChaCha20Poly1305Variant, Variant


def _normalize_alias(value: str) -> str:
    """Normalize alias strings for case- and punctuation-insensitive matching."""

    return "".join(ch for ch in value.lower() if ch.isalnum())


_VARIANT_REGISTRY = {
    "aes-cbc": {
        "cls": AesCbc,
        "display_name": "AES-CBC",
        "family": "block-cbc",
        "description": "AES-CBC, random internal IV, PKCS#7, no authentication",
        "aliases": ("AES-CBC", "aescbc", "aes", "cbc"),
    },
    "aes-cbc-hmac": {
        "cls": AesCbcHmac,
        "display_name": "AES-CBC-HMACSHA256",
        "family": "block-cbc-mac",
        "description": "AES-CBC then HMAC-SHA256 over AAD||IV||ciphertext",
        "aliases": ("AES-CBC-HMAC", "aes-hmac", "aeshmac", "aes-cbc-hmacsha256", "cbc-hmac"),
    },
    "aes-cbc-extiv": {
        "cls": AesCbcExternalIv,
        "display_name": "AES-CBC-EXTIV",
        "family": "raw-block",
        "description": "AES-CBC with caller-supplied IV, PKCS#7 applied by the variant",
        "aliases": ("AES-CBC-EXTIV", "aes-cbc-raw", "aes-raw", "cbc-raw", "extiv"),
    },
    "aes-gcm": {
        "cls": AesGcm,
        "display_name": "AES-GCM",
        "family": "aead",
        "description": "AES-GCM, 96-bit random nonce, 128-bit tag",
        "aliases": ("AES-GCM", "aesgcm", "gcm", "aes-gcm-128", "aes-256-gcm"),
    },
    "chacha20-poly1305": {
        "cls": ChaCha20Poly1305Variant,
        "display_name": "CHACHA20-POLY1305",
        "family": "aead",
        "description": "ChaCha20-Poly1305, 96-bit random nonce, 128-bit tag (256-bit key only)",
        "aliases": ("ChaCha20-Poly1305", "chacha20poly1305", "chacha", "chacha20"),
    },
}


def _build_alias_map(registry: Dict[str, Dict]) -> Dict[str, str]:
    alias_map: Dict[str, str] = {}
    for key, entry in registry.items():
        for alias in entry["aliases"]:
            alias_map[_normalize_alias(alias)] = key
        alias_map[_normalize_alias(entry["display_name"])] = key
        alias_map[_normalize_alias(key)] = key
    return alias_map


_VARIANT_ALIASES = _build_alias_map(_VARIANT_REGISTRY)

VARIANTS = MappingProxyType({key: MappingProxyType(entry) for key, entry in _VARIANT_REGISTRY.items()})


def resolve_variant(name: str) -> str:
    """Return the canonical registry key for any known alias."""

    if not name:
        raise InvalidArgument("variant name cannot be empty")
    lookup = _VARIANT_ALIASES.get(_normalize_alias(name))
    if lookup is None:
        raise InvalidArgument(f"unknown variant: {name}")
    return lookup


def get_variant(name: str) -> Dict:
    """Get variant metadata by name or alias."""

    key = resolve_variant(name)
    entry = _VARIANT_REGISTRY[key]
    cls = entry["cls"]
    return {
        "key": key,
        "cls": cls,
        "display_name": entry["display_name"],
        "family": entry["family"],
        "description": entry["description"],
        "external_iv": cls.EXTERNAL_IV,
        "key_bits": tuple(size * 8 for size in cls.KEY_SIZES),
    }


def list_variants() -> Dict[str, Dict]:
    """Return metadata for every registered variant in registration order."""

    return {key: get_variant(key) for key in _VARIANT_REGISTRY}


def variant_factory(name: str, **kwargs) -> Callable[[], Variant]:
    """Return a zero-argument factory producing fresh instances of the variant."""

    cls = _VARIANT_REGISTRY[resolve_variant(name)]["cls"]
    return partial(cls, **kwargs) if kwargs else cls


@dataclass(frozen=True)
class SuiteEntry:
    variant: str
    key_bits: int = 256

    def __post_init__(self):
        canonical = resolve_variant(self.variant)
        object.__setattr__(self, "variant", canonical)
        allowed = get_variant(canonical)["key_bits"]
        if self.key_bits not in allowed:
            raise InvalidArgument(
                f"{canonical} supports key sizes {', '.join(map(str, allowed))} bits, got {self.key_bits}"
            )

    @property
    def external_iv(self) -> bool:
        return _VARIANT_REGISTRY[self.variant]["cls"].EXTERNAL_IV

    @property
    def label(self) -> str:
        return f"{self.variant}:{self.key_bits}"

    @property
    def display_name(self) -> str:
        """Name the variant reports once keyed, e.g. AES256-GCM."""
        return _VARIANT_REGISTRY[self.variant]["cls"].NAME_TEMPLATE.format(bits=self.key_bits)

    def factory(self) -> Callable[[], Variant]:
        return variant_factory(self.variant)


# Plain AES, AES+HMAC, raw AES, then GCM; 128-bit before 256-bit.
DEFAULT_SUITE: Tuple[SuiteEntry, ...] = (
    SuiteEntry("aes-cbc", 128),
    SuiteEntry("aes-cbc", 256),
    SuiteEntry("aes-cbc-hmac", 128),
    SuiteEntry("aes-cbc-hmac", 256),
    SuiteEntry("aes-cbc-extiv", 128),
    SuiteEntry("aes-cbc-extiv", 256),
    SuiteEntry("aes-gcm", 128),
    SuiteEntry("aes-gcm", 256),
)


def parse_selection(selection: Optional[str], default_bits: int = 256) -> List[SuiteEntry]:
    """Parse ``"aes-gcm:128,aes-cbc"`` into suite entries; empty means DEFAULT_SUITE."""

    if selection is None or not selection.strip():
        return list(DEFAULT_SUITE)

    entries: List[SuiteEntry] = []
    for token in _split_tokens(selection):
        name, sep, bits = token.partition(":")
        if sep:
            try:
                key_bits = int(bits)
            except ValueError:
                raise InvalidArgument(f"invalid key size in selection: {token}")
        else:
            key_bits = default_bits
        entries.append(SuiteEntry(name.strip(), key_bits))
    return entries


def _split_tokens(selection: str) -> Iterable[str]:
    return (part.strip() for part in selection.split(",") if part.strip())
