"""
Encryption variants benchmarked behind one uniform contract.

Every variant exposes name() / init(key) / encrypt(plaintext, iv, aad) /
decrypt(message, iv_len, aad_len) and emits AAD || IV/nonce || ciphertext || tag?.
Primitives come from the `cryptography` package (AES, GCM, ChaCha20-Poly1305,
HKDF) and the standard library (HMAC-SHA256); nothing here implements a
cipher round itself.
"""

import hashlib
import hmac
import os
from abc import ABC, abstractmethod
from typing import Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .errors import AuthenticationFailure, CorruptFraming, InvalidArgument, InvalidKeyLength
from .framing import BLOCK_SIZE, assemble, pad, split, unpad


AES_KEY_SIZES = (16, 24, 32)
MAC_LEN = 32      # HMAC-SHA256 digest
AEAD_TAG_LEN = 16  # 128-bit tag, fixed
DEFAULT_NONCE_LEN = 12
MAX_GCM_NONCE_LEN = 128

_HKDF_SALT = b"cipherbench|hkdf|v1"
_HKDF_AUTH_INFO = b"cipherbench:cbc-hmac:auth"


def _as_bytes(value, label: str = "data") -> bytes:
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise InvalidArgument(f"{label} must be bytes-like, got {type(value).__name__}")


def derive_auth_key(key: bytes) -> bytes:
    """HKDF-SHA256 sub-key used for the HMAC tag."""
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=MAC_LEN,
        salt=_HKDF_SALT,
        info=_HKDF_AUTH_INFO,
    )
    return hkdf.derive(key)


class Variant(ABC):
    """Base class for benchmarkable encryption constructions.

    Subclasses set the class attributes below and implement ``_derive`` plus
    the encrypt/decrypt pair. ``init`` keeps derived state cached while the
    key is unchanged and rebuilds it when a different key is bound.
    """

    NAME_TEMPLATE = "AES{bits}"
    BARE_NAME = "AES"
    KEY_SIZES: Tuple[int, ...] = AES_KEY_SIZES
    IV_LEN = 0
    TAG_LEN = 0
    EXTERNAL_IV = False

    def __init__(self):
        self._key: Optional[bytes] = None

    def name(self) -> str:
        if self._key is None:
            return self.BARE_NAME
        return self.NAME_TEMPLATE.format(bits=len(self._key) * 8)

    @property
    def key_bits(self) -> Optional[int]:
        return None if self._key is None else len(self._key) * 8

    def init(self, key: bytes) -> "Variant":
        """Bind ``key``; raises InvalidKeyLength for unsupported lengths."""
        if not isinstance(key, (bytes, bytearray, memoryview)):
            raise InvalidKeyLength(f"key must be bytes, got {type(key).__name__}")
        key = bytes(key)
        if len(key) not in self.KEY_SIZES:
            allowed = "/".join(str(size * 8) for size in self.KEY_SIZES)
            raise InvalidKeyLength(f"{self.BARE_NAME} key must be {allowed} bits, got {len(key) * 8}")
        if key != self._key:
            self._key = key
            self._derive(key)
        return self

    @abstractmethod
    def _derive(self, key: bytes) -> None:
        """Build per-key state (primitive objects, sub-keys)."""

    @abstractmethod
    def encrypt(self, plaintext: bytes, iv: Optional[bytes] = None, aad: Optional[bytes] = None) -> bytes:
        ...

    @abstractmethod
    def decrypt(self, message: bytes, iv_len: int = 0, aad_len: int = 0) -> bytes:
        ...

    def _require_key(self) -> None:
        if self._key is None:
            raise InvalidArgument(f"{self.BARE_NAME}: init(key) must be called before use")

    def _check_internal_iv_len(self, iv_len: int) -> None:
        # 0 means "not tracked by the caller"; otherwise it must agree with ours
        if iv_len not in (0, self.IV_LEN):
            raise InvalidArgument(
                f"{self.BARE_NAME} manages a {self.IV_LEN}-byte IV internally; iv_len must be 0 or {self.IV_LEN}, got {iv_len}"
            )


class AesCbc(Variant):
    """AES-CBC with a random internal IV and provider PKCS#7 padding. No authentication."""

    NAME_TEMPLATE = "AES{bits}-CBC"
    BARE_NAME = "AES-CBC"
    IV_LEN = BLOCK_SIZE

    def _derive(self, key: bytes) -> None:
        self._algorithm = algorithms.AES(key)

    def encrypt(self, plaintext, iv=None, aad=None) -> bytes:
        self._require_key()
        if iv is not None:
            raise InvalidArgument("AES-CBC generates its IV internally; pass iv=None")
        plaintext = _as_bytes(plaintext, "plaintext")
        aad = _as_bytes(aad, "aad")

        iv = os.urandom(BLOCK_SIZE)
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        body = encryptor.update(padded) + encryptor.finalize()
        return assemble(aad, iv, body)

    def decrypt(self, message, iv_len=0, aad_len=0) -> bytes:
        self._require_key()
        self._check_internal_iv_len(iv_len)
        frame = split(message, aad_len, BLOCK_SIZE)
        if not frame.body or len(frame.body) % BLOCK_SIZE:
            raise CorruptFraming(f"ciphertext length {len(frame.body)} is not a positive multiple of {BLOCK_SIZE}")

        decryptor = Cipher(self._algorithm, modes.CBC(frame.iv)).decryptor()
        padded = decryptor.update(frame.body) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        try:
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as exc:
            raise CorruptFraming("invalid PKCS#7 padding") from exc


class AesCbcHmac(Variant):
    """AES-CBC followed by HMAC-SHA256 over AAD || IV || ciphertext (encrypt-then-MAC).

    The MAC key is derived from the cipher key with HKDF-SHA256. Tags are
    compared with ``hmac.compare_digest`` before any decryption happens.
    """

    NAME_TEMPLATE = "AES{bits}-CBC-HMACSHA256"
    BARE_NAME = "AES-CBC-HMACSHA256"
    IV_LEN = BLOCK_SIZE
    TAG_LEN = MAC_LEN

    def __init__(self):
        super().__init__()
        self._cbc = AesCbc()
        self._auth_key: Optional[bytes] = None

    def _derive(self, key: bytes) -> None:
        self._cbc.init(key)
        self._auth_key = derive_auth_key(key)

    def _mac(self, data: bytes) -> bytes:
        return hmac.new(self._auth_key, data, hashlib.sha256).digest()

    def encrypt(self, plaintext, iv=None, aad=None) -> bytes:
        self._require_key()
        if iv is not None:
            raise InvalidArgument("AES-CBC-HMACSHA256 generates its IV internally; pass iv=None")
        signed = self._cbc.encrypt(plaintext, None, aad)
        return signed + self._mac(signed)

    def decrypt(self, message, iv_len=0, aad_len=0) -> bytes:
        self._require_key()
        self._check_internal_iv_len(iv_len)
        frame = split(message, aad_len, BLOCK_SIZE, MAC_LEN)
        signed = assemble(frame.aad, frame.iv, frame.body)
        if not hmac.compare_digest(frame.tag, self._mac(signed)):
            raise AuthenticationFailure("HMAC-SHA256 tag mismatch")
        return self._cbc.decrypt(signed, 0, aad_len)


class AesCbcExternalIv(Variant):
    """Raw AES-CBC with a caller-supplied IV; padding added and stripped here."""

    NAME_TEMPLATE = "AES{bits}-CBC-EXTIV"
    BARE_NAME = "AES-CBC-EXTIV"
    IV_LEN = BLOCK_SIZE
    EXTERNAL_IV = True

    def _derive(self, key: bytes) -> None:
        self._algorithm = algorithms.AES(key)

    def encrypt(self, plaintext, iv=None, aad=None) -> bytes:
        self._require_key()
        if iv is None:
            raise InvalidArgument("AES-CBC-EXTIV requires an externally supplied IV")
        iv = _as_bytes(iv, "iv")
        if len(iv) != BLOCK_SIZE:
            raise InvalidArgument(f"IV must be {BLOCK_SIZE} bytes, got {len(iv)}")
        plaintext = _as_bytes(plaintext, "plaintext")
        aad = _as_bytes(aad, "aad")

        encryptor = Cipher(self._algorithm, modes.CBC(iv)).encryptor()
        body = encryptor.update(pad(plaintext, BLOCK_SIZE)) + encryptor.finalize()
        return assemble(aad, iv, body)

    def decrypt(self, message, iv_len=0, aad_len=0) -> bytes:
        self._require_key()
        if iv_len != BLOCK_SIZE:
            raise InvalidArgument(f"AES-CBC-EXTIV needs iv_len={BLOCK_SIZE}, got {iv_len}")
        frame = split(message, aad_len, iv_len)
        if not frame.body or len(frame.body) % BLOCK_SIZE:
            raise CorruptFraming(f"ciphertext length {len(frame.body)} is not a positive multiple of {BLOCK_SIZE}")

        decryptor = Cipher(self._algorithm, modes.CBC(frame.iv)).decryptor()
        padded = decryptor.update(frame.body) + decryptor.finalize()
        return unpad(padded, BLOCK_SIZE)


class _AeadVariant(Variant):
    """Shared AEAD plumbing: nonce handling, tag split and InvalidTag mapping."""

    TAG_LEN = AEAD_TAG_LEN

    def __init__(self, nonce_size: int = DEFAULT_NONCE_LEN, nonce: Optional[bytes] = None):
        super().__init__()
        if nonce is not None:
            nonce = _as_bytes(nonce, "nonce")
            nonce_size = len(nonce)
        self._check_nonce_size(nonce_size)
        self.IV_LEN = nonce_size
        self._fixed_nonce = nonce
        self._aead = None

    @property
    def nonce_size(self) -> int:
        return self.IV_LEN

    def _check_nonce_size(self, nonce_size: int) -> None:
        if nonce_size != DEFAULT_NONCE_LEN:
            raise InvalidArgument(f"{self.BARE_NAME} nonce must be {DEFAULT_NONCE_LEN} bytes, got {nonce_size}")

    @abstractmethod
    def _primitive(self, key: bytes):
        ...

    def _derive(self, key: bytes) -> None:
        self._aead = self._primitive(key)

    def encrypt(self, plaintext, iv=None, aad=None) -> bytes:
        self._require_key()
        if iv is not None:
            raise InvalidArgument(
                f"{self.BARE_NAME} manages its nonce; pass a fixed nonce at construction instead of iv"
            )
        plaintext = _as_bytes(plaintext, "plaintext")
        aad = _as_bytes(aad, "aad")

        nonce = self._fixed_nonce if self._fixed_nonce is not None else os.urandom(self.IV_LEN)
        body = self._aead.encrypt(nonce, plaintext, aad or None)  # ciphertext || tag
        return assemble(aad, nonce, body)

    def decrypt(self, message, iv_len=0, aad_len=0) -> bytes:
        self._require_key()
        self._check_internal_iv_len(iv_len)
        frame = split(message, aad_len, self.IV_LEN, self.TAG_LEN)
        try:
            return self._aead.decrypt(frame.iv, frame.body + frame.tag, frame.aad or None)
        except InvalidTag as exc:
            raise AuthenticationFailure(f"{self.name()} tag verification failed") from exc


class AesGcm(_AeadVariant):
    """AES-GCM with a 128-bit tag and a 96-bit nonce by default.

    Larger nonces are available through ``nonce_size``; shorter ones are
    rejected.
    """

    NAME_TEMPLATE = "AES{bits}-GCM"
    BARE_NAME = "AES-GCM"

    def _check_nonce_size(self, nonce_size: int) -> None:
        if not isinstance(nonce_size, int) or nonce_size < DEFAULT_NONCE_LEN:
            raise InvalidArgument(f"AES-GCM nonce must be at least {DEFAULT_NONCE_LEN} bytes, got {nonce_size}")
        if nonce_size > MAX_GCM_NONCE_LEN:
            raise InvalidArgument(f"AES-GCM nonce must be at most {MAX_GCM_NONCE_LEN} bytes, got {nonce_size}")

    def _primitive(self, key: bytes):
        return AESGCM(key)


class ChaCha20Poly1305Variant(_AeadVariant):
    NAME_TEMPLATE = "CHACHA20-POLY1305"
    BARE_NAME = "CHACHA20-POLY1305"
    KEY_SIZES = (32,)

    def _primitive(self, key: bytes):
        return ChaCha20Poly1305(key)
