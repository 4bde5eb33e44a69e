"""
Message framing shared by every encryption variant.

Wire format: AAD || nonce/IV || ciphertext || tag (tag optional).
No field carries a length prefix; the AAD and IV lengths travel out-of-band
and must be handed back to ``split`` by the caller.
"""

from dataclasses import dataclass

from .errors import CorruptFraming, InvalidArgument


BLOCK_SIZE = 16  # AES block size in bytes


@dataclass(frozen=True)
class Frame:
    aad: bytes
    iv: bytes
    body: bytes
    tag: bytes = b""


def pad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """PKCS#7 pad ``data``; always adds 1..block_size bytes."""
    if not 1 <= block_size <= 255:
        raise InvalidArgument(f"block_size must be 1..255, got {block_size}")
    pad_len = block_size - (len(data) % block_size)
    return bytes(data) + bytes([pad_len]) * pad_len


def unpad(data: bytes, block_size: int = BLOCK_SIZE) -> bytes:
    """Strip PKCS#7 padding; the last byte gives the number of bytes to remove."""
    if not data:
        raise CorruptFraming("cannot unpad empty buffer")
    pad_len = data[-1]
    if pad_len == 0:
        raise CorruptFraming("padding length byte is zero")
    if pad_len > len(data):
        raise CorruptFraming(f"padding length {pad_len} exceeds buffer length {len(data)}")
    if pad_len > block_size:
        raise CorruptFraming(f"padding length {pad_len} exceeds block size {block_size}")
    return bytes(data[:-pad_len])


def assemble(aad: bytes, iv: bytes, body: bytes, tag: bytes = b"") -> bytes:
    """Concatenate message regions in wire order."""
    return b"".join((aad or b"", iv or b"", body, tag or b""))


def split(message: bytes, aad_len: int, iv_len: int, tag_len: int = 0) -> Frame:
    """Cut ``message`` into its regions using caller-tracked lengths.

    Raises CorruptFraming when the declared header and tag do not fit, so a
    short buffer never turns into an index error further down.
    """
    for label, value in (("aad_len", aad_len), ("iv_len", iv_len), ("tag_len", tag_len)):
        if not isinstance(value, int) or value < 0:
            raise InvalidArgument(f"{label} must be a non-negative int, got {value!r}")

    if message is None:
        raise CorruptFraming("message required")

    header_len = aad_len + iv_len
    if len(message) < header_len + tag_len:
        raise CorruptFraming(
            f"message of {len(message)} bytes shorter than declared "
            f"aad({aad_len}) + iv({iv_len}) + tag({tag_len})"
        )

    message = bytes(message)
    body_end = len(message) - tag_len
    return Frame(
        aad=message[:aad_len],
        iv=message[aad_len:header_len],
        body=message[header_len:body_end],
        tag=message[body_end:],
    )
