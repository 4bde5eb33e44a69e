"""
Error taxonomy shared by variants, framing and the benchmark runner.
"""


class CipherBenchError(Exception):
    """Base class for all cipherbench failures."""
    pass


class InvalidKeyLength(CipherBenchError):
    """Key material is not one of the lengths accepted by the variant."""
    pass


class InvalidArgument(CipherBenchError):
    """Caller violated a variant or runner contract (IV ownership, sizes, call order)."""
    pass


class CorruptFraming(CipherBenchError):
    """Declared AAD/IV/tag lengths or padding do not fit the message buffer."""
    pass


class AuthenticationFailure(CipherBenchError):
    """MAC or AEAD tag verification failed during decryption."""
    pass


class RoundTripMismatch(CipherBenchError):
    """Decrypted plaintext differs from the original without an authentication error."""
    pass
