"""Exception hierarchy for peerbox."""

from __future__ import annotations


class CryptError(Exception):
    """Base class for every error raised by peerbox."""


class RandomSourceError(CryptError):
    """The OS random source could not supply entropy."""


class InvalidEncodingError(CryptError, ValueError):
    """Text could not be decoded (base58 or base64)."""


class InvalidKeyError(CryptError, ValueError):
    """Key material is unusable."""


class InvalidKeyLengthError(InvalidKeyError):
    def __init__(self, kind: str, got: int, expected: tuple[int, ...]) -> None:
        want = " or ".join(str(n) for n in expected)
        super().__init__(f"invalid {kind}: expected {want} bytes, got {got}")
        self.kind = kind
        self.got = got
        self.expected = expected


class KeyMismatchError(InvalidKeyError):
    """Cached public half of a private key does not match its secret half."""


class TruncatedMessageError(CryptError, ValueError):
    reason = "truncated message"

    def __init__(self, length: int) -> None:
        super().__init__(f"invalid message: {self.reason} ({length} bytes)")
        self.length = length


class MissingPublicKeyError(TruncatedMessageError):
    reason = "missing public key"


class MissingNonceError(TruncatedMessageError):
    reason = "missing nonce"


class AuthenticationFailedError(CryptError):
    """Box open failed: wrong key, tampered ciphertext or corrupted nonce.

    Callers must treat this as "reject message". It is never transient.
    """


class ConfigError(CryptError):
    """The keyring document could not be read or contains invalid keys."""
