"""peerbox — NaCl box key pairs and peer-to-peer message encryption."""

from peerbox.crypto import (
    KEY_SIZE,
    NONCE_SIZE,
    PrivateKey,
    PublicKey,
    generate,
    parse_private_key,
    parse_public_key,
    split_message,
)
from peerbox.errors import (
    AuthenticationFailedError,
    ConfigError,
    CryptError,
    InvalidEncodingError,
    InvalidKeyError,
    InvalidKeyLengthError,
    KeyMismatchError,
    MissingNonceError,
    MissingPublicKeyError,
    RandomSourceError,
    TruncatedMessageError,
)

__version__ = "0.1.0"

__all__ = [
    "KEY_SIZE",
    "NONCE_SIZE",
    "PrivateKey",
    "PublicKey",
    "generate",
    "parse_private_key",
    "parse_public_key",
    "split_message",
    "AuthenticationFailedError",
    "ConfigError",
    "CryptError",
    "InvalidEncodingError",
    "InvalidKeyError",
    "InvalidKeyLengthError",
    "KeyMismatchError",
    "MissingNonceError",
    "MissingPublicKeyError",
    "RandomSourceError",
    "TruncatedMessageError",
]
