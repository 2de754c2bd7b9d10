"""Curve25519 key pairs, base58 text form, and NaCl box encrypt/decrypt.

An encrypted message is ``sender_public_key || nonce || sealed`` where
``sealed`` is the output of ``crypto_box`` (XSalsa20-Poly1305 ciphertext
with its 16-byte tag).
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field

import base58
from nacl import public as _nacl
from nacl.exceptions import CryptoError
from nacl.public import Box

from peerbox.errors import (
    AuthenticationFailedError,
    InvalidEncodingError,
    InvalidKeyError,
    InvalidKeyLengthError,
    KeyMismatchError,
    MissingNonceError,
    MissingPublicKeyError,
    RandomSourceError,
)

log = logging.getLogger(__name__)

KEY_SIZE = 32
NONCE_SIZE = Box.NONCE_SIZE  # 24
MAC_SIZE = 16  # Poly1305 tag


def _random_bytes(size: int) -> bytes:
    try:
        return secrets.token_bytes(size)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceError(f"secure random source unavailable: {exc}") from exc


def generate_nonce() -> bytes:
    """Return a fresh random nonce. Never reuse one under the same key pair."""
    return _random_bytes(NONCE_SIZE)


def _b58encode(raw: bytes) -> str:
    return base58.b58encode(raw).decode("ascii")


def _b58decode(text: str) -> bytes:
    if isinstance(text, str) and text != text.strip():
        raise InvalidEncodingError("invalid base58 key text: surrounding whitespace")
    try:
        return base58.b58decode(text)
    except (ValueError, TypeError) as exc:
        raise InvalidEncodingError(f"invalid base58 key text: {exc}") from exc


def _derive_public(secret: bytes) -> bytes:
    return bytes(_nacl.PrivateKey(secret).public_key)


def _coerce_raw(kind: str, raw: object) -> bytes:
    if not isinstance(raw, (bytes, bytearray, memoryview)):
        raise TypeError(f"{kind} must be bytes, not {type(raw).__name__}")
    return bytes(raw)


@dataclass(frozen=True)
class PublicKey:
    """A 32-byte Curve25519 public key."""

    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _coerce_raw("public key", self.raw))
        if len(self.raw) != KEY_SIZE:
            raise InvalidKeyLengthError("public key", len(self.raw), (KEY_SIZE,))

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.text()

    def text(self) -> str:
        return _b58encode(self.raw)

    to_text = text

    @classmethod
    def from_text(cls, text: str) -> PublicKey:
        return parse_public_key(text)


@dataclass(frozen=True)
class PrivateKey:
    """A 64-byte private key: 32-byte secret scalar followed by its public key.

    The public half is cached so it never has to be recomputed. Instances
    come from :func:`generate` or :func:`parse_private_key`, which keep the
    two halves consistent.
    """

    raw: bytes = field(repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _coerce_raw("private key", self.raw))
        if len(self.raw) != KEY_SIZE * 2:
            raise InvalidKeyLengthError("private key", len(self.raw), (KEY_SIZE * 2,))

    def __bytes__(self) -> bytes:
        return self.raw

    def __str__(self) -> str:
        return self.text()

    def __repr__(self) -> str:
        return f"PrivateKey(public={self.public_key().text()})"

    def text(self) -> str:
        return _b58encode(self.raw)

    to_text = text

    @classmethod
    def from_text(cls, text: str) -> PrivateKey:
        return parse_private_key(text)

    def public_key(self) -> PublicKey:
        return PublicKey(self.raw[KEY_SIZE:])

    def _box(self, peer: PublicKey) -> Box:
        return Box(_nacl.PrivateKey(self.raw[:KEY_SIZE]), _nacl.PublicKey(peer.raw))

    def encrypt(self, peer: PublicKey, plaintext: bytes) -> bytes:
        """Seal plaintext for peer. Output is ``our_pub || nonce || sealed``."""
        try:
            box = self._box(peer)
        except CryptoError as exc:
            raise InvalidKeyError(f"unusable peer public key {peer.text()}") from exc

        nonce = generate_nonce()
        sealed = box.encrypt(plaintext, nonce).ciphertext
        log.debug("sealed %d bytes for %s", len(plaintext), peer.text())
        return bytes(self.public_key()) + nonce + sealed

    def decrypt(self, data: bytes) -> tuple[PublicKey, bytes]:
        """Open a message sealed for us. Returns (sender public key, plaintext)."""
        sender, nonce, sealed = split_message(data)
        try:
            opened = self._box(sender).decrypt(sealed, nonce)
        except CryptoError:
            raise AuthenticationFailedError("invalid message: nacl box open failed") from None
        log.debug("opened %d bytes from %s", len(opened), sender.text())
        return sender, opened


def generate() -> PrivateKey:
    """Generate a new key pair from the OS random source."""
    secret = _random_bytes(KEY_SIZE)
    key = PrivateKey(secret + _derive_public(secret))
    log.debug("generated key %s", key.public_key().text())
    return key


def parse_private_key(text: str) -> PrivateKey:
    """Parse a base58 private key.

    Accepts the full 64-byte form produced by :meth:`PrivateKey.text` (the
    public half is checked) or a bare 32-byte secret (the public half is
    derived).
    """
    raw = _b58decode(text)
    if len(raw) == KEY_SIZE:
        return PrivateKey(raw + _derive_public(raw))
    if len(raw) != KEY_SIZE * 2:
        raise InvalidKeyLengthError("private key", len(raw), (KEY_SIZE * 2, KEY_SIZE))
    if _derive_public(raw[:KEY_SIZE]) != raw[KEY_SIZE:]:
        raise KeyMismatchError("invalid private key: public half does not match secret")
    return PrivateKey(raw)


def parse_public_key(text: str) -> PublicKey:
    raw = _b58decode(text)
    if len(raw) != KEY_SIZE:
        raise InvalidKeyLengthError("public key", len(raw), (KEY_SIZE,))
    return PublicKey(raw)


def split_message(data: bytes) -> tuple[PublicKey, bytes, bytes]:
    """Split ``sender[32] || nonce[24] || sealed`` into its three fields."""
    data = bytes(data)
    if len(data) < KEY_SIZE:
        raise MissingPublicKeyError(len(data))
    if len(data) < KEY_SIZE + NONCE_SIZE:
        raise MissingNonceError(len(data))
    return (
        PublicKey(data[:KEY_SIZE]),
        data[KEY_SIZE:KEY_SIZE + NONCE_SIZE],
        data[KEY_SIZE + NONCE_SIZE:],
    )
