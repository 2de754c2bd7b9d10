"""Wire framing for encrypted messages and base64 payload transport."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass

from peerbox.crypto import KEY_SIZE, MAC_SIZE, NONCE_SIZE, PublicKey, split_message
from peerbox.errors import InvalidEncodingError


@dataclass(frozen=True)
class EncryptedMessage:
    """On-the-wire encrypted message: ``sender[32] || nonce[24] || sealed``."""

    sender: PublicKey
    nonce: bytes
    sealed: bytes  # ciphertext + Poly1305 tag

    overhead = KEY_SIZE + NONCE_SIZE + MAC_SIZE

    def to_bytes(self) -> bytes:
        return bytes(self.sender) + self.nonce + self.sealed

    @classmethod
    def from_bytes(cls, data: bytes) -> EncryptedMessage:
        sender, nonce, sealed = split_message(data)
        return cls(sender=sender, nonce=nonce, sealed=sealed)


def encode_payload(encrypted: bytes) -> str:
    return base64.b64encode(encrypted).decode()


def decode_payload(b64: str) -> bytes:
    try:
        return base64.b64decode(b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError(f"invalid base64 payload: {exc}") from exc
