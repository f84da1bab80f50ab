from __future__ import annotations

import base58
from nacl.signing import SigningKey


ED25519 = "ed25519"
ED25519_KEY_TYPE = 0


def _split_key(text: str) -> bytes:
    key_type, sep, data = text.partition(":")
    if not sep:
        key_type, data = ED25519, text
    if key_type.lower() != ED25519:
        raise ValueError(f"Unsupported key type {key_type}")
    return base58.b58decode(data)


class PublicKey:
    def __init__(self, data: bytes) -> None:
        if len(data) != 32:
            raise ValueError("ed25519 public keys are 32 bytes")
        self.data = data

    @classmethod
    def from_string(cls, text: str) -> "PublicKey":
        return cls(_split_key(text))

    def __str__(self) -> str:
        return f"{ED25519}:{base58.b58encode(self.data).decode('ascii')}"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, PublicKey) and other.data == self.data

    def __hash__(self) -> int:
        return hash(self.data)


class KeyPair:
    """
    ed25519 key pair in NEAR's text form, `ed25519:<base58(seed + public key)>`.
    """

    def __init__(self, secret_key: str) -> None:
        raw = _split_key(secret_key)
        if len(raw) not in (32, 64):
            raise ValueError("ed25519 secret keys are 32 or 64 bytes")
        self._signing_key = SigningKey(raw[:32])
        self.public_key = PublicKey(bytes(self._signing_key.verify_key))

    @classmethod
    def from_random(cls) -> "KeyPair":
        signing_key = SigningKey.generate()
        raw = bytes(signing_key) + bytes(signing_key.verify_key)
        return cls(f"{ED25519}:{base58.b58encode(raw).decode('ascii')}")

    @property
    def secret_key(self) -> str:
        raw = bytes(self._signing_key) + self.public_key.data
        return f"{ED25519}:{base58.b58encode(raw).decode('ascii')}"

    def sign(self, message: bytes) -> bytes:
        return self._signing_key.sign(message).signature

    def __str__(self) -> str:
        return self.secret_key
