"""
Borsh encoding and signing of NEAR function-call transactions.

Only the parts of the transaction schema the gateway sends are covered:
a transaction carrying FunctionCall actions, and its signed envelope.
"""

from __future__ import annotations

import hashlib
import json
import struct
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from .keys import ED25519_KEY_TYPE, KeyPair, PublicKey


FUNCTION_CALL_ACTION = 2


class BorshWriter:
    def __init__(self) -> None:
        self._buf = bytearray()

    def u8(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<B", value)
        return self

    def u32(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<I", value)
        return self

    def u64(self, value: int) -> "BorshWriter":
        self._buf += struct.pack("<Q", value)
        return self

    def u128(self, value: int) -> "BorshWriter":
        self._buf += value.to_bytes(16, "little")
        return self

    def fixed(self, data: bytes) -> "BorshWriter":
        self._buf += data
        return self

    def vec(self, data: bytes) -> "BorshWriter":
        return self.u32(len(data)).fixed(data)

    def string(self, value: str) -> "BorshWriter":
        return self.vec(value.encode("utf-8"))

    def getvalue(self) -> bytes:
        return bytes(self._buf)


def encode_args(args: Dict[str, Any]) -> bytes:
    return json.dumps(args, separators=(",", ":")).encode("utf-8")


@dataclass
class FunctionCall:
    method_name: str
    args: bytes
    gas: int
    deposit: int = 0

    def write(self, writer: BorshWriter) -> None:
        writer.u8(FUNCTION_CALL_ACTION)
        writer.string(self.method_name)
        writer.vec(self.args)
        writer.u64(self.gas)
        writer.u128(self.deposit)


@dataclass
class Transaction:
    signer_id: str
    public_key: PublicKey
    nonce: int
    receiver_id: str
    block_hash: bytes
    actions: List[FunctionCall] = field(default_factory=list)

    def serialize(self) -> bytes:
        if len(self.block_hash) != 32:
            raise ValueError("block hash must be 32 bytes")
        writer = BorshWriter()
        writer.string(self.signer_id)
        writer.u8(ED25519_KEY_TYPE).fixed(self.public_key.data)
        writer.u64(self.nonce)
        writer.string(self.receiver_id)
        writer.fixed(self.block_hash)
        writer.u32(len(self.actions))
        for action in self.actions:
            action.write(writer)
        return writer.getvalue()


@dataclass
class SignedTransaction:
    transaction: Transaction
    signature: bytes

    def serialize(self) -> bytes:
        writer = BorshWriter()
        writer.fixed(self.transaction.serialize())
        writer.u8(ED25519_KEY_TYPE).fixed(self.signature)
        return writer.getvalue()


def sign_transaction(
    transaction: Transaction,
    key_pair: KeyPair,
) -> Tuple[bytes, SignedTransaction]:
    """Return the transaction hash and the signed transaction."""

    digest = hashlib.sha256(transaction.serialize()).digest()
    return digest, SignedTransaction(transaction, key_pair.sign(digest))
