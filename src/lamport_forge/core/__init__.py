"""Lamport one-time signature primitives: types, keys, signing."""

from __future__ import annotations

from lamport_forge.core.blocks import (
    Block,
    Message,
    PrivateKey,
    PublicKey,
    Signature,
    bit_at,
    message_from_string,
    unpack_bits,
)
from lamport_forge.core.keygen import generate_key
from lamport_forge.core.signing import sign, verify

__all__ = [
    "Block",
    "Message",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "bit_at",
    "generate_key",
    "message_from_string",
    "sign",
    "unpack_bits",
    "verify",
]
