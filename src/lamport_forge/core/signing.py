"""One-time signing and verification."""

from __future__ import annotations

from lamport_forge.core.blocks import (
    Message,
    PrivateKey,
    PublicKey,
    Signature,
    bit_at,
    check_message,
    hash_block,
)
from lamport_forge.utils.constants import MESSAGE_BITS


def sign(message: Message, private_key: PrivateKey) -> Signature:
    """Reveal, for each message bit, the preimage matching its value."""
    message = check_message(message)
    return Signature(tuple(
        private_key.one_hash[i] if bit_at(message, i) else private_key.zero_hash[i]
        for i in range(MESSAGE_BITS)
    ))


def verify(message: Message, public_key: PublicKey, signature: Signature) -> bool:
    """True iff every revealed block hashes to the half selected by its bit."""
    message = check_message(message)
    for i in range(MESSAGE_BITS):
        expected = public_key.one_hash[i] if bit_at(message, i) else public_key.zero_hash[i]
        if hash_block(signature.preimages[i]) != expected:
            return False
    return True
