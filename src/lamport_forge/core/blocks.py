"""Block, message, key and signature types plus the canonical bit order.

Every fixed-size byte array is read big-endian, most significant bit
first: bit ``i`` lives in byte ``i // 8`` at offset ``7 - i % 8``, so
bit 0 is the top bit of byte 0 and bit 255 is the low bit of byte 31.
Keys and signatures are only mutually readable if every component uses
this order, so all single-bit reads go through :func:`bit_at`.
"""

from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from lamport_forge.utils.constants import (
    BLOCK_BYTES,
    KEY_HEX_CHARS,
    MESSAGE_BITS,
    MESSAGE_BYTES,
    SIGNATURE_HEX_CHARS,
)
from lamport_forge.utils.errors import FormatError

Block = bytes
Message = bytes


def bit_at(data: bytes, index: int) -> int:
    """Return bit ``index`` of ``data`` (0 or 1), MSB first."""
    return (data[index // 8] >> (7 - index % 8)) & 0x01


def unpack_bits(data: bytes) -> NDArray[np.uint8]:
    """All bits of ``data`` as a uint8 vector, in :func:`bit_at` order."""
    return np.unpackbits(np.frombuffer(data, dtype=np.uint8), bitorder="big")


def hash_block(data: bytes) -> Block:
    return hashlib.sha256(data).digest()


def message_from_string(text: str) -> Message:
    """Message digest of a plaintext string (SHA-256 of its UTF-8 bytes)."""
    return hash_block(text.encode("utf-8"))


def check_message(message: bytes) -> Message:
    if not isinstance(message, (bytes, bytearray)) or len(message) != MESSAGE_BYTES:
        raise FormatError(f"Message must be exactly {MESSAGE_BYTES} bytes")
    return bytes(message)


def _check_blocks(blocks: Sequence[bytes], name: str) -> tuple[Block, ...]:
    if len(blocks) != MESSAGE_BITS:
        raise FormatError(f"{name} must hold {MESSAGE_BITS} blocks, got {len(blocks)}")
    out = tuple(bytes(b) for b in blocks)
    for i, block in enumerate(out):
        if len(block) != BLOCK_BYTES:
            raise FormatError(
                f"{name}[{i}] must be {BLOCK_BYTES} bytes, got {len(block)}"
            )
    return out


def _decode_hex(text: str, expected_chars: int, what: str) -> bytes:
    cleaned = text.strip()
    if len(cleaned) != expected_chars:
        raise FormatError(
            f"{what} string has {len(cleaned)} characters, expected {expected_chars}"
        )
    try:
        raw = bytes.fromhex(cleaned)
    except ValueError as exc:
        raise FormatError(f"{what} string is not valid hex") from exc
    if len(raw) != expected_chars // 2:
        # bytes.fromhex skips whitespace, which the length check lets through
        raise FormatError(f"{what} string is not valid hex")
    return raw


def _split_blocks(raw: bytes) -> list[Block]:
    return [raw[i : i + BLOCK_BYTES] for i in range(0, len(raw), BLOCK_BYTES)]


@dataclass(frozen=True)
class PublicKey:
    """Hashes of the 256 zero-preimages and 256 one-preimages."""

    zero_hash: tuple[Block, ...]
    one_hash: tuple[Block, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "zero_hash", _check_blocks(self.zero_hash, "zero_hash"))
        object.__setattr__(self, "one_hash", _check_blocks(self.one_hash, "one_hash"))

    def to_hex(self) -> str:
        """Zero row then one row, blocks in bit-index order."""
        return b"".join(self.zero_hash + self.one_hash).hex()

    @classmethod
    def from_hex(cls, text: str) -> PublicKey:
        blocks = _split_blocks(_decode_hex(text, KEY_HEX_CHARS, "Pubkey"))
        return cls(tuple(blocks[:MESSAGE_BITS]), tuple(blocks[MESSAGE_BITS:]))

    def __repr__(self) -> str:
        return f"PublicKey(0x{self.zero_hash[0].hex()[:16]}...)"


@dataclass(frozen=True)
class PrivateKey:
    """The 512 secret preimages: one per (bit position, bit value)."""

    zero_hash: tuple[Block, ...]
    one_hash: tuple[Block, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "zero_hash", _check_blocks(self.zero_hash, "zero_hash"))
        object.__setattr__(self, "one_hash", _check_blocks(self.one_hash, "one_hash"))

    def public_key(self) -> PublicKey:
        return PublicKey(
            tuple(hash_block(b) for b in self.zero_hash),
            tuple(hash_block(b) for b in self.one_hash),
        )

    def to_hex(self) -> str:
        return b"".join(self.zero_hash + self.one_hash).hex()

    @classmethod
    def from_hex(cls, text: str) -> PrivateKey:
        blocks = _split_blocks(_decode_hex(text, KEY_HEX_CHARS, "Private key"))
        return cls(tuple(blocks[:MESSAGE_BITS]), tuple(blocks[MESSAGE_BITS:]))

    def __repr__(self) -> str:
        # never print secret material
        return "PrivateKey(<secret>)"


@dataclass(frozen=True)
class Signature:
    """One revealed preimage per message bit, in bit-index order."""

    preimages: tuple[Block, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "preimages", _check_blocks(self.preimages, "preimages"))

    def to_hex(self) -> str:
        return b"".join(self.preimages).hex()

    @classmethod
    def from_hex(cls, text: str) -> Signature:
        return cls(tuple(_split_blocks(_decode_hex(text, SIGNATURE_HEX_CHARS, "Signature"))))

    def __repr__(self) -> str:
        return f"Signature(0x{self.preimages[0].hex()[:16]}...)"
