"""Key pair generation from a cryptographically secure random source."""

from __future__ import annotations

import secrets
from collections.abc import Callable

from lamport_forge.core.blocks import Block, PrivateKey, PublicKey
from lamport_forge.utils.constants import BLOCK_BYTES, MESSAGE_BITS
from lamport_forge.utils.errors import RandomnessError

RandomSource = Callable[[int], bytes]


def _read_row(read_random: RandomSource) -> tuple[Block, ...]:
    row = []
    for _ in range(MESSAGE_BITS):
        try:
            block = read_random(BLOCK_BYTES)
        except OSError as exc:
            raise RandomnessError(f"Random source failed: {exc}") from exc
        if len(block) != BLOCK_BYTES:
            raise RandomnessError(
                f"Random source returned {len(block)} bytes, expected {BLOCK_BYTES}"
            )
        row.append(bytes(block))
    return tuple(row)


def generate_key(
    read_random: RandomSource = secrets.token_bytes,
) -> tuple[PrivateKey, PublicKey]:
    """Generate a fresh one-time key pair.

    Args:
        read_random: Callable returning ``n`` random bytes. Defaults to the
            OS CSPRNG via :func:`secrets.token_bytes`.

    Returns:
        ``(private_key, public_key)``.

    Raises:
        RandomnessError: if the source raises ``OSError`` or returns a
            short read.
    """
    private_key = PrivateKey(_read_row(read_random), _read_row(read_random))
    return private_key, private_key.public_key()
