"""Forgeability predicate, signature assembly and search cost estimates."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray
from scipy.stats import geom

from lamport_forge.analysis.coverage import CoverageState
from lamport_forge.core.blocks import Message, Signature, bit_at, check_message
from lamport_forge.utils.constants import FULL_BYTE, MESSAGE_BITS, MESSAGE_BYTES


def _bitmap(data: bytes) -> NDArray[np.uint8]:
    return np.frombuffer(data, dtype=np.uint8)


def bitmap_mask(
    digests: NDArray[np.uint8],
    zero_used: bytes,
    one_used: bytes,
) -> NDArray[np.bool_]:
    """Vectorized forgeability test against raw coverage bitmaps.

    Per byte, ``(m & one) | (~m & zero)`` must be 0xFF: every 1-bit needs a
    revealed one-preimage and every 0-bit a revealed zero-preimage.
    """
    digests = np.asarray(digests, dtype=np.uint8).reshape(-1, MESSAGE_BYTES)
    covered = (digests & _bitmap(one_used)) | (~digests & _bitmap(zero_used))
    return np.all(covered == FULL_BYTE, axis=1)


def forgeable_mask(digests: NDArray[np.uint8], coverage: CoverageState) -> NDArray[np.bool_]:
    """:func:`is_forgeable` over every row of an ``(n, 32)`` uint8 array."""
    return bitmap_mask(digests, coverage.zero_used, coverage.one_used)


def is_forgeable(message: Message, coverage: CoverageState) -> bool:
    """True iff every bit of ``message`` can be signed from revealed preimages."""
    message = check_message(message)
    for m, one, zero in zip(message, coverage.one_used, coverage.zero_used):
        if ((m & one) | (~m & zero)) & FULL_BYTE != FULL_BYTE:
            return False
    return True


def assemble_signature(message: Message, coverage: CoverageState) -> Signature:
    """Build a signature for ``message`` from cached preimages only.

    Raises:
        ValueError: if ``message`` is not forgeable under ``coverage``.
    """
    if not is_forgeable(message, coverage):
        raise ValueError("Message is not forgeable from the observed signatures")
    return Signature(tuple(
        coverage.one_used_sigs[i] if bit_at(message, i) else coverage.zero_used_sigs[i]
        for i in range(MESSAGE_BITS)
    ))


def estimate_difficulty(coverage: CoverageState) -> int:
    """Count positions not covered on both sides.

    ``2 ** difficulty`` approximates the number of random digests to try
    before one is forgeable. Positions covered on neither side are counted
    the same as one-sided ones; see :func:`unreachable_positions`.
    """
    both = _bitmap(coverage.zero_used) & _bitmap(coverage.one_used)
    return MESSAGE_BITS - int(np.unpackbits(both).sum())


def unreachable_positions(coverage: CoverageState) -> list[int]:
    """Bit positions with no revealed preimage at all.

    Any of these makes every message unforgeable, whatever the difficulty
    estimate says.
    """
    covered = coverage.zero_bits() | coverage.one_bits()
    return [int(i) for i in np.flatnonzero(covered == 0)]


def expected_attempts(difficulty: int) -> float:
    """Mean number of candidates until the first forgeable one."""
    return float(geom.mean(2.0 ** -difficulty))


def success_probability(difficulty: int, attempts: int) -> float:
    """Probability that at least one of ``attempts`` candidates is forgeable."""
    if attempts <= 0:
        return 0.0
    return float(geom.cdf(attempts, 2.0 ** -difficulty))
