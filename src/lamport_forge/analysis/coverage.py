"""Coverage tracking: which key halves have been exposed by observed signatures."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from lamport_forge.core.blocks import Block, PublicKey, Signature, hash_block, unpack_bits
from lamport_forge.utils.constants import MESSAGE_BITS, MESSAGE_BYTES
from lamport_forge.utils.errors import KeyMismatchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoverageState:
    """Exposed preimages under one public key.

    ``zero_used`` / ``one_used`` are 256-bit bitmaps in the canonical bit
    order: bit i of ``zero_used`` is set iff some observed signature
    revealed the preimage of ``public_key.zero_hash[i]`` (likewise for
    ``one_used``). The revealed blocks are cached in ``zero_used_sigs`` /
    ``one_used_sigs`` (None where nothing was revealed).
    """

    zero_used: bytes
    one_used: bytes
    zero_used_sigs: tuple[Block | None, ...]
    one_used_sigs: tuple[Block | None, ...]
    n_signatures: int = 0

    @classmethod
    def empty(cls) -> CoverageState:
        return cls(
            zero_used=bytes(MESSAGE_BYTES),
            one_used=bytes(MESSAGE_BYTES),
            zero_used_sigs=(None,) * MESSAGE_BITS,
            one_used_sigs=(None,) * MESSAGE_BITS,
        )

    def fold(
        self,
        public_key: PublicKey,
        signature: Signature,
        signature_index: int | None = None,
    ) -> CoverageState:
        """Return a new state with ``signature``'s preimages added.

        Each revealed block is classified by the public half it hashes to,
        not by the bit of the message it was issued for, so signatures for
        unknown messages still count. Bits are only ever set.

        Raises:
            KeyMismatchError: a block hashes to neither public half.
        """
        if signature_index is None:
            signature_index = self.n_signatures
        zero_used = bytearray(self.zero_used)
        one_used = bytearray(self.one_used)
        zero_sigs = list(self.zero_used_sigs)
        one_sigs = list(self.one_used_sigs)

        for i, block in enumerate(signature.preimages):
            digest = hash_block(block)
            mask = 0x01 << (7 - i % 8)
            if digest == public_key.zero_hash[i]:
                zero_used[i // 8] |= mask
                zero_sigs[i] = block
            elif digest == public_key.one_hash[i]:
                one_used[i // 8] |= mask
                one_sigs[i] = block
            else:
                raise KeyMismatchError(signature_index, i)

        return CoverageState(
            zero_used=bytes(zero_used),
            one_used=bytes(one_used),
            zero_used_sigs=tuple(zero_sigs),
            one_used_sigs=tuple(one_sigs),
            n_signatures=self.n_signatures + 1,
        )

    def zero_bits(self) -> NDArray[np.uint8]:
        return unpack_bits(self.zero_used)

    def one_bits(self) -> NDArray[np.uint8]:
        return unpack_bits(self.one_used)

    def covered_both(self) -> int:
        """Positions where both preimages are known."""
        return int(np.count_nonzero(self.zero_bits() & self.one_bits()))

    def covered_one_side(self) -> int:
        """Positions where exactly one preimage is known."""
        return int(np.count_nonzero(self.zero_bits() ^ self.one_bits()))

    def covered_neither(self) -> int:
        return int(np.count_nonzero((self.zero_bits() | self.one_bits()) == 0))

    def __repr__(self) -> str:
        return (
            f"CoverageState(n_signatures={self.n_signatures}, "
            f"both={self.covered_both()}, one_side={self.covered_one_side()}, "
            f"neither={self.covered_neither()})"
        )


def build_coverage(public_key: PublicKey, signatures: Iterable[Signature]) -> CoverageState:
    """Fold a batch of observed signatures into a fresh coverage state."""
    state = CoverageState.empty()
    for index, signature in enumerate(signatures):
        state = state.fold(public_key, signature, signature_index=index)
    logger.debug("Coverage built: %r", state)
    return state
