"""Exception hierarchy for lamport-forge."""

from __future__ import annotations


class LamportError(Exception):
    """Base class for every error raised by lamport-forge."""


class FormatError(LamportError, ValueError):
    """Hex string or block array has the wrong length or alphabet."""


class KeyMismatchError(LamportError, ValueError):
    """A revealed preimage hashes to neither half of the public key.

    The observed signatures are inconsistent with the stated key (wrong
    key, corrupted signature, or a hash collision), so the analysis that
    hit it cannot continue.
    """

    def __init__(self, signature_index: int, bit_index: int) -> None:
        self.signature_index = signature_index
        self.bit_index = bit_index
        super().__init__(
            f"Signature {signature_index}: preimage at bit {bit_index} "
            "matches neither public key half"
        )


class RandomnessError(LamportError, OSError):
    """The random byte source failed during key generation."""


class SearchAborted(LamportError, RuntimeError):
    """The forge search stopped before finding a forgeable candidate.

    ``reason`` is one of ``"cancelled"``, ``"timeout"``, ``"budget"`` or
    ``"unreachable"``.
    """

    def __init__(self, reason: str, attempts: int = 0) -> None:
        self.reason = reason
        self.attempts = attempts
        super().__init__(f"Forge search aborted ({reason}) after {attempts:,} attempts")
