"""Dataclass definitions for the forge search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from lamport_forge.utils.constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_PREFIX,
    DEFAULT_WORKERS,
    PROGRESS_INTERVAL,
)

if TYPE_CHECKING:
    from lamport_forge.core.blocks import Signature


@dataclass
class SearchConfig:
    """Configuration for a forge search run."""

    prefix: str = DEFAULT_PREFIX
    start: int = 0  # first counter value
    workers: int = DEFAULT_WORKERS
    batch_size: int = DEFAULT_BATCH_SIZE
    max_attempts: int | None = None  # None = unbounded
    timeout: float | None = None  # seconds, None = no deadline
    use_processes: bool = True  # False = thread pool
    progress_interval: int = PROGRESS_INTERVAL

    def __post_init__(self) -> None:
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.start < 0:
            raise ValueError(f"start must be >= 0, got {self.start}")
        if self.max_attempts is not None and self.max_attempts < 0:
            raise ValueError(f"max_attempts must be >= 0, got {self.max_attempts}")
        if self.progress_interval < 1:
            raise ValueError(f"progress_interval must be >= 1, got {self.progress_interval}")

    def candidate(self, counter: int) -> str:
        """Plaintext candidate for a given counter value."""
        return f"{self.prefix} {counter}"


@dataclass
class ForgeResult:
    """A forged message and the signature assembled for it."""

    candidate: str
    message: bytes
    signature: Signature
    counter: int
    attempts: int
    elapsed: float  # seconds
