"""Concurrent generate-and-test search for a forgeable message.

Candidates ``"<prefix> <n>"`` are handed to a bounded worker pool in
contiguous counter batches. Each batch hashes its candidates, tests them
all at once against the coverage bitmaps and reports the first hit. The
first hit stops the pool: pending batches are cancelled and running
workers see the stop event before their next batch.

Hashing short candidates holds the GIL, so the default pool is made of
processes; the stop event then lives in a ``multiprocessing.Manager``.
"""

from __future__ import annotations

import hashlib
import logging
import multiprocessing
import threading
import time
from collections.abc import Iterable
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from contextlib import ExitStack
from typing import Any

import numpy as np

from lamport_forge.analysis.coverage import CoverageState, build_coverage
from lamport_forge.analysis.difficulty import (
    assemble_signature,
    bitmap_mask,
    estimate_difficulty,
    unreachable_positions,
)
from lamport_forge.core.blocks import PublicKey, Signature, message_from_string
from lamport_forge.utils.constants import INFLIGHT_PER_WORKER, MESSAGE_BYTES, POLL_INTERVAL
from lamport_forge.utils.errors import SearchAborted
from lamport_forge.utils.types import ForgeResult, SearchConfig

logger = logging.getLogger(__name__)


def scan_batch(
    prefix: str,
    start: int,
    count: int,
    zero_used: bytes,
    one_used: bytes,
    stop: Any = None,
) -> tuple[int | None, int]:
    """Test candidates ``start .. start + count - 1``.

    ``stop`` is anything with ``is_set()``: a ``threading.Event`` or a
    manager ``Event`` proxy.

    Returns ``(counter, scanned)`` where ``counter`` is the lowest forgeable
    counter in the batch or None. ``scanned`` is 0 if the batch was skipped
    because ``stop`` was already set.
    """
    if stop is not None and stop.is_set():
        return None, 0
    digests = b"".join(
        hashlib.sha256(f"{prefix} {n}".encode("utf-8")).digest()
        for n in range(start, start + count)
    )
    rows = np.frombuffer(digests, dtype=np.uint8).reshape(count, MESSAGE_BYTES)
    hits = np.flatnonzero(bitmap_mask(rows, zero_used, one_used))
    if hits.size:
        return start + int(hits[0]), count
    return None, count


class ForgeSearch:
    """Search for a message whose every bit is covered by revealed preimages.

    The coverage state is shared read-only by all workers.
    """

    def __init__(self, coverage: CoverageState, config: SearchConfig | None = None) -> None:
        self.coverage = coverage
        self.config = config or SearchConfig()
        self.difficulty = estimate_difficulty(coverage)

    def _executor(self) -> Executor:
        if self.config.use_processes:
            return ProcessPoolExecutor(max_workers=self.config.workers)
        return ThreadPoolExecutor(max_workers=self.config.workers)

    def _stop_event(self, stack: ExitStack) -> Any:
        """Stop event visible to the workers of the configured pool."""
        if self.config.use_processes:
            manager = stack.enter_context(multiprocessing.Manager())
            return manager.Event()
        return threading.Event()

    def run(self, cancel: threading.Event | None = None) -> ForgeResult:
        """Run until a forgeable candidate is found.

        Args:
            cancel: Optional event; setting it from another thread aborts
                the search.

        Raises:
            SearchAborted: on cancellation, timeout, an exhausted
                ``max_attempts`` budget, or coverage with unreachable bits.
        """
        cfg = self.config
        unreachable = unreachable_positions(self.coverage)
        if unreachable:
            logger.warning(
                "%d bit positions have no revealed preimage (first: %d); "
                "no message is forgeable", len(unreachable), unreachable[0],
            )
            raise SearchAborted("unreachable", 0)

        logger.info(
            "Forge search: difficulty %d, %d %s workers, batch %d",
            self.difficulty, cfg.workers,
            "process" if cfg.use_processes else "thread", cfg.batch_size,
        )

        zero_used, one_used = self.coverage.zero_used, self.coverage.one_used
        t0 = time.monotonic()
        deadline = t0 + cfg.timeout if cfg.timeout is not None else None
        end = cfg.start + cfg.max_attempts if cfg.max_attempts is not None else None
        inflight = cfg.workers * INFLIGHT_PER_WORKER
        next_counter = cfg.start
        attempts = 0
        next_progress = cfg.progress_interval
        found: int | None = None

        # the manager (if any) must outlive the pool, so it is entered first
        with ExitStack() as stack:
            stop = self._stop_event(stack)
            pool = stack.enter_context(self._executor())
            pending: set[Future] = set()
            try:
                while found is None:
                    while len(pending) < inflight and (end is None or next_counter < end):
                        count = cfg.batch_size if end is None else min(cfg.batch_size, end - next_counter)
                        pending.add(pool.submit(
                            scan_batch, cfg.prefix, next_counter, count,
                            zero_used, one_used, stop,
                        ))
                        next_counter += count

                    if not pending:
                        raise SearchAborted("budget", attempts)

                    wait_for = POLL_INTERVAL
                    if deadline is not None:
                        wait_for = max(0.0, min(wait_for, deadline - time.monotonic()))
                    done, pending = wait(pending, timeout=wait_for, return_when=FIRST_COMPLETED)

                    hits = []
                    for future in done:
                        counter, scanned = future.result()
                        attempts += scanned
                        if counter is not None:
                            hits.append(counter)
                    if hits:
                        found = min(hits)
                        break

                    if attempts >= next_progress:
                        elapsed = time.monotonic() - t0
                        rate = attempts / elapsed if elapsed else 0.0
                        logger.debug("%d candidates tested, %.0f/s", attempts, rate)
                        next_progress += cfg.progress_interval

                    if cancel is not None and cancel.is_set():
                        raise SearchAborted("cancelled", attempts)
                    if deadline is not None and time.monotonic() >= deadline:
                        raise SearchAborted("timeout", attempts)
            except SearchAborted as exc:
                logger.info("%s", exc)
                raise
            finally:
                stop.set()
                for future in pending:
                    future.cancel()

        elapsed = time.monotonic() - t0
        candidate = cfg.candidate(found)
        message = message_from_string(candidate)
        signature = assemble_signature(message, self.coverage)
        logger.info("Found forgeable message %r after %d attempts (%.2fs)", candidate, attempts, elapsed)
        return ForgeResult(
            candidate=candidate,
            message=message,
            signature=signature,
            counter=found,
            attempts=attempts,
            elapsed=elapsed,
        )


def forge(
    public_key: PublicKey,
    signatures: Iterable[Signature],
    config: SearchConfig | None = None,
    cancel: threading.Event | None = None,
) -> ForgeResult:
    """Build coverage from observed signatures and search for a forgery."""
    coverage = build_coverage(public_key, signatures)
    return ForgeSearch(coverage, config).run(cancel=cancel)
