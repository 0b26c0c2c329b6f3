"""Sizes and defaults for the one-time signature scheme and the forge search."""

import os

# -- Scheme geometry --
MESSAGE_BITS: int = 256
MESSAGE_BYTES: int = MESSAGE_BITS // 8
BLOCK_BYTES: int = 32  # SHA-256 output / preimage size

# -- Hex encodings --
BLOCK_HEX_CHARS: int = BLOCK_BYTES * 2
SIGNATURE_HEX_CHARS: int = MESSAGE_BITS * BLOCK_HEX_CHARS  # 1 row
KEY_HEX_CHARS: int = 2 * MESSAGE_BITS * BLOCK_HEX_CHARS  # 2 rows: zero, then one

# -- Bitmaps --
FULL_BYTE: int = 0xFF

# -- Forge search --
DEFAULT_PREFIX: str = "forge"
DEFAULT_BATCH_SIZE: int = 4096
DEFAULT_WORKERS: int = os.cpu_count() or 1
INFLIGHT_PER_WORKER: int = 2
PROGRESS_INTERVAL: int = 1_000_000
POLL_INTERVAL: float = 0.1  # seconds between cancellation checks
