"""Forge search engine: find and sign a message from reused-key signatures."""

from __future__ import annotations

from lamport_forge.forge.search import ForgeSearch, forge, scan_batch

__all__ = [
    "ForgeSearch",
    "forge",
    "scan_batch",
]
