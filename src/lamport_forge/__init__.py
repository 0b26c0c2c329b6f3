"""Lamport one-time signatures and the key-reuse forgery attack."""

__version__ = "0.1.0"
