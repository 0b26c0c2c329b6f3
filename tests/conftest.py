"""Shared key pairs and observed signatures for the test suite."""

import pytest

from lamport_forge.core.blocks import message_from_string
from lamport_forge.core.keygen import generate_key
from lamport_forge.core.signing import sign


@pytest.fixture(scope="session")
def keypair():
    return generate_key()


@pytest.fixture(scope="session")
def private_key(keypair):
    return keypair[0]


@pytest.fixture(scope="session")
def public_key(keypair):
    return keypair[1]


@pytest.fixture(scope="session")
def observed(private_key):
    """(text, message, signature) for "1".."8", all under one key."""
    out = []
    for i in range(1, 9):
        text = str(i)
        message = message_from_string(text)
        out.append((text, message, sign(message, private_key)))
    return out


@pytest.fixture(scope="session")
def full_signatures(private_key):
    """Signatures on the all-zero and all-one messages: every preimage revealed."""
    return [sign(b"\x00" * 32, private_key), sign(b"\xff" * 32, private_key)]
