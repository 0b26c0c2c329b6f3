"""Tests for the codec model: bit order, digests, hex encodings."""

import pytest

from lamport_forge.core.blocks import (
    PrivateKey,
    PublicKey,
    Signature,
    bit_at,
    check_message,
    hash_block,
    message_from_string,
    unpack_bits,
)
from lamport_forge.utils.constants import KEY_HEX_CHARS, SIGNATURE_HEX_CHARS
from lamport_forge.utils.errors import FormatError

ABC_SHA256 = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


class TestBitOrder:
    def test_bit_zero_is_msb_of_first_byte(self):
        data = b"\x80" + b"\x00" * 31
        assert bit_at(data, 0) == 1
        assert all(bit_at(data, i) == 0 for i in range(1, 256))

    def test_bit_255_is_lsb_of_last_byte(self):
        data = b"\x00" * 31 + b"\x01"
        assert bit_at(data, 255) == 1
        assert bit_at(data, 248) == 0

    def test_mixed_byte(self):
        data = bytes([0b10100000]) + b"\x00" * 31
        assert [bit_at(data, i) for i in range(8)] == [1, 0, 1, 0, 0, 0, 0, 0]

    def test_unpack_agrees_with_bit_at(self):
        data = message_from_string("bit order")
        bits = unpack_bits(data)
        assert bits.shape == (256,)
        assert [int(b) for b in bits] == [bit_at(data, i) for i in range(256)]


class TestDigests:
    def test_message_from_string(self):
        assert message_from_string("abc").hex() == ABC_SHA256

    def test_message_is_utf8(self):
        assert message_from_string("é") == hash_block("é".encode("utf-8"))

    def test_hash_block_length(self):
        assert len(hash_block(b"\x00" * 32)) == 32

    def test_check_message_rejects_short(self):
        with pytest.raises(FormatError):
            check_message(b"\x00" * 31)

    def test_check_message_rejects_str(self):
        with pytest.raises(FormatError):
            check_message("0" * 32)


class TestKeyEncoding:
    def test_public_key_hex_length(self, public_key):
        assert len(public_key.to_hex()) == KEY_HEX_CHARS

    def test_public_key_round_trip(self, public_key):
        assert PublicKey.from_hex(public_key.to_hex()) == public_key

    def test_zero_row_first(self, public_key):
        text = public_key.to_hex()
        assert text[:64] == public_key.zero_hash[0].hex()
        assert text[256 * 64 : 257 * 64] == public_key.one_hash[0].hex()
        assert text[-64:] == public_key.one_hash[255].hex()

    def test_private_key_round_trip(self, private_key):
        assert PrivateKey.from_hex(private_key.to_hex()) == private_key

    def test_public_key_derivation(self, private_key, public_key):
        assert public_key.zero_hash[17] == hash_block(private_key.zero_hash[17])
        assert public_key.one_hash[200] == hash_block(private_key.one_hash[200])

    def test_private_repr_hides_secret(self, private_key):
        assert private_key.zero_hash[0].hex()[:16] not in repr(private_key)

    def test_surrounding_whitespace_ignored(self, public_key):
        assert PublicKey.from_hex("  " + public_key.to_hex() + "\n") == public_key


class TestSignatureEncoding:
    def test_round_trip(self, observed):
        signature = observed[0][2]
        text = signature.to_hex()
        assert len(text) == SIGNATURE_HEX_CHARS
        assert Signature.from_hex(text) == signature

    def test_block_order(self, observed):
        signature = observed[0][2]
        assert signature.to_hex()[64:128] == signature.preimages[1].hex()


class TestFormatErrors:
    def test_short_pubkey(self):
        with pytest.raises(FormatError):
            PublicKey.from_hex("ab" * 100)

    def test_long_signature(self):
        with pytest.raises(FormatError):
            Signature.from_hex("0" * (SIGNATURE_HEX_CHARS + 2))

    def test_non_hex_characters(self):
        with pytest.raises(FormatError):
            Signature.from_hex("zz" * (SIGNATURE_HEX_CHARS // 2))

    def test_embedded_whitespace(self):
        text = "00 " + "0" * (SIGNATURE_HEX_CHARS - 3)
        with pytest.raises(FormatError):
            Signature.from_hex(text)

    def test_length_message(self):
        with pytest.raises(FormatError, match="string has 2 characters, expected 32768"):
            PrivateKey.from_hex("ab")

    def test_format_error_is_value_error(self):
        with pytest.raises(ValueError):
            PrivateKey.from_hex("")

    def test_wrong_block_count(self):
        with pytest.raises(FormatError):
            Signature(tuple(b"\x00" * 32 for _ in range(255)))

    def test_wrong_block_size(self):
        blocks = [b"\x00" * 32] * 256
        blocks[3] = b"\x00" * 31
        with pytest.raises(FormatError):
            PublicKey(tuple(blocks), tuple(blocks))
