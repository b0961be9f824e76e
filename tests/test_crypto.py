"""Tests for the legacy crypto helpers."""

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from hikscan.crypto import decrypt_aes, decrypt_xor, generate_reset_code
from hikscan.exceptions import CryptoError


AES_KEY = "279977f62f6cfd2d91cd75b889ce0c9a"
XOR_KEY = "738B5544"


def encrypt_ecb(data: bytes, key_hex: str) -> bytes:
    encryptor = Cipher(algorithms.AES(bytes.fromhex(key_hex)), modes.ECB()).encryptor()
    return encryptor.update(data) + encryptor.finalize()


class TestDecryptAES:
    """Test suite for decrypt_aes."""

    def test_decrypts_ecb(self):
        plaintext = b"admin\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x0012345\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00\x00"
        assert decrypt_aes(encrypt_ecb(plaintext, AES_KEY), AES_KEY) == plaintext

    def test_block_aligned(self):
        assert len(decrypt_aes(bytes(16), AES_KEY)) == 16

    def test_unaligned_input_is_zero_padded(self):
        data = encrypt_ecb(b"A" * 16, AES_KEY) + b"\x01"
        result = decrypt_aes(data, AES_KEY)

        assert len(result) == 32
        assert result[:16] == b"A" * 16

    def test_empty_data(self):
        assert decrypt_aes(b"", AES_KEY) == b""

    def test_invalid_key_hex(self):
        with pytest.raises(CryptoError, match="invalid AES key hex"):
            decrypt_aes(bytes(16), "invalid")

    def test_key_too_short(self):
        with pytest.raises(CryptoError):
            decrypt_aes(bytes(16), "279977")


class TestDecryptXOR:
    """Test suite for decrypt_xor."""

    def test_known_output(self):
        assert decrypt_xor(bytes(5), XOR_KEY) == bytes.fromhex("738B554473")

    def test_self_inverse(self):
        original = b"Hello World! This is a test message."
        assert decrypt_xor(decrypt_xor(original, XOR_KEY), XOR_KEY) == original

    def test_empty_data(self):
        assert decrypt_xor(b"", XOR_KEY) == b""

    def test_invalid_key_hex(self):
        with pytest.raises(CryptoError, match="invalid XOR key hex"):
            decrypt_xor(b"test", "invalid")

    def test_empty_key(self):
        with pytest.raises(CryptoError):
            decrypt_xor(b"test", "")


class TestGenerateResetCode:
    """Test suite for generate_reset_code."""

    @pytest.mark.parametrize("serial,date,expected", [
        ("0123456789", "20231215", "RRRrdy9yRd"),
        ("", "", "Q"),
        ("ABC", "20240101", "RQd9qSerQz"),
    ])
    def test_known_codes(self, serial, date, expected):
        assert generate_reset_code(serial, date) == expected

    def test_deterministic(self):
        assert generate_reset_code("SN123", "20230101") == generate_reset_code("SN123", "20230101")

    def test_date_changes_code(self):
        assert generate_reset_code("SN123", "20230101") != generate_reset_code("SN123", "20230102")

    def test_alphabet(self):
        for serial in ("A", "0123456789", "DS-7616NI", "zzzzzzzzzzzzzzzz"):
            code = generate_reset_code(serial, "20231215")
            assert code
            assert set(code) <= set("QRSqrdeyz9")
