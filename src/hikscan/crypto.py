"""
Legacy Hikvision crypto helpers.

These reproduce the vendor's old schemes for interoperability only: raw
AES-ECB decryption of configuration blobs, repeating-key XOR, and the
password-reset code used by firmware older than 5.3.0.
"""

import binascii

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from hikscan.exceptions import CryptoError

AES_BLOCK_SIZE = 16

RESET_CODE_MULTIPLIER = 1751873395

# Decimal digit -> reset code character; 9 is left as is
_RESET_CODE_TABLE = str.maketrans("012345678", "QRSqrdeyz")


def _decode_key(key_hex: str, kind: str) -> bytes:
    try:
        return binascii.unhexlify(key_hex)
    except (binascii.Error, ValueError) as e:
        raise CryptoError(f"invalid {kind} key hex: {e}") from e


def decrypt_aes(data: bytes, key_hex: str) -> bytes:
    """
    Decrypt data with AES in ECB mode.

    Data that is not a whole number of blocks is zero-padded first, so the
    result is always a multiple of the block size.

    Raises:
        CryptoError: If the key is not valid hex or not a valid AES key length
    """
    key = _decode_key(key_hex, "AES")
    try:
        cipher = Cipher(algorithms.AES(key), modes.ECB())
    except ValueError as e:
        raise CryptoError(f"failed to create AES cipher: {e}") from e

    remainder = len(data) % AES_BLOCK_SIZE
    if remainder:
        data = data + b"\x00" * (AES_BLOCK_SIZE - remainder)

    decryptor = cipher.decryptor()
    return decryptor.update(data) + decryptor.finalize()


def decrypt_xor(data: bytes, key_hex: str) -> bytes:
    """
    XOR data with a repeating key. Applying it twice returns the input.

    Raises:
        CryptoError: If the key is not valid hex or is empty
    """
    key = _decode_key(key_hex, "XOR")
    if not key:
        raise CryptoError("XOR key must not be empty")
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(data))


def generate_reset_code(serial: str, date: str) -> str:
    """
    Generate the legacy password-reset code for a device.

    Args:
        serial: Device serial number (without the model prefix)
        date: Device date as YYYYMMDD

    Returns:
        The reset code
    """
    magic = 0
    for i, char in enumerate(serial + date, start=1):
        magic += (i * ord(char)) ^ i

    secret = (magic * RESET_CODE_MULTIPLIER) & 0xFFFFFFFF
    return str(secret).translate(_RESET_CODE_TABLE)
