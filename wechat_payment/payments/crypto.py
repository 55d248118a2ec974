"""AES decryption of the encrypted ``req_info`` field of refund notifications."""

import base64
import binascii
import hashlib

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from wechat_payment.core.exceptions import DecryptionError

KEY_SIZE = 32


def derive_refund_key(partner_key: str) -> bytes:
    """Key for ``req_info``: lowercase hex MD5 of the API key (32 bytes)."""
    return hashlib.md5(partner_key.encode("utf-8")).hexdigest().lower().encode("ascii")


def decrypt_req_info(key: bytes, ciphertext_b64: str) -> str:
    """Decrypt a base64 AES-256-ECB payload.

    Padding is not removed: PKCS#7 bytes remain at the end of the returned
    text. ``parse_xml`` ignores them.

    Raises:
        DecryptionError: On bad key length, malformed base64 or cipher failure
    """
    if len(key) != KEY_SIZE:
        raise DecryptionError(
            message=f"Invalid key length: {len(key)}",
            details={"key_length": len(key)},
        )

    try:
        ciphertext = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecryptionError(message=f"Invalid base64: {e}") from e

    if not ciphertext or len(ciphertext) % (algorithms.AES.block_size // 8):
        raise DecryptionError(
            message="Ciphertext is not a whole number of blocks",
            details={"length": len(ciphertext)},
        )

    decryptor = Cipher(algorithms.AES(key), modes.ECB()).decryptor()
    plaintext = decryptor.update(ciphertext) + decryptor.finalize()

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError(message="Decrypted payload is not UTF-8") from e
