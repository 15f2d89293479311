"""
Symmetric decoding of the short encrypted strings embedded in consultation links.

The link generator encrypts each parameter with AES-CBC, PKCS7 padding and
an all-zero IV, then base64-encodes it (sometimes with the URL-safe
alphabet and without padding). The zero IV is imposed by that producer:
identical plaintext prefixes encrypt to identical ciphertext prefixes, so
this routine must not be reused for anything new. Everything that depends
on the scheme goes through ``decrypt_text``/``encrypt_text`` so the scheme
can be swapped in one place.

Env vars used (through settings):
- DECRYPT_KEY / DECRYPTION_KEY: raw key, 16/24/32 bytes once UTF-8 encoded
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from ..exceptions import DecryptionError

_ALLOWED_KEY_SIZES = (16, 24, 32)
_ZERO_IV = bytes(16)


def _key_bytes(key: Union[str, bytes]) -> bytes:
    raw = key.encode("utf-8") if isinstance(key, str) else bytes(key)
    if len(raw) not in _ALLOWED_KEY_SIZES:
        raise DecryptionError(
            f"Invalid key length: {len(raw)}. Must be 16, 24, or 32 bytes."
        )
    return raw


def normalize_base64(value: str) -> str:
    """Map URL-safe/space-mangled base64 back to the standard alphabet and fix padding."""
    if not value or not isinstance(value, str):
        raise DecryptionError("Invalid input: ciphertext must be a non-empty string")

    s = value.strip()
    # '+' arrives as ' ' when the link was not URL-encoded
    s = s.replace(" ", "+").replace("-", "+").replace("_", "/")
    remainder = len(s) % 4
    if remainder == 1:
        raise DecryptionError("Invalid base64 length")
    if remainder:
        s += "=" * (4 - remainder)
    return s


def decrypt_text(key: Union[str, bytes], ciphertext: str) -> str:
    """Decrypt a link parameter and return its UTF-8 plaintext."""
    raw_key = _key_bytes(key)
    normalized = normalize_base64(ciphertext)

    try:
        encrypted = base64.b64decode(normalized, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError(f"Invalid base64 payload: {exc}") from exc

    if not encrypted:
        raise DecryptionError("Empty ciphertext")

    try:
        decryptor = Cipher(algorithms.AES(raw_key), modes.CBC(_ZERO_IV)).decryptor()
        padded = decryptor.update(encrypted) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plaintext = unpadder.update(padded) + unpadder.finalize()
        return plaintext.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as exc:
        raise DecryptionError(f"Decryption failed: {exc}") from exc


def encrypt_text(key: Union[str, bytes], plaintext: str) -> str:
    """Produce a link parameter the same way the link generator does."""
    if plaintext is None:
        raise ValueError("encrypt_text: plaintext cannot be None")
    raw_key = _key_bytes(key)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(raw_key), modes.CBC(_ZERO_IV)).encryptor()
    encrypted = encryptor.update(padded) + encryptor.finalize()
    return base64.b64encode(encrypted).decode("ascii")
