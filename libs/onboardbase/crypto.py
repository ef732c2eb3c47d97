"""Decrypt secret envelopes produced by Onboardbase.

Envelopes use the CryptoJS passphrase format, which mirrors ``openssl enc``:
``base64("Salted__" + salt[8] + ciphertext)``. Key and IV are derived from the
passphrase and salt with ``EVP_BytesToKey`` (MD5, one round) and the payload is
AES-256-CBC with PKCS#7 padding.
"""
from __future__ import annotations

import base64
import binascii
import hashlib

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

SALT_HEADER = b"Salted__"
SALT_SIZE = 8
KEY_SIZE = 32
IV_SIZE = 16


class DecryptionError(ValueError):
    """Raised when an envelope cannot be decrypted with the given passphrase."""


def derive_key_and_iv(passphrase: str, salt: bytes) -> tuple[bytes, bytes]:
    """Return the ``(key, iv)`` pair OpenSSL derives for ``passphrase``."""

    secret = passphrase.encode("utf-8")
    derived = b""
    block = b""
    while len(derived) < KEY_SIZE + IV_SIZE:
        block = hashlib.md5(block + secret + salt).digest()
        derived += block
    return derived[:KEY_SIZE], derived[KEY_SIZE : KEY_SIZE + IV_SIZE]


def decrypt(envelope: str, passphrase: str) -> str:
    """Decrypt ``envelope`` and return the UTF-8 plaintext."""

    try:
        raw = base64.b64decode(envelope, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecryptionError("envelope is not valid base64") from exc

    if not raw.startswith(SALT_HEADER):
        raise DecryptionError("envelope is missing the salt header")
    salt = raw[len(SALT_HEADER) : len(SALT_HEADER) + SALT_SIZE]
    ciphertext = raw[len(SALT_HEADER) + SALT_SIZE :]
    if len(salt) != SALT_SIZE or not ciphertext or len(ciphertext) % IV_SIZE:
        raise DecryptionError("envelope has an invalid length")

    key, iv = derive_key_and_iv(passphrase, salt)
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()

    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        plaintext = unpadder.update(padded) + unpadder.finalize()
    except ValueError as exc:
        raise DecryptionError("invalid padding, wrong passcode?") from exc

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("plaintext is not valid UTF-8") from exc


__all__ = ["DecryptionError", "decrypt", "derive_key_and_iv"]
