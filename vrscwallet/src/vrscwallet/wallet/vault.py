"""
Password-based authenticated encryption for wallet secrets.

Blob layout (base64 encoded):

    salt (16) || iv (12) || tag (16) || ciphertext (N)

The key is PBKDF2-HMAC-SHA256(password, salt, 100_000 iterations, 32 bytes)
and the cipher is AES-256-GCM. These parameters are fixed: the password is
the only thing protecting funds at rest.
"""

from __future__ import annotations

import base64
import binascii
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from loguru import logger
from vrsccore.errors import AuthenticationError, EntropyError, ValidationError
from vrsccore.secure import SecretBuffer

SALT_LENGTH = 16
IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32
PBKDF2_ITERATIONS = 100_000

HEADER_LENGTH = SALT_LENGTH + IV_LENGTH + TAG_LENGTH


def _derive_key(password: str, salt: bytes) -> SecretBuffer:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return SecretBuffer(kdf.derive(password.encode("utf-8")))


def encrypt(plaintext: str, password: str) -> str:
    """
    Encrypt a secret string under a password.

    Args:
        plaintext: Secret to protect (mnemonic, WIF, ...)
        password: User password

    Returns:
        Base64 encoded blob
    """
    if not isinstance(plaintext, str) or not isinstance(password, str):
        raise ValidationError("Plaintext and password must be strings")

    try:
        salt = secrets.token_bytes(SALT_LENGTH)
        iv = secrets.token_bytes(IV_LENGTH)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e

    with _derive_key(password, salt) as key:
        sealed = AESGCM(key.reveal()).encrypt(iv, plaintext.encode("utf-8"), None)

    # AESGCM appends the tag; the blob stores it ahead of the ciphertext
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    blob = base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")
    logger.debug(f"Encrypted {len(ciphertext)}-byte secret")
    return blob


def decrypt(blob: str, password: str) -> str:
    """
    Decrypt a blob produced by encrypt().

    Raises:
        AuthenticationError: Wrong password, tampered or malformed blob
    """
    if not isinstance(blob, str) or not isinstance(password, str):
        raise AuthenticationError("Blob and password must be strings")

    try:
        raw = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as e:
        raise AuthenticationError("Encrypted blob is not valid base64") from e

    # Padding bits must be zero so each blob string has exactly one decoding
    if base64.b64encode(raw).decode("ascii") != blob:
        raise AuthenticationError("Encrypted blob is not canonical base64")

    if len(raw) < HEADER_LENGTH:
        raise AuthenticationError("Encrypted blob is truncated")

    salt = raw[:SALT_LENGTH]
    iv = raw[SALT_LENGTH : SALT_LENGTH + IV_LENGTH]
    tag = raw[SALT_LENGTH + IV_LENGTH : HEADER_LENGTH]
    ciphertext = raw[HEADER_LENGTH:]

    with _derive_key(password, salt) as key:
        try:
            plaintext = AESGCM(key.reveal()).decrypt(iv, ciphertext + tag, None)
        except InvalidTag as e:
            raise AuthenticationError("Decryption failed: wrong password or tampered data") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise AuthenticationError("Decrypted data is not valid UTF-8") from e
