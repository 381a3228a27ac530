"""
Hashing, base58check and message-signing primitives.
"""

from __future__ import annotations

import base64
import hashlib

import base58
from coincurve import PrivateKey, PublicKey

from vrsccore.errors import DecodeError, ValidationError
from vrsccore.networks import NetworkParams


def hash256(data: bytes) -> bytes:
    """SHA256(SHA256(data))"""
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def encode_varint(value: int) -> bytes:
    if value < 0:
        raise ValidationError(f"Varint cannot encode negative value {value}")
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    first = data[offset]
    offset += 1

    if first < 0xFD:
        return first, offset
    if first == 0xFD:
        value = int.from_bytes(data[offset : offset + 2], "little")
        return value, offset + 2
    if first == 0xFE:
        value = int.from_bytes(data[offset : offset + 4], "little")
        return value, offset + 4
    value = int.from_bytes(data[offset : offset + 8], "little")
    return value, offset + 8


def base58check_encode(payload: bytes) -> str:
    """base58(payload || SHA256d(payload)[:4])"""
    return base58.b58encode_check(payload).decode("ascii")


def base58check_decode(value: str) -> bytes:
    """
    Decode a base58check string and verify its checksum.

    Raises:
        DecodeError: On characters outside the base58 alphabet or checksum mismatch
    """
    if not isinstance(value, str) or not value:
        raise DecodeError("Empty or non-string base58check value")
    try:
        return base58.b58decode_check(value)
    except ValueError as e:
        raise DecodeError(f"Invalid base58check string: {e}") from e


def message_hash(message: str, params: NetworkParams) -> bytes:
    """
    Hash a message using the chain's signed-message format.

    Format: SHA256d(message_prefix + varint(len) + message)
    """
    prefix = params.message_prefix.encode("utf-8")
    msg_bytes = message.encode("utf-8")
    return hash256(prefix + encode_varint(len(msg_bytes)) + msg_bytes)


def sign_message(message: str, private_key: PrivateKey, params: NetworkParams) -> str:
    """
    Sign a message with a compact recoverable signature.

    Returns:
        Base64 of header byte (27 + recid + 4 for compressed keys) followed by r || s
    """
    sig = private_key.sign_recoverable(message_hash(message, params), hasher=None)
    # coincurve layout is r || s || recid
    header = 27 + sig[64] + 4
    return base64.b64encode(bytes([header]) + sig[:64]).decode("ascii")


def verify_message(address: str, message: str, signature_b64: str, params: NetworkParams) -> bool:
    """
    Verify a compact signature against a P2PKH address.

    Returns:
        True if the recovered key hashes to the address
    """
    try:
        sig = base64.b64decode(signature_b64, validate=True)
    except ValueError:
        return False
    if len(sig) != 65 or not 31 <= sig[0] <= 34:
        return False

    recid = sig[0] - 31
    try:
        pubkey = PublicKey.from_signature_and_message(
            sig[1:] + bytes([recid]), message_hash(message, params), hasher=None
        )
    except ValueError:
        return False

    payload = bytes([params.pub_key_hash]) + hash160(pubkey.format(compressed=True))
    return base58check_encode(payload) == address
