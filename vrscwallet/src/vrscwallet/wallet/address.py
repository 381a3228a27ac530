"""
Address and WIF encoding.

Addresses are base58check(version || hash160) and private keys use the
Wallet Import Format base58check(wif_version || scalar [|| 0x01]).
"""

from __future__ import annotations

from dataclasses import dataclass

from vrsccore.crypto import base58check_decode, base58check_encode, hash160
from vrsccore.errors import DecodeError, ValidationError
from vrsccore.networks import NetworkParams

WIF_COMPRESSED_FLAG = 0x01


@dataclass(frozen=True)
class DecodedAddress:
    version: int
    hash160: bytes


@dataclass(frozen=True)
class DecodedWIF:
    version: int
    secret: bytes
    compressed: bool


def encode_address(pubkey_hash: bytes, params: NetworkParams, version: int | None = None) -> str:
    """
    Encode a 20-byte hash as a base58check address.

    Args:
        pubkey_hash: RIPEMD160(SHA256(pubkey)) or a script hash
        params: Network parameters
        version: Version byte override (defaults to params.pub_key_hash)
    """
    if len(pubkey_hash) != 20:
        raise ValidationError(f"Invalid hash160 length: {len(pubkey_hash)}")
    version_byte = params.pub_key_hash if version is None else version
    return base58check_encode(bytes([version_byte]) + pubkey_hash)


def decode_address(address: str) -> DecodedAddress:
    """
    Decode a base58check address.

    Raises:
        DecodeError: On bad alphabet, checksum mismatch or wrong payload length
    """
    payload = base58check_decode(address)
    if len(payload) != 21:
        raise DecodeError(f"Invalid address payload length: {len(payload)}")
    return DecodedAddress(version=payload[0], hash160=payload[1:])


def pubkey_to_address(pubkey: bytes, params: NetworkParams) -> str:
    """Convert a compressed public key to a P2PKH address."""
    if len(pubkey) != 33:
        raise ValidationError(f"Invalid compressed pubkey length: {len(pubkey)}")
    return encode_address(hash160(pubkey), params)


def encode_wif(secret: bytes, params: NetworkParams, compressed: bool = True) -> str:
    if len(secret) != 32:
        raise ValidationError(f"Invalid private key length: {len(secret)}")
    payload = bytes([params.wif]) + secret
    if compressed:
        payload += bytes([WIF_COMPRESSED_FLAG])
    return base58check_encode(payload)


def decode_wif(wif: str, params: NetworkParams | None = None) -> DecodedWIF:
    """
    Decode a WIF private key.

    Args:
        wif: WIF string
        params: When given, the version byte must match params.wif

    Raises:
        DecodeError: On checksum, length, compression flag or version mismatch
    """
    payload = base58check_decode(wif)

    if len(payload) == 34:
        if payload[33] != WIF_COMPRESSED_FLAG:
            raise DecodeError("Invalid WIF compression flag")
        compressed = True
    elif len(payload) == 33:
        compressed = False
    else:
        raise DecodeError(f"Invalid WIF payload length: {len(payload)}")

    version = payload[0]
    if params is not None and version != params.wif:
        raise DecodeError(f"WIF version 0x{version:02x} does not match network {params.name}")

    return DecodedWIF(version=version, secret=payload[1:33], compressed=compressed)


def validate_address(address: str, params: NetworkParams) -> bool:
    """Check an address is well-formed for the network (P2PKH or P2SH)."""
    if not isinstance(address, str) or len(address) != params.address_length:
        return False
    try:
        decoded = decode_address(address)
    except DecodeError:
        return False
    return decoded.version in (params.pub_key_hash, params.script_hash)


def pubkey_hash_to_p2pkh_script(pubkey_hash: bytes) -> bytes:
    """OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG"""
    return bytes([0x76, 0xA9, 0x14]) + pubkey_hash + bytes([0x88, 0xAC])


def address_to_scriptpubkey(address: str, params: NetworkParams) -> bytes:
    """
    Convert an address to its output script.

    Supports P2PKH and P2SH versions of the given network.
    """
    try:
        decoded = decode_address(address)
    except DecodeError as e:
        raise ValidationError(f"Invalid address {address!r}: {e}") from e

    if decoded.version == params.pub_key_hash:
        return pubkey_hash_to_p2pkh_script(decoded.hash160)
    if decoded.version == params.script_hash:
        # OP_HASH160 <20-byte-scripthash> OP_EQUAL
        return bytes([0xA9, 0x14]) + decoded.hash160 + bytes([0x87])

    raise ValidationError(
        f"Address version 0x{decoded.version:02x} is not valid on network {params.name}"
    )
