"""
Mnemonic -> seed -> HD key -> keypair/WIF/address derivation.
"""

from __future__ import annotations

from loguru import logger
from vrsccore.constants import DEFAULT_DERIVATION_PATH
from vrsccore.errors import DecodeError, InvariantError
from vrsccore.networks import NetworkParams
from vrsccore.secure import SecretBuffer

from vrscwallet.wallet.address import decode_address, decode_wif, encode_wif, pubkey_to_address
from vrscwallet.wallet.bip32 import HDKey, mnemonic_to_seed, normalize_mnemonic
from vrscwallet.wallet.models import KeyPair, WalletKeys


def derive_key(seed: bytes | SecretBuffer, path: str) -> HDKey:
    """Derive the extended key at ``path`` from a BIP39 seed."""
    master = HDKey.from_seed(seed)
    try:
        key = master.derive(path)
    except Exception:
        master.wipe()
        raise
    if key is not master:
        master.wipe()
    return key


def to_keypair(hd_key: HDKey) -> KeyPair:
    return KeyPair(hd_key.get_private_key_bytes())


def to_wif(keypair: KeyPair, params: NetworkParams) -> str:
    return encode_wif(keypair.secret_bytes(), params, compressed=True)


def to_address(keypair: KeyPair, params: NetworkParams) -> str:
    return pubkey_to_address(keypair.public_key_bytes(), params)


def check_derived_address(address: str, params: NetworkParams) -> None:
    """
    Raise InvariantError unless the address has the network's shape.

    Checks length, leading character and decoded version byte.
    """
    if len(address) != params.address_length:
        raise InvariantError(
            f"Derived address has length {len(address)}, expected {params.address_length}"
        )
    if params.address_prefix and not address.startswith(params.address_prefix):
        raise InvariantError(
            f"Derived address does not start with {params.address_prefix!r} on {params.name}"
        )
    try:
        decoded = decode_address(address)
    except DecodeError as e:
        raise InvariantError(f"Derived address does not decode: {e}") from e
    if decoded.version != params.pub_key_hash:
        raise InvariantError("Derived address version does not match network")


def derive_wallet_keys(
    mnemonic: str,
    params: NetworkParams,
    path: str = DEFAULT_DERIVATION_PATH,
    passphrase: str = "",
) -> WalletKeys:
    """
    Derive the wallet's single keypair, WIF and address from a mnemonic.

    Raises:
        ValidationError: Invalid mnemonic or path
        InvariantError: Derived address does not match the network's format
    """
    mnemonic = normalize_mnemonic(mnemonic)

    with mnemonic_to_seed(mnemonic, passphrase) as seed:
        hd_key = derive_key(seed, path)

    try:
        keypair = to_keypair(hd_key)
    finally:
        hd_key.wipe()

    with keypair:
        address = to_address(keypair, params)
        check_derived_address(address, params)
        wif = to_wif(keypair, params)
        public_key_hex = keypair.public_key_hex()

    logger.debug(f"Derived wallet keys at {path} on {params.name}")

    return WalletKeys(
        mnemonic=mnemonic,
        address=address,
        wif=wif,
        public_key_hex=public_key_hex,
        path=path,
    )


def keypair_from_wif(wif: str, params: NetworkParams) -> KeyPair:
    """
    Rebuild a keypair from a WIF string.

    Raises:
        DecodeError: Bad checksum, wrong network or uncompressed key
    """
    decoded = decode_wif(wif, params)
    if not decoded.compressed:
        raise DecodeError("Only compressed WIF keys are supported")
    return KeyPair(decoded.secret)
