"""
Tests for mnemonic -> keypair/WIF/address derivation.
"""

import pytest
from vrsccore.constants import DEFAULT_DERIVATION_PATH
from vrsccore.errors import DecodeError, InvariantError, ValidationError

import vrscwallet.wallet.keys as keys_module
from vrscwallet.wallet.address import decode_address, decode_wif, encode_wif
from vrscwallet.wallet.bip32 import HDKey, mnemonic_to_seed
from vrscwallet.wallet.keys import (
    check_derived_address,
    derive_key,
    derive_wallet_keys,
    keypair_from_wif,
    to_address,
)
from vrscwallet.wallet.models import KeyPair


def test_derive_wallet_keys(test_mnemonic, mainnet):
    keys = derive_wallet_keys(test_mnemonic, mainnet)

    assert keys.path == DEFAULT_DERIVATION_PATH
    assert keys.address.startswith("R")
    assert len(keys.address) == 34
    assert decode_address(keys.address).version == mainnet.pub_key_hash

    decoded = decode_wif(keys.wif, mainnet)
    assert decoded.compressed
    with KeyPair(decoded.secret) as keypair:
        assert keypair.public_key_hex() == keys.public_key_hex
        assert to_address(keypair, mainnet) == keys.address


def test_derivation_is_deterministic(test_mnemonic, mainnet):
    first = derive_wallet_keys(test_mnemonic, mainnet)
    second = derive_wallet_keys(test_mnemonic, mainnet)
    assert first.address == second.address
    assert first.wif == second.wif


def test_matches_manual_derivation(test_mnemonic, mainnet):
    with mnemonic_to_seed(test_mnemonic) as seed:
        expected = HDKey.from_seed(seed).derive(DEFAULT_DERIVATION_PATH)
    keys = derive_wallet_keys(test_mnemonic, mainnet)
    assert keys.public_key_hex == expected.get_public_key_bytes().hex()


def test_path_and_passphrase_change_address(test_mnemonic, mainnet):
    default = derive_wallet_keys(test_mnemonic, mainnet).address
    assert derive_wallet_keys(test_mnemonic, mainnet, path="m/44'/19167'/0'/0/1").address != default
    assert derive_wallet_keys(test_mnemonic, mainnet, passphrase="extra").address != default


def test_invalid_mnemonic(mainnet):
    with pytest.raises(ValidationError):
        derive_wallet_keys("abandon abandon abandon", mainnet)


def test_invalid_path(test_mnemonic, mainnet):
    with pytest.raises(ValidationError):
        derive_wallet_keys(test_mnemonic, mainnet, path="44'/19167'")


def test_repr_hides_secrets(test_mnemonic, mainnet):
    keys = derive_wallet_keys(test_mnemonic, mainnet)
    text = repr(keys)
    assert keys.wif not in text
    assert "abandon" not in text


def test_address_format_mismatch(test_mnemonic, mainnet):
    wrong_prefix = mainnet.model_copy(update={"address_prefix": "X"})
    with pytest.raises(InvariantError):
        derive_wallet_keys(test_mnemonic, wrong_prefix)


def test_check_derived_address(source_address, mainnet, bitcoin_params):
    check_derived_address(source_address, mainnet)
    with pytest.raises(InvariantError):
        check_derived_address("1BgGZ9tcN4rm9KBzDn7KprQz87SZ26SAMH", mainnet)
    with pytest.raises(InvariantError):
        check_derived_address(source_address, bitcoin_params)


def test_derive_key_master_path():
    seed = bytes(range(32))
    master = derive_key(seed, "m")
    assert master.depth == 0
    # The returned master must still be usable
    assert len(master.get_private_key_bytes()) == 32


def test_hd_key_wiped_when_keypair_fails(test_mnemonic, mainnet, monkeypatch):
    derived = []

    def capture(seed, path):
        key = derive_key(seed, path)
        derived.append(key)
        return key

    def reject(hd_key):
        raise ValidationError("Invalid private key")

    monkeypatch.setattr(keys_module, "derive_key", capture)
    monkeypatch.setattr(keys_module, "to_keypair", reject)

    with pytest.raises(ValidationError):
        derive_wallet_keys(test_mnemonic, mainnet)
    assert derived[0].keypair._secret.wiped


class TestKeypairFromWIF:
    def test_roundtrip(self, test_mnemonic, mainnet):
        keys = derive_wallet_keys(test_mnemonic, mainnet)
        with keypair_from_wif(keys.wif, mainnet) as keypair:
            assert to_address(keypair, mainnet) == keys.address

    def test_rejects_uncompressed(self, mainnet):
        wif = encode_wif(bytes(31) + b"\x01", mainnet, compressed=False)
        with pytest.raises(DecodeError, match="compressed"):
            keypair_from_wif(wif, mainnet)

    def test_rejects_other_network(self, mainnet, bitcoin_params):
        wif = encode_wif(bytes(31) + b"\x01", bitcoin_params)
        with pytest.raises(DecodeError):
            keypair_from_wif(wif, mainnet)


class TestKeyPair:
    def test_wiped_keypair_cannot_sign(self):
        keypair = KeyPair(bytes(31) + b"\x01")
        with keypair:
            keypair.sign(bytes(32))
        with pytest.raises(InvariantError):
            keypair.sign(bytes(32))

    def test_invalid_scalar(self):
        with pytest.raises(ValidationError):
            KeyPair(bytes(32))
        with pytest.raises(ValidationError):
            KeyPair(bytes(31))

    def test_digest_length(self, keypair):
        with pytest.raises(ValidationError):
            keypair.sign(b"short")
