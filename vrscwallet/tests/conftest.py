"""
Test configuration for wallet tests.
"""

from __future__ import annotations

import pytest
from vrsccore.networks import VERUS_MAINNET, VERUS_TESTNET, NetworkParams

from vrscwallet.wallet.address import pubkey_to_address
from vrscwallet.wallet.models import KeyPair


@pytest.fixture
def test_mnemonic() -> str:
    """Test mnemonic (not for production use!)."""
    return (
        "abandon abandon abandon abandon abandon abandon "
        "abandon abandon abandon abandon abandon about"
    )


@pytest.fixture
def mainnet() -> NetworkParams:
    return VERUS_MAINNET


@pytest.fixture
def testnet() -> NetworkParams:
    return VERUS_TESTNET


@pytest.fixture
def bitcoin_params() -> NetworkParams:
    """Bitcoin mainnet version bytes, for checking against published vectors."""
    return VERUS_MAINNET.model_copy(
        update={
            "name": "bitcoin",
            "coin": "BTC",
            "pub_key_hash": 0x00,
            "script_hash": 0x05,
            "wif": 0x80,
            "address_prefix": "1",
        }
    )


@pytest.fixture
def keypair() -> KeyPair:
    return KeyPair(bytes(31) + b"\x01")


@pytest.fixture
def other_keypair() -> KeyPair:
    return KeyPair(bytes(31) + b"\x02")


@pytest.fixture
def source_address(keypair: KeyPair, mainnet: NetworkParams) -> str:
    return pubkey_to_address(keypair.public_key_bytes(), mainnet)


@pytest.fixture
def recipient_address(other_keypair: KeyPair, mainnet: NetworkParams) -> str:
    return pubkey_to_address(other_keypair.public_key_bytes(), mainnet)

