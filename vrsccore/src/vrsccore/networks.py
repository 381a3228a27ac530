"""
Network parameter sets.

NetworkParams is an explicit value handed to every function that needs
chain-specific version bytes. There is no module-level "active network".
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from vrsccore.constants import (
    SAPLING_BRANCH_ID,
    SAPLING_TX_VERSION,
    SAPLING_VERSION_GROUP_ID,
)
from vrsccore.errors import ValidationError


class NetworkType(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


class NetworkParams(BaseModel):
    """Version bytes and transaction format constants for one chain/network."""

    model_config = ConfigDict(frozen=True)

    name: str
    coin: str
    pub_key_hash: int = Field(..., ge=0, le=0xFF)
    script_hash: int = Field(..., ge=0, le=0xFF)
    wif: int = Field(..., ge=0, le=0xFF)
    bip32_public: int = Field(..., ge=0, le=0xFFFFFFFF)
    bip32_private: int = Field(..., ge=0, le=0xFFFFFFFF)
    message_prefix: str

    tx_version: int = SAPLING_TX_VERSION
    version_group_id: int = SAPLING_VERSION_GROUP_ID
    consensus_branch_id: int = SAPLING_BRANCH_ID

    # Sanity checks applied to freshly derived addresses
    address_prefix: str = ""
    address_length: int = 34


# Mainnet and testnet share the same address format
VERUS_MAINNET = NetworkParams(
    name="mainnet",
    coin="VRSC",
    pub_key_hash=0x3C,
    script_hash=0x55,
    wif=0xBC,
    bip32_public=0x0488B21E,
    bip32_private=0x0488ADE4,
    message_prefix="\x18Verus Signed Message:\n",
    address_prefix="R",
)

VERUS_TESTNET = NetworkParams(
    name="testnet",
    coin="VRSCTEST",
    pub_key_hash=0x3C,
    script_hash=0x55,
    wif=0xBC,
    bip32_public=0x0488B21E,
    bip32_private=0x0488ADE4,
    message_prefix="\x18Verus Signed Message:\n",
    address_prefix="R",
)

NETWORKS: dict[NetworkType, NetworkParams] = {
    NetworkType.MAINNET: VERUS_MAINNET,
    NetworkType.TESTNET: VERUS_TESTNET,
}


def get_network(network: NetworkType | str) -> NetworkParams:
    """Look up the parameter set for a network name."""
    try:
        return NETWORKS[NetworkType(network)]
    except ValueError as e:
        raise ValidationError(f"Unknown network: {network}") from e
