"""
vrsccore - Core library for the Verus wallet components

Provides network parameters, the error taxonomy, hashing/base58check
primitives and scoped secret buffers.
"""

__version__ = "0.3.0"

from vrsccore.constants import (
    DEFAULT_DERIVATION_PATH,
    MAX_SATOSHIS,
    SATS_PER_COIN,
    STANDARD_DUST_LIMIT,
)
from vrsccore.errors import (
    AuthenticationError,
    DecodeError,
    EntropyError,
    InsufficientFundsError,
    InvariantError,
    NetworkError,
    ValidationError,
    WalletError,
)
from vrsccore.networks import (
    VERUS_MAINNET,
    VERUS_TESTNET,
    NetworkParams,
    NetworkType,
    get_network,
)
from vrsccore.secure import SecretBuffer

__all__ = [
    "AuthenticationError",
    "DEFAULT_DERIVATION_PATH",
    "DecodeError",
    "EntropyError",
    "InsufficientFundsError",
    "InvariantError",
    "MAX_SATOSHIS",
    "NetworkError",
    "NetworkParams",
    "NetworkType",
    "SATS_PER_COIN",
    "STANDARD_DUST_LIMIT",
    "SecretBuffer",
    "VERUS_MAINNET",
    "VERUS_TESTNET",
    "ValidationError",
    "WalletError",
    "get_network",
]
