"""
Chain and wallet constants.

Transaction size weights follow the P2PKH heuristic used for fee estimation:
- INPUT_SIZE: signed P2PKH input (outpoint, scriptSig, sequence), rounded up
- OUTPUT_SIZE: P2PKH output (value + 25-byte script + length)
- TX_OVERHEAD: version, counts and locktime
"""

from __future__ import annotations

# Standard P2PKH dust limit in satoshis. Change at or below this is added to the fee.
STANDARD_DUST_LIMIT = 546

SATS_PER_COIN = 100_000_000

# Amounts are signed 64-bit on the wire
MAX_SATOSHIS = 2**63 - 1

# Fee estimation weights (bytes)
INPUT_SIZE = 180
OUTPUT_SIZE = 34
TX_OVERHEAD = 10

# Overwinter/Sapling transaction format
OVERWINTERED_FLAG = 0x80000000
SAPLING_TX_VERSION = 4
SAPLING_VERSION_GROUP_ID = 0x892F2085
SAPLING_BRANCH_ID = 0x76B809BB

SIGHASH_ALL = 0x01
DEFAULT_SEQUENCE = 0xFFFFFFFF

# Single fixed path for every wallet this core creates (BIP44, Verus coin type 19167)
DEFAULT_DERIVATION_PATH = "m/44'/19167'/0'/0/0"

# BIP39 mnemonic strength
DEFAULT_ENTROPY_BITS = 256
