"""
Wallet components: keys, addresses, vault, coin selection and transactions.
"""

from vrscwallet.wallet.models import UTXO, CoinSelection, KeyPair, WalletKeys, WalletRecord

__all__ = [
    "CoinSelection",
    "KeyPair",
    "UTXO",
    "WalletKeys",
    "WalletRecord",
]
