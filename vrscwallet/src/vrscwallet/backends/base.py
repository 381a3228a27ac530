"""
Base chain gateway interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from vrscwallet.wallet.models import UTXO


class ChainBackend(ABC):
    """
    Abstract chain gateway.

    Implementations raise NetworkError on transport or node failures; they
    never report an unreachable node as an empty UTXO set or a zero balance.
    """

    @abstractmethod
    async def get_info(self) -> dict[str, Any]:
        """Node and chain summary (getinfo)"""

    @abstractmethod
    async def get_utxos(self, addresses: list[str]) -> list[UTXO]:
        """Get UTXOs for given addresses"""

    @abstractmethod
    async def get_address_balance(self, address: str) -> int:
        """Get balance for an address in satoshis"""

    @abstractmethod
    async def get_block_height(self) -> int:
        """Get current blockchain height"""

    @abstractmethod
    async def broadcast_transaction(self, tx_hex: str) -> str:
        """Broadcast transaction, returns txid"""

    async def close(self) -> None:
        """Close backend connection"""
        pass
