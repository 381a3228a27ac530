"""
Verus JSON-RPC chain gateway.

Talks to a daemon (or a public gateway such as api.verus.services) with the
address index enabled. No wallet RPCs are used: keys never leave this process.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from vrsccore.errors import NetworkError

from vrscwallet.backends.base import ChainBackend
from vrscwallet.wallet.models import UTXO

# Timeout for RPC calls (seconds)
DEFAULT_RPC_TIMEOUT = 30.0


class VerusRPCBackend(ChainBackend):
    """
    Chain gateway using the Verus daemon's JSON-RPC interface.

    Failures are not retried here; callers decide whether to try again.
    """

    def __init__(
        self,
        rpc_url: str = "https://api.verustest.net",
        rpc_user: str | None = None,
        rpc_password: str | None = None,
        timeout: float = DEFAULT_RPC_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        auth = (rpc_user, rpc_password or "") if rpc_user else None
        self.client = httpx.AsyncClient(timeout=timeout, auth=auth, transport=transport)
        self._request_id = 0

    async def _rpc_call(self, method: str, params: list | None = None) -> Any:
        """
        Make an RPC call to the daemon.

        Args:
            method: RPC method name
            params: Method parameters

        Returns:
            RPC result

        Raises:
            NetworkError: On HTTP, transport, decoding or JSON-RPC errors
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            response = await self.client.post(self.rpc_url, json=payload)
        except httpx.TimeoutException as e:
            logger.error(f"RPC call timed out: {method} - {e}")
            raise NetworkError(f"RPC call {method} timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"RPC call failed: {method} - {e}")
            raise NetworkError(f"RPC call {method} failed: {e}") from e

        # The daemon reports RPC errors with a non-2xx status and a JSON body
        try:
            data = response.json()
        except ValueError as e:
            if response.is_error:
                raise NetworkError(
                    f"RPC call {method} failed with HTTP {response.status_code}",
                    code=response.status_code,
                ) from e
            raise NetworkError(f"RPC call {method} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise NetworkError(f"RPC call {method} returned unexpected payload")

        error_info = data.get("error")
        if error_info:
            if isinstance(error_info, dict):
                error_code = error_info.get("code")
                error_msg = error_info.get("message", str(error_info))
            else:
                error_code, error_msg = None, str(error_info)
            logger.error(f"RPC error from {method}: {error_code} {error_msg}")
            raise NetworkError(f"RPC error {error_code}: {error_msg}", code=error_code)

        if response.is_error:
            raise NetworkError(
                f"RPC call {method} failed with HTTP {response.status_code}",
                code=response.status_code,
            )

        return data.get("result")

    async def get_info(self) -> dict[str, Any]:
        info = await self._rpc_call("getinfo")
        if not isinstance(info, dict):
            raise NetworkError("getinfo returned unexpected result")
        return info

    async def get_utxos(self, addresses: list[str]) -> list[UTXO]:
        if not addresses:
            return []

        result = await self._rpc_call("getaddressutxos", [{"addresses": addresses}])
        if not isinstance(result, list):
            raise NetworkError("getaddressutxos returned unexpected result")

        utxos: list[UTXO] = []
        for utxo_data in result:
            try:
                utxo = UTXO(
                    txid=utxo_data["txid"],
                    vout=int(utxo_data["outputIndex"]),
                    value=int(utxo_data["satoshis"]),
                    address=utxo_data.get("address", ""),
                    script=utxo_data.get("script", ""),
                    height=utxo_data.get("height"),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise NetworkError(f"Malformed UTXO in getaddressutxos result: {e}") from e
            utxos.append(utxo)

        logger.debug(f"Fetched {len(utxos)} UTXOs for {len(addresses)} address(es)")
        return utxos

    async def get_address_balance(self, address: str) -> int:
        result = await self._rpc_call("getaddressbalance", [{"addresses": [address]}])
        try:
            balance = int(result["balance"])
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"getaddressbalance returned unexpected result: {result}") from e
        logger.debug(f"Balance for {address}: {balance} sats")
        return balance

    async def get_block_height(self) -> int:
        height = await self._rpc_call("getblockcount")
        if isinstance(height, bool) or not isinstance(height, int):
            raise NetworkError(f"getblockcount returned unexpected result: {height}")
        logger.debug(f"Current block height: {height}")
        return height

    async def broadcast_transaction(self, tx_hex: str) -> str:
        txid = await self._rpc_call("sendrawtransaction", [tx_hex])
        if not isinstance(txid, str):
            raise NetworkError(f"sendrawtransaction returned unexpected result: {txid}")
        logger.info(f"Broadcast transaction: {txid}")
        return txid

    async def close(self) -> None:
        await self.client.aclose()
