"""
Single-address wallet service.

Owns one persisted WalletRecord (address plus encrypted mnemonic and WIF) and
a chain gateway. Secrets are decrypted only for the duration of the operation
that needs them.
"""

from __future__ import annotations

from loguru import logger
from vrsccore.constants import DEFAULT_DERIVATION_PATH
from vrsccore.errors import InvariantError, ValidationError
from vrsccore.networks import NetworkParams, get_network

from vrscwallet.backends.base import ChainBackend
from vrscwallet.wallet import vault
from vrscwallet.wallet.address import validate_address
from vrscwallet.wallet.bip32 import generate_mnemonic
from vrscwallet.wallet.coin_selection import select_coins
from vrscwallet.wallet.keys import derive_wallet_keys, keypair_from_wif, to_address
from vrscwallet.wallet.locks import SpendLockRegistry
from vrscwallet.wallet.models import UTXO, CoinSelection, KeyPair, WalletKeys, WalletRecord
from vrscwallet.wallet.transaction import build_and_sign, compute_txid

# Blocks after the current height before an unmined spend expires
DEFAULT_EXPIRY_DELTA = 20


def create_wallet(
    password: str,
    params: NetworkParams,
    mnemonic: str | None = None,
    path: str = DEFAULT_DERIVATION_PATH,
) -> tuple[WalletRecord, WalletKeys]:
    """
    Create a new wallet, or restore one from an existing mnemonic.

    Returns:
        The record to persist (secrets encrypted under ``password``) and the
        derived keys, so the caller can show the new mnemonic once.
    """
    if not password:
        raise ValidationError("Password must not be empty")

    restored = mnemonic is not None
    if mnemonic is None:
        mnemonic = generate_mnemonic()

    keys = derive_wallet_keys(mnemonic, params, path=path)
    record = WalletRecord(
        address=keys.address,
        private_key_wif=vault.encrypt(keys.wif, password),
        mnemonic=vault.encrypt(keys.mnemonic, password),
        network=params.name,
        path=path,
    )

    logger.info(f"{'Restored' if restored else 'Created'} wallet {keys.address} on {params.name}")
    return record, keys


class WalletService:
    """
    Wallet operations for one address.

    Spends from the same address are serialized through ``locks`` so two
    concurrent sends can never select the same UTXOs.
    """

    def __init__(
        self,
        record: WalletRecord,
        backend: ChainBackend,
        params: NetworkParams | None = None,
        locks: SpendLockRegistry | None = None,
    ):
        if params is None:
            params = get_network(record.network)
        elif params.name != record.network:
            raise ValidationError(
                f"Wallet belongs to {record.network}, not {params.name}"
            )

        self.record = record
        self.backend = backend
        self.params = params
        self.locks = locks or SpendLockRegistry()

    @property
    def address(self) -> str:
        return self.record.address

    def unlock(self, password: str) -> KeyPair:
        """
        Decrypt the stored WIF.

        Use the result as a context manager so the key is wiped afterwards.

        Raises:
            AuthenticationError: Wrong password or tampered record
            InvariantError: The decrypted key does not control the wallet address
        """
        wif = vault.decrypt(self.record.private_key_wif, password)
        keypair = keypair_from_wif(wif, self.params)
        if to_address(keypair, self.params) != self.record.address:
            keypair.wipe()
            raise InvariantError("Stored key does not match wallet address")
        return keypair

    def reveal_mnemonic(self, password: str) -> str:
        return vault.decrypt(self.record.mnemonic, password)

    async def get_balance(self) -> int:
        return await self.backend.get_address_balance(self.address)

    async def get_utxos(self) -> list[UTXO]:
        """UTXOs locked to the wallet address."""
        utxos = await self.backend.get_utxos([self.address])
        return [utxo for utxo in utxos if not utxo.address or utxo.address == self.address]

    async def estimate_fee(self, amount: int, fee_per_byte: int) -> CoinSelection:
        """
        Preview the inputs, fee and change a send of ``amount`` would use.

        Nothing is unlocked, signed or broadcast.

        Raises:
            InsufficientFundsError: The wallet cannot cover amount + fee
        """
        utxos = await self.get_utxos()
        selection = select_coins(utxos, amount, fee_per_byte)
        logger.debug(
            f"Fee estimate for {amount} sats: {len(selection.utxos)} inputs, fee {selection.fee}"
        )
        return selection

    async def send(
        self,
        password: str,
        recipient: str,
        amount: int,
        fee_per_byte: int,
        expiry_delta: int = DEFAULT_EXPIRY_DELTA,
    ) -> str:
        """
        Pay ``amount`` satoshis to ``recipient``.

        Lock time is the current height and the transaction expires
        ``expiry_delta`` blocks later.

        Returns:
            Transaction id reported by the gateway
        """
        if not validate_address(recipient, self.params):
            raise ValidationError(f"Invalid recipient address: {recipient}")
        if expiry_delta < 0:
            raise ValidationError("expiry_delta must not be negative")

        async with self.locks.hold(self.address):
            with self.unlock(password) as keypair:
                utxos = await self.get_utxos()
                selection = select_coins(utxos, amount, fee_per_byte)
                height = await self.backend.get_block_height()

                tx_hex = build_and_sign(
                    selection,
                    recipient,
                    keypair,
                    self.address,
                    self.params,
                    lock_time=height,
                    expiry_height=height + expiry_delta,
                )

            logger.info(
                f"Sending {amount} sats to {recipient} "
                f"({len(selection.utxos)} inputs, fee {selection.fee}, change {selection.change})"
            )
            txid = await self.backend.broadcast_transaction(tx_hex)

        expected = compute_txid(bytes.fromhex(tx_hex))
        if txid != expected:
            logger.warning(f"Gateway returned txid {txid}, expected {expected}")
        return txid

    async def close(self) -> None:
        """Close backend connection"""
        await self.backend.close()
