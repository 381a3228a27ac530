"""
Transaction builder for single-key P2PKH spends.

Turns a CoinSelection into a signed, serialized v4 transaction: one input per
selected UTXO, the recipient output and, when there is change, a change output
back to the source address.
"""

from __future__ import annotations

from loguru import logger
from vrsccore.constants import DEFAULT_SEQUENCE, MAX_SATOSHIS
from vrsccore.crypto import hash256
from vrsccore.errors import DecodeError, InvariantError, ValidationError
from vrsccore.networks import NetworkParams

from vrscwallet.wallet.address import (
    address_to_scriptpubkey,
    pubkey_hash_to_p2pkh_script,
    validate_address,
)
from vrscwallet.wallet.models import CoinSelection, KeyPair
from vrscwallet.wallet.signing import (
    Transaction,
    TxInput,
    TxOutput,
    create_p2pkh_script_sig,
    deserialize_transaction,
    serialize_transaction,
    sign_p2pkh_input,
)

__all__ = [
    "build_and_sign",
    "build_unsigned",
    "check_selection",
    "compute_txid",
    "deserialize_transaction",
    "parse_transaction_hex",
]


def compute_txid(tx_bytes: bytes) -> str:
    """Transaction id as displayed by the node (byte-reversed SHA256d)."""
    return hash256(tx_bytes)[::-1].hex()


def parse_transaction_hex(tx_hex: str) -> Transaction:
    try:
        raw = bytes.fromhex(tx_hex)
    except ValueError as e:
        raise DecodeError(f"Transaction is not valid hex: {e}") from e
    return deserialize_transaction(raw)


def check_selection(selection: CoinSelection) -> None:
    """
    Verify the amount identity of a selection before anything is signed.

    Raises:
        InvariantError: Empty selection, negative amounts or
            sum(utxos) != target + fee + change
    """
    if not selection.utxos:
        raise InvariantError("Selection has no inputs")
    if selection.target <= 0 or selection.fee < 0 or selection.change < 0:
        raise InvariantError(
            f"Selection amounts out of range: target={selection.target} "
            f"fee={selection.fee} change={selection.change}"
        )
    for utxo in selection.utxos:
        if utxo.value <= 0 or utxo.value > MAX_SATOSHIS:
            raise InvariantError(f"UTXO {utxo.outpoint} has invalid value {utxo.value}")

    total = selection.total_value
    if total != selection.target + selection.fee + selection.change:
        raise InvariantError(
            f"Selection does not balance: inputs {total} != target {selection.target} "
            f"+ fee {selection.fee} + change {selection.change}"
        )
    if total > MAX_SATOSHIS:
        raise InvariantError("Selection total overflows 64-bit amount")


def build_unsigned(
    selection: CoinSelection,
    recipient: str,
    source_address: str,
    params: NetworkParams,
    lock_time: int = 0,
    expiry_height: int = 0,
) -> Transaction:
    """Build the unsigned transaction for a selection."""
    check_selection(selection)

    if not validate_address(recipient, params):
        raise ValidationError(f"Invalid recipient address: {recipient}")
    if not validate_address(source_address, params):
        raise ValidationError(f"Invalid source address: {source_address}")
    if not 0 <= lock_time <= 0xFFFFFFFF or not 0 <= expiry_height <= 0xFFFFFFFF:
        raise ValidationError("lock_time and expiry_height must fit in 32 bits")

    inputs = [
        TxInput(txid=utxo.txid, vout=utxo.vout, sequence=DEFAULT_SEQUENCE)
        for utxo in selection.utxos
    ]
    outputs = [TxOutput(value=selection.target, script=address_to_scriptpubkey(recipient, params))]
    if selection.change > 0:
        outputs.append(
            TxOutput(value=selection.change, script=address_to_scriptpubkey(source_address, params))
        )

    return Transaction(
        version=params.tx_version,
        version_group_id=params.version_group_id,
        inputs=inputs,
        outputs=outputs,
        lock_time=lock_time,
        expiry_height=expiry_height,
    )


def build_and_sign(
    selection: CoinSelection,
    recipient: str,
    keypair: KeyPair,
    source_address: str,
    params: NetworkParams,
    lock_time: int = 0,
    expiry_height: int = 0,
) -> str:
    """
    Build, sign and serialize a spend.

    Every input is assumed to be a P2PKH output locked to ``keypair``; the
    caller is responsible for only selecting UTXOs the key controls.

    Args:
        selection: Output of select_coins
        recipient: Address receiving selection.target
        keypair: Key controlling every selected UTXO
        source_address: Address receiving the change
        params: Network parameters
        lock_time: nLockTime
        expiry_height: nExpiryHeight (0 disables expiry)

    Returns:
        Signed transaction hex
    """
    tx = build_unsigned(selection, recipient, source_address, params, lock_time, expiry_height)

    # Every input spends a P2PKH output of this key, so the script code is shared
    script_code = pubkey_hash_to_p2pkh_script(keypair.pubkey_hash())
    pubkey = keypair.public_key_bytes()

    for index, utxo in enumerate(selection.utxos):
        signature = sign_p2pkh_input(tx, index, script_code, utxo.value, keypair, params)
        tx.inputs[index].script_sig = create_p2pkh_script_sig(signature, pubkey)

    raw = serialize_transaction(tx)
    logger.debug(
        f"Signed tx {compute_txid(raw)}: {len(tx.inputs)} inputs, {len(tx.outputs)} outputs, "
        f"fee {selection.fee} sats, {len(raw)} bytes"
    )
    return raw.hex()
