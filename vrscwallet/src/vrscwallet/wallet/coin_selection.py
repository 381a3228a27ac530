"""
UTXO selection and fee computation for P2PKH spends.

Selection prefers a single UTXO that covers the whole spend and otherwise
accumulates UTXOs largest-first. Change at or below the dust limit is not
returned as an output; it is added to the fee.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger
from vrsccore.constants import (
    INPUT_SIZE,
    MAX_SATOSHIS,
    OUTPUT_SIZE,
    STANDARD_DUST_LIMIT,
    TX_OVERHEAD,
)
from vrsccore.errors import InsufficientFundsError, ValidationError

from vrscwallet.wallet.models import UTXO, CoinSelection

# Recipient + change
SELECTION_OUTPUTS = 2


def check_satoshis(value: object, name: str) -> int:
    """Require a non-negative integer amount that fits in a signed 64-bit field."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer amount of satoshis")
    if value < 0 or value > MAX_SATOSHIS:
        raise ValidationError(f"{name} out of range: {value}")
    return value


def estimate_tx_size(num_inputs: int, num_outputs: int) -> int:
    """Estimated size in bytes of a P2PKH transaction."""
    return num_inputs * INPUT_SIZE + num_outputs * OUTPUT_SIZE + TX_OVERHEAD


def calculate_fee(num_inputs: int, num_outputs: int, fee_per_byte: int) -> int:
    fee = estimate_tx_size(num_inputs, num_outputs) * fee_per_byte
    if fee > MAX_SATOSHIS:
        raise ValidationError(f"Fee overflows 64-bit amount: {fee}")
    return fee


def _finalize(selected: list[UTXO], total: int, target: int, fee: int) -> CoinSelection:
    change = total - target - fee
    if change <= STANDARD_DUST_LIMIT:
        fee += change
        change = 0
    return CoinSelection(utxos=selected, target=target, fee=fee, change=change)


def select_coins(utxos: Sequence[UTXO], target: int, fee_per_byte: int) -> CoinSelection:
    """
    Select UTXOs to pay ``target`` satoshis.

    Args:
        utxos: Candidate UTXOs
        target: Amount to pay the recipient (satoshis)
        fee_per_byte: Fee rate in satoshis per byte

    Returns:
        CoinSelection where sum(utxos) == target + fee + change

    Raises:
        ValidationError: target <= 0, or an amount outside the 64-bit range
        InsufficientFundsError: UTXOs cannot cover target + fee
    """
    check_satoshis(target, "target")
    if target <= 0:
        raise ValidationError(f"Target amount must be positive, got {target}")
    check_satoshis(fee_per_byte, "fee_per_byte")

    if not utxos:
        raise InsufficientFundsError("No UTXOs available", needed=target, available=0)

    for utxo in utxos:
        check_satoshis(utxo.value, f"UTXO {utxo.outpoint} value")

    # sorted() is stable: equal values keep their original order
    candidates = sorted((u for u in utxos if u.value > 0), key=lambda u: u.value, reverse=True)

    # Candidates are sorted descending, so only the largest can cover it alone
    single_fee = calculate_fee(1, SELECTION_OUTPUTS, fee_per_byte)
    if candidates and candidates[0].value >= target + single_fee:
        largest = candidates[0]
        logger.debug(f"Selected single UTXO {largest.outpoint} ({largest.value} sats)")
        return _finalize([largest], largest.value, target, single_fee)

    selected: list[UTXO] = []
    total = 0
    fee = 0
    for utxo in candidates:
        selected.append(utxo)
        total += utxo.value
        if total > MAX_SATOSHIS:
            raise ValidationError("Sum of UTXO values overflows 64-bit amount")
        fee = calculate_fee(len(selected), SELECTION_OUTPUTS, fee_per_byte)
        if total >= target + fee:
            logger.debug(
                f"Selected {len(selected)} UTXOs totalling {total} sats for target {target}"
            )
            return _finalize(selected, total, target, fee)

    needed = target + calculate_fee(max(len(candidates), 1), SELECTION_OUTPUTS, fee_per_byte)
    raise InsufficientFundsError(
        f"Insufficient funds: need {needed} sats, have {total}",
        needed=needed,
        available=total,
    )
