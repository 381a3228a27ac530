"""
Overwinter/Sapling (v4) transaction serialization and P2PKH input signing.

Signature hashes follow ZIP-243: BLAKE2b-256 digests personalised with the
network's consensus branch id, committing to the value of the spent output.
Only transparent inputs and outputs are supported; the shielded sections are
always empty.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from vrsccore.constants import DEFAULT_SEQUENCE, OVERWINTERED_FLAG, SIGHASH_ALL
from vrsccore.crypto import encode_varint, read_varint
from vrsccore.errors import DecodeError, ValidationError
from vrsccore.networks import NetworkParams

from vrscwallet.wallet.models import KeyPair

SIGHASH_PERSONALIZATION = b"ZcashSigHash"
PREVOUTS_PERSONALIZATION = b"ZcashPrevoutHash"
SEQUENCE_PERSONALIZATION = b"ZcashSequencHash"
OUTPUTS_PERSONALIZATION = b"ZcashOutputsHash"

EMPTY_HASH = bytes(32)


@dataclass
class TxInput:
    txid: str
    vout: int
    script_sig: bytes = b""
    sequence: int = DEFAULT_SEQUENCE

    def outpoint(self) -> bytes:
        """txid is in RPC (big-endian) hex; the wire format is little-endian."""
        return bytes.fromhex(self.txid)[::-1] + self.vout.to_bytes(4, "little")


@dataclass
class TxOutput:
    value: int
    script: bytes

    def serialize(self) -> bytes:
        return self.value.to_bytes(8, "little") + encode_varint(len(self.script)) + self.script


@dataclass
class Transaction:
    version: int
    version_group_id: int
    inputs: list[TxInput] = field(default_factory=list)
    outputs: list[TxOutput] = field(default_factory=list)
    lock_time: int = 0
    expiry_height: int = 0
    value_balance: int = 0
    overwintered: bool = True

    @property
    def header(self) -> int:
        return self.version | OVERWINTERED_FLAG if self.overwintered else self.version


def serialize_transaction(tx: Transaction) -> bytes:
    if not tx.overwintered or tx.version < 4:
        raise ValidationError("Only overwintered v4 transactions can be serialized")

    result = tx.header.to_bytes(4, "little")
    result += tx.version_group_id.to_bytes(4, "little")

    result += encode_varint(len(tx.inputs))
    for inp in tx.inputs:
        result += inp.outpoint()
        result += encode_varint(len(inp.script_sig)) + inp.script_sig
        result += inp.sequence.to_bytes(4, "little")

    result += encode_varint(len(tx.outputs))
    for out in tx.outputs:
        result += out.serialize()

    result += tx.lock_time.to_bytes(4, "little")
    result += tx.expiry_height.to_bytes(4, "little")
    result += tx.value_balance.to_bytes(8, "little", signed=True)
    # nShieldedSpend, nShieldedOutput, nJoinSplit
    result += b"\x00\x00\x00"
    return result


def deserialize_transaction(tx_bytes: bytes) -> Transaction:
    try:
        offset = 0
        header = int.from_bytes(tx_bytes[offset : offset + 4], "little")
        offset += 4

        overwintered = bool(header & OVERWINTERED_FLAG)
        version = header & ~OVERWINTERED_FLAG
        if not overwintered or version < 4:
            raise DecodeError(f"Unsupported transaction version {version}")

        version_group_id = int.from_bytes(tx_bytes[offset : offset + 4], "little")
        offset += 4

        input_count, offset = read_varint(tx_bytes, offset)
        inputs: list[TxInput] = []

        for _ in range(input_count):
            txid = tx_bytes[offset : offset + 32][::-1].hex()
            offset += 32

            vout = int.from_bytes(tx_bytes[offset : offset + 4], "little")
            offset += 4

            script_len, offset = read_varint(tx_bytes, offset)
            script_sig = tx_bytes[offset : offset + script_len]
            offset += script_len

            sequence = int.from_bytes(tx_bytes[offset : offset + 4], "little")
            offset += 4

            inputs.append(TxInput(txid, vout, script_sig, sequence))

        output_count, offset = read_varint(tx_bytes, offset)
        outputs: list[TxOutput] = []

        for _ in range(output_count):
            value = int.from_bytes(tx_bytes[offset : offset + 8], "little")
            offset += 8

            script_len, offset = read_varint(tx_bytes, offset)
            script = tx_bytes[offset : offset + script_len]
            offset += script_len

            outputs.append(TxOutput(value, script))

        lock_time = int.from_bytes(tx_bytes[offset : offset + 4], "little")
        offset += 4
        expiry_height = int.from_bytes(tx_bytes[offset : offset + 4], "little")
        offset += 4
        value_balance = int.from_bytes(tx_bytes[offset : offset + 8], "little", signed=True)
        offset += 8

        for section in ("shielded spends", "shielded outputs", "joinsplits"):
            count, offset = read_varint(tx_bytes, offset)
            if count:
                raise DecodeError(f"Transactions with {section} are not supported")

        if offset != len(tx_bytes):
            raise DecodeError(f"{len(tx_bytes) - offset} trailing bytes after transaction")

        return Transaction(
            version=version,
            version_group_id=version_group_id,
            inputs=inputs,
            outputs=outputs,
            lock_time=lock_time,
            expiry_height=expiry_height,
            value_balance=value_balance,
        )

    except DecodeError:
        raise
    except (IndexError, ValueError) as e:
        raise DecodeError(f"Failed to parse transaction: {e}") from e


def _blake2b_256(data: bytes, person: bytes) -> bytes:
    return hashlib.blake2b(data, digest_size=32, person=person).digest()


def compute_sighash(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    params: NetworkParams,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """
    Compute the ZIP-243 signature hash for a transparent input.

    Args:
        tx: Transaction being signed
        input_index: Index of the input to sign
        script_code: scriptPubKey of the output being spent
        value: Value of the output being spent (satoshis)
        params: Network parameters (supplies the consensus branch id)
        sighash_type: Only SIGHASH_ALL is supported
    """
    if sighash_type != SIGHASH_ALL:
        raise ValidationError(f"Unsupported sighash type: {sighash_type}")
    if not 0 <= input_index < len(tx.inputs):
        raise ValidationError("Input index out of range")

    hash_prevouts = _blake2b_256(
        b"".join(inp.outpoint() for inp in tx.inputs), PREVOUTS_PERSONALIZATION
    )
    hash_sequence = _blake2b_256(
        b"".join(inp.sequence.to_bytes(4, "little") for inp in tx.inputs),
        SEQUENCE_PERSONALIZATION,
    )
    hash_outputs = _blake2b_256(
        b"".join(out.serialize() for out in tx.outputs), OUTPUTS_PERSONALIZATION
    )

    target_input = tx.inputs[input_index]

    preimage = (
        tx.header.to_bytes(4, "little")
        + tx.version_group_id.to_bytes(4, "little")
        + hash_prevouts
        + hash_sequence
        + hash_outputs
        + EMPTY_HASH  # hashJoinSplits
        + EMPTY_HASH  # hashShieldedSpends
        + EMPTY_HASH  # hashShieldedOutputs
        + tx.lock_time.to_bytes(4, "little")
        + tx.expiry_height.to_bytes(4, "little")
        + tx.value_balance.to_bytes(8, "little", signed=True)
        + sighash_type.to_bytes(4, "little")
        + target_input.outpoint()
        + encode_varint(len(script_code))
        + script_code
        + value.to_bytes(8, "little")
        + target_input.sequence.to_bytes(4, "little")
    )

    person = SIGHASH_PERSONALIZATION + params.consensus_branch_id.to_bytes(4, "little")
    return _blake2b_256(preimage, person)


def sign_p2pkh_input(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    keypair: KeyPair,
    params: NetworkParams,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """Sign a P2PKH input using coincurve.

    Returns:
        DER-encoded signature with sighash type byte appended
    """
    sighash = compute_sighash(tx, input_index, script_code, value, params, sighash_type)

    # coincurve produces low-S signatures with RFC 6979 nonces
    signature = keypair.sign(sighash)

    return signature + bytes([sighash_type])


def create_p2pkh_script_sig(signature: bytes, pubkey_bytes: bytes) -> bytes:
    """<sig> <pubkey> as direct pushes."""
    return bytes([len(signature)]) + signature + bytes([len(pubkey_bytes)]) + pubkey_bytes
