"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import TracebackType

from coincurve import PrivateKey, PublicKey
from pydantic import BaseModel, ConfigDict
from vrsccore.crypto import hash160
from vrsccore.errors import InvariantError, ValidationError
from vrsccore.secure import SecretBuffer


@dataclass
class UTXO:
    """Unspent output owned by a wallet address"""

    txid: str
    vout: int
    value: int
    address: str
    script: str = ""
    height: int | None = None

    @property
    def outpoint(self) -> str:
        return f"{self.txid}:{self.vout}"


@dataclass
class CoinSelection:
    """Result of coin selection"""

    utxos: list[UTXO]
    target: int
    fee: int
    change: int

    @property
    def total_value(self) -> int:
        return sum(utxo.value for utxo in self.utxos)


@dataclass
class WalletKeys:
    """Public result of deriving a wallet from a mnemonic."""

    mnemonic: str = field(repr=False)
    address: str
    wif: str = field(repr=False)
    public_key_hex: str
    path: str


class WalletRecord(BaseModel):
    """
    Persisted wallet record.

    The mnemonic and the WIF are stored only as encrypted blobs.
    """

    model_config = ConfigDict(frozen=True)

    address: str
    private_key_wif: str
    mnemonic: str
    network: str
    path: str


class KeyPair:
    """
    secp256k1 keypair with a compressed public key.

    Use as a context manager: the private scalar is wiped and the key can no
    longer sign once the block exits.
    """

    def __init__(self, secret: bytes | bytearray | SecretBuffer):
        buffer = secret if isinstance(secret, SecretBuffer) else SecretBuffer(secret)
        if len(buffer) != 32:
            buffer.wipe()
            raise ValidationError("Private key must be 32 bytes")
        try:
            self._private_key: PrivateKey | None = PrivateKey(buffer.reveal())
        except ValueError as e:
            buffer.wipe()
            raise ValidationError(f"Invalid private key: {e}") from e
        self._secret = buffer
        self._public_key = self._private_key.public_key

    def __enter__(self) -> KeyPair:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.wipe()

    def __repr__(self) -> str:
        return f"KeyPair(pubkey={self.public_key_hex()})"

    @property
    def private_key(self) -> PrivateKey:
        """Return the coincurve PrivateKey instance."""
        if self._private_key is None:
            raise InvariantError("KeyPair used after it was wiped")
        return self._private_key

    @property
    def public_key(self) -> PublicKey:
        return self._public_key

    def secret_bytes(self) -> bytes:
        return self._secret.reveal()

    def public_key_bytes(self) -> bytes:
        return self._public_key.format(compressed=True)

    def public_key_hex(self) -> str:
        return self.public_key_bytes().hex()

    def pubkey_hash(self) -> bytes:
        return hash160(self.public_key_bytes())

    def sign(self, digest: bytes) -> bytes:
        """Sign a 32-byte pre-computed digest, returning a DER signature."""
        if len(digest) != 32:
            raise ValidationError("Digest must be 32 bytes")
        return self.private_key.sign(digest, hasher=None)

    def wipe(self) -> None:
        self._secret.wipe()
        self._private_key = None
