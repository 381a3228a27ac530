"""
BIP32 HD key derivation and BIP39 mnemonics for Verus wallets.
Implements BIP44-style P2PKH derivation paths.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from mnemonic import Mnemonic
from vrsccore.constants import DEFAULT_ENTROPY_BITS
from vrsccore.crypto import base58check_encode, hash160
from vrsccore.errors import EntropyError, InvariantError, ValidationError
from vrsccore.networks import NetworkParams
from vrsccore.secure import SecretBuffer

from vrscwallet.wallet.models import KeyPair

# secp256k1 curve order
SECP256K1_N = int("FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16)

HARDENED_OFFSET = 0x80000000

VALID_ENTROPY_BITS = (128, 160, 192, 224, 256)

_WORDLIST = Mnemonic("english")


class HDKey:
    """
    Hierarchical Deterministic Key.
    Implements BIP32 private derivation.
    """

    def __init__(
        self,
        keypair: KeyPair,
        chain_code: bytes,
        depth: int = 0,
        parent_fingerprint: bytes = b"\x00\x00\x00\x00",
        child_index: int = 0,
    ):
        self._keypair = keypair
        self.chain_code = chain_code
        self.depth = depth
        self.parent_fingerprint = parent_fingerprint
        self.child_index = child_index

    @property
    def keypair(self) -> KeyPair:
        return self._keypair

    @property
    def fingerprint(self) -> bytes:
        """First 4 bytes of HASH160 of the compressed public key."""
        return hash160(self._keypair.public_key_bytes())[:4]

    @classmethod
    def from_seed(cls, seed: bytes | SecretBuffer) -> HDKey:
        """Create master HD key from seed"""
        seed_bytes = seed.reveal() if isinstance(seed, SecretBuffer) else seed
        if not 16 <= len(seed_bytes) <= 64:
            raise ValidationError(f"Seed must be 16-64 bytes, got {len(seed_bytes)}")

        hmac_result = hmac.new(b"Bitcoin seed", seed_bytes, hashlib.sha512).digest()
        key_int = int.from_bytes(hmac_result[:32], "big")
        if key_int == 0 or key_int >= SECP256K1_N:
            raise InvariantError("Invalid master key derived from seed")

        return cls(KeyPair(hmac_result[:32]), hmac_result[32:], depth=0)

    def derive(self, path: str) -> HDKey:
        """
        Derive child key from path notation (e.g., "m/44'/19167'/0'/0/0")
        ' or h indicates hardened derivation
        """
        indexes = parse_path(path)
        key = self

        try:
            for index in indexes:
                child = key._derive_child(index)
                if key is not self:
                    key.wipe()
                key = child
        except Exception:
            if key is not self:
                key.wipe()
            raise

        return key

    def _derive_child(self, index: int) -> HDKey:
        """Derive a child key at the given index"""
        hardened = index >= HARDENED_OFFSET
        secret = self._keypair.secret_bytes()

        if hardened:
            data = b"\x00" + secret + index.to_bytes(4, "big")
        else:
            data = self._keypair.public_key_bytes() + index.to_bytes(4, "big")

        hmac_result = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        offset_int = int.from_bytes(hmac_result[:32], "big")
        child_chain = hmac_result[32:]

        if offset_int >= SECP256K1_N:
            raise InvariantError(f"Invalid child key at index {index}")

        child_key_int = (int.from_bytes(secret, "big") + offset_int) % SECP256K1_N
        if child_key_int == 0:
            raise InvariantError(f"Invalid child key at index {index}")

        return HDKey(
            KeyPair(child_key_int.to_bytes(32, "big")),
            child_chain,
            depth=self.depth + 1,
            parent_fingerprint=self.fingerprint,
            child_index=index,
        )

    def _serialize(self, version: int, key_data: bytes) -> str:
        payload = (
            version.to_bytes(4, "big")
            + bytes([self.depth])
            + self.parent_fingerprint
            + self.child_index.to_bytes(4, "big")
            + self.chain_code
            + key_data
        )
        return base58check_encode(payload)

    def to_xprv(self, params: NetworkParams) -> str:
        """Serialize as an extended private key."""
        return self._serialize(params.bip32_private, b"\x00" + self._keypair.secret_bytes())

    def to_xpub(self, params: NetworkParams) -> str:
        """Serialize as an extended public key."""
        return self._serialize(params.bip32_public, self._keypair.public_key_bytes())

    def get_private_key_bytes(self) -> bytes:
        """Get private key as 32 bytes"""
        return self._keypair.secret_bytes()

    def get_public_key_bytes(self) -> bytes:
        """Get compressed public key bytes"""
        return self._keypair.public_key_bytes()

    def wipe(self) -> None:
        self._keypair.wipe()


def parse_path(path: str) -> list[int]:
    """Parse "m/a'/b/c" into child indexes (hardened ones offset by 2^31)."""
    if not isinstance(path, str) or not path.startswith("m"):
        raise ValidationError("Path must start with 'm'")

    parts = path.split("/")
    if parts[0] != "m":
        raise ValidationError(f"Invalid derivation path: {path}")

    indexes = []
    for part in parts[1:]:
        hardened = part.endswith("'") or part.endswith("h")
        index_str = part[:-1] if hardened else part
        if not index_str.isdigit():
            raise ValidationError(f"Invalid path component {part!r} in {path}")

        index = int(index_str)
        if index >= HARDENED_OFFSET:
            raise ValidationError(f"Path index out of range: {part}")
        indexes.append(index + HARDENED_OFFSET if hardened else index)

    return indexes


def generate_mnemonic(entropy_bits: int = DEFAULT_ENTROPY_BITS) -> str:
    """
    Generate a BIP39 mnemonic from secure entropy.

    Args:
        entropy_bits: 128, 160, 192, 224 or 256 (12 to 24 words)

    Returns:
        BIP39 mnemonic phrase
    """
    if entropy_bits not in VALID_ENTROPY_BITS:
        raise ValidationError(f"entropy_bits must be one of {VALID_ENTROPY_BITS}")

    try:
        entropy = secrets.token_bytes(entropy_bits // 8)
    except (OSError, NotImplementedError) as e:
        raise EntropyError(f"Secure random source unavailable: {e}") from e

    with SecretBuffer(entropy) as buffer:
        return _WORDLIST.to_mnemonic(buffer.reveal())


def normalize_mnemonic(mnemonic: str) -> str:
    return " ".join(mnemonic.split())


def validate_mnemonic(mnemonic: str) -> bool:
    """Check wordlist membership, word count and checksum."""
    if not isinstance(mnemonic, str):
        return False
    try:
        return _WORDLIST.check(normalize_mnemonic(mnemonic))
    except (ValueError, LookupError):
        return False


def mnemonic_to_seed(mnemonic: str, passphrase: str = "") -> SecretBuffer:
    """
    Convert a BIP39 mnemonic to its 64-byte seed.

    PBKDF2-HMAC-SHA512(mnemonic, "mnemonic" + passphrase, 2048 rounds).

    Raises:
        ValidationError: If the mnemonic fails the wordlist or checksum check
    """
    if not validate_mnemonic(mnemonic):
        raise ValidationError("Invalid BIP39 mnemonic")
    return SecretBuffer(Mnemonic.to_seed(normalize_mnemonic(mnemonic), passphrase))
