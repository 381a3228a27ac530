"""
Error taxonomy for the wallet core.

Every failure raised by the core is a WalletError subclass. Errors from the
underlying libraries (coincurve, cryptography, base58, httpx) are wrapped
with ``raise ... from e`` so the original cause stays attached.
"""

from __future__ import annotations


class WalletError(Exception):
    """Base class for all wallet core errors."""

    pass


class ValidationError(WalletError):
    """Malformed mnemonic, address, path or amount."""

    pass


class InsufficientFundsError(WalletError):
    """The UTXO set cannot cover target + fee."""

    def __init__(self, message: str, needed: int = 0, available: int = 0):
        super().__init__(message)
        self.needed = needed
        self.available = available


class AuthenticationError(WalletError):
    """Wrong password or tampered ciphertext."""

    pass


class DecodeError(WalletError):
    """Bad checksum, alphabet or payload on an address or WIF."""

    pass


class NetworkError(WalletError):
    """Chain gateway failure (transport or JSON-RPC error)."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class InvariantError(WalletError):
    """Internal consistency check failed. Fatal if ever seen."""

    pass


class EntropyError(WalletError):
    """The secure random source is unavailable."""

    pass
