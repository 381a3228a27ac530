"""
Chain gateway implementations.

Available backends:
- VerusRPCBackend: JSON-RPC against a Verus daemon or public gateway with the
  address index enabled (getaddressutxos, getaddressbalance)
"""

from vrscwallet.backends.base import ChainBackend
from vrscwallet.backends.verus_rpc import VerusRPCBackend

__all__ = [
    "ChainBackend",
    "VerusRPCBackend",
]
