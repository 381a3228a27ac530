"""
vrscwallet - Non-custodial single-address wallet for Verus

Key derivation, encrypted secret storage, coin selection and Sapling (v4)
transaction signing, plus a JSON-RPC chain gateway and the vrsc-wallet CLI.
"""

__version__ = "0.3.0"
