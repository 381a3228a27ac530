"""
Configuration management for the wallet CLI.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from vrsccore.networks import NetworkParams, get_network


class WalletSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VRSC_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    network: Literal["mainnet", "testnet"] = "testnet"

    rpc_url: str = "https://api.verustest.net"
    rpc_user: str | None = None
    rpc_password: str | None = None
    rpc_timeout: float = Field(default=30.0, gt=0)

    fee_per_byte: int = Field(default=10, ge=0)
    expiry_delta: int = Field(default=20, ge=0)

    wallet_file: Path = Path.home() / ".vrsc" / "wallet.json"

    log_level: str = "INFO"

    @property
    def network_params(self) -> NetworkParams:
        return get_network(self.network)


def get_settings(**overrides: Any) -> WalletSettings:
    """Load settings from the environment, with explicit overrides taking precedence."""
    return WalletSettings(**overrides)
