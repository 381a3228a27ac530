"""
Tests for wallet settings.
"""

from pathlib import Path

import pydantic
import pytest
from vrsccore.networks import VERUS_MAINNET, VERUS_TESTNET

from vrscwallet.config import WalletSettings, get_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # Keep a developer's .env and VRSC_* variables out of the tests
    monkeypatch.chdir(tmp_path)
    for name in ("NETWORK", "RPC_URL", "FEE_PER_BYTE", "EXPIRY_DELTA", "WALLET_FILE", "LOG_LEVEL"):
        monkeypatch.delenv(f"VRSC_{name}", raising=False)


def test_defaults():
    settings = WalletSettings()
    assert settings.network == "testnet"
    assert settings.fee_per_byte == 10
    assert settings.expiry_delta == 20
    assert settings.network_params is VERUS_TESTNET


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("VRSC_NETWORK", "mainnet")
    monkeypatch.setenv("VRSC_FEE_PER_BYTE", "25")
    monkeypatch.setenv("VRSC_WALLET_FILE", "/tmp/w.json")

    settings = get_settings()
    assert settings.network_params is VERUS_MAINNET
    assert settings.fee_per_byte == 25
    assert settings.wallet_file == Path("/tmp/w.json")


def test_dotenv_file(tmp_path):
    (tmp_path / ".env").write_text("VRSC_RPC_URL=http://127.0.0.1:27486\n")
    assert get_settings().rpc_url == "http://127.0.0.1:27486"


def test_explicit_overrides_win(monkeypatch):
    monkeypatch.setenv("VRSC_NETWORK", "mainnet")
    assert get_settings(network="testnet").network == "testnet"


def test_invalid_network():
    with pytest.raises(pydantic.ValidationError):
        WalletSettings(network="regtest")


def test_negative_fee_rate():
    with pytest.raises(pydantic.ValidationError):
        WalletSettings(fee_per_byte=-1)
