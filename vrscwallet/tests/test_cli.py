"""
Tests for the vrsc-wallet CLI.
"""

import os
import stat
import sys
from unittest.mock import AsyncMock

import pytest
from loguru import logger
from typer.testing import CliRunner
from vrsccore.errors import ValidationError

import vrscwallet.cli as cli_module
from vrscwallet.cli import app, load_wallet_record, parse_amount
from vrscwallet.wallet.keys import derive_wallet_keys
from vrscwallet.wallet.models import UTXO

runner = CliRunner()

PASSWORD = "hunter2hunter2"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ("NETWORK", "WALLET_FILE", "PASSWORD", "MNEMONIC", "LOG_LEVEL"):
        monkeypatch.delenv(f"VRSC_{name}", raising=False)
    yield
    # The CLI points loguru at the runner's captured stderr
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def wallet_file(tmp_path):
    return tmp_path / "wallet.json"


class TestParseAmount:
    def test_coins_to_sats(self):
        assert parse_amount("1") == 100_000_000
        assert parse_amount("0.00000001") == 1
        assert parse_amount("12.5") == 1_250_000_000

    @pytest.mark.parametrize("value", ["0", "-1", "0.000000001", "abc", "NaN", "inf"])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            parse_amount(value)


def test_generate():
    result = runner.invoke(app, ["generate", "--words", "12"])
    assert result.exit_code == 0
    phrases = [line for line in result.stdout.splitlines() if len(line.split()) == 12]
    assert len(phrases) == 1


def test_generate_rejects_word_count():
    result = runner.invoke(app, ["generate", "--words", "13"])
    assert result.exit_code == 1


def test_create_and_address(wallet_file):
    result = runner.invoke(
        app,
        ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file), "-n", "mainnet"],
    )
    assert result.exit_code == 0, result.output
    assert wallet_file.exists()
    assert stat.S_IMODE(os.stat(wallet_file).st_mode) == 0o600

    record = load_wallet_record(wallet_file)
    assert record.network == "mainnet"
    assert f"Address: {record.address}" in result.stdout

    result = runner.invoke(app, ["address", "--wallet-file", str(wallet_file)])
    assert result.exit_code == 0
    assert result.stdout.strip() == record.address


def test_create_refuses_overwrite(wallet_file):
    args = ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file)]
    assert runner.invoke(app, args).exit_code == 0
    first = wallet_file.read_text()

    assert runner.invoke(app, args).exit_code == 1
    assert wallet_file.read_text() == first

    assert runner.invoke(app, args + ["--force"]).exit_code == 0
    assert wallet_file.read_text() != first


def test_restore_and_export(wallet_file, test_mnemonic, testnet):
    result = runner.invoke(
        app,
        [
            "create",
            "--restore",
            "--mnemonic",
            test_mnemonic,
            "--password",
            PASSWORD,
            "--wallet-file",
            str(wallet_file),
        ],
    )
    assert result.exit_code == 0, result.output
    assert load_wallet_record(wallet_file).address == derive_wallet_keys(test_mnemonic, testnet).address
    # A restored mnemonic is not echoed back
    assert test_mnemonic not in result.stdout

    result = runner.invoke(
        app, ["export-mnemonic", "--password", PASSWORD, "--wallet-file", str(wallet_file)]
    )
    assert result.exit_code == 0
    assert test_mnemonic in result.stdout


def test_export_wrong_password(wallet_file):
    runner.invoke(app, ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file)])
    result = runner.invoke(
        app, ["export-mnemonic", "--password", "wrong", "--wallet-file", str(wallet_file)]
    )
    assert result.exit_code == 1


def test_missing_wallet_file(tmp_path):
    result = runner.invoke(app, ["address", "--wallet-file", str(tmp_path / "nope.json")])
    assert result.exit_code == 1


def test_invalid_network_option(wallet_file):
    result = runner.invoke(
        app, ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file), "-n", "regtest"]
    )
    assert result.exit_code == 1
    assert not wallet_file.exists()


def test_send_rejects_bad_amount(wallet_file):
    runner.invoke(app, ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file)])
    result = runner.invoke(
        app,
        [
            "send",
            "RJhtGFNZEnJyq6Xg3Vrf3nVCbcK1zRmh4v",
            "0.000000001",
            "--password",
            PASSWORD,
            "--wallet-file",
            str(wallet_file),
        ],
    )
    assert result.exit_code == 1


def test_estimate_fee(wallet_file, monkeypatch):
    runner.invoke(app, ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file)])
    record = load_wallet_record(wallet_file)

    backend = AsyncMock()
    backend.get_utxos.return_value = [
        UTXO(txid="aa" * 32, vout=0, value=1_000_000, address=record.address),
        UTXO(txid="bb" * 32, vout=1, value=2_000_000, address=record.address),
    ]
    monkeypatch.setattr(cli_module, "_create_backend", lambda settings: backend)

    result = runner.invoke(
        app,
        ["estimate-fee", "0.015", "--fee-per-byte", "1", "--wallet-file", str(wallet_file)],
    )
    assert result.exit_code == 0, result.output
    assert "Inputs: 1" in result.stdout
    assert "Fee:    258 sats" in result.stdout
    assert "Change: 499,742 sats" in result.stdout
    backend.broadcast_transaction.assert_not_awaited()
    backend.close.assert_awaited_once()


def test_estimate_fee_insufficient_funds(wallet_file, monkeypatch):
    runner.invoke(app, ["create", "--password", PASSWORD, "--wallet-file", str(wallet_file)])

    backend = AsyncMock()
    backend.get_utxos.return_value = []
    monkeypatch.setattr(cli_module, "_create_backend", lambda settings: backend)

    result = runner.invoke(app, ["estimate-fee", "1", "--wallet-file", str(wallet_file)])
    assert result.exit_code == 1
