"""
Verus Wallet CLI - Create wallets, check balances and send funds.
"""

from __future__ import annotations

import asyncio
import os
import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer
from loguru import logger
from pydantic import ValidationError as PydanticValidationError
from vrsccore.constants import MAX_SATOSHIS, SATS_PER_COIN
from vrsccore.errors import ValidationError, WalletError

from vrscwallet.config import WalletSettings, get_settings
from vrscwallet.wallet.models import CoinSelection, WalletRecord

app = typer.Typer(
    name="vrsc-wallet",
    help="Verus Wallet Management",
    add_completion=False,
)

# BIP39 word count -> entropy bits
WORD_COUNTS = {12: 128, 15: 160, 18: 192, 21: 224, 24: 256}


def setup_logging(level: str = "INFO") -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def parse_amount(value: str) -> int:
    """Convert a coin amount such as "1.5" to satoshis."""
    try:
        coins = Decimal(value)
    except InvalidOperation as e:
        raise ValidationError(f"Invalid amount: {value}") from e

    if not coins.is_finite():
        raise ValidationError(f"Invalid amount: {value}")

    sats = coins * SATS_PER_COIN
    if sats != sats.to_integral_value():
        raise ValidationError("Amount has more than 8 decimal places")
    if sats <= 0 or sats > MAX_SATOSHIS:
        raise ValidationError(f"Amount out of range: {value}")
    return int(sats)


def format_amount(sats: int, coin: str) -> str:
    return f"{sats:,} sats ({Decimal(sats) / SATS_PER_COIN:.8f} {coin})"


def load_wallet_record(path: Path) -> WalletRecord:
    if not path.exists():
        raise ValidationError(f"Wallet file not found: {path}. Run 'vrsc-wallet create' first")
    try:
        return WalletRecord.model_validate_json(path.read_text())
    except PydanticValidationError as e:
        raise ValidationError(f"Wallet file {path} is corrupt: {e}") from e


def save_wallet_record(record: WalletRecord, path: Path, overwrite: bool = False) -> None:
    """Write the record readable by the owner only."""
    path.parent.mkdir(parents=True, exist_ok=True)

    flags = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
    if not overwrite:
        flags |= os.O_EXCL

    try:
        fd = os.open(path, flags, 0o600)
    except FileExistsError as e:
        raise ValidationError(f"Wallet file already exists: {path} (use --force)") from e

    with os.fdopen(fd, "w") as f:
        f.write(record.model_dump_json(indent=2))
    os.chmod(path, 0o600)


def _load_settings(
    network: str | None,
    wallet_file: Path | None,
    rpc_url: str | None,
    log_level: str | None,
) -> WalletSettings:
    overrides = {
        "network": network,
        "wallet_file": wallet_file,
        "rpc_url": rpc_url,
        "log_level": log_level,
    }
    try:
        settings = get_settings(**{k: v for k, v in overrides.items() if v is not None})
    except PydanticValidationError as e:
        setup_logging()
        logger.error(f"Invalid settings: {e}")
        raise typer.Exit(1)
    setup_logging(settings.log_level)
    return settings


def _create_backend(settings: WalletSettings):
    from vrscwallet.backends.verus_rpc import VerusRPCBackend

    return VerusRPCBackend(
        rpc_url=settings.rpc_url,
        rpc_user=settings.rpc_user,
        rpc_password=settings.rpc_password,
        timeout=settings.rpc_timeout,
    )


def _print_mnemonic(mnemonic: str) -> None:
    typer.echo("\n" + "=" * 80)
    typer.echo("WALLET MNEMONIC - WRITE THIS DOWN AND KEEP IT SAFE!")
    typer.echo("=" * 80)
    typer.echo(f"\n{mnemonic}\n")
    typer.echo("=" * 80)
    typer.echo("\nAnyone with this phrase can spend your coins.")
    typer.echo("Store it securely offline - NEVER share it with anyone!")
    typer.echo("=" * 80 + "\n")


@app.command()
def generate(
    word_count: int = typer.Option(24, "--words", "-w", help="Number of words (12-24)"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Generate a new BIP39 mnemonic phrase."""
    from vrscwallet.wallet.bip32 import generate_mnemonic

    _load_settings(None, None, None, log_level)

    if word_count not in WORD_COUNTS:
        logger.error(f"--words must be one of {sorted(WORD_COUNTS)}")
        raise typer.Exit(1)

    try:
        mnemonic = generate_mnemonic(WORD_COUNTS[word_count])
    except WalletError as e:
        logger.error(f"Failed to generate mnemonic: {e}")
        raise typer.Exit(1)

    _print_mnemonic(mnemonic)


@app.command()
def create(
    password: str = typer.Option(
        ...,
        "--password",
        envvar="VRSC_PASSWORD",
        prompt=True,
        hide_input=True,
        confirmation_prompt=True,
        help="Password protecting the wallet file",
    ),
    restore: bool = typer.Option(False, "--restore", "-r", help="Restore from a mnemonic"),
    mnemonic: str | None = typer.Option(
        None, "--mnemonic", envvar="VRSC_MNEMONIC", help="Mnemonic to restore (prompted if omitted)"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing wallet file"),
    network: str | None = typer.Option(None, "--network", "-n"),
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Create a new wallet, or restore one with --restore."""
    from vrscwallet.wallet.service import create_wallet

    settings = _load_settings(network, wallet_file, None, log_level)

    if restore and mnemonic is None:
        mnemonic = typer.prompt("Mnemonic", hide_input=True)

    try:
        record, keys = create_wallet(
            password, settings.network_params, mnemonic=mnemonic if restore else None
        )
        save_wallet_record(record, settings.wallet_file, overwrite=force)
    except WalletError as e:
        logger.error(f"Failed to create wallet: {e}")
        raise typer.Exit(1)

    if not restore:
        _print_mnemonic(keys.mnemonic)

    typer.echo(f"Wallet saved to: {settings.wallet_file}")
    typer.echo(f"Address: {record.address}")


@app.command()
def address(
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Show the wallet's receive address."""
    settings = _load_settings(None, wallet_file, None, log_level)

    try:
        record = load_wallet_record(settings.wallet_file)
    except WalletError as e:
        logger.error(str(e))
        raise typer.Exit(1)

    typer.echo(record.address)


@app.command()
def balance(
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    rpc_url: str | None = typer.Option(None, "--rpc-url"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Show the wallet balance."""
    settings = _load_settings(None, wallet_file, rpc_url, log_level)

    try:
        record = load_wallet_record(settings.wallet_file)
        asyncio.run(_show_balance(record, settings))
    except WalletError as e:
        logger.error(f"Failed to fetch balance: {e}")
        raise typer.Exit(1)


async def _show_balance(record: WalletRecord, settings: WalletSettings) -> None:
    from vrscwallet.wallet.service import WalletService

    wallet = WalletService(record, _create_backend(settings))
    try:
        sats = await wallet.get_balance()
        typer.echo(f"{record.address}: {format_amount(sats, wallet.params.coin)}")
    finally:
        await wallet.close()


@app.command()
def send(
    recipient: str = typer.Argument(..., help="Destination address"),
    amount: str = typer.Argument(..., help="Amount in coins, e.g. 1.25"),
    password: str = typer.Option(
        ..., "--password", envvar="VRSC_PASSWORD", prompt=True, hide_input=True
    ),
    fee_per_byte: int | None = typer.Option(None, "--fee-per-byte", help="Fee rate in sat/byte"),
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    rpc_url: str | None = typer.Option(None, "--rpc-url"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Send coins to an address."""
    settings = _load_settings(None, wallet_file, rpc_url, log_level)

    try:
        sats = parse_amount(amount)
        record = load_wallet_record(settings.wallet_file)
        rate = settings.fee_per_byte if fee_per_byte is None else fee_per_byte
        txid = asyncio.run(_send(record, settings, password, recipient, sats, rate))
    except WalletError as e:
        logger.error(f"Send failed: {e}")
        raise typer.Exit(1)

    typer.echo(f"Transaction broadcast: {txid}")


async def _send(
    record: WalletRecord,
    settings: WalletSettings,
    password: str,
    recipient: str,
    sats: int,
    fee_per_byte: int,
) -> str:
    from vrscwallet.wallet.service import WalletService

    wallet = WalletService(record, _create_backend(settings))
    try:
        return await wallet.send(
            password, recipient, sats, fee_per_byte, expiry_delta=settings.expiry_delta
        )
    finally:
        await wallet.close()


@app.command("estimate-fee")
def estimate_fee(
    amount: str = typer.Argument(..., help="Amount in coins, e.g. 1.25"),
    fee_per_byte: int | None = typer.Option(None, "--fee-per-byte", help="Fee rate in sat/byte"),
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    rpc_url: str | None = typer.Option(None, "--rpc-url"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Preview the fee for sending an amount, without signing anything."""
    settings = _load_settings(None, wallet_file, rpc_url, log_level)

    try:
        sats = parse_amount(amount)
        record = load_wallet_record(settings.wallet_file)
        rate = settings.fee_per_byte if fee_per_byte is None else fee_per_byte
        selection = asyncio.run(_estimate_fee(record, settings, sats, rate))
    except WalletError as e:
        logger.error(f"Fee estimate failed: {e}")
        raise typer.Exit(1)

    coin = settings.network_params.coin
    typer.echo(f"Inputs: {len(selection.utxos)}")
    typer.echo(f"Fee:    {format_amount(selection.fee, coin)}")
    typer.echo(f"Change: {format_amount(selection.change, coin)}")
    typer.echo(f"Total:  {format_amount(sats + selection.fee, coin)}")


async def _estimate_fee(
    record: WalletRecord, settings: WalletSettings, sats: int, fee_per_byte: int
) -> CoinSelection:
    from vrscwallet.wallet.service import WalletService

    wallet = WalletService(record, _create_backend(settings))
    try:
        return await wallet.estimate_fee(sats, fee_per_byte)
    finally:
        await wallet.close()


@app.command()
def info(
    rpc_url: str | None = typer.Option(None, "--rpc-url"),
    network: str | None = typer.Option(None, "--network", "-n"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Display chain gateway information."""
    settings = _load_settings(network, None, rpc_url, log_level)

    try:
        node_info = asyncio.run(_get_info(settings))
    except WalletError as e:
        logger.error(f"Failed to query gateway: {e}")
        raise typer.Exit(1)

    typer.echo(f"Gateway:     {settings.rpc_url}")
    typer.echo(f"Chain:       {node_info.get('name', settings.network_params.coin)}")
    typer.echo(f"Version:     {node_info.get('version', 'unknown')}")
    typer.echo(f"Blocks:      {node_info.get('blocks', 'unknown')}")
    typer.echo(f"Connections: {node_info.get('connections', 'unknown')}")


async def _get_info(settings: WalletSettings) -> dict:
    backend = _create_backend(settings)
    try:
        return await backend.get_info()
    finally:
        await backend.close()


@app.command("export-mnemonic")
def export_mnemonic(
    password: str = typer.Option(
        ..., "--password", envvar="VRSC_PASSWORD", prompt=True, hide_input=True
    ),
    wallet_file: Path | None = typer.Option(None, "--wallet-file", "-f"),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
) -> None:
    """Decrypt and print the wallet mnemonic."""
    from vrscwallet.wallet import vault

    settings = _load_settings(None, wallet_file, None, log_level)

    try:
        record = load_wallet_record(settings.wallet_file)
        mnemonic = vault.decrypt(record.mnemonic, password)
    except WalletError as e:
        logger.error(f"Failed to export mnemonic: {e}")
        raise typer.Exit(1)

    _print_mnemonic(mnemonic)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
