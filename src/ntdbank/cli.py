"""
ntdbank CLI

Command-line interface for the NTD token, credit-card and deposit contracts.

Commands:
  token     - NTD token reads and writes
  credit    - Credit-card product reads and writes
  deposit   - Deposit product reads and writes
  call      - Run any view function from a bundled ABI
  send      - Send any transaction from a bundled ABI
  whoami    - Show the signer address
  info      - Show resolved configuration
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import click

from .config import (
    PRIVATE_KEY_ENV,
    RPC_URL_ENV,
    Product,
    is_address,
    load_env_files,
    lookup_env,
    resolve_rpc_url,
)
from .errors import ConfigurationError
from .wallet import get_address, load_private_key


# ============ Constants ============

VERSION = "1.0.0"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _configure_logging(verbose: bool) -> None:
    """Console logging on stderr; DEBUG with --verbose, else WARNING."""
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger("ntdbank")
    logger.setLevel(level)

    # Prevent duplicate handlers
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level)


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="ntdbank")
@click.option("--rpc-url", default=None, help=f"JSON-RPC endpoint (overrides {RPC_URL_ENV})")
@click.option("--verbose", "-v", is_flag=True, help="Log RPC traffic to stderr")
def cli(rpc_url: Optional[str], verbose: bool) -> None:
    """ntdbank - NTD token, credit-card and deposit contract client."""
    _configure_logging(verbose)
    load_env_files()
    if rpc_url:
        os.environ[RPC_URL_ENV] = rpc_url


# ============ Command Groups ============

from .commands.invoke import call, send
from .commands.products import credit, deposit, token

cli.add_command(token)
cli.add_command(credit)
cli.add_command(deposit)
cli.add_command(call)
cli.add_command(send)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show the signer address derived from PRIVATE_KEY."""
    try:
        address = get_address(load_private_key())
    except ConfigurationError as exc:
        click.echo(f"No signer configured: {exc}")
        click.echo(f"Set {PRIVATE_KEY_ENV} in the environment or a .env file.")
        sys.exit(exc.exit_code)
    click.echo(f"Address: {address}")


# ============ Info ============


@cli.command()
def info() -> None:
    """Show the resolved configuration (private key redacted)."""
    click.secho(f"  ntdbank v{VERSION}", bold=True)
    click.echo()

    try:
        rpc_url = resolve_rpc_url()
        click.echo(click.style("  RPC URL:     ", dim=True) + rpc_url)
    except ConfigurationError as exc:
        click.echo(click.style("  RPC URL:     ", dim=True) + click.style(str(exc), fg="yellow"))

    for product in Product:
        label = f"  {product.contract_name + ':':<13}"
        address = lookup_env(product.address_env)
        if address and is_address(address):
            click.echo(click.style(label, dim=True) + address)
        else:
            status = "invalid address" if address else "not set"
            click.echo(
                click.style(label, dim=True)
                + click.style(f"{product.address_env} {status}", fg="yellow")
            )

    try:
        address = get_address(load_private_key())
        click.echo(click.style("  Signer:      ", dim=True) + address)
    except ConfigurationError:
        click.echo(
            click.style("  Signer:      ", dim=True)
            + click.style("not configured", fg="yellow")
            + click.style("  (reads only)", dim=True)
        )
    click.echo()


# ============ Entry Points ============


def main() -> None:
    """ntdbank CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
