"""
Commands - CLI implementations for ntdbank.

- products: one click group per contract (token, credit, deposit), one
  command per entry in ``ntdbank.entrypoints.ENTRY_POINTS``
- invoke:   generic ``call`` / ``send`` for any method in a bundled ABI
"""

from __future__ import annotations

import json
import sys
from typing import Any, NoReturn, Optional

import click

from ..chain.invoke import Receipt
from ..errors import NtdBankError


def fail(exc: NtdBankError) -> NoReturn:
    """Print an error and exit with the code for its kind."""
    click.secho(f"ERROR: {exc}", fg="red", err=True)
    if getattr(exc, "tx_hash", None):
        click.echo(f"  TX: {exc.tx_hash}", err=True)
    sys.exit(exc.exit_code)


def echo_value(label: str, value: Any) -> None:
    if isinstance(value, (dict, list)):
        click.echo(f"{label}:")
        click.echo(json.dumps(value, indent=2))
    elif isinstance(value, bool):
        click.echo(f"{label}: {str(value).lower()}")
    else:
        click.echo(f"{label}: {value}")


def echo_submitted(tx_hash: str) -> None:
    click.echo(click.style("  Transaction sent: ", dim=True) + tx_hash)


def echo_receipt(method: str, receipt: Optional[Receipt]) -> None:
    if receipt is None:
        click.echo("  Not waiting for confirmation.")
        return
    click.secho(f"SUCCESS: {method} confirmed in block {receipt.block_number}", fg="green")
    click.echo(f"  TX: {receipt.tx_hash}")
    if receipt.gas_used is not None:
        click.echo(f"  Gas used: {receipt.gas_used}")


def resolve_interactive(interactive: Optional[bool]) -> bool:
    if interactive is None:
        return sys.stdin.isatty()
    return interactive


def prompt_for(text: str) -> str:
    return click.prompt(text, default="", show_default=False)
