"""
Product command groups.

Builds ``ntdbank token``, ``ntdbank credit`` and ``ntdbank deposit`` from the
entry point table.  Each method argument becomes an option; options left out
are prompted for when running interactively.

Examples:
  ntdbank token balance-of --account 0xAbC...
  ntdbank token mint --to 0xAbC... --amount 100
  ntdbank credit spend --user 0x... --merchant 0x... --amount 12.5
  ntdbank deposit create-deposit --user 0x... --amount 1000 --period 2592000 --interest-rate 150
"""

from __future__ import annotations

from typing import Any, Optional

import click

from ..config import Product
from ..entrypoints import EntryPoint, entry_points_for, run_entry_point
from ..errors import NtdBankError
from . import echo_receipt, echo_submitted, echo_value, fail, prompt_for, resolve_interactive

_GROUP_HELP = {
    Product.TOKEN: "NTD token operations (NTD_TOKEN_CONTRACT_ADDRESS).",
    Product.CREDIT_CARD: "Credit-card product operations (CREDITCARD_CONTRACT_ADDRESS).",
    Product.DEPOSIT: "Deposit product operations (DEPOSIT_CONTRACT_ADDRESS).",
}


def _common_options(entry: EntryPoint) -> list[click.Parameter]:
    params: list[click.Parameter] = [
        click.Option(
            ["--interactive/--no-interactive"],
            default=None,
            help="Prompt for missing arguments (default: when stdin is a terminal)",
        ),
        click.Option(
            ["--raw"],
            is_flag=True,
            default=False,
            help="Amounts are integers in the smallest unit (no 18-decimal scaling)",
        ),
    ]
    if entry.requires_signer:
        params += [
            click.Option(
                ["--wait/--no-wait"],
                default=True,
                help="Wait for the transaction to be mined",
            ),
            click.Option(
                ["--timeout"],
                type=float,
                default=None,
                help="Seconds to wait for the receipt (default: no limit)",
            ),
            click.Option(["--gas-limit"], type=int, default=None, help="Gas limit (default: estimate)"),
        ]
    return params


def build_command(entry: EntryPoint) -> click.Command:
    """Create the click command for one entry point."""

    def callback(
        interactive: Optional[bool],
        raw: bool,
        wait: bool = True,
        timeout: Optional[float] = None,
        gas_limit: Optional[int] = None,
        **values: Optional[str],
    ) -> None:
        prompt = prompt_for if resolve_interactive(interactive) else None
        try:
            result: Any = run_entry_point(
                entry,
                values,
                prompt=prompt,
                raw_units=raw,
                wait=wait,
                timeout=timeout,
                gas_limit=gas_limit,
                on_submitted=echo_submitted,
            )
        except NtdBankError as exc:
            fail(exc)

        if entry.requires_signer:
            echo_receipt(entry.method, result)
        else:
            echo_value(entry.method, result)

    params: list[click.Parameter] = [
        click.Option([spec.option, spec.name], default=None, help=spec.help)
        for spec in entry.params
    ]
    params += _common_options(entry)

    return click.Command(
        name=entry.command,
        callback=callback,
        params=params,
        help=entry.summary,
        short_help=entry.summary,
    )


def build_group(product: Product) -> click.Group:
    group = click.Group(name=product.value, help=_GROUP_HELP[product])
    for entry in entry_points_for(product):
        group.add_command(build_command(entry))
    return group


token = build_group(Product.TOKEN)
credit = build_group(Product.CREDIT_CARD)
deposit = build_group(Product.DEPOSIT)
