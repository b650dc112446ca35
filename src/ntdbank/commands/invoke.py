"""
Generic contract calls.

``ntdbank call`` runs any view function and ``ntdbank send`` any state-changing
function of a bundled contract ABI, with arguments given as a JSON array.
Useful for methods the product groups don't expose.
"""

from __future__ import annotations

import json
from typing import Any, Optional

import click

from ..chain.abi import abi_type, find_function, is_read_only, label_outputs
from ..chain.invoke import call_read, call_write, connect
from ..config import Product, resolve_config
from ..errors import NtdBankError, ValidationError
from ..units import render_value
from . import echo_receipt, echo_submitted, echo_value, fail

_PRODUCTS = click.Choice([p.value for p in Product])


def coerce_json_arg(typ: str, value: Any) -> Any:
    """Fit a JSON value to the ABI type eth-abi expects (hex → bytes, str → int)."""
    if typ.endswith("]"):
        if not isinstance(value, list):
            raise ValidationError(f"Expected a JSON array for {typ}")
        element = typ[: typ.rindex("[")]
        return [coerce_json_arg(element, v) for v in value]
    if typ.startswith("bytes") and isinstance(value, str):
        body = value[2:] if value.lower().startswith("0x") else value
        try:
            return bytes.fromhex(body)
        except ValueError:
            raise ValidationError(f"Not a hex string for {typ}: {value!r}") from None
    if typ.startswith(("uint", "int")) and isinstance(value, str):
        try:
            return int(value, 0)
        except ValueError:
            raise ValidationError(f"Not an integer for {typ}: {value!r}") from None
    return value


def _parse_args(args_json: str) -> list:
    try:
        args = json.loads(args_json)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Invalid args: {exc}") from exc
    if not isinstance(args, list):
        raise ValidationError("Invalid args: must be a JSON array")
    return args


def _prepare(product: Product, func_name: str, args_json: str, needs_signer: bool):
    config = resolve_config(product, needs_signer=needs_signer)
    handle = connect(config, needs_signer=needs_signer, contract_name=product.contract_name)
    try:
        func = find_function(handle.abi, func_name)
        raw_args = _parse_args(args_json)
        inputs = func.get("inputs", [])
        if len(raw_args) != len(inputs):
            raise ValidationError(
                f"{func_name} takes {len(inputs)} argument(s), got {len(raw_args)}"
            )
        args = [coerce_json_arg(abi_type(p), v) for p, v in zip(inputs, raw_args)]
    except NtdBankError:
        handle.close()
        raise
    return handle, func, args


@click.command()
@click.option("--product", "product_name", required=True, type=_PRODUCTS, help="Target contract")
@click.option("--function", "func_name", required=True, help="Function name to call")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
def call(product_name: str, func_name: str, args_json: str) -> None:
    """Read from a contract (eth_call)."""
    try:
        handle, func, args = _prepare(Product(product_name), func_name, args_json, False)
        with handle:
            if not is_read_only(func):
                click.secho(
                    f"  Warning: {func_name} is not a view function; nothing is sent.",
                    fg="yellow",
                )
            value = call_read(handle, func_name, args)
            value = label_outputs(handle.abi, func_name, value)
    except NtdBankError as exc:
        fail(exc)

    echo_value(func_name, render_value(value))


@click.command()
@click.option("--product", "product_name", required=True, type=_PRODUCTS, help="Target contract")
@click.option("--function", "func_name", required=True, help="Function name to call")
@click.option("--args", "args_json", default="[]", help="Function args as JSON array")
@click.option("--value", default=0, type=int, help="Wei to attach")
@click.option("--gas-limit", default=None, type=int, help="Gas limit (default: estimate)")
@click.option("--timeout", default=None, type=float, help="Receipt wait limit in seconds")
@click.option("--wait/--no-wait", default=True, help="Wait for the transaction to be mined")
def send(
    product_name: str,
    func_name: str,
    args_json: str,
    value: int,
    gas_limit: Optional[int],
    timeout: Optional[float],
    wait: bool,
) -> None:
    """
    Send a transaction to a contract.

    Signs with PRIVATE_KEY; the signer pays gas.
    """
    try:
        handle, _func, args = _prepare(Product(product_name), func_name, args_json, True)
        with handle:
            click.echo(f"  Sender: {handle.account.address}")
            click.echo(f"  Target: {handle.address}")
            click.echo(f"  Function: {func_name}")
            click.echo(f"  Args: {render_value(args)}")
            if value > 0:
                click.echo(f"  Value: {value} wei")
            click.echo("")

            receipt = call_write(
                handle,
                func_name,
                args,
                wait=wait,
                timeout=timeout,
                gas_limit=gas_limit,
                value=value,
                on_submitted=echo_submitted,
            )
    except NtdBankError as exc:
        fail(exc)

    echo_receipt(func_name, receipt)
