"""
Entry point table.

Every CLI command is one row here: a contract method, the arguments it takes
(and how to parse them), whether it needs a signer, and how to format what
comes back.  ``run_entry_point`` is the single code path that executes a row.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

import httpx

from .chain.abi import label_outputs
from .chain.invoke import Receipt, call_read, call_write, connect
from .config import Product, resolve_config
from .errors import ValidationError
from .units import (
    ADDRESS,
    ADDRESS_LIST,
    AMOUNT,
    AMOUNT_LIST,
    BYTES4,
    BYTES32,
    UINT,
    UINT_LIST,
    coerce_argument,
    format_units,
    render_value,
)

logger = logging.getLogger(__name__)

# Output formats
RAW = "raw"
TOKEN_AMOUNT = "amount"

Prompt = Callable[[str], str]


@dataclass(frozen=True)
class ArgSpec:
    """One method argument: its name, how to parse it, what to ask for."""

    name: str
    kind: str
    help: str

    @property
    def option(self) -> str:
        return "--" + self.name.replace("_", "-")


@dataclass(frozen=True)
class EntryPoint:
    """
    A CLI command bound to a single contract method.

    Attributes:
        command: CLI command name (kebab-case)
        product: Contract the method lives on
        method: Contract method name
        params: Arguments in ABI order
        requires_signer: Write call (signed transaction) vs read call
        output: RAW or TOKEN_AMOUNT
        summary: One-line help text
        amount_fields: Struct fields holding token amounts (18 decimals)
    """

    command: str
    product: Product
    method: str
    params: tuple[ArgSpec, ...] = ()
    requires_signer: bool = False
    output: str = RAW
    summary: str = ""
    amount_fields: tuple[str, ...] = ()


def _arg(name: str, kind: str, help: str) -> ArgSpec:
    return ArgSpec(name=name, kind=kind, help=help)


def _read(product: Product, command: str, method: str, *params: ArgSpec,
          output: str = RAW, summary: str = "",
          amount_fields: tuple[str, ...] = ()) -> EntryPoint:
    return EntryPoint(command, product, method, tuple(params), False, output, summary,
                      amount_fields)


def _write(product: Product, command: str, method: str, *params: ArgSpec,
           summary: str = "") -> EntryPoint:
    return EntryPoint(command, product, method, tuple(params), True, RAW, summary)


_T = Product.TOKEN
_C = Product.CREDIT_CARD
_D = Product.DEPOSIT

_ACCOUNT = _arg("account", ADDRESS, "Account address (0x...)")
_ROLE = _arg("role", BYTES32, "Role identifier (bytes32 hex)")
_USER = _arg("user", ADDRESS, "User address (0x...)")

_CREDIT_AMOUNTS = ("limit", "balance")
_RECORD_AMOUNTS = ("amount",)

ENTRY_POINTS: tuple[EntryPoint, ...] = (
    # ---- NTD token: reads ----
    _read(_T, "name", "name", summary="Token name."),
    _read(_T, "symbol", "symbol", summary="Token symbol."),
    _read(_T, "decimals", "decimals", summary="Token decimals."),
    _read(_T, "total-supply", "totalSupply", output=TOKEN_AMOUNT,
          summary="Total token supply."),
    _read(_T, "balance-of", "balanceOf", _ACCOUNT, output=TOKEN_AMOUNT,
          summary="Token balance of an account."),
    _read(_T, "allowance", "allowance",
          _arg("owner", ADDRESS, "Owner address (0x...)"),
          _arg("spender", ADDRESS, "Spender address (0x...)"),
          output=TOKEN_AMOUNT, summary="Amount a spender may move for an owner."),
    _read(_T, "paused", "paused", summary="Whether transfers are paused."),
    _read(_T, "default-admin-role", "DEFAULT_ADMIN_ROLE", summary="DEFAULT_ADMIN_ROLE id."),
    _read(_T, "minter-role", "MINTER_ROLE", summary="MINTER_ROLE id."),
    _read(_T, "pauser-role", "PAUSER_ROLE", summary="PAUSER_ROLE id."),
    _read(_T, "get-role-admin", "getRoleAdmin", _ROLE, summary="Admin role of a role."),
    _read(_T, "has-role", "hasRole", _ROLE, _ACCOUNT, summary="Whether an account holds a role."),
    _read(_T, "is-user-allowed", "isUserAllowed", _ACCOUNT,
          summary="Whether an account may transfer."),
    _read(_T, "get-restriction", "getRestriction", _ACCOUNT,
          summary="Restriction state of an account."),
    _read(_T, "supports-interface", "supportsInterface",
          _arg("interface_id", BYTES4, "ERC-165 interface id (bytes4 hex)"),
          summary="ERC-165 interface support."),
    # ---- NTD token: writes ----
    _write(_T, "transfer", "transfer",
           _arg("to", ADDRESS, "Recipient address (0x...)"),
           _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Transfer tokens from the signer."),
    _write(_T, "transfer-from", "transferFrom",
           _arg("from_address", ADDRESS, "Source address (0x...)"),
           _arg("to", ADDRESS, "Recipient address (0x...)"),
           _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Transfer tokens using an allowance."),
    _write(_T, "approve", "approve",
           _arg("spender", ADDRESS, "Spender address (0x...)"),
           _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Approve a spender."),
    _write(_T, "mint", "mint",
           _arg("to", ADDRESS, "Recipient address (0x...)"),
           _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Mint new tokens."),
    _write(_T, "burn", "burn", _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Burn the signer's tokens."),
    _write(_T, "burn-from", "burnFrom", _ACCOUNT, _arg("amount", AMOUNT, "Amount of tokens"),
           summary="Burn tokens from an account."),
    _write(_T, "pause", "pause", summary="Pause all transfers."),
    _write(_T, "unpause", "unpause", summary="Resume transfers."),
    _write(_T, "grant-role", "grantRole", _ROLE, _ACCOUNT, summary="Grant a role."),
    _write(_T, "revoke-role", "revokeRole", _ROLE, _ACCOUNT, summary="Revoke a role."),
    _write(_T, "renounce-role", "renounceRole", _ROLE, _ACCOUNT,
           summary="Renounce a role held by the signer."),
    _write(_T, "block-account", "blockAccount", _ACCOUNT, summary="Block an account."),
    _write(_T, "allow-account", "allowAccount", _ACCOUNT,
           summary="Allow an account to transfer."),
    _write(_T, "reset-account-restriction", "resetAccountRestriction", _ACCOUNT,
           summary="Clear an account's restriction."),
    # ---- Credit card: reads ----
    _read(_C, "bank-admin", "bankAdmin", summary="Bank admin address."),
    _read(_C, "ntd", "ntd", summary="NTD token address."),
    _read(_C, "credits", "credits", _USER, summary="Credit line of a user.",
          amount_fields=_CREDIT_AMOUNTS),
    _read(_C, "spend-records", "spendRecords", _USER,
          _arg("index", UINT, "Record index (0, 1, 2, ...)"),
          summary="One spending record.", amount_fields=_RECORD_AMOUNTS),
    _read(_C, "get-spend-records", "getSpendRecords", _USER,
          summary="All spending records of a user.", amount_fields=_RECORD_AMOUNTS),
    _read(_C, "calculate-credit-limit", "calculateCreditLimit", _USER,
          output=TOKEN_AMOUNT, summary="Credit limit the contract would grant."),
    # ---- Credit card: writes ----
    _write(_C, "set-credit-limit", "setCreditLimit", _USER,
           _arg("limit", AMOUNT, "Credit limit in NTD"),
           summary="Set a user's credit limit."),
    _write(_C, "spend", "spend", _USER,
           _arg("merchant", ADDRESS, "Merchant address (0x...)"),
           _arg("amount", AMOUNT, "Amount in NTD"),
           summary="Charge a card payment."),
    _write(_C, "repay", "repay", _USER, _arg("amount", AMOUNT, "Amount in NTD"),
           summary="Repay card debt."),
    # ---- Deposit: reads ----
    _read(_D, "bank-admin", "bankAdmin", summary="Bank admin address."),
    _read(_D, "ntd", "ntd", summary="NTD token address."),
    _read(_D, "users", "users", _arg("index", UINT, "User index"),
          summary="User at an index."),
    _read(_D, "deposits", "deposits", _USER, _arg("index", UINT, "Deposit index"),
          summary="One deposit of a user.", amount_fields=_RECORD_AMOUNTS),
    _read(_D, "get-user-deposits", "getUserDeposits", _USER,
          summary="All deposits of a user.", amount_fields=_RECORD_AMOUNTS),
    _read(_D, "get-all-users", "getAllUsers", summary="All depositors."),
    _read(_D, "get-all-active-deposits", "getAllActiveDeposits",
          summary="Deposits not yet withdrawn."),
    _read(_D, "get-all-expired-deposits", "getAllExpiredDeposits",
          summary="Matured deposits not yet withdrawn."),
    _read(_D, "last-withdraw-time", "lastWithdrawTime", _USER,
          summary="Last withdrawal timestamp of a user."),
    # ---- Deposit: writes ----
    _write(_D, "create-deposit", "createDeposit", _USER,
           _arg("amount", AMOUNT, "Amount in NTD"),
           _arg("period", UINT, "Term in seconds"),
           _arg("interest_rate", UINT, "Interest rate in basis points"),
           summary="Open a fixed-term deposit."),
    _write(_D, "withdraw-deposit", "withdrawDeposit", _USER,
           _arg("deposit_id", UINT, "Deposit id"),
           summary="Withdraw a matured deposit."),
    _write(_D, "batch-withdraw-deposit", "batchWithdrawDeposit",
           _arg("users", ADDRESS_LIST, "Comma-separated user addresses"),
           _arg("deposit_ids", UINT_LIST, "Comma-separated deposit ids"),
           summary="Withdraw several deposits."),
    _write(_D, "send-interest", "sendInterest", _USER,
           _arg("amount", AMOUNT, "Interest in NTD"),
           summary="Pay interest to a user."),
    _write(_D, "send-interest-batch", "sendInterestBatch",
           _arg("users", ADDRESS_LIST, "Comma-separated user addresses"),
           _arg("amounts", AMOUNT_LIST, "Comma-separated amounts in NTD"),
           summary="Pay interest to several users."),
)


def entry_points_for(product: Product) -> list[EntryPoint]:
    return [e for e in ENTRY_POINTS if e.product is product]


def find_entry_point(product: Product, command: str) -> EntryPoint:
    for entry in ENTRY_POINTS:
        if entry.product is product and entry.command == command:
            return entry
    raise KeyError(f"{product.value} {command}")


def collect_arguments(
    entry: EntryPoint,
    supplied: Mapping[str, Optional[str]],
    prompt: Optional[Prompt] = None,
    raw_units: bool = False,
) -> list[Any]:
    """
    Gather and parse the arguments for an entry point, in ABI order.

    Values missing from ``supplied`` are asked for through ``prompt`` when
    one is given.  Nothing here touches the network.

    Raises:
        ValidationError: A required argument is missing or malformed
    """
    args = []
    for spec in entry.params:
        text = supplied.get(spec.name)
        if (text is None or not text.strip()) and prompt is not None:
            text = prompt(spec.help)
        if text is None or not text.strip():
            raise ValidationError(f"Missing required argument {spec.option} ({spec.help})")
        args.append(coerce_argument(spec.kind, text, raw_units=raw_units))
    return args


def _scale_fields(value: Any, fields: tuple[str, ...]) -> Any:
    if isinstance(value, dict):
        return {
            k: format_units(v) if k in fields and type(v) is int else _scale_fields(v, fields)
            for k, v in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [_scale_fields(v, fields) for v in value]
    return value


def format_result(entry: EntryPoint, value: Any, raw_units: bool = False) -> Any:
    """Render a decoded read result for display."""
    if raw_units:
        return render_value(value)
    if entry.output == TOKEN_AMOUNT and isinstance(value, int):
        return format_units(value)
    if entry.amount_fields:
        value = _scale_fields(value, entry.amount_fields)
    return render_value(value)


def run_entry_point(
    entry: EntryPoint,
    supplied: Mapping[str, Optional[str]],
    *,
    prompt: Optional[Prompt] = None,
    raw_units: bool = False,
    env: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.BaseTransport] = None,
    wait: bool = True,
    timeout: Optional[float] = None,
    gas_limit: Optional[int] = None,
    on_submitted: Optional[Callable[[str], None]] = None,
) -> Any:
    """
    Execute one entry point end to end.

    Returns:
        The formatted read result, or the write's ``Receipt`` (None when
        ``wait`` is False)
    """
    config = resolve_config(entry.product, needs_signer=entry.requires_signer, env=env)
    logger.debug("Config: %s", config.redacted())
    args = collect_arguments(entry, supplied, prompt=prompt, raw_units=raw_units)
    logger.debug("%s.%s(%s)", entry.product.value, entry.method, args)

    with connect(
        config,
        needs_signer=entry.requires_signer,
        contract_name=entry.product.contract_name,
        transport=transport,
    ) as handle:
        if not entry.requires_signer:
            value = call_read(handle, entry.method, args)
            value = label_outputs(handle.abi, entry.method, value)
            return format_result(entry, value, raw_units=raw_units)

        receipt: Optional[Receipt] = call_write(
            handle,
            entry.method,
            args,
            wait=wait,
            timeout=timeout,
            gas_limit=gas_limit,
            on_submitted=on_submitted,
        )
        return receipt
