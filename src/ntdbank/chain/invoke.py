"""
Invocation helper.

One uniform way to read from or write to a configured contract:

    config = resolve_config(Product.TOKEN, needs_signer=False)
    with connect(config, needs_signer=False) as handle:
        name = call_read(handle, "name", [])

Handles are built explicitly from a ``ConnectionConfig`` and live for one
command; nothing is cached at module level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

import httpx
from eth_account.signers.local import LocalAccount

from ..config import ConnectionConfig
from ..errors import ConfigurationError, RemoteCallError
from ..wallet import get_account
from .abi import decode_function_result, encode_function_call, load_abi
from .rpc import JsonRpcClient
from .tx import build_contract_tx, sign_and_send

logger = logging.getLogger(__name__)


@dataclass
class ContractHandle:
    """
    A contract bound to a connection, read-only or read-write.

    Attributes:
        address: Contract address
        abi: Contract ABI
        client: JSON-RPC client owned by this handle
        account: Signer for write calls (None when read-only)
        chain_id: Chain id override for signing
    """

    address: str
    abi: list[dict[str, Any]]
    client: JsonRpcClient
    account: Optional[LocalAccount] = None
    chain_id: Optional[int] = None

    @property
    def writable(self) -> bool:
        return self.account is not None

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "ContractHandle":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


@dataclass(frozen=True)
class Receipt:
    """Outcome of a mined transaction."""

    tx_hash: str
    status: int
    block_number: int
    gas_used: Optional[int] = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.status == 1

    @classmethod
    def from_rpc(cls, tx_hash: str, receipt: dict[str, Any]) -> "Receipt":
        gas_used = receipt.get("gasUsed")
        return cls(
            tx_hash=receipt.get("transactionHash") or tx_hash,
            status=int(receipt.get("status") or "0x0", 16),
            block_number=int(receipt.get("blockNumber") or "0x0", 16),
            gas_used=int(gas_used, 16) if gas_used else None,
            raw=receipt,
        )


def connect(
    config: ConnectionConfig,
    needs_signer: bool,
    abi: Optional[list[dict[str, Any]]] = None,
    contract_name: Optional[str] = None,
    transport: Optional[httpx.BaseTransport] = None,
) -> ContractHandle:
    """
    Build a contract handle from a resolved configuration.

    No request is sent here; connection problems surface on the first call.

    Args:
        config: Resolved connection configuration
        needs_signer: Bind a signer for write calls
        abi: Pre-loaded ABI
        contract_name: Bundled ABI to load when ``abi`` is not given
        transport: httpx transport override (tests)

    Raises:
        ConfigurationError: If a signer is needed but no private key is set
    """
    if abi is None:
        if contract_name is None:
            raise ValueError("Either abi or contract_name must be provided")
        abi = load_abi(contract_name)

    account = None
    if needs_signer:
        if not config.private_key:
            raise ConfigurationError("A private key is required for write calls.")
        account = get_account(config.private_key)

    return ContractHandle(
        address=config.contract_address,
        abi=abi,
        client=JsonRpcClient(config.rpc_url, transport=transport),
        account=account,
        chain_id=config.chain_id,
    )


def call_read(handle: ContractHandle, method_name: str, args: Sequence[Any]) -> Any:
    """
    Invoke a non-mutating contract method (eth_call).

    Returns:
        Decoded return value(s)

    Raises:
        ValidationError: Unknown method or arguments that don't encode
        RemoteCallError: The node rejected the call
        NetworkError: The node is unreachable
    """
    calldata = encode_function_call(handle.abi, method_name, args)
    sender = handle.account.address if handle.account else None
    result = handle.client.eth_call(handle.address, calldata, from_address=sender)

    if result is None:
        raise RemoteCallError(f"{method_name} returned no data", reason="empty result")

    return decode_function_result(handle.abi, method_name, result)


def call_write(
    handle: ContractHandle,
    method_name: str,
    args: Sequence[Any],
    *,
    wait: bool = True,
    timeout: Optional[float] = None,
    gas_limit: Optional[int] = None,
    value: int = 0,
    poll_interval: float = 2.0,
    on_submitted: Optional[Callable[[str], None]] = None,
) -> Optional[Receipt]:
    """
    Submit a mutating transaction and wait for it to be mined.

    Args:
        handle: Writable contract handle
        method_name: Function to call
        args: Function arguments
        wait: Whether to wait for the receipt
        timeout: Receipt wait limit in seconds (None: wait indefinitely)
        gas_limit: Gas limit (default: node estimate)
        value: Wei to attach
        poll_interval: Seconds between receipt polls
        on_submitted: Called with the tx hash right after submission

    Returns:
        Receipt of the mined transaction, or None when ``wait`` is False

    Raises:
        ConfigurationError: The handle has no signer
        RemoteCallError: Submission rejected or the transaction reverted
        NetworkError: The node is unreachable or the timeout elapsed
    """
    if handle.account is None:
        raise ConfigurationError(f"{method_name} needs a signer; handle is read-only.")

    calldata = encode_function_call(handle.abi, method_name, args)
    tx = build_contract_tx(
        handle.client,
        handle.account,
        handle.address,
        calldata,
        value=value,
        gas_limit=gas_limit,
        chain_id=handle.chain_id,
    )
    tx_hash = sign_and_send(handle.client, handle.account, tx)
    logger.info("%s submitted: %s", method_name, tx_hash)
    if on_submitted is not None:
        on_submitted(tx_hash)

    if not wait:
        return None

    receipt = Receipt.from_rpc(
        tx_hash,
        handle.client.wait_for_receipt(tx_hash, timeout=timeout, poll_interval=poll_interval),
    )
    logger.debug("Receipt for %s: status=%s block=%s", tx_hash, receipt.status, receipt.block_number)

    if not receipt.succeeded:
        raise RemoteCallError(
            f"Transaction {tx_hash} reverted in block {receipt.block_number}",
            reason="execution reverted",
            tx_hash=tx_hash,
        )
    return receipt
