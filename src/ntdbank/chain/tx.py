"""
Transaction Builder - build, sign, and send contract transactions.

Uses eth-account for signing and the JSON-RPC client for everything that
needs the node (nonce, gas price, chain id, gas estimate, submission).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from eth_account.signers.local import LocalAccount
from eth_utils import to_checksum_address

from .rpc import JsonRpcClient

logger = logging.getLogger(__name__)

# Headroom applied to eth_estimateGas results
GAS_MULTIPLIER_PCT = 120


def build_contract_tx(
    client: JsonRpcClient,
    account: LocalAccount,
    contract_address: str,
    calldata: str,
    value: int = 0,
    gas_limit: Optional[int] = None,
    chain_id: Optional[int] = None,
) -> dict[str, Any]:
    """
    Build an unsigned legacy transaction calling a contract.

    Args:
        client: JSON-RPC client
        account: Signer; its address is the sender
        contract_address: 0x-prefixed contract address
        calldata: 0x-prefixed encoded call
        value: Wei to attach
        gas_limit: Gas limit (default: estimated by the node)
        chain_id: Chain id (default: queried from the node)

    Returns:
        Unsigned transaction dict
    """
    tx: dict[str, Any] = {
        "from": account.address,
        "to": to_checksum_address(contract_address),
        "data": calldata,
        "value": value,
    }

    if gas_limit is None:
        # Reverts surface here, before anything is signed
        estimate = client.estimate_gas(tx)
        gas_limit = estimate * GAS_MULTIPLIER_PCT // 100

    tx.update(
        nonce=client.get_nonce(account.address),
        gas=gas_limit,
        gasPrice=client.get_gas_price(),
        chainId=chain_id if chain_id is not None else client.get_chain_id(),
    )
    del tx["from"]
    return tx


def sign_and_send(client: JsonRpcClient, account: LocalAccount, tx: dict) -> str:
    """
    Sign a transaction and submit it.

    Returns:
        Transaction hash (0x-prefixed hex)
    """
    signed = account.sign_transaction(tx)
    raw_tx = signed.raw_transaction.hex()
    if not raw_tx.startswith("0x"):
        raw_tx = "0x" + raw_tx

    tx_hash = client.send_raw_transaction(raw_tx)
    logger.debug("Submitted %s (nonce %s)", tx_hash, tx.get("nonce"))
    return tx_hash
