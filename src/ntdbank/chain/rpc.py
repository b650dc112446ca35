"""
JSON-RPC Client.

Thin httpx wrapper around the handful of ``eth_*`` methods the invocation
helper needs.  One client per contract handle; nothing is shared at module
level.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx
from eth_abi import decode
from eth_abi.exceptions import DecodingError

from ..errors import NetworkError, RemoteCallError

logger = logging.getLogger(__name__)

# Error(string) selector used by Solidity revert messages
_ERROR_STRING_SELECTOR = "0x08c379a0"
# Panic(uint256)
_PANIC_SELECTOR = "0x4e487b71"


def decode_revert_reason(data: Any) -> Optional[str]:
    """
    Extract a human-readable reason from revert data.

    Args:
        data: 0x-prefixed hex revert payload (or anything else)

    Returns:
        The reason string, or None if the payload isn't a standard revert
    """
    if not isinstance(data, str) or len(data) < 10:
        return None

    selector, payload = data[:10].lower(), data[10:]
    try:
        if selector == _ERROR_STRING_SELECTOR:
            (reason,) = decode(["string"], bytes.fromhex(payload))
            return reason
        if selector == _PANIC_SELECTOR:
            (code,) = decode(["uint256"], bytes.fromhex(payload))
            return f"panic code {code:#x}"
    except (ValueError, DecodingError):
        logger.debug("Undecodable revert data: %s", data)
    return None


class JsonRpcClient:
    """
    Minimal JSON-RPC 2.0 client.

    Args:
        rpc_url: Endpoint URL
        timeout: Per-request HTTP timeout in seconds
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._next_id = 1

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "JsonRpcClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            NetworkError: If the endpoint is unreachable or answers garbage
            RemoteCallError: If the node returns an error object
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": self._next_id,
        }
        self._next_id += 1
        logger.debug("RPC -> %s %s", method, params)

        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as exc:
            raise NetworkError(f"RPC request {method} failed: {exc}") from exc
        except ValueError as exc:
            raise NetworkError(f"RPC response for {method} is not JSON") from exc

        if "error" in data:
            error = data["error"] or {}
            message = error.get("message", "unknown error")
            reason = decode_revert_reason(error.get("data"))
            if reason and reason not in message:
                message = f"{message} ({reason})"
            raise RemoteCallError(f"RPC error: {message}", reason=reason or message)

        result = data.get("result")
        logger.debug("RPC <- %s %s", method, result)
        return result

    # ------------------------------------------------------------------
    # eth_* helpers
    # ------------------------------------------------------------------

    def eth_call(self, to: str, data: str, from_address: Optional[str] = None) -> str:
        call: dict[str, Any] = {"to": to, "data": data}
        if from_address:
            call["from"] = from_address
        return self.request("eth_call", [call, "latest"])

    def estimate_gas(self, tx: dict) -> int:
        call = {k: tx[k] for k in ("from", "to", "data") if k in tx}
        if tx.get("value"):
            call["value"] = hex(tx["value"])
        return int(self.request("eth_estimateGas", [call]), 16)

    def get_balance(self, address: str) -> int:
        return int(self.request("eth_getBalance", [address, "latest"]), 16)

    def get_nonce(self, address: str) -> int:
        return int(self.request("eth_getTransactionCount", [address, "pending"]), 16)

    def get_gas_price(self) -> int:
        return int(self.request("eth_gasPrice", []), 16)

    def get_chain_id(self) -> int:
        return int(self.request("eth_chainId", []), 16)

    def send_raw_transaction(self, raw_tx: str) -> str:
        return self.request("eth_sendRawTransaction", [raw_tx])

    def get_receipt(self, tx_hash: str) -> Optional[dict]:
        return self.request("eth_getTransactionReceipt", [tx_hash])

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: Optional[float] = None,
        poll_interval: float = 2.0,
    ) -> dict:
        """
        Poll until the transaction is mined.

        Args:
            tx_hash: Transaction hash
            timeout: Maximum wait in seconds; None waits indefinitely
            poll_interval: Seconds between polls

        Raises:
            NetworkError: If the timeout elapses first
        """
        start = time.monotonic()
        while True:
            receipt = self.get_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if timeout is not None and time.monotonic() - start >= timeout:
                raise NetworkError(
                    f"Transaction {tx_hash} not confirmed within {timeout}s"
                )
            time.sleep(poll_interval)
