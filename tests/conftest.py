"""Shared fixtures: a scripted JSON-RPC node behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest
from eth_abi import encode

TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
CREDIT_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"
DEPOSIT_ADDRESS = "0x9fE46736679d2D9a65F0992F2272dE9f3c7fa6e0"
PRIVATE_KEY = "0x" + "11" * 32
RPC_URL = "http://node.test:8545"

TX_HASH = "0x" + "ab" * 32

Result = Union[Any, Callable[[list], Any]]


def encode_result(types: list[str], values: list[Any]) -> str:
    return "0x" + encode(types, values).hex()


def by_selector(replies: dict[str, str]) -> Callable[[list], str]:
    """eth_call responder keyed on the 4-byte selector (0x-prefixed)."""

    def reply(params: list) -> str:
        return replies[params[0]["data"][:10]]

    return reply


class FakeNode:
    """
    Minimal scripted JSON-RPC node.

    ``results`` maps method name to a result value (or a callable taking the
    params); ``errors`` maps method name to a JSON-RPC error object.  Every
    request is recorded in ``calls``.
    """

    def __init__(self) -> None:
        self.results: dict[str, Result] = {
            "eth_chainId": "0x7a69",
            "eth_gasPrice": "0x3b9aca00",
            "eth_getTransactionCount": "0x0",
            "eth_estimateGas": "0x5208",
            "eth_sendRawTransaction": TX_HASH,
            "eth_getTransactionReceipt": {
                "transactionHash": TX_HASH,
                "status": "0x1",
                "blockNumber": "0x2a",
                "gasUsed": "0x5208",
            },
        }
        self.errors: dict[str, dict] = {}
        self.calls: list[tuple[str, list]] = []
        self.transport = httpx.MockTransport(self._handle)

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def _handle(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method, params = payload["method"], payload["params"]
        self.calls.append((method, params))

        if method in self.errors:
            body = {"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]}
            return httpx.Response(200, json=body)

        if method not in self.results:
            body = {
                "jsonrpc": "2.0",
                "id": payload["id"],
                "error": {"code": -32601, "message": f"method {method} not found"},
            }
            return httpx.Response(200, json=body)

        result = self.results[method]
        if callable(result):
            result = result(params)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def env() -> dict[str, str]:
    return {
        "RPC_URL": RPC_URL,
        "NTD_TOKEN_CONTRACT_ADDRESS": TOKEN_ADDRESS,
        "CREDITCARD_CONTRACT_ADDRESS": CREDIT_ADDRESS,
        "DEPOSIT_CONTRACT_ADDRESS": DEPOSIT_ADDRESS,
        "PRIVATE_KEY": PRIVATE_KEY,
    }
