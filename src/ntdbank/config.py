"""
Connection configuration for ntdbank.

Values come from the process environment, optionally seeded from a ``.env``
file in the working directory and from ``~/.ntdbank/.env``.  The frontend's
``VITE_``-prefixed names are accepted as fallbacks so one ``.env`` can serve
both.

Resolution is a fail-fast startup check: nothing here touches the network.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

# Default config directory
NTDBANK_DIR = Path.home() / ".ntdbank"
NTDBANK_ENV = NTDBANK_DIR / ".env"

RPC_URL_ENV = "RPC_URL"
PRIVATE_KEY_ENV = "PRIVATE_KEY"
CHAIN_ID_ENV = "CHAIN_ID"

_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
_PRIVATE_KEY_RE = re.compile(r"^(0x)?[0-9a-fA-F]{64}$")
_URL_SCHEMES = ("http://", "https://", "ws://", "wss://")

# Frontend names beyond the plain VITE_ prefix
_FRONTEND_ALIASES = {
    PRIVATE_KEY_ENV: ("VITE_PRIVATE_KEY_1",),
}


class Product(str, Enum):
    """The three contracts this tool talks to."""

    TOKEN = "token"
    CREDIT_CARD = "credit"
    DEPOSIT = "deposit"

    @property
    def address_env(self) -> str:
        return _ADDRESS_ENV[self]

    @property
    def contract_name(self) -> str:
        return _CONTRACT_NAMES[self]


_ADDRESS_ENV = {
    Product.TOKEN: "NTD_TOKEN_CONTRACT_ADDRESS",
    Product.CREDIT_CARD: "CREDITCARD_CONTRACT_ADDRESS",
    Product.DEPOSIT: "DEPOSIT_CONTRACT_ADDRESS",
}

_CONTRACT_NAMES = {
    Product.TOKEN: "NTDToken",
    Product.CREDIT_CARD: "CreditCardProduct",
    Product.DEPOSIT: "DepositProduct",
}


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Everything needed to bind one contract.

    Attributes:
        rpc_url: JSON-RPC endpoint
        contract_address: 0x-prefixed contract address
        private_key: 0x-prefixed signing key, only present for writes
        chain_id: Chain id for signing; queried from the node when None
    """

    rpc_url: str
    contract_address: str
    private_key: Optional[str] = None
    chain_id: Optional[int] = None

    def redacted(self) -> dict[str, object]:
        return {
            "rpc_url": self.rpc_url,
            "contract_address": self.contract_address,
            "private_key": "***" if self.private_key else None,
            "chain_id": self.chain_id,
        }


def load_env_files(env_path: Optional[Path] = None) -> None:
    """Seed ``os.environ`` from .env files without overriding set values."""
    load_dotenv(Path.cwd() / ".env", override=False)
    env_path = env_path or NTDBANK_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)


def lookup_env(name: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """Read a setting, falling back to the frontend's VITE_ names for it."""
    env = os.environ if env is None else env
    for candidate in (name, f"VITE_{name}", *_FRONTEND_ALIASES.get(name, ())):
        value = (env.get(candidate) or "").strip()
        if value:
            return value
    return None


def is_address(value: str) -> bool:
    return bool(_ADDRESS_RE.match(value))


def normalize_private_key(value: str) -> str:
    """Validate a hex private key and ensure the 0x prefix."""
    if not _PRIVATE_KEY_RE.match(value):
        raise ConfigurationError(f"{PRIVATE_KEY_ENV} must be a 32-byte hex string")
    if not value.startswith("0x"):
        value = "0x" + value
    return value


def resolve_rpc_url(env: Optional[Mapping[str, str]] = None) -> str:
    rpc_url = lookup_env(RPC_URL_ENV, env)
    if not rpc_url:
        raise ConfigurationError(f"{RPC_URL_ENV} not set.")
    if not rpc_url.startswith(_URL_SCHEMES):
        raise ConfigurationError(f"{RPC_URL_ENV} is not a valid URL: {rpc_url}")
    return rpc_url


def resolve_config(
    product: Product,
    needs_signer: bool,
    env: Optional[Mapping[str, str]] = None,
) -> ConnectionConfig:
    """
    Resolve the connection configuration for one product contract.

    Args:
        product: Which contract to bind
        needs_signer: Whether a private key is required (write calls)
        env: Mapping to read from (default: ``os.environ``)

    Returns:
        ConnectionConfig

    Raises:
        ConfigurationError: If a required value is missing or malformed
    """
    rpc_url = resolve_rpc_url(env)

    address = lookup_env(product.address_env, env)
    if not address:
        raise ConfigurationError(f"{product.address_env} not set.")
    if not is_address(address):
        raise ConfigurationError(
            f"{product.address_env} is not a valid address: {address}"
        )

    private_key = None
    if needs_signer:
        raw_key = lookup_env(PRIVATE_KEY_ENV, env)
        if not raw_key:
            raise ConfigurationError(
                f"{PRIVATE_KEY_ENV} not set. Write calls need a signing key."
            )
        private_key = normalize_private_key(raw_key)

    chain_id = None
    raw_chain_id = lookup_env(CHAIN_ID_ENV, env)
    if raw_chain_id:
        try:
            chain_id = int(raw_chain_id, 0)
        except ValueError:
            raise ConfigurationError(
                f"{CHAIN_ID_ENV} is not an integer: {raw_chain_id}"
            ) from None

    return ConnectionConfig(
        rpc_url=rpc_url,
        contract_address=address,
        private_key=private_key,
        chain_id=chain_id,
    )
