"""
Signer management for ntdbank.

Write calls are signed locally with an eth-account ``LocalAccount`` derived
from ``PRIVATE_KEY``.  The key never leaves the process.
"""

from __future__ import annotations

from typing import Mapping, Optional

from eth_account import Account
from eth_account.signers.local import LocalAccount

from .config import PRIVATE_KEY_ENV, lookup_env, normalize_private_key
from .errors import ConfigurationError


def load_private_key(env: Optional[Mapping[str, str]] = None) -> str:
    """
    Load the signing key from the environment.

    Returns:
        0x-prefixed hex private key

    Raises:
        ConfigurationError: If PRIVATE_KEY is missing or malformed
    """
    private_key = lookup_env(PRIVATE_KEY_ENV, env)
    if not private_key:
        raise ConfigurationError(f"{PRIVATE_KEY_ENV} not found in environment.")
    return normalize_private_key(private_key)


def get_account(private_key: str) -> LocalAccount:
    """Get an eth-account LocalAccount for signing transactions."""
    try:
        return Account.from_key(private_key)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid private key: {exc}") from exc


def get_address(private_key: str) -> str:
    """0x-prefixed checksummed address for a private key."""
    return get_account(private_key).address
