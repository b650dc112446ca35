"""
Chain - on-chain interaction layer for ntdbank.

Provides the JSON-RPC client, ABI codec, transaction builder, and the
invocation helper that the CLI commands sit on.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
