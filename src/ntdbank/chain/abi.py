"""
ABI Loader and codec.

Contract ABIs ship as static JSON inside the package (``ntdbank/abis``).
Encoding and decoding go through eth-abi; selectors are the first four bytes
of the Keccak-256 of the canonical signature.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from ..errors import RemoteCallError, ValidationError

ABI_DIR = Path(__file__).resolve().parent.parent / "abis"


@lru_cache(maxsize=8)
def load_abi(contract_name: str) -> list[dict[str, Any]]:
    """
    Load the ABI for one of the bundled contracts.

    Args:
        contract_name: Contract name (e.g., "NTDToken", "DepositProduct")

    Returns:
        ABI as a list of dicts

    Raises:
        FileNotFoundError: If no ABI ships under that name
    """
    abi_path = ABI_DIR / f"{contract_name}.json"
    if not abi_path.exists():
        raise FileNotFoundError(f"ABI not found: {abi_path}")

    with abi_path.open("r", encoding="utf-8") as f:
        return json.load(f)


def find_function(abi: Sequence[dict], function_name: str) -> dict:
    for entry in abi:
        if entry.get("type") == "function" and entry.get("name") == function_name:
            return entry
    raise ValidationError(f"Function {function_name} not found in ABI")


def is_read_only(func: dict) -> bool:
    return func.get("stateMutability") in ("view", "pure")


def abi_type(param: dict) -> str:
    """Canonical type string, expanding tuples into ``(t1,t2,...)``."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(abi_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def function_signature(func: dict) -> str:
    input_types = [abi_type(p) for p in func.get("inputs", [])]
    return f"{func['name']}({','.join(input_types)})"


def function_selector(func: dict) -> bytes:
    # Keccak-256, not NIST SHA3-256
    return keccak(function_signature(func).encode("utf-8"))[:4]


def encode_function_call(abi: Sequence[dict], function_name: str, args: Sequence[Any]) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata

    Raises:
        ValidationError: If the function is unknown or the args don't fit
    """
    func = find_function(abi, function_name)
    inputs = func.get("inputs", [])
    if len(args) != len(inputs):
        raise ValidationError(
            f"{function_name} takes {len(inputs)} argument(s), got {len(args)}"
        )

    input_types = [abi_type(p) for p in inputs]
    try:
        encoded_args = encode(input_types, list(args)) if args else b""
    except (EncodingError, TypeError, ValueError) as exc:
        raise ValidationError(f"Cannot encode arguments for {function_name}: {exc}") from exc

    return "0x" + function_selector(func).hex() + encoded_args.hex()


def _label(param: dict, value: Any) -> Any:
    """Turn decoded struct tuples into dicts keyed by component name."""
    typ = param["type"]
    components = param.get("components")
    if not components:
        return value
    if typ.endswith("]"):
        element = dict(param, type=typ[: typ.rindex("[")])
        return [_label(element, v) for v in value]
    names = [c.get("name") for c in components]
    if not all(names):
        return tuple(_label(c, v) for c, v in zip(components, value))
    return {c["name"]: _label(c, v) for c, v in zip(components, value)}


def decode_function_result(abi: Sequence[dict], function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result: None for no outputs, the bare value for one output,
        a tuple otherwise.  Struct outputs come back as dicts.
    """
    func = find_function(abi, function_name)
    outputs = func.get("outputs", [])
    if not outputs:
        return None

    raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
    try:
        decoded = decode([abi_type(o) for o in outputs], raw)
    except DecodingError as exc:
        raise RemoteCallError(
            f"Cannot decode result of {function_name}: {exc}", reason=str(exc)
        ) from exc

    labelled = tuple(_label(o, v) for o, v in zip(outputs, decoded))
    if len(labelled) == 1:
        return labelled[0]
    return labelled


def label_outputs(abi: Sequence[dict], function_name: str, value: Any) -> Any:
    """Key a multi-output result by output name when every output is named."""
    outputs = find_function(abi, function_name).get("outputs", [])
    names = [o.get("name") for o in outputs]
    if len(outputs) > 1 and all(names):
        return dict(zip(names, value))
    return value
