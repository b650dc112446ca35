__all__ = [
    # Configuration
    "ConnectionConfig",
    "Product",
    "resolve_config",
    # Invocation helper
    "ContractHandle",
    "Receipt",
    "connect",
    "call_read",
    "call_write",
    # Entry points
    "ArgSpec",
    "EntryPoint",
    "ENTRY_POINTS",
    "run_entry_point",
    # Units
    "parse_units",
    "format_units",
    # Errors
    "ErrorKind",
    "NtdBankError",
    "ConfigurationError",
    "ValidationError",
    "RemoteCallError",
    "NetworkError",
]

from .config import ConnectionConfig, Product, resolve_config
from .chain.invoke import ContractHandle, Receipt, call_read, call_write, connect
from .entrypoints import ENTRY_POINTS, ArgSpec, EntryPoint, run_entry_point
from .units import format_units, parse_units
from .errors import (
    ConfigurationError,
    ErrorKind,
    NetworkError,
    NtdBankError,
    RemoteCallError,
    ValidationError,
)
