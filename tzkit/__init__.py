"""
tzkit: a Tezos operation toolkit.

Convenience exports for the most common client APIs.
"""

from .version import __version__  # noqa: F401

# Core config & errors
from .config import PollingConfig, ToolkitConfig  # noqa: F401
from .errors import (  # noqa: F401
    ConfirmationTimeoutError,
    OperationFailedError,
    PreapplyError,
    RpcResponseError,
    TzKitError,
)

# RPC & context
from .rpc.http import RpcClient  # noqa: F401
from .context import Context  # noqa: F401

# Signers
from .signer import InMemorySigner, NoopSigner  # noqa: F401

# Operations
from .operations import (  # noqa: F401
    Estimate,
    Operation,
    OperationEmitter,
    RpcEstimateProvider,
    TransferParams,
)

# Providers & facade
from .contract import RpcContractProvider  # noqa: F401
from .tz import RpcTzProvider  # noqa: F401
from .subscribe import PollingSubscribeProvider  # noqa: F401
from .toolkit import TezosToolkit  # noqa: F401

# Utilities
from .utils.format import format_amount  # noqa: F401

__all__ = [
    "__version__",
    "PollingConfig",
    "ToolkitConfig",
    "TzKitError",
    "RpcResponseError",
    "PreapplyError",
    "OperationFailedError",
    "ConfirmationTimeoutError",
    "RpcClient",
    "Context",
    "InMemorySigner",
    "NoopSigner",
    "Estimate",
    "Operation",
    "OperationEmitter",
    "RpcEstimateProvider",
    "TransferParams",
    "RpcContractProvider",
    "RpcTzProvider",
    "PollingSubscribeProvider",
    "TezosToolkit",
    "format_amount",
]
