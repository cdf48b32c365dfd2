from . import manager_lambda
from .contract import DEFAULT_ENTRYPOINT, ContractAbstraction, ContractMethod, EntrypointDescriptor
from .provider import RpcContractProvider

__all__ = [
    "RpcContractProvider",
    "ContractAbstraction",
    "ContractMethod",
    "EntrypointDescriptor",
    "DEFAULT_ENTRYPOINT",
    "manager_lambda",
]
