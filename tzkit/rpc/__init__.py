from .delegates import Forger, Injector, RpcForger, RpcInjector
from .http import RpcClient

__all__ = ["RpcClient", "Forger", "Injector", "RpcForger", "RpcInjector"]
