from .builders import DelegateParams, OriginateParams, RegisterDelegateParams, TransferParams
from .confirmation import ConfirmationState, ConfirmationTracker
from .emitter import OperationEmitter
from .estimate import Estimate
from .estimator import RpcEstimateProvider
from .operation import HandleKind, Operation
from .types import ForgedOperation, InjectionResult, OpKind, PreparedOperation, SimulationResult

__all__ = [
    "OpKind",
    "PreparedOperation",
    "ForgedOperation",
    "SimulationResult",
    "InjectionResult",
    "TransferParams",
    "OriginateParams",
    "DelegateParams",
    "RegisterDelegateParams",
    "OperationEmitter",
    "Estimate",
    "RpcEstimateProvider",
    "ConfirmationState",
    "ConfirmationTracker",
    "HandleKind",
    "Operation",
]
