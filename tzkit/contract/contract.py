"""
Contract abstraction with a typed entrypoint table.

Entrypoints are resolved once, when the contract is loaded, into a mapping
``name -> EntrypointDescriptor``. A call is a lookup plus an argument-count
check; nothing is generated on the instance.

Example
-------
    contract = await toolkit.contract.at("KT1...")
    op = await contract.method("transfer", "tz1...", "tz1...", 10).send()
    await op.confirmation()
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from ..errors import InvalidParameterError
from ..operations.builders import TransferParams
from ..utils.format import Number
from ..utils.michelson import arity_of, encode_args, flatten_pair, or_branches, wrap_branch

if TYPE_CHECKING:  # pragma: no cover
    from ..operations.operation import Operation
    from .provider import RpcContractProvider

__all__ = ["EntrypointDescriptor", "ContractMethod", "ContractAbstraction", "DEFAULT_ENTRYPOINT"]

DEFAULT_ENTRYPOINT = "default"


@dataclass(frozen=True, slots=True)
class EntrypointDescriptor:
    """
    One callable entrypoint. ``path`` is empty for entrypoints the node
    lists by name; for a branch of the parameter's ``or`` tree it holds the
    ``Left``/``Right`` steps, and the call goes through ``default``.
    """

    name: str
    type_expr: Any
    arity: int
    path: Tuple[str, ...] = ()

    @classmethod
    def from_type(cls, name: str, type_expr: Any, path: Tuple[str, ...] = ()) -> "EntrypointDescriptor":
        return cls(name=name, type_expr=type_expr, arity=arity_of(type_expr), path=tuple(path))

    @property
    def signature(self) -> List[str]:
        if self.arity == 0:
            return []
        return [leaf["prim"] for leaf in flatten_pair(self.type_expr)]

    def check(self, args: Tuple[Any, ...]) -> None:
        if len(args) != self.arity:
            raise InvalidParameterError(self.name, [self.signature], args)

    def encode(self, args: Tuple[Any, ...]) -> Dict[str, Any]:
        self.check(args)
        value = encode_args(self.type_expr, args)
        if self.path:
            return {"entrypoint": DEFAULT_ENTRYPOINT, "value": wrap_branch(self.path, value)}
        return {"entrypoint": self.name, "value": value}


class ContractMethod:
    """A validated, encoded call, ready to be sent as a transfer."""

    def __init__(
        self,
        provider: "RpcContractProvider",
        address: str,
        descriptor: EntrypointDescriptor,
        args: Tuple[Any, ...],
        *,
        legacy: bool = False,
    ) -> None:
        self.provider = provider
        self.address = address
        self.descriptor = descriptor
        encoded = descriptor.encode(args)
        # before 005 a transaction carries the bare value
        self.parameter = encoded["value"] if legacy else encoded

    def to_transfer_params(
        self,
        *,
        amount: Number = 0,
        mutez: bool = False,
        source: Optional[str] = None,
        fee: Optional[int] = None,
        gas_limit: Optional[int] = None,
        storage_limit: Optional[int] = None,
    ) -> TransferParams:
        return TransferParams(
            to=self.address,
            amount=amount,
            mutez=mutez,
            source=source,
            fee=fee,
            gas_limit=gas_limit,
            storage_limit=storage_limit,
            parameter=self.parameter,
        )

    async def send(self, **kwargs: Any) -> "Operation":
        return await self.provider.transfer(self.to_transfer_params(**kwargs))


class ContractAbstraction:
    """
    Entrypoints come from the node's ``/entrypoints`` table plus every branch
    of the parameter's ``or`` tree the table does not name (unannotated
    branches, or every branch when the table is empty before 005). A
    contract whose parameter is not an ``or`` and that lists nothing gets a
    single ``default`` entrypoint. ``legacy`` contracts (loaded before 005)
    send bare parameter values.
    """

    def __init__(
        self,
        address: str,
        script: Mapping[str, Any],
        entrypoints: Mapping[str, Any],
        provider: "RpcContractProvider",
        *,
        legacy: bool = False,
    ) -> None:
        self.address = address
        self.script = dict(script)
        self.provider = provider
        self.legacy = legacy
        table = {name: EntrypointDescriptor.from_type(name, t) for name, t in entrypoints.items()}
        parameter = self.parameter_type
        if isinstance(parameter, dict) and parameter.get("prim") == "or":
            for name, leaf, path in or_branches(parameter):
                table.setdefault(name, EntrypointDescriptor.from_type(name, leaf, path))
        elif not table and parameter is not None:
            table[DEFAULT_ENTRYPOINT] = EntrypointDescriptor.from_type(DEFAULT_ENTRYPOINT, parameter)
        self.entrypoints: Dict[str, EntrypointDescriptor] = table

    def __repr__(self) -> str:
        return f"ContractAbstraction({self.address!r}, entrypoints={sorted(self.entrypoints)})"

    def _section(self, prim: str) -> Optional[Any]:
        for section in self.script.get("code") or []:
            if isinstance(section, dict) and section.get("prim") == prim:
                return section["args"][0]
        return None

    @property
    def parameter_type(self) -> Optional[Any]:
        return self._section("parameter")

    @property
    def storage_type(self) -> Optional[Any]:
        return self._section("storage")

    def entrypoint(self, name: str) -> EntrypointDescriptor:
        try:
            return self.entrypoints[name]
        except KeyError:
            raise KeyError(f"{self.address} has no entrypoint {name!r}; known: {sorted(self.entrypoints)}") from None

    def method(self, name: str, *args: Any) -> ContractMethod:
        """Validate ``args`` against entrypoint ``name`` and encode the call."""
        return ContractMethod(self.provider, self.address, self.entrypoint(name), args, legacy=self.legacy)

    async def storage(self) -> Any:
        """Current storage as raw Micheline."""
        return await self.provider.get_storage(self.address)
