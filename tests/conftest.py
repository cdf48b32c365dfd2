"""Shared fakes for the tzkit test-suite.

Provides a minimal asyncio runner so tests marked with
``@pytest.mark.asyncio`` can execute without external plugins, plus an
in-memory node (:class:`FakeRpc`) and a deterministic signer.
"""
from __future__ import annotations

import asyncio
import copy
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from tzkit.constants import Protocols
from tzkit.context import Context
from tzkit.errors import RpcResponseError
from tzkit.head_cache import HeadCache
from tzkit.signer.base import SignResult

BABYLON = Protocols.PsBabyM1.value
ATHENS = Protocols.Pt24m4xi.value

SOURCE = "tz1SourceFakeFakeFakeFakeFakeFake"
PUBLIC_KEY = "edpkFakePublicKey"
BRANCH = "BLockFakeBranch"
OP_HASH = "ooFakeOperationHash"


@pytest.hookimpl(tryfirst=True)
def pytest_configure(config: pytest.Config) -> None:  # pragma: no cover - plugin hook
    config.addinivalue_line("markers", "asyncio: mark test as requiring asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:  # pragma: no cover - plugin hook
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if asyncio.iscoroutinefunction(test_func):
        argnames = getattr(pyfuncitem, "_fixtureinfo", None)
        wanted = set(getattr(argnames, "argnames", []) or [])
        kwargs = {k: v for k, v in pyfuncitem.funcargs.items() if k in wanted}
        asyncio.run(test_func(**kwargs))
        return True
    return None


def block(level: int, *op_hashes: str, block_hash: Optional[str] = None, contents: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    """A head block at ``level`` carrying ``op_hashes`` in the manager pass."""
    ops = [{"hash": h, "contents": list(contents or [])} for h in op_hashes]
    return {
        "hash": block_hash or f"BLock{level}",
        "header": {"level": level},
        "operations": [[], [], [], ops],
    }


class FakeRpc:
    """
    In-memory node. Every call is recorded in ``calls`` as ``(method, arg)``.

    ``run_operation`` and ``preapply_operations`` echo the submitted contents
    back with an ``applied`` result unless a canned response is set.
    """

    def __init__(
        self,
        *,
        protocol: str = BABYLON,
        counter: str = "7",
        manager_key: Any = PUBLIC_KEY,
        consumed_gas: str = "10207",
        paid_storage: str = "0",
        forged: str = "00" * 120,
        balance: str = "1500000",
    ) -> None:
        self.calls: List[Tuple[str, Any]] = []
        self.header: Optional[Dict[str, Any]] = {"hash": BRANCH, "level": 100}
        self.metadata: Optional[Dict[str, Any]] = {"protocol": protocol, "next_protocol": protocol}
        self.counter = counter
        self.manager_key = manager_key
        self.consumed_gas = consumed_gas
        self.paid_storage = paid_storage
        self.forged = forged
        self.balance = balance
        self.delegate: Optional[str] = None
        self.chain_id = "NetXdQprcVkpaWU"
        self.run_response: Optional[Dict[str, Any]] = None
        self.preapply_response: Any = None
        self.inject_error: Optional[Exception] = None
        self.op_hash = OP_HASH
        self.heads: List[Dict[str, Any]] = [block(100)]
        self.script: Dict[str, Any] = {"code": [], "storage": {"int": "0"}}
        self.entrypoints: Dict[str, Any] = {}
        self.storage: Any = {"int": "0"}

    def _record(self, method: str, arg: Any = None) -> None:
        self.calls.append((method, copy.deepcopy(arg)))

    def called(self, method: str) -> List[Any]:
        return [arg for name, arg in self.calls if name == method]

    def _result(self, content: Mapping[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "status": "applied",
            "consumed_gas": self.consumed_gas,
            "paid_storage_size_diff": self.paid_storage,
        }
        if content.get("kind") == "origination":
            result["originated_contracts"] = ["KT1FakeOriginated"]
        return {**content, "metadata": {"operation_result": result}}

    # --- queries ---------------------------------------------------------

    async def get_block_header(self) -> Optional[Dict[str, Any]]:
        self._record("get_block_header")
        return self.header

    async def get_block_metadata(self) -> Optional[Dict[str, Any]]:
        self._record("get_block_metadata")
        return self.metadata

    async def get_block(self) -> Dict[str, Any]:
        self._record("get_block")
        head = self.heads[0]
        if len(self.heads) > 1:
            self.heads.pop(0)
        return head

    async def get_chain_id(self) -> str:
        self._record("get_chain_id")
        return self.chain_id

    async def get_contract(self, address: str) -> Dict[str, Any]:
        self._record("get_contract", address)
        return {"balance": self.balance, "counter": self.counter}

    async def get_manager_key(self, address: str) -> Any:
        self._record("get_manager_key", address)
        return self.manager_key

    async def get_balance(self, address: str) -> Decimal:
        self._record("get_balance", address)
        return Decimal(self.balance)

    async def get_delegate(self, address: str) -> Optional[str]:
        self._record("get_delegate", address)
        return self.delegate

    async def get_script(self, address: str) -> Dict[str, Any]:
        self._record("get_script", address)
        return self.script

    async def get_storage(self, address: str) -> Any:
        self._record("get_storage", address)
        return self.storage

    async def get_entrypoints(self, address: str) -> Dict[str, Any]:
        self._record("get_entrypoints", address)
        return {"entrypoints": self.entrypoints}

    # --- helpers ---------------------------------------------------------

    async def forge_operations(self, operation: Mapping[str, Any]) -> str:
        self._record("forge_operations", operation)
        return self.forged

    async def run_operation(self, operation: Mapping[str, Any]) -> Dict[str, Any]:
        self._record("run_operation", operation)
        if self.run_response is not None:
            return self.run_response
        group = operation.get("operation", operation)
        return {"contents": [self._result(c) for c in group["contents"]]}

    async def preapply_operations(self, operations: List[Mapping[str, Any]]) -> Any:
        self._record("preapply_operations", operations)
        if self.preapply_response is not None:
            return self.preapply_response
        return [{"contents": [self._result(c) for c in op["contents"]]} for op in operations]

    async def inject_operation(self, signed_bytes: str) -> str:
        self._record("inject_operation", signed_bytes)
        if self.inject_error is not None:
            raise self.inject_error
        return self.op_hash


def rpc_error(status: int, body: Any) -> RpcResponseError:
    return RpcResponseError(method="inject_operation", url="http://node/injection/operation", status=status, body=body)


class FakeSigner:
    """Deterministic signer: fixed key, signature is 64 ``ff`` bytes."""

    def __init__(self, pkh: str = SOURCE, pk: str = PUBLIC_KEY) -> None:
        self.pkh = pkh
        self.pk = pk
        self.signed: List[Tuple[str, Optional[bytes]]] = []

    async def public_key_hash(self) -> str:
        return self.pkh

    async def public_key(self) -> str:
        return self.pk

    async def secret_key(self) -> Optional[str]:
        return None

    async def sign(self, op_bytes: str, watermark: Optional[bytes] = None) -> SignResult:
        self.signed.append((op_bytes, watermark))
        return SignResult(bytes=op_bytes, sig="sigFake", prefix_sig="edsigFake", sbytes=op_bytes + "ff" * 64)


def make_context(rpc: Optional[FakeRpc] = None, *, proto: Optional[str] = None, signer: Any = None) -> Context:
    return Context(rpc or FakeRpc(), signer or FakeSigner(), proto, head_cache=HeadCache(ttl=0))


@pytest.fixture()
def rpc() -> FakeRpc:
    return FakeRpc()


@pytest.fixture()
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture()
def context(rpc: FakeRpc, signer: FakeSigner) -> Context:
    return Context(rpc, signer, head_cache=HeadCache(ttl=0))
