"""
Async REST client for a Tezos node RPC.

- Built on ``httpx.AsyncClient``; one client per :class:`RpcClient`.
- Block-scoped paths are ``/chains/{chain}/blocks/{block}/...``; ``block``
  defaults to ``head``.
- GET requests are retried on transient HTTP statuses (429/502/503/504) and
  transport failures when ``max_retries > 0``. POST requests (forge, simulate,
  preapply, inject) are sent exactly once.

Example:
    async with RpcClient("https://rpc.example.net") as rpc:
        header = await rpc.get_block_header()
        print(header["level"])
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

import httpx

from ..errors import RpcResponseError, RpcTransportError
from ..version import USER_AGENT

log = logging.getLogger(__name__)

JSON = Union[dict, list, str, int, float, bool, None]

__all__ = ["RpcClient", "JSON"]


def _is_retriable_http(status: int) -> bool:
    return status in (429, 502, 503, 504)


def _jitter_backoff(base: float, factor: float, attempt: int, jitter: float) -> float:
    # Exponential backoff with jitter in [0, jitter]
    return base * (factor ** max(attempt - 1, 0)) + random.random() * jitter


@dataclass
class RpcClient:
    """Async client for the subset of the node RPC the operation pipeline uses."""

    url: str
    chain: str = "main"
    timeout: float = 30.0
    max_retries: int = 0
    backoff_base: float = 0.15
    backoff_factor: float = 1.8
    backoff_jitter: float = 0.2
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.AsyncBaseTransport] = None
    _client: Optional[httpx.AsyncClient] = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.url = self.url.rstrip("/")
        merged: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        if self.headers:
            merged.update(dict(self.headers))
        self._client = httpx.AsyncClient(
            base_url=self.url,
            timeout=self.timeout,
            headers=merged,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()

    async def aclose(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    # --- block queries ---------------------------------------------------

    def _block(self, block: str) -> str:
        return f"/chains/{self.chain}/blocks/{block}"

    async def get_block_hash(self, block: str = "head") -> str:
        return await self._get("get_block_hash", f"{self._block(block)}/hash")

    async def get_block(self, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_block", self._block(block))

    async def get_block_header(self, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_block_header", f"{self._block(block)}/header")

    async def get_block_metadata(self, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_block_metadata", f"{self._block(block)}/metadata")

    async def get_chain_id(self) -> str:
        return await self._get("get_chain_id", f"/chains/{self.chain}/chain_id")

    # --- contract queries ------------------------------------------------

    def _contract(self, address: str, block: str, suffix: str = "") -> str:
        return f"{self._block(block)}/context/contracts/{address}{suffix}"

    async def get_contract(self, address: str, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_contract", self._contract(address, block))

    async def get_balance(self, address: str, block: str = "head") -> Decimal:
        raw = await self._get("get_balance", self._contract(address, block, "/balance"))
        return Decimal(str(raw))

    async def get_delegate(self, address: str, block: str = "head") -> Optional[str]:
        """Current delegate, or ``None`` when the account has none (node answers 404)."""
        try:
            return await self._get("get_delegate", self._contract(address, block, "/delegate"))
        except RpcResponseError as exc:
            if exc.status == 404:
                return None
            raise

    async def get_manager_key(self, address: str, block: str = "head") -> Any:
        """Revealed public key; ``None`` (or ``{"key": None}`` on older nodes) when unrevealed."""
        return await self._get("get_manager_key", self._contract(address, block, "/manager_key"))

    async def get_script(self, address: str, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_script", self._contract(address, block, "/script"))

    async def get_storage(self, address: str, block: str = "head") -> JSON:
        return await self._get("get_storage", self._contract(address, block, "/storage"))

    async def get_entrypoints(self, address: str, block: str = "head") -> Dict[str, Any]:
        return await self._get("get_entrypoints", self._contract(address, block, "/entrypoints"))

    # --- helpers (never retried) -----------------------------------------

    async def forge_operations(self, operation: Mapping[str, Any], block: str = "head") -> str:
        return await self._post(
            "forge_operations", f"{self._block(block)}/helpers/forge/operations", dict(operation)
        )

    async def run_operation(self, operation: Mapping[str, Any], block: str = "head") -> Dict[str, Any]:
        return await self._post(
            "run_operation", f"{self._block(block)}/helpers/scripts/run_operation", dict(operation)
        )

    async def preapply_operations(self, operations: List[Mapping[str, Any]], block: str = "head") -> JSON:
        return await self._post(
            "preapply_operations",
            f"{self._block(block)}/helpers/preapply/operations",
            [dict(op) for op in operations],
        )

    async def inject_operation(self, signed_bytes: str) -> str:
        return await self._post(
            "inject_operation", "/injection/operation", signed_bytes, params={"chain": self.chain}
        )

    # --- internals -------------------------------------------------------

    async def _get(self, method: str, path: str) -> Any:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await self._send(method, "GET", path)
            except RpcResponseError as exc:
                if not _is_retriable_http(exc.status) or attempt > self.max_retries:
                    raise
                err: Exception = exc
            except RpcTransportError as exc:
                if attempt > self.max_retries:
                    raise
                err = exc
            delay = _jitter_backoff(self.backoff_base, self.backoff_factor, attempt, self.backoff_jitter)
            log.debug("retrying %s in %.2fs (attempt %d): %s", method, delay, attempt, err)
            await asyncio.sleep(delay)

    async def _post(self, method: str, path: str, body: Any, params: Optional[Mapping[str, str]] = None) -> Any:
        return await self._send(method, "POST", path, body=body, params=params)

    async def _send(
        self,
        method: str,
        verb: str,
        path: str,
        *,
        body: Any = None,
        params: Optional[Mapping[str, str]] = None,
    ) -> Any:
        url = f"{self.url}{path}"
        client = self._client
        if client is None:
            raise RpcTransportError(method=method, url=url, reason="client is closed")
        log.debug("%s %s", verb, path)
        try:
            if verb == "GET":
                r = await client.get(path, params=params)
            else:
                r = await client.post(path, json=body, params=params)
        except httpx.TransportError as exc:
            raise RpcTransportError(method=method, url=url, reason=str(exc) or type(exc).__name__) from exc

        if r.status_code >= 400:
            try:
                detail: Any = r.json()
            except ValueError:
                detail = r.text[:512]
            raise RpcResponseError(method=method, url=url, status=r.status_code, body=detail)
        try:
            return r.json()
        except ValueError as exc:
            raise RpcResponseError(
                method=method, url=url, status=r.status_code, body=f"non-JSON response: {r.text[:256]}"
            ) from exc
