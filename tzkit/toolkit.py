"""
TezosToolkit: one object wiring the context and every provider together.

Examples
--------
    async with TezosToolkit("https://rpc.example.net") as tk:
        await tk.import_key("edsk...")
        op = await tk.contract.transfer(to="tz1...", amount=1.5)
        await op.confirmation(1)

Configuration comes from :class:`~tzkit.config.ToolkitConfig` (by default
``ToolkitConfig.from_env()``); an explicit ``rpc`` argument wins over
``TZKIT_RPC_URL``.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from .config import PollingConfig, ToolkitConfig
from .context import Context
from .contract.provider import RpcContractProvider
from .errors import RpcResponseError
from .operations.estimator import RpcEstimateProvider
from .rpc.http import RpcClient
from .signer.base import Signer
from .signer.memory import InMemorySigner
from .subscribe.polling import PollingSubscribeProvider
from .tz import RpcTzProvider

log = logging.getLogger(__name__)

__all__ = ["TezosToolkit"]


class TezosToolkit:
    def __init__(
        self,
        rpc: Union[str, RpcClient, Any, None] = None,
        *,
        signer: Optional[Signer] = None,
        config: Optional[ToolkitConfig] = None,
    ) -> None:
        self.config = config or ToolkitConfig.from_env()
        self._owned: List[RpcClient] = []
        self._context = Context(
            self._resolve_rpc(rpc if rpc is not None else self.config.rpc_url),
            signer,
            self.config.protocol,
            self.config.polling,
        )
        self._estimate = RpcEstimateProvider(self._context)
        self._contract = RpcContractProvider(self._context, self._estimate)
        self._tz = RpcTzProvider(self._context)
        self._stream = PollingSubscribeProvider(self._context, self.config.stream_poll_interval)

    def _resolve_rpc(self, rpc: Union[str, Any]) -> Any:
        if isinstance(rpc, str):
            client = RpcClient(
                rpc,
                chain=self.config.chain,
                timeout=self.config.request_timeout,
                max_retries=self.config.max_retries,
                backoff_base=self.config.backoff_base,
                backoff_factor=self.config.backoff_factor,
            )
            self._owned.append(client)
            return client
        return rpc

    # --- wiring ----------------------------------------------------------------

    def set_provider(
        self,
        *,
        rpc: Union[str, Any, None] = None,
        stream: Optional[Any] = None,
        signer: Optional[Signer] = None,
        protocol: Optional[str] = None,
        config: Optional[PollingConfig] = None,
    ) -> None:
        """Swap collaborators on the live context. Handles already returned keep their snapshot."""
        if rpc is not None:
            self._context.rpc = self._resolve_rpc(rpc)
        if stream is not None:
            self._stream = stream
        if signer is not None:
            self._context.signer = signer
        if protocol is not None:
            self._context.proto = protocol
        if config is not None:
            self._context.config = config

    @property
    def context(self) -> Context:
        return self._context

    @property
    def tz(self) -> RpcTzProvider:
        return self._tz

    @property
    def contract(self) -> RpcContractProvider:
        return self._contract

    @property
    def estimate(self) -> RpcEstimateProvider:
        return self._estimate

    @property
    def stream(self) -> Any:
        return self._stream

    @property
    def rpc(self) -> Any:
        return self._context.rpc

    @property
    def signer(self) -> Signer:
        return self._context.signer

    # --- keys --------------------------------------------------------------------

    async def import_key(
        self,
        private_key_or_email: str,
        password: Optional[str] = None,
        mnemonic: Optional[str] = None,
        secret: Optional[str] = None,
    ) -> Signer:
        """
        Install an in-memory signer.

        With ``password`` and ``mnemonic`` the first argument is a fundraiser
        email: the account is derived, activated with ``secret`` (an
        "Invalid activation" answer means it already is) and the activation
        is awaited before the signer is installed.
        """
        if password and mnemonic:
            signer = InMemorySigner.from_fundraiser(private_key_or_email, password, mnemonic)
            pkh = await signer.public_key_hash()
            op = None
            try:
                op = await self.tz.activate(pkh, secret or "")
            except RpcResponseError as exc:
                if "Invalid activation" not in str(exc.body):
                    raise
                log.info("%s is already activated", pkh)
            if op is not None:
                await op.confirmation()
        else:
            signer = InMemorySigner.from_secret_key(private_key_or_email)
        self.set_provider(signer=signer)
        return signer

    # --- lifecycle ---------------------------------------------------------------

    async def aclose(self) -> None:
        while self._owned:
            await self._owned.pop().aclose()

    async def __aenter__(self) -> "TezosToolkit":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.aclose()
