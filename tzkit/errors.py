"""
Typed error classes for tzkit.

Every failure the operation pipeline can surface has its own class so callers
can tell "the node rejected it" (:class:`OperationFailedError`) apart from
"it was never observed" (:class:`ConfirmationTimeoutError`) while still being
able to catch the base :class:`TzKitError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

__all__ = [
    "TzKitError",
    "ConfigError",
    "PollingConfigError",
    "RpcResponseError",
    "RpcTransportError",
    "PreparationError",
    "PreapplyError",
    "OperationFailedError",
    "InvalidSourceError",
    "InvalidDelegationSource",
    "InvalidParameterError",
    "ConfirmationTimeoutError",
    "FilterError",
    "SignerError",
    "Base58Error",
    "EncodingError",
]


class TzKitError(Exception):
    """Base class for all tzkit errors."""


# --- configuration -----------------------------------------------------------


@dataclass(slots=True)
class ConfigError(TzKitError):
    """Raised when an environment variable or override holds an unusable value."""

    message: str
    key: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.key}: {self.message}" if self.key else self.message


@dataclass(slots=True)
class PollingConfigError(TzKitError):
    """Non-positive confirmation polling interval or timeout."""

    message: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


# --- network / protocol ------------------------------------------------------


@dataclass(slots=True)
class RpcResponseError(TzKitError):
    """The node answered with a non-2xx status."""

    method: str
    url: str
    status: int
    body: Any = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"RPC[{self.method}] http={self.status} url={self.url} body={self.body!r}"


@dataclass(slots=True)
class RpcTransportError(TzKitError):
    """The request never produced an HTTP response (timeout, refused, ...)."""

    method: str
    url: str
    reason: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"RPC[{self.method}] transport failure url={self.url}: {self.reason}"


@dataclass(slots=True)
class PreparationError(TzKitError):
    """Head header or metadata could not be fetched while preparing."""

    message: str
    cause: Optional[BaseException] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.message}: {self.cause}" if self.cause else self.message


@dataclass(slots=True)
class PreapplyError(TzKitError):
    """Preapply answered with something other than a list of result groups."""

    response: Any

    def __str__(self) -> str:
        return f"RPC Fail: {self.response!r}"


@dataclass(slots=True)
class OperationFailedError(TzKitError):
    """
    Preapply reported one or more failed contents. ``errors`` is the
    concatenation of every failed content's ``errors`` array, in content order.
    Nothing was broadcast.
    """

    errors: List[Any] = field(default_factory=list)
    message: str = "Operation Failed"

    def __str__(self) -> str:
        ids = [e.get("id") for e in self.errors if isinstance(e, dict) and e.get("id")]
        return f"{self.message}: {', '.join(ids)}" if ids else self.message


# --- protocol compatibility ----------------------------------------------------


@dataclass(slots=True)
class InvalidSourceError(TzKitError):
    """A contract (KT1) address was used as a transaction source under protocol 005+."""

    source: str
    protocol: Optional[str] = None

    def __str__(self) -> str:
        return (
            f"KT1 addresses are not supported as source in {self.protocol or 'this protocol'} "
            f"(got {self.source})"
        )


@dataclass(slots=True)
class InvalidDelegationSource(TzKitError):
    source: str

    def __str__(self) -> str:
        return (
            "Since Babylon delegation source can no longer be a contract address "
            f"{self.source}. Please use the smart contract abstraction to set your delegate."
        )


# --- argument shape ----------------------------------------------------------


@dataclass(slots=True)
class InvalidParameterError(TzKitError):
    """A contract method was called with an argument count no signature accepts."""

    name: str
    signatures: Sequence[Any] = ()
    arguments: Sequence[Any] = ()

    def __str__(self) -> str:
        sigs = ", ".join(str(s) for s in self.signatures)
        return (
            f"{self.name} Received {len(self.arguments)} arguments while expecting one of "
            f"the following signatures ({sigs})"
        )


# --- confirmation ------------------------------------------------------------


@dataclass(slots=True)
class ConfirmationTimeoutError(TzKitError):
    """The operation did not reach the requested depth within the tick budget."""

    op_hash: str
    ticks: int
    found_at: Optional[int] = None

    def __str__(self) -> str:
        where = f" (included at level {self.found_at})" if self.found_at is not None else ""
        return f"Confirmation polling timed out for {self.op_hash} after {self.ticks} polls{where}"


# --- misc --------------------------------------------------------------------


class FilterError(TzKitError, ValueError):
    pass


class SignerError(TzKitError):
    pass


class Base58Error(TzKitError, ValueError):
    pass


@dataclass(slots=True)
class EncodingError(TzKitError):
    """A Python value could not be mapped onto the Michelson type it was given for."""

    message: str
    michelson_type: Any = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.michelson_type is None:
            return self.message
        return f"{self.message} (type={self.michelson_type!r})"
