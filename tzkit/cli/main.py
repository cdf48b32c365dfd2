"""
tzkit.cli.main
==============

`tzkit`: a small command-line front end over :class:`~tzkit.toolkit.TezosToolkit`.

Examples
--------
    $ tzkit --rpc https://rpc.example.net head
    $ tzkit balance tz1...
    $ tzkit estimate-transfer --to tz1... --amount 1.5 --source tz1...
    $ TZKIT_SECRET_KEY=edsk... tzkit transfer --to tz1... --amount 1.5 --confirmations 1
    $ tzkit watch --kind transaction --destination KT1... --limit 5

Configuration
-------------
- RPC URL      : `--rpc` or env `TZKIT_RPC_URL` (default: http://127.0.0.1:8732)
- Chain        : `--chain` or env `TZKIT_CHAIN` (default: main)
- HTTP Timeout : `--timeout` or env `TZKIT_TIMEOUT` seconds (default: 30.0)
- Log level    : `--log-level` or env `TZKIT_LOG_LEVEL` (default: WARNING)
- Signing key  : env `TZKIT_SECRET_KEY` (only for `transfer`)
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import typer

from ..config import ToolkitConfig
from ..errors import TzKitError
from ..toolkit import TezosToolkit
from ..utils.format import format_amount, to_wire_string
from ..version import __version__

app = typer.Typer(
    name="tzkit",
    help="Tezos operation toolkit: query the node, estimate, transfer and watch operations.",
    no_args_is_help=True,
    add_completion=False,
)

__all__ = ["app", "main"]

T = TypeVar("T")


@dataclass
class Ctx:
    config: ToolkitConfig


def _print_json(obj: Any) -> None:
    typer.echo(json.dumps(obj, indent=2, ensure_ascii=False, default=str))


def _toolkit(c: Ctx) -> TezosToolkit:
    return TezosToolkit(config=c.config)


def _run(c: Ctx, body: Callable[[TezosToolkit], Awaitable[T]]) -> T:
    """Run ``body`` against a fresh toolkit; library errors become exit code 1."""

    async def go() -> T:
        async with _toolkit(c) as tk:
            return await body(tk)

    try:
        return asyncio.run(go())
    except TzKitError as e:
        typer.secho(f"error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from e


@app.callback()
def _root(
    ctx: typer.Context,
    rpc: Optional[str] = typer.Option(None, "--rpc", help="Node RPC URL.", envvar="TZKIT_RPC_URL"),
    chain: Optional[str] = typer.Option(None, "--chain", help="Chain alias or id.", envvar="TZKIT_CHAIN"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="HTTP timeout in seconds.", envvar="TZKIT_TIMEOUT"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level name.", envvar="TZKIT_LOG_LEVEL"),
) -> None:
    """
    Resolve the effective configuration: flags win over ``TZKIT_*`` variables.
    """
    try:
        config = ToolkitConfig.from_env().with_overrides(
            rpc_url=rpc, chain=chain, request_timeout=timeout, log_level=log_level.upper() if log_level else None
        )
    except TzKitError as e:
        raise typer.BadParameter(str(e)) from e
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Ctx(config=config)


@app.command("version")
def version_cmd() -> None:
    """Print the tzkit version."""
    typer.echo(__version__)


@app.command("env")
def env_cmd(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    c: Ctx = ctx.obj
    _print_json(c.config.to_dict())


@app.command("head")
def head_cmd(ctx: typer.Context) -> None:
    """Print the head block header."""
    _print_json(_run(ctx.obj, lambda tk: tk.rpc.get_block_header()))


@app.command("balance")
def balance_cmd(
    ctx: typer.Context,
    address: str = typer.Argument(..., help="tz1/KT1 address."),
    mutez: bool = typer.Option(False, "--mutez", help="Print the raw mutez amount."),
) -> None:
    """Print an account balance (tez by default)."""
    balance = _run(ctx.obj, lambda tk: tk.tz.get_balance(address))
    typer.echo(to_wire_string(balance if mutez else format_amount("mutez", "tz", balance)))


@app.command("estimate-transfer")
def estimate_transfer_cmd(
    ctx: typer.Context,
    to: str = typer.Option(..., "--to", help="Destination address."),
    amount: str = typer.Option(..., "--amount", help="Amount in tez."),
    source: Optional[str] = typer.Option(None, "--source", help="Source address (defaults to the signer)."),
) -> None:
    """Simulate a transfer and print the suggested limits and fee."""
    estimate = _run(ctx.obj, lambda tk: tk.estimate.transfer(to=to, amount=amount, source=source))
    _print_json(estimate.to_dict())


@app.command("transfer")
def transfer_cmd(
    ctx: typer.Context,
    to: str = typer.Option(..., "--to", help="Destination address."),
    amount: str = typer.Option(..., "--amount", help="Amount in tez."),
    confirmations: int = typer.Option(0, "--confirmations", "-c", help="Blocks to wait after inclusion."),
) -> None:
    """Sign and inject a transfer using the key in TZKIT_SECRET_KEY."""
    secret = os.environ.get("TZKIT_SECRET_KEY")
    if not secret:
        raise typer.BadParameter("TZKIT_SECRET_KEY must hold an edsk... key")

    async def body(tk: TezosToolkit) -> Dict[str, Any]:
        await tk.import_key(secret)
        op = await tk.contract.transfer(to=to, amount=amount)
        out: Dict[str, Any] = {"hash": op.hash, "status": op.status}
        if confirmations > 0:
            out["level"] = await op.confirmation(confirmations)
        return out

    _print_json(_run(ctx.obj, body))


@app.command("watch")
def watch_cmd(
    ctx: typer.Context,
    kind: Optional[str] = typer.Option(None, "--kind", help="Operation kind, e.g. transaction."),
    source: Optional[str] = typer.Option(None, "--source", help="Source address."),
    destination: Optional[str] = typer.Option(None, "--destination", help="Destination address."),
    op_hash: Optional[str] = typer.Option(None, "--op-hash", help="Operation hash."),
    limit: int = typer.Option(0, "--limit", help="Stop after this many matches (0 = forever)."),
) -> None:
    """Print matching operation contents from new blocks (Ctrl+C to exit)."""
    flt: List[Dict[str, Any]] = []
    if kind:
        flt.append({"kind": kind})
    if source:
        flt.append({"source": source})
    if destination:
        flt.append({"destination": destination})
    if op_hash:
        flt.append({"opHash": op_hash})

    async def body(tk: TezosToolkit) -> int:
        sub = tk.stream.subscribe_operation(flt)
        seen = 0

        def on_data(content: Dict[str, Any]) -> None:
            nonlocal seen
            _print_json(content)
            seen += 1
            if limit and seen >= limit:
                sub.close()

        def on_error(exc: BaseException) -> None:
            typer.secho(f"error: {exc}", fg=typer.colors.RED, err=True)

        sub.on("data", on_data)
        sub.on("error", on_error)
        await sub.wait_closed()
        await sub.aclose()
        return seen

    try:
        _run(ctx.obj, body)
    except KeyboardInterrupt:
        typer.echo("bye")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI. Returns an integer exit code.
    """
    try:
        rv = app(prog_name="tzkit", standalone_mode=False, args=argv)
        return rv if isinstance(rv, int) else 0
    except typer.Exit as e:
        return int(e.exit_code)
    except Exception as e:
        typer.echo(f"error: {e}", err=True)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
