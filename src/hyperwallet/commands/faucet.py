"""
Faucet - Request test funds for an address.

Checks the faucet's /readyz first, then asks it to fund the address. With
--wait the balance is polled until it reaches the spendable minimum.
"""

from __future__ import annotations

import asyncio
import sys
import time
from typing import Optional

import click

from ..config import Endpoints
from ..errors import FetchError
from ..ledger.faucet import FaucetClient
from ..wallet.session import WalletSession, open_session


async def wait_for_funds(session: WalletSession, address: str, timeout: float, interval: float) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        amount = await session.balance.fetch(address, session.asset)
        if amount is not None:
            session.context.update_balance(amount)
            if amount >= session.context.min_balance:
                return True
        await asyncio.sleep(interval)
    return False


@click.command()
@click.option("--address", default=None, help="Address to fund (default: local wallet)")
@click.option("--wait/--no-wait", default=True, help="Poll the balance until the funds arrive")
@click.option("--timeout", default=120, type=int, help="Seconds to wait for funds")
@click.pass_obj
def faucet(endpoints: Endpoints, address: Optional[str], wait: bool, timeout: int) -> None:
    """Request test funds from the faucet."""

    async def run() -> tuple[str, bool]:
        async with open_session(endpoints) as session, FaucetClient(endpoints.faucet_host) as client:
            target = address or session.context.address
            if not target:
                raise ValueError("No address given and no local wallet. Run 'hyperwallet keygen'.")

            if not await client.is_ready():
                raise FetchError(f"Faucet at {endpoints.faucet_host} is not ready")

            await client.request_transfer(target)
            click.echo(f"  Requested funds for {target}")
            if not wait:
                return target, True
            click.echo("  Waiting for funds...")
            return target, await wait_for_funds(session, target, timeout, interval=2.0)

    try:
        target, funded = asyncio.run(run())
    except (FetchError, ValueError) as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    if not funded:
        click.secho(f"Funds for {target} did not arrive within {timeout}s", fg="yellow")
        sys.exit(1)
    click.secho("SUCCESS: Faucet request sent.", fg="green")
