"""
Balance - Show how much of an asset an address holds.

Defaults to the local wallet address and the native asset.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from ..config import Endpoints
from ..wallet.balance import BalanceState
from ..wallet.session import open_session


@click.command()
@click.option("--address", default=None, help="Address to query (default: local wallet)")
@click.option("--asset", default=None, help="Asset ID or symbol (default: native asset)")
@click.option("--full", is_flag=True, help="Print every decimal instead of six")
@click.pass_obj
def balance(endpoints: Endpoints, address: Optional[str], asset: Optional[str], full: bool) -> None:
    """Show a balance."""

    async def run() -> tuple[BalanceState, Optional[str], str]:
        async with open_session(endpoints, asset=asset) as session:
            target = address or session.context.address
            if not target:
                raise ValueError("No address given and no local wallet. Run 'hyperwallet keygen'.")
            await session.balance.fetch(target, session.asset)
            shown = session.balance.formatted() if full else session.balance.display()
            return session.balance.state, shown, session.asset

    try:
        state, shown, symbol = asyncio.run(run())
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    if state.error:
        click.secho(f"Error: {state.error}", fg="red")
        sys.exit(1)
    click.echo(f"  Address: {state.address}")
    click.echo(f"  Balance: {shown} {symbol}")
