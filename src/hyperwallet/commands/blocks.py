"""
Blocks - Follow newly produced blocks.

Keeps the five most recent blocks and redraws them on every new block and
every ten seconds, so the "n seconds ago" labels stay current. Empty blocks
are skipped unless --include-empty is given.
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Optional

import click

from ..config import Endpoints
from ..errors import SubscriptionError
from ..ledger.blocks import Block
from ..ledger.rpc import LedgerClient
from ..wallet.feed import DEFAULT_CAPACITY, DEFAULT_TICK_INTERVAL, BlockFeed


def render_block(block: Block, age: str) -> list[str]:
    count = len(block.txs)
    lines = [
        click.style(f"Block #{block.height}", fg="bright_white", bold=True),
        click.style(age, dim=True),
        f"  Parent:     {block.parent}",
        f"  State Root: {block.state_root}",
        f"  {count} Transaction{'' if count == 1 else 's'}",
    ]
    for tx, result in block.entries():
        status = click.style("✅ Success", fg="green") if result.success else click.style("❌ Failed", fg="red")
        lines.append(f"  {status}")
        lines.append(f"    Sender: {tx.sender or 'unknown'}")
        detail = json.dumps({"actions": list(tx.actions), "outputs": list(result.outputs)}, indent=2, default=str)
        lines.extend("    " + line for line in detail.splitlines())
    return lines


def render_feed(feed: BlockFeed) -> None:
    entries = feed.view()
    click.echo(click.style("Latest Blocks ─────────────────────────", fg="cyan"))
    if not entries:
        click.echo("Waiting for new blocks (empty blocks are skipped)...")
    for block, age in entries:
        for line in render_block(block, age):
            click.echo(line)
        click.echo()


@click.command()
@click.option("--count", default=None, type=int, help="Stop after this many blocks (default: run until Ctrl-C)")
@click.option("--capacity", default=DEFAULT_CAPACITY, type=int, show_default=True, help="Blocks kept on screen")
@click.option("--include-empty", is_flag=True, help="Also show blocks without transactions")
@click.option("--poll-interval", default=1.0, type=float, show_default=True, help="Seconds between indexer polls")
@click.pass_obj
def blocks(
    endpoints: Endpoints,
    count: Optional[int],
    capacity: int,
    include_empty: bool,
    poll_interval: float,
) -> None:
    """Follow newly produced blocks."""

    async def run() -> None:
        async with LedgerClient(endpoints) as client:
            feed = BlockFeed(
                client,
                capacity=capacity,
                tick_interval=DEFAULT_TICK_INTERVAL,
                include_empty=include_empty,
                poll_interval=poll_interval,
            )
            done = asyncio.Event()
            heights: set[int] = set()

            def track(current: BlockFeed) -> None:
                heights.update(block.height for block in current.blocks())
                if count is not None and len(heights) >= count:
                    done.set()

            render_feed(feed)
            feed.subscribe(render_feed)
            feed.subscribe(track)
            subscription = feed.mount()
            try:
                await subscription.wait_started()
                await done.wait()
            finally:
                await feed.unmount()

    try:
        asyncio.run(run())
    except SubscriptionError as exc:
        click.secho(f"Error: {exc}", fg="red")
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Stopped.")
