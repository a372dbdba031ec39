"""
Abi - List the actions a ledger offers.

Prints each action with its fields, their declared types and the value a new
form starts with.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from ..config import Endpoints
from ..errors import FetchError
from ..ledger.abi import ABI
from ..wallet.defaults import is_supported, resolve_default
from ..wallet.session import open_session


def render_abi(abi: ABI) -> None:
    for action in abi.actions:
        click.secho(f"{action.name}", fg="bright_white", bold=True, nl=False)
        click.echo(click.style(f"  (id {action.id})", dim=True))
        type_def = abi.type_for(action.name)
        if type_def is None:
            click.secho("  (no type describes this action)", fg="yellow")
            continue
        for field in type_def.fields:
            if not is_supported(field.type):
                click.secho(
                    f"  Warning: Array type not supported for {field.name}", fg="yellow"
                )
                continue
            default = resolve_default(field.type)
            click.echo(f"  {field.name}: {field.type}" + (f"  [default: {default}]" if default else ""))
        click.echo()


@click.command()
@click.option(
    "--abi-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the ABI from a JSON file instead of the node",
)
@click.pass_obj
def abi(endpoints: Endpoints, abi_file: Optional[Path]) -> None:
    """List actions and their fields."""

    async def run() -> ABI:
        async with open_session(endpoints) as session:
            return await session.load_abi(abi_file)

    try:
        loaded = asyncio.run(run())
    except FetchError as exc:
        click.secho(f"Error loading ABI: {exc}", fg="red")
        sys.exit(1)

    if not loaded.actions:
        click.echo("The ledger exposes no actions.")
        return
    render_abi(loaded)
