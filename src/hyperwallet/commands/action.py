"""
Action - Fill in and run one ABI action.

The form starts from the per-type defaults, then applies each --field
name=value. Without --submit the action is simulated against current state;
with --submit it is signed by the local key and broadcast, and the balance is
refreshed afterwards.
"""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from ..config import Endpoints
from ..errors import FetchError
from ..wallet.executor import ExecutionMode, ExecutionOutcome
from ..wallet.form import ActionFormState
from ..wallet.session import open_session


def parse_field_options(pairs: tuple[str, ...]) -> dict[str, str]:
    values: dict[str, str] = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"Expected name=value, got {pair!r}", param_hint="--field")
        values[name.strip()] = value
    return values


@click.command()
@click.argument("action_name")
@click.option("--field", "-f", "fields", multiple=True, help="Field value as name=value (repeatable)")
@click.option("--submit", is_flag=True, help="Broadcast as a transaction instead of simulating")
@click.option(
    "--abi-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read the ABI from a JSON file instead of the node",
)
@click.pass_obj
def action(
    endpoints: Endpoints,
    action_name: str,
    fields: tuple[str, ...],
    submit: bool,
    abi_file: Optional[Path],
) -> None:
    """Run ACTION_NAME read-only, or as a transaction with --submit."""
    values = parse_field_options(fields)
    mode = ExecutionMode.SUBMIT if submit else ExecutionMode.READ_ONLY

    async def run() -> ExecutionOutcome:
        async with open_session(endpoints, require_signer=submit) as session:
            form = ActionFormState(await session.load_abi(abi_file))
            form.select(action_name)
            form.set_many(values)

            for warning in form.warnings:
                click.secho(warning, fg="yellow")
            click.echo(f"Action data for {action_name}: {json.dumps(form.log_view(), indent=2)}")

            executor = session.executor()
            executor.subscribe(lambda entry: click.echo(str(entry)))
            outcome = await executor.execute(action_name, form.snapshot(), mode)
            await executor.drain()

            if outcome.ok and submit:
                shown = session.balance.display()
                if shown is not None:
                    click.echo(f"Balance: {shown} {session.asset}")
            return outcome

    try:
        outcome = asyncio.run(run())
    except FetchError as exc:
        click.secho(f"Error loading ABI: {exc}", fg="red")
        sys.exit(1)
    except KeyError as exc:
        click.secho(f"ERROR: {exc.args[0]}", fg="red")
        sys.exit(1)
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)

    if not outcome.ok:
        sys.exit(1)
