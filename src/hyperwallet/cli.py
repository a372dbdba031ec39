"""
hyperwallet CLI

Command-line wallet for HyperSDK ledgers. Actions are not hard-coded: the
ledger's ABI describes them, and every command that runs one builds its input
form from that description.

Commands:
  keygen    - Create a local Ed25519 key
  whoami    - Show the wallet address
  abi       - List actions and their fields
  action    - Run an action read-only or as a transaction
  balance   - Show a balance
  blocks    - Follow newly produced blocks
  faucet    - Request test funds
  info      - Show configuration and status
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click

from .config import (
    DEFAULT_API_HOST,
    DEFAULT_FAUCET_HOST,
    DEFAULT_VM_NAME,
    DEFAULT_VM_RPC_PREFIX,
    HYPERWALLET_ENV,
    Endpoints,
    get_native_asset,
    load_env,
)
from .errors import FetchError
from .keys.signer import load_signer
from .ledger.rpc import LedgerClient

logger = logging.getLogger(__name__)

VERSION = "0.3.0"


# ============ Banner ============


def _print_banner(compact: bool = False) -> None:
    if compact:
        click.echo(
            click.style("  ◆ ", fg="cyan")
            + click.style("H Y P E R W A L L E T", fg="bright_white", bold=True)
            + click.style(f"  v{VERSION}", dim=True)
        )
        click.echo()
        return

    border = click.style("  ◆ ═══════════════════════════════════════ ◆", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()
    click.echo(
        click.style("     H Y P E R W A L L E T", fg="bright_white", bold=True)
        + click.style(f"      v{VERSION}", dim=True)
    )
    click.secho("        ─── ABI-driven ledger wallet ───", fg="cyan")
    click.echo()
    click.echo(border)
    click.echo()


# ============ Main CLI Group ============


@click.group(invoke_without_command=True)
@click.version_option(version=VERSION, prog_name="hyperwallet")
@click.option("--api-host", envvar="HYPERWALLET_API_HOST", default=DEFAULT_API_HOST, help="Node API URL")
@click.option("--faucet-host", envvar="HYPERWALLET_FAUCET_HOST", default=DEFAULT_FAUCET_HOST, help="Faucet URL")
@click.option("--vm-name", envvar="HYPERWALLET_VM_NAME", default=DEFAULT_VM_NAME, help="VM name in API paths")
@click.option(
    "--rpc-prefix", envvar="HYPERWALLET_VM_RPC_PREFIX", default=DEFAULT_VM_RPC_PREFIX, help="VM API prefix"
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Logging verbosity",
)
@click.pass_context
def cli(
    ctx: click.Context,
    api_host: str,
    faucet_host: str,
    vm_name: str,
    rpc_prefix: str,
    log_level: str,
) -> None:
    """hyperwallet: ABI-driven ledger wallet."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Endpoints(
        api_host=api_host.rstrip("/"),
        vm_name=vm_name,
        vm_rpc_prefix=rpc_prefix,
        faucet_host=faucet_host.rstrip("/"),
    )
    if ctx.invoked_subcommand is None:
        _print_banner()
        click.echo(ctx.get_help())


# ============ Top-level Commands ============

from .commands.abi import abi
from .commands.action import action
from .commands.balance import balance
from .commands.blocks import blocks
from .commands.faucet import faucet
from .commands.keygen import keygen

cli.add_command(keygen)
cli.add_command(abi)
cli.add_command(action)
cli.add_command(balance)
cli.add_command(blocks)
cli.add_command(faucet)


# ============ Identity ============


@cli.command()
def whoami() -> None:
    """Show current wallet identity."""
    try:
        signer = load_signer()
        click.echo(f"Address: {signer.address}")
    except ValueError:
        click.echo("No wallet found.")
        click.echo("Run 'hyperwallet keygen' to create one.")
        sys.exit(1)


# ============ Info ============


def _ledger_status(endpoints: Endpoints) -> str:
    async def ping() -> bool:
        async with LedgerClient(endpoints, timeout=5.0) as client:
            return await client.ping()

    try:
        return "online" if asyncio.run(ping()) else "not ready"
    except FetchError as exc:
        logger.debug("Ledger ping failed: %s", exc)
        return "unreachable"


@cli.command()
@click.pass_obj
def info(endpoints: Endpoints) -> None:
    """Show configuration and status."""
    _print_banner()

    click.secho("  Status ─────────────────────────────────", fg="cyan")
    click.echo()

    try:
        address = load_signer().address
        click.echo(
            click.style("  Address:     ", dim=True)
            + click.style(address, fg="bright_white")
        )
    except ValueError:
        click.echo(
            click.style("  Address:     ", dim=True)
            + click.style("not initialized", fg="yellow")
            + click.style("  (run: hyperwallet keygen)", dim=True)
        )

    rows = [
        ("Core API:    ", endpoints.core_api_url),
        ("Indexer:     ", endpoints.indexer_url),
        ("VM API:      ", endpoints.vm_api_url),
        ("Faucet:      ", endpoints.faucet_host),
        ("Asset:       ", get_native_asset()),
        ("Key file:    ", str(HYPERWALLET_ENV)),
    ]
    for label, value in rows:
        click.echo(click.style(f"  {label}", dim=True) + click.style(value, fg="bright_white"))

    status = _ledger_status(endpoints)
    click.echo(
        click.style("  Ledger:      ", dim=True)
        + click.style(status, fg="green" if status == "online" else "yellow")
    )

    click.echo()

    click.secho("  Commands ───────────────────────────────", fg="cyan")
    click.echo()

    commands = [
        ("keygen ", "Create a local Ed25519 key"),
        ("abi    ", "List actions and their fields"),
        ("action ", "Run an action read-only or as a transaction"),
        ("balance", "Show a balance"),
        ("blocks ", "Follow newly produced blocks"),
        ("faucet ", "Request test funds"),
        ("whoami ", "Show current wallet address"),
    ]
    for cmd, desc in commands:
        click.echo(
            click.style("  ", dim=True)
            + click.style(cmd, fg="bright_white", bold=True)
            + click.style("  ◇  ", fg="cyan")
            + click.style(desc, dim=True)
        )

    click.echo()


# ============ Entry Points ============


def main() -> None:
    """hyperwallet CLI entry point."""
    # Ensure UTF-8 output on Windows (for Unicode box-drawing / symbols)
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass
    load_env()
    cli()


if __name__ == "__main__":
    main()
