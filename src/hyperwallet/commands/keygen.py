"""
Keygen - Create the local wallet key.

Generates an Ed25519 seed and stores it as PRIVATE_KEY in
~/.hyperwallet/.env. Refuses to replace an existing key unless --force.
"""

from __future__ import annotations

import sys

import click

from ..keys.signer import generate_key, load_private_key, save_private_key


@click.command()
@click.option("--force", is_flag=True, help="Replace an existing key")
def keygen(force: bool) -> None:
    """Create a new local Ed25519 key."""
    try:
        load_private_key()
        exists = True
    except ValueError:
        exists = False

    if exists and not force:
        click.secho("ERROR: A key already exists. Use --force to replace it.", fg="red")
        sys.exit(1)

    private_key, address = generate_key()
    env_path = save_private_key(private_key)

    click.secho("Key created.", fg="green")
    click.echo(f"  Address:  {address}")
    click.echo(f"  Saved to: {env_path}")
