"""
Runtime configuration.

Every setting is an environment variable with a default. Values stored in
``~/.hyperwallet/.env`` are loaded on first access, so a key generated by
``hyperwallet keygen`` and endpoints written next to it are picked up without
exporting anything in the shell.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

HYPERWALLET_DIR = Path.home() / ".hyperwallet"
HYPERWALLET_ENV = HYPERWALLET_DIR / ".env"

DEFAULT_API_HOST = "http://127.0.0.1:9650"
DEFAULT_FAUCET_HOST = "http://127.0.0.1:8765"
DEFAULT_VM_NAME = "nuklaivm"
DEFAULT_VM_RPC_PREFIX = "nuklaiapi"
DEFAULT_NATIVE_ASSET = "NAI"
NATIVE_DECIMALS = 9

_env_loaded = False


def load_env(env_path: Optional[Path] = None) -> None:
    """Load the wallet ``.env`` file once; the process environment wins."""
    global _env_loaded
    if _env_loaded and env_path is None:
        return
    env_path = env_path or HYPERWALLET_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)
    _env_loaded = True


def _get(name: str, default: str) -> str:
    load_env()
    return os.environ.get(name, default)


def get_api_host() -> str:
    return _get("HYPERWALLET_API_HOST", DEFAULT_API_HOST).rstrip("/")


def get_faucet_host() -> str:
    return _get("HYPERWALLET_FAUCET_HOST", DEFAULT_FAUCET_HOST).rstrip("/")


def get_vm_name() -> str:
    return _get("HYPERWALLET_VM_NAME", DEFAULT_VM_NAME)


def get_vm_rpc_prefix() -> str:
    return _get("HYPERWALLET_VM_RPC_PREFIX", DEFAULT_VM_RPC_PREFIX)


def get_native_asset() -> str:
    return _get("HYPERWALLET_NATIVE_ASSET", DEFAULT_NATIVE_ASSET)


@dataclass(frozen=True)
class Endpoints:
    """Resolved endpoint set for one ledger."""

    api_host: str
    vm_name: str
    vm_rpc_prefix: str
    faucet_host: str

    @classmethod
    def from_env(cls) -> "Endpoints":
        return cls(
            api_host=get_api_host(),
            vm_name=get_vm_name(),
            vm_rpc_prefix=get_vm_rpc_prefix(),
            faucet_host=get_faucet_host(),
        )

    def chain_url(self, path: str) -> str:
        return f"{self.api_host}/ext/bc/{self.vm_name}/{path}"

    @property
    def core_api_url(self) -> str:
        return self.chain_url("coreapi")

    @property
    def indexer_url(self) -> str:
        return self.chain_url("indexer")

    @property
    def vm_api_url(self) -> str:
        return self.chain_url(self.vm_rpc_prefix)
