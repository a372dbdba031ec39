"""Wiring of client, signer, balance and executor for one ledger."""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

import httpx

from ..config import Endpoints, get_native_asset
from ..keys.signer import load_signer
from ..ledger.abi import ABI, load_abi_file
from ..ledger.rpc import LedgerClient
from .balance import BalanceReader
from .context import WalletContext
from .executor import ActionExecutor

logger = logging.getLogger(__name__)


@dataclass
class WalletSession:
    client: LedgerClient
    context: WalletContext
    balance: BalanceReader
    asset: str

    async def load_abi(self, abi_file: Optional[Path] = None) -> ABI:
        if abi_file is not None:
            return load_abi_file(abi_file)
        return await self.client.get_abi()

    async def refresh_balance(self) -> Optional[int]:
        if not self.context.connected:
            return None
        amount = await self.balance.fetch(self.context.address, self.asset)
        if amount is not None:
            self.context.update_balance(amount)
        return amount

    def executor(self) -> ActionExecutor:
        return ActionExecutor(self.client, on_submitted=self.refresh_balance)


@contextlib.asynccontextmanager
async def open_session(
    endpoints: Optional[Endpoints] = None,
    *,
    require_signer: bool = False,
    asset: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> AsyncIterator[WalletSession]:
    """
    Open a ledger client and connect the local signer when one is configured.

    Raises:
        ValueError: If ``require_signer`` is set and no key is configured
    """
    client = LedgerClient(endpoints, http_client=http_client)
    context = WalletContext(events=client.signer_events)
    try:
        signer = load_signer()
    except ValueError:
        if require_signer:
            await client.aclose()
            raise
        logger.debug("No local signer configured")
    else:
        client.signer_events.connect(signer)

    session = WalletSession(
        client=client,
        context=context,
        balance=BalanceReader(client),
        asset=asset or get_native_asset(),
    )
    try:
        yield session
    finally:
        await client.aclose()
