"""
Balance of one (address, asset) pair with loading/error/value state.

State is an immutable ``BalanceState`` swapped as a whole, so observers never
see a half-updated mix. Asking for a different address or asset clears the
old value and error in the same swap that starts loading; a failed refresh of
the same pair keeps the last good value next to the error.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Protocol

from ..config import NATIVE_DECIMALS, get_native_asset
from ..ledger.units import format_units, truncate_display
from .executor import describe_error

logger = logging.getLogger(__name__)


class BalanceClient(Protocol):
    async def get_balance(self, address: str, asset: str) -> int:
        ...

    async def get_asset(self, asset: str) -> dict[str, Any]:
        ...


@dataclass(frozen=True)
class BalanceState:
    address: Optional[str] = None
    asset: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None
    value: Optional[int] = None
    decimals: Optional[int] = None

    def same_identity(self, address: str, asset: str) -> bool:
        return self.address == address and self.asset == asset


def format_balance(amount: int, decimals: int) -> str:
    return format_units(amount, decimals)


class BalanceReader:
    def __init__(self, client: BalanceClient, *, native_asset: Optional[str] = None) -> None:
        self.client = client
        self.native_asset = native_asset or get_native_asset()
        self._state = BalanceState()
        self._decimals: dict[str, int] = {self.native_asset: NATIVE_DECIMALS}
        self._listeners: list[Callable[[BalanceState], None]] = []
        self._generation = 0

    @property
    def state(self) -> BalanceState:
        return self._state

    def subscribe(self, listener: Callable[[BalanceState], None]) -> None:
        self._listeners.append(listener)

    def _swap(self, state: BalanceState) -> None:
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    async def _decimals_for(self, asset: str) -> int:
        if asset not in self._decimals:
            info = await self.client.get_asset(asset)
            self._decimals[asset] = int(info["decimals"])
        return self._decimals[asset]

    async def fetch(self, address: str, asset: Optional[str] = None) -> Optional[int]:
        """
        Fetch the balance and publish the resulting state.

        Returns:
            The amount in base units, or None if the fetch failed
        """
        asset = asset or self.native_asset
        self._generation += 1
        generation = self._generation

        if self._state.same_identity(address, asset):
            self._swap(replace(self._state, loading=True))
        else:
            self._swap(BalanceState(address=address, asset=asset, loading=True))

        try:
            amount = await self.client.get_balance(address, asset)
            decimals = await self._decimals_for(asset)
        except Exception as exc:
            if generation != self._generation:
                return None
            message = describe_error(exc)
            logger.warning("Failed to fetch balance of %s for %s: %s", asset, address, message)
            self._swap(replace(self._state, loading=False, error=message))
            return None

        # a newer fetch owns the state now
        if generation != self._generation:
            return amount
        self._swap(
            BalanceState(
                address=address,
                asset=asset,
                loading=False,
                error=None,
                value=amount,
                decimals=decimals,
            )
        )
        return amount

    async def refresh(self) -> Optional[int]:
        """Re-fetch the current pair; no-op before the first fetch."""
        if self._state.address is None:
            return None
        return await self.fetch(self._state.address, self._state.asset)

    def formatted(self) -> Optional[str]:
        state = self._state
        if state.value is None or state.decimals is None:
            return None
        return format_balance(state.value, state.decimals)

    def display(self) -> Optional[str]:
        """Presentation string: six fraction digits, truncated."""
        text = self.formatted()
        return truncate_display(text) if text is not None else None
