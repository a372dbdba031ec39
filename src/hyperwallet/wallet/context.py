"""Application-level wallet state handed explicitly to the parts that need it."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..keys.signer import SIGNER_CONNECTED, Signer, SignerEvents, address_from_public_key
from ..ledger.units import convert_to_native_tokens

logger = logging.getLogger(__name__)

# Below this much native token the faucet is offered
DEFAULT_MIN_BALANCE = "1"


@dataclass
class WalletContext:
    """Connected identity and whether it can pay for transactions.

    ``has_spendable_balance`` is derived from the last balance reported via
    ``update_balance``; it stays False until a balance is known.
    """

    events: SignerEvents = field(default_factory=SignerEvents)
    min_balance: int = field(default_factory=lambda: convert_to_native_tokens(DEFAULT_MIN_BALANCE))
    address: str = ""
    balance: Optional[int] = None

    def __post_init__(self) -> None:
        self.events.on(SIGNER_CONNECTED, self._on_signer)
        if self.events.signer is not None:
            self._on_signer(self.events.signer)

    @property
    def connected(self) -> bool:
        return bool(self.address)

    @property
    def has_spendable_balance(self) -> bool:
        return self.balance is not None and self.balance >= self.min_balance

    def _on_signer(self, signer: Optional[Signer]) -> None:
        if signer is None:
            self.address = ""
            self.balance = None
            return
        self.address = address_from_public_key(signer.public_key)

    def update_balance(self, amount: Optional[int]) -> None:
        self.balance = amount
        if amount is not None and not self.has_spendable_balance:
            logger.info("Balance of %s is below %s base units", self.address, self.min_balance)
