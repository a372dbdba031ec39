"""Exception taxonomy shared by the ledger client and the wallet core."""

from __future__ import annotations


class WalletError(Exception):
    pass


class CodecError(WalletError, ValueError):
    """A wire-encoded field value could not be decoded."""


class ExecutionError(WalletError):
    """The ledger rejected a simulation or a submitted transaction."""


class FetchError(WalletError):
    """A balance, ABI, block or faucet request failed."""


class SubscriptionError(WalletError):
    """Subscribing to, or unsubscribing from, the block stream failed."""
