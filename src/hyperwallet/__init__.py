__all__ = [
    # Errors
    "WalletError",
    "CodecError",
    "ExecutionError",
    "FetchError",
    "SubscriptionError",
    # Ledger
    "ABI",
    "ActionDef",
    "FieldDef",
    "TypeDef",
    "Block",
    "ExecutionResult",
    "Transaction",
    "LedgerClient",
    "FaucetClient",
    "parse_abi",
    "parse_block",
    "format_native_tokens",
    "convert_to_native_tokens",
    # Keys
    "LocalSigner",
    "Signer",
    "SignerEvents",
    "address_from_public_key",
    # Wallet core
    "FieldKind",
    "classify",
    "resolve_default",
    "to_display",
    "to_encoded",
    "ActionFormState",
    "ActionExecutor",
    "ExecutionMode",
    "ExecutionOutcome",
    "LogEntry",
    "BalanceReader",
    "BalanceState",
    "BlockBuffer",
    "BlockFeed",
    "BlockSubscription",
    "WalletContext",
]

from .errors import CodecError, ExecutionError, FetchError, SubscriptionError, WalletError
from .keys.signer import LocalSigner, Signer, SignerEvents, address_from_public_key
from .ledger.abi import ABI, ActionDef, FieldDef, TypeDef, parse_abi
from .ledger.blocks import Block, ExecutionResult, Transaction, parse_block
from .ledger.faucet import FaucetClient
from .ledger.rpc import LedgerClient
from .ledger.units import convert_to_native_tokens, format_native_tokens
from .wallet.balance import BalanceReader, BalanceState
from .wallet.codec import to_display, to_encoded
from .wallet.context import WalletContext
from .wallet.defaults import FieldKind, classify, resolve_default
from .wallet.executor import ActionExecutor, ExecutionMode, ExecutionOutcome, LogEntry
from .wallet.feed import BlockBuffer, BlockFeed, BlockSubscription
from .wallet.form import ActionFormState
