"""
Wallet core: ABI-driven action forms, execution, balances and the block feed.

Modules:
- defaults: field type classification and initial values
- codec:    display <-> wire conversion
- form:     per-action dual field state
- executor: read-only / submit execution with a timestamped log
- balance:  balance state for one address and asset
- feed:     bounded live block feed
- context:  connected identity and spendable-balance flag
- session:  wiring of the above for one ledger
"""
