"""
Command implementations for the hyperwallet CLI.

Each module corresponds to a top-level command:
- keygen:  Create a local Ed25519 key
- abi:     List the ledger's actions and their fields
- action:  Fill in and run one action (read-only or submitted)
- balance: Show an account balance
- blocks:  Follow newly produced blocks
- faucet:  Request test funds
"""
