"""
Ledger access layer.

JSON-RPC client, ABI and block models, unit conversion and the faucet client
for HyperSDK-based chains. Uses httpx for HTTP and jsonschema to validate what
the node sends back.
"""
