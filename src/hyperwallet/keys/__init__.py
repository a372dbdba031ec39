"""Signer interface, Ed25519 keys and signer connection events."""
