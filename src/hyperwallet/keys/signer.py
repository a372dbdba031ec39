"""
Ed25519 key management and the signer interface.

The wallet never implements a signing scheme of its own: transactions are
handed to whatever object satisfies ``Signer``. ``LocalSigner`` is the
implementation used by the CLI, backed by a key stored in
``~/.hyperwallet/.env`` as PRIVATE_KEY (hex, 32-byte Ed25519 seed).

Addresses are the ed25519 auth type id (``0x00``) followed by the SHA-256 of
the public key, hex encoded without a prefix.
"""

from __future__ import annotations

import logging
import os
import secrets
from pathlib import Path
from typing import Any, Callable, Optional, Protocol

import rfc8785
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from dotenv import load_dotenv, set_key

from ..config import HYPERWALLET_ENV
from ..utils import sha256_hex

logger = logging.getLogger(__name__)

ED25519_ID = 0x00
SIGNER_CONNECTED = "signerConnected"


class Signer(Protocol):
    @property
    def public_key(self) -> bytes:
        ...

    def sign(self, message: bytes) -> bytes:
        ...


def address_from_public_key(public_key: bytes, type_id: int = ED25519_ID) -> str:
    if len(public_key) != 32:
        raise ValueError(f"Expected a 32-byte public key, got {len(public_key)} bytes")
    return f"{type_id:02x}" + sha256_hex(public_key)


def signing_payload(actions: list[dict[str, Any]]) -> bytes:
    """Canonical bytes a signer commits to for a list of actions (RFC 8785 JCS)."""
    return rfc8785.dumps({"actions": actions})


class LocalSigner:
    """Signer backed by an in-process Ed25519 private key."""

    def __init__(self, private_key: Ed25519PrivateKey) -> None:
        self._key = private_key

    @classmethod
    def from_hex(cls, private_key_hex: str) -> "LocalSigner":
        seed = bytes.fromhex(private_key_hex.removeprefix("0x"))
        if len(seed) != 32:
            raise ValueError("PRIVATE_KEY must be a 32-byte hex Ed25519 seed")
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @property
    def public_key(self) -> bytes:
        return self._key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    @property
    def address(self) -> str:
        return address_from_public_key(self.public_key)

    def sign(self, message: bytes) -> bytes:
        return self._key.sign(message)


def verify_signature(public_key: bytes, signature: bytes, message: bytes) -> bool:
    try:
        Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
    except InvalidSignature:
        return False
    return True


def generate_key() -> tuple[str, str]:
    """
    Generate a new Ed25519 key.

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = secrets.token_hex(32)
    return private_key, LocalSigner.from_hex(private_key).address


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Store an Ed25519 seed as PRIVATE_KEY in the wallet .env file.

    The seed is checked before anything is written. Other entries and
    comments in the file are left as they are.

    Raises:
        ValueError: If ``private_key`` is not a 32-byte hex seed
    """
    seed = private_key.removeprefix("0x")
    signer = LocalSigner.from_hex(seed)

    env_path = env_path or HYPERWALLET_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(mode=0o600, exist_ok=True)
    set_key(str(env_path), "PRIVATE_KEY", seed, quote_mode="never")

    if os.name != "nt":
        env_path.chmod(0o600)
    logger.info("Saved key for %s to %s", signer.address, env_path)
    return env_path


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from the .env file or the environment.

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or HYPERWALLET_ENV

    if env_path.exists():
        load_dotenv(env_path, override=True)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY not found. Run 'hyperwallet keygen' or set "
            f"PRIVATE_KEY in {env_path}"
        )
    return private_key.removeprefix("0x")


def load_signer(env_path: Optional[Path] = None) -> LocalSigner:
    return LocalSigner.from_hex(load_private_key(env_path))


SignerListener = Callable[[Optional[Signer]], None]


class SignerEvents:
    """Named-event hub announcing signer connection changes.

    Listeners of ``signerConnected`` receive the signer, or ``None`` when the
    signer disconnects.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[SignerListener]] = {}
        self._signer: Optional[Signer] = None

    @property
    def signer(self) -> Optional[Signer]:
        return self._signer

    def on(self, event: str, listener: SignerListener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: str, listener: SignerListener) -> None:
        listeners = self._listeners.get(event, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event: str, value: Optional[Signer]) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(value)

    def connect(self, signer: Signer) -> None:
        self._signer = signer
        logger.info("Signer connected: %s", address_from_public_key(signer.public_key))
        self.emit(SIGNER_CONNECTED, signer)

    def disconnect(self) -> None:
        self._signer = None
        logger.info("Signer disconnected")
        self.emit(SIGNER_CONNECTED, None)
