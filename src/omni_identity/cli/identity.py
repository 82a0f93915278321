"""Local key file management for the omni-identity CLI."""

from __future__ import annotations

import os
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat

from omni_identity.errors import KeyEncodingError
from omni_identity.key_identity import KeyIdentity


class IdentityError(ValueError):
    """Raised when key material is invalid or cannot be loaded."""


def _chmod_owner_only(path: Path) -> None:
    if os.name != "posix":
        return
    path.chmod(0o600)


def load_key_identity(path: str | Path) -> KeyIdentity:
    key_path = Path(path)
    try:
        pem = key_path.read_bytes()
    except OSError as exc:
        raise IdentityError(f"cannot read key file: {key_path}") from exc

    try:
        return KeyIdentity.from_pem(pem)
    except KeyEncodingError as exc:
        raise IdentityError(f"invalid key file: {key_path}") from exc


def _create_key_identity(path: Path) -> KeyIdentity:
    path.parent.mkdir(parents=True, exist_ok=True)

    private = Ed25519PrivateKey.generate()
    pem = private.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    path.write_bytes(pem)
    _chmod_owner_only(path)
    return KeyIdentity.from_key(private)


def load_or_create_key_identity(path: str | Path) -> tuple[KeyIdentity, bool]:
    key_path = Path(path)
    if key_path.exists():
        return load_key_identity(key_path), False
    return _create_key_identity(key_path), True
