"""Keys paired with the identities they control."""

from __future__ import annotations

from dataclasses import dataclass

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.serialization import load_pem_private_key, load_pem_public_key

from omni_identity.crypto.keys import PublicKey, as_public_key
from omni_identity.errors import KeyEncodingError
from omni_identity.identity import Identity


@dataclass(frozen=True)
class KeyIdentity:
    identity: Identity
    key: PublicKey | None = None

    @classmethod
    def anonymous(cls) -> KeyIdentity:
        return cls(identity=Identity.anonymous())

    @classmethod
    def from_key(cls, key: object, subresource_id: int | None = None) -> KeyIdentity:
        public_key = as_public_key(key)
        if subresource_id is None:
            identity = Identity.public_key(public_key)
        else:
            identity = Identity.subresource(public_key, subresource_id)
        return cls(identity=identity, key=public_key)

    @classmethod
    def from_pem(cls, pem: str | bytes, password: bytes | None = None) -> KeyIdentity:
        """Load a PEM private or public key."""
        try:
            data = pem.encode("ascii") if isinstance(pem, str) else pem
            if b"PRIVATE KEY" in data:
                key = load_pem_private_key(data, password=password)
            else:
                key = load_pem_public_key(data)
        except (TypeError, ValueError, UnsupportedAlgorithm) as exc:
            raise KeyEncodingError(f"invalid PEM key: {exc}") from exc
        return cls.from_key(key)

    def with_subresource_id(self, subresource_id: int) -> KeyIdentity:
        return KeyIdentity(identity=self.identity.with_subresource_id(subresource_id), key=self.key)

    def matches(self, identity: Identity) -> bool:
        return identity.matches_key(self.key)

    def __str__(self) -> str:
        return str(self.identity)
