"""Public key collaborator used to derive and match identities.

An identity never stores key material. Derivation only needs a stable byte
encoding of the public key, which is hashed with SHA3-224.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import cbor2
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa, x448, x25519
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from omni_identity.errors import KeyEncodingError

COSE_KEY_KTY = 1
COSE_KEY_ALG = 3
COSE_KEY_OPS = 4
COSE_OKP_CRV = -1
COSE_OKP_X = -2
COSE_KTY_OKP = 1
COSE_ALG_EDDSA = -8
COSE_KEY_OP_VERIFY = 2
COSE_CRV_ED25519 = 6

_RAW_PUBLIC_KEY_TYPES = (
    ed25519.Ed25519PublicKey,
    ed448.Ed448PublicKey,
    x25519.X25519PublicKey,
    x448.X448PublicKey,
)
_SPKI_PUBLIC_KEY_TYPES = (ec.EllipticCurvePublicKey, rsa.RSAPublicKey)
_PRIVATE_KEY_TYPES = (
    ed25519.Ed25519PrivateKey,
    ed448.Ed448PrivateKey,
    x25519.X25519PrivateKey,
    x448.X448PrivateKey,
    ec.EllipticCurvePrivateKey,
    rsa.RSAPrivateKey,
)


@runtime_checkable
class PublicKey(Protocol):
    def to_deterministic_bytes(self) -> bytes:
        """Return an encoding that is identical for every call on the same key."""
        ...


@runtime_checkable
class KeySource(Protocol):
    def to_public_key(self) -> PublicKey:
        ...


@dataclass(frozen=True)
class RawPublicKey:
    """Public key already given as its deterministic byte encoding."""

    data: bytes

    def to_deterministic_bytes(self) -> bytes:
        return self.data


@dataclass(frozen=True)
class CryptographyPublicKey:
    """Adapter over a ``cryptography`` public key.

    Ed25519 keys use their canonical CBOR COSE_Key encoding, so identities
    agree with other implementations of the format. Other Edwards and
    Montgomery keys use their raw encoding; EC and RSA keys use DER
    SubjectPublicKeyInfo, which is canonical for a given key.
    """

    key: Any

    def to_deterministic_bytes(self) -> bytes:
        try:
            if isinstance(self.key, ed25519.Ed25519PublicKey):
                return cose_key_bytes(self.key.public_bytes(Encoding.Raw, PublicFormat.Raw))
            if isinstance(self.key, _RAW_PUBLIC_KEY_TYPES):
                return self.key.public_bytes(Encoding.Raw, PublicFormat.Raw)
            return self.key.public_bytes(Encoding.DER, PublicFormat.SubjectPublicKeyInfo)
        except (TypeError, ValueError) as exc:
            raise KeyEncodingError(f"cannot encode public key: {exc}") from exc


def cose_key_bytes(ed25519_public_key: bytes) -> bytes:
    """Canonical CBOR COSE_Key for an Ed25519 verification key (RFC 8152)."""
    return cbor2.dumps(
        {
            COSE_KEY_KTY: COSE_KTY_OKP,
            COSE_KEY_ALG: COSE_ALG_EDDSA,
            COSE_KEY_OPS: [COSE_KEY_OP_VERIFY],
            COSE_OKP_CRV: COSE_CRV_ED25519,
            COSE_OKP_X: ed25519_public_key,
        },
        canonical=True,
    )


def as_public_key(key: object) -> PublicKey:
    """Normalize a key-like object into a :class:`PublicKey`.

    Accepts ``PublicKey`` and ``KeySource`` implementations, ``cryptography``
    private or public keys, and raw public key bytes.
    """
    if isinstance(key, PublicKey):
        return key
    if isinstance(key, KeySource):
        return as_public_key(key.to_public_key())
    if isinstance(key, (bytes, bytearray, memoryview)):
        return RawPublicKey(bytes(key))
    if isinstance(key, _RAW_PUBLIC_KEY_TYPES + _SPKI_PUBLIC_KEY_TYPES):
        return CryptographyPublicKey(key)
    if isinstance(key, _PRIVATE_KEY_TYPES):
        return CryptographyPublicKey(key.public_key())
    raise KeyEncodingError(f"unsupported key type: {type(key).__name__}")


def key_hash(key: object) -> bytes:
    """SHA3-224 digest of the key's deterministic public encoding."""
    return hashlib.sha3_224(as_public_key(key).to_deterministic_bytes()).digest()
