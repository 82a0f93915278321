"""The identity value type.

An identity names an actor: the anonymous actor, the holder of a public key,
or a numbered subresource controlled by a public key. Identities are
immutable, hashable and compare by meaning rather than by raw bytes.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from omni_identity.crypto.keys import key_hash as _key_hash
from omni_identity.errors import InvalidIdentityError
from omni_identity.layout import (
    SHA_OUTPUT_SIZE,
    SUBRESOURCE_ID_MASK,
    IdentityKind,
    pack,
    pack_compact,
    unpack,
)
from omni_identity.text import decode_text, encode_text

logger = logging.getLogger(__name__)


@functools.total_ordering
@dataclass(frozen=True, eq=False, repr=False)
class Identity:
    """An anonymous, public-key or subresource identity.

    Build instances with :meth:`anonymous`, :meth:`public_key`,
    :meth:`subresource`, :meth:`from_bytes` or :meth:`from_text` rather than
    the field constructor. ``Identity()`` is the anonymous identity.
    """

    kind: IdentityKind = IdentityKind.ANONYMOUS
    key_hash: bytes | None = None
    subresource_id: int | None = None

    def __post_init__(self) -> None:
        if self.kind is IdentityKind.ANONYMOUS:
            if self.key_hash is not None or self.subresource_id is not None:
                raise InvalidIdentityError("anonymous identity carries no hash or id")
            return

        if self.key_hash is None or len(self.key_hash) != SHA_OUTPUT_SIZE:
            raise InvalidIdentityError(f"key hash must be {SHA_OUTPUT_SIZE} bytes")
        object.__setattr__(self, "key_hash", bytes(self.key_hash))

        if self.kind is IdentityKind.PUBLIC_KEY:
            if self.subresource_id is not None:
                raise InvalidIdentityError("public key identity carries no subresource id")
        elif self.subresource_id is None:
            raise InvalidIdentityError("subresource identity needs a subresource id")
        else:
            object.__setattr__(self, "subresource_id", self.subresource_id & SUBRESOURCE_ID_MASK)

    @classmethod
    def anonymous(cls) -> Identity:
        return cls()

    @classmethod
    def public_key(cls, key: object) -> Identity:
        """Identity controlled by ``key`` (a public key, private key or raw key bytes)."""
        return cls(IdentityKind.PUBLIC_KEY, _key_hash(key))

    @classmethod
    def subresource(cls, key: object, subresource_id: int) -> Identity:
        """Subresource ``subresource_id`` of the identity controlled by ``key``."""
        return cls(IdentityKind.SUBRESOURCE, _key_hash(key), subresource_id)

    @classmethod
    def from_bytes(cls, data: bytes | bytearray | memoryview) -> Identity:
        """Parse the compact encoding (1, 29 or 32 bytes depending on the tag)."""
        kind, key_hash, subresource_id = unpack(bytes(data))
        return cls(kind, key_hash, subresource_id)

    @classmethod
    def from_text(cls, value: str) -> Identity:
        """Parse identity text, rejecting anything that does not re-encode to ``value``."""
        identity = cls.from_bytes(decode_text(value))
        if identity.to_text() != value:
            logger.debug("rejected identity text: %r is not canonical", value)
            raise InvalidIdentityError(f"invalid identity text: {value!r}")
        return identity

    @classmethod
    def coerce(cls, value: object) -> Identity:
        """Accept an identity, identity text or compact identity bytes."""
        if isinstance(value, Identity):
            return value
        if isinstance(value, str):
            return cls.from_text(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return cls.from_bytes(value)
        raise InvalidIdentityError(f"cannot build an identity from {type(value).__name__}")

    @property
    def is_anonymous(self) -> bool:
        return self.kind is IdentityKind.ANONYMOUS

    @property
    def is_public_key(self) -> bool:
        return self.kind is IdentityKind.PUBLIC_KEY

    @property
    def is_subresource(self) -> bool:
        return self.kind is IdentityKind.SUBRESOURCE

    @property
    def can_sign(self) -> bool:
        return self.is_public_key or self.is_subresource

    @property
    def can_be_source(self) -> bool:
        return self.is_anonymous or self.is_public_key or self.is_subresource

    @property
    def can_be_dest(self) -> bool:
        return self.is_public_key or self.is_subresource

    def with_subresource_id(self, subresource_id: int) -> Identity:
        """Subresource of this identity's key; anonymous stays anonymous."""
        if self.key_hash is None:
            return Identity.anonymous()
        return Identity(IdentityKind.SUBRESOURCE, self.key_hash, subresource_id)

    def matches_key(self, key: object | None) -> bool:
        """Whether ``key`` controls this identity.

        Anonymous matches only the absence of a key. Public key and
        subresource identities match a key whose hash equals their hash, so
        every subresource matches its parent key.
        """
        if self.is_anonymous:
            return key is None
        if key is None:
            return False
        return self.key_hash == _key_hash(key)

    def to_bytes(self) -> bytes:
        """Compact encoding, used on the wire and in the text form."""
        return pack_compact(self.kind, self.key_hash, self.subresource_id)

    def to_byte_array(self) -> bytes:
        """Full 32-byte canonical layout, e.g. for use as a fixed-size storage key."""
        return pack(self.kind, self.key_hash, self.subresource_id)

    def to_text(self) -> str:
        return self._text

    @cached_property
    def _text(self) -> str:
        return encode_text(self.to_bytes())

    def __str__(self) -> str:
        return self.to_text()

    def __repr__(self) -> str:
        if self.is_subresource:
            label = f"subresource({self.subresource_id})"
        else:
            label = self.kind.value
        return f"Identity({label}, {self.to_text()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            return self.to_text() == other
        if not isinstance(other, Identity):
            return NotImplemented
        return (self.kind, self.key_hash, self.subresource_id) == (
            other.kind,
            other.key_hash,
            other.subresource_id,
        )

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return self.to_byte_array() < other.to_byte_array()

    def __hash__(self) -> int:
        # Identities equal their text, so they must hash like it.
        return hash(self.to_text())

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Text in JSON, compact bytes in python (binary) mode."""

        def serialize(value: Identity, info: core_schema.SerializationInfo) -> str | bytes:
            if info.mode_is_json():
                return value.to_text()
            return value.to_bytes()

        return core_schema.json_or_python_schema(
            json_schema=core_schema.no_info_after_validator_function(
                cls.from_text, core_schema.str_schema()
            ),
            python_schema=core_schema.no_info_plain_validator_function(cls.coerce),
            serialization=core_schema.plain_serializer_function_ser_schema(
                serialize, info_arg=True
            ),
        )
