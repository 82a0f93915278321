"""Canonical identity byte layout.

Every identity packs into a 32-byte buffer whose first byte is the tag:

- ``0x00``: anonymous, the remaining bytes are zero.
- ``0x01``: public key, bytes 1..28 hold the SHA3-224 key hash and the
  last three bytes are zero padding.
- ``0x80..0xFF``: subresource, bytes 1..28 hold the parent key hash. The
  31-bit subresource id is split: bits 24..30 live in the low 7 bits of the
  tag, bits 0..23 in the last three bytes (big-endian).

The compact form drops whatever carries no information: 1 byte for
anonymous, 29 for a public key, the full 32 for a subresource.
"""

from __future__ import annotations

import logging
from enum import Enum

from omni_identity.errors import InvalidIdentityError, InvalidIdentityKindError

logger = logging.getLogger(__name__)

MAX_IDENTITY_BYTE_LEN = 32
SHA_OUTPUT_SIZE = 28

ANONYMOUS_TAG = 0x00
PUBLIC_KEY_TAG = 0x01
SUBRESOURCE_TAG = 0x80
SUBRESOURCE_ID_MASK = 0x7FFFFFFF

ANONYMOUS_BYTE_LEN = 1
PUBLIC_KEY_BYTE_LEN = 1 + SHA_OUTPUT_SIZE
SUBRESOURCE_BYTE_LEN = MAX_IDENTITY_BYTE_LEN

_PADDING_LEN = MAX_IDENTITY_BYTE_LEN - PUBLIC_KEY_BYTE_LEN


class IdentityKind(str, Enum):
    ANONYMOUS = "anonymous"
    PUBLIC_KEY = "public-key"
    SUBRESOURCE = "subresource"


_COMPACT_LENGTHS = {
    IdentityKind.ANONYMOUS: ANONYMOUS_BYTE_LEN,
    IdentityKind.PUBLIC_KEY: PUBLIC_KEY_BYTE_LEN,
    IdentityKind.SUBRESOURCE: SUBRESOURCE_BYTE_LEN,
}


def kind_of_tag(tag: int) -> IdentityKind:
    """Map a tag byte to its identity kind, rejecting unassigned tags."""
    if tag == ANONYMOUS_TAG:
        return IdentityKind.ANONYMOUS
    if tag == PUBLIC_KEY_TAG:
        return IdentityKind.PUBLIC_KEY
    if SUBRESOURCE_TAG <= tag <= 0xFF:
        return IdentityKind.SUBRESOURCE
    raise InvalidIdentityKindError(tag)


def compact_length(kind: IdentityKind) -> int:
    return _COMPACT_LENGTHS[kind]


def subresource_tag(subresource_id: int) -> int:
    return SUBRESOURCE_TAG | ((subresource_id >> 24) & 0x7F)


def pack(kind: IdentityKind, key_hash: bytes | None, subresource_id: int | None) -> bytes:
    """Build the full 32-byte canonical layout."""
    if kind is IdentityKind.ANONYMOUS:
        return bytes(MAX_IDENTITY_BYTE_LEN)

    if key_hash is None or len(key_hash) != SHA_OUTPUT_SIZE:
        raise InvalidIdentityError(f"key hash must be {SHA_OUTPUT_SIZE} bytes")
    if kind is IdentityKind.PUBLIC_KEY:
        return bytes([PUBLIC_KEY_TAG]) + key_hash + bytes(_PADDING_LEN)

    if subresource_id is None:
        raise InvalidIdentityError("subresource identity needs a subresource id")
    subresource_id &= SUBRESOURCE_ID_MASK
    return (
        bytes([subresource_tag(subresource_id)])
        + key_hash
        + (subresource_id & 0x00FFFFFF).to_bytes(3, "big")
    )


def pack_compact(kind: IdentityKind, key_hash: bytes | None, subresource_id: int | None) -> bytes:
    """Build the shortest valid encoding for ``kind``."""
    return pack(kind, key_hash, subresource_id)[: compact_length(kind)]


def unpack(data: bytes) -> tuple[IdentityKind, bytes | None, int | None]:
    """Parse a compact encoding into ``(kind, key_hash, subresource_id)``.

    The length must be exactly the compact length of the kind selected by the
    tag byte; nothing is truncated or padded.
    """
    if not data:
        logger.debug("rejected identity bytes: empty input")
        raise InvalidIdentityError("identity bytes must not be empty")

    tag = data[0]
    try:
        kind = kind_of_tag(tag)
    except InvalidIdentityKindError:
        logger.debug("rejected identity bytes: unassigned tag 0x%02x", tag)
        raise

    expected = compact_length(kind)
    if len(data) != expected:
        logger.debug(
            "rejected identity bytes: %s needs %d bytes, got %d", kind.value, expected, len(data)
        )
        raise InvalidIdentityError(
            f"{kind.value} identity must be {expected} bytes, got {len(data)}"
        )

    if kind is IdentityKind.ANONYMOUS:
        return kind, None, None

    key_hash = bytes(data[1 : 1 + SHA_OUTPUT_SIZE])
    if kind is IdentityKind.PUBLIC_KEY:
        return kind, key_hash, None

    subresource_id = int.from_bytes(bytes([tag & 0x7F]) + bytes(data[1 + SHA_OUTPUT_SIZE :]), "big")
    return kind, key_hash, subresource_id
