"""Checksummed textual identity codec.

Text format: ``o`` + lowercase unpadded base32 of the compact identity bytes
+ the first two lowercase base32 characters of the big-endian CRC-16/ARC of
those bytes. The anonymous identity is the fixed literal ``oaa``.
"""

from __future__ import annotations

import base64
import logging

from omni_identity.errors import InvalidIdentityError, InvalidIdentityPrefixError

logger = logging.getLogger(__name__)

IDENTITY_TEXT_PREFIX = "o"
ANONYMOUS_TEXT = "oaa"
CHECKSUM_TEXT_LEN = 2

_ANONYMOUS_COMPACT = b"\x00"


def crc16(data: bytes) -> int:
    """CRC-16/ARC: reflected polynomial 0x8005, zero init, no final xor."""
    crc = 0
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 1:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc


def b32encode_lower(data: bytes) -> str:
    return base64.b32encode(data).decode("ascii").rstrip("=").lower()


def b32decode_lower(data: str) -> bytes:
    padding = "=" * (-len(data) % 8)
    try:
        return base64.b32decode(data + padding, casefold=True)
    except ValueError as exc:  # binascii.Error or non-ASCII input
        raise InvalidIdentityError("identity text is not valid base32") from exc


def checksum_text(data: bytes) -> str:
    return b32encode_lower(crc16(data).to_bytes(2, "big"))[:CHECKSUM_TEXT_LEN]


def encode_text(compact: bytes) -> str:
    """Render compact identity bytes as identity text."""
    if compact == _ANONYMOUS_COMPACT:
        return ANONYMOUS_TEXT
    return f"{IDENTITY_TEXT_PREFIX}{b32encode_lower(compact)}{checksum_text(compact)}"


def decode_text(value: str) -> bytes:
    """Extract the compact bytes carried by identity text.

    Only the prefix and the base32 body are checked here. Callers must parse
    the bytes and compare the re-encoded text with ``value``; that round trip
    is what validates the checksum and rejects non-canonical spellings.
    """
    if not value.startswith(IDENTITY_TEXT_PREFIX):
        logger.debug("rejected identity text: missing %r prefix", IDENTITY_TEXT_PREFIX)
        raise InvalidIdentityPrefixError(value)

    if value == ANONYMOUS_TEXT:
        return _ANONYMOUS_COMPACT

    if len(value) <= len(IDENTITY_TEXT_PREFIX) + CHECKSUM_TEXT_LEN:
        logger.debug("rejected identity text: too short (%d chars)", len(value))
        raise InvalidIdentityError("identity text is too short")

    body = value[len(IDENTITY_TEXT_PREFIX) : -CHECKSUM_TEXT_LEN]
    return b32decode_lower(body)
