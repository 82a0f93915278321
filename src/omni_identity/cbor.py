"""CBOR wire codec for identities.

On the wire an identity is the compact byte encoding wrapped in the private
CBOR tag 10000. Decoders also accept a bare identity text string, with or
without tags in front of it.
"""

from __future__ import annotations

import logging
from typing import Any

import cbor2
from cbor2 import CBORDecodeError, CBORTag

from omni_identity.errors import (
    IdentityDecodeError,
    IdentityTaggingRequiredError,
    OmniIdentityError,
)
from omni_identity.identity import Identity

logger = logging.getLogger(__name__)

IDENTITY_CBOR_TAG = 10000

_MAJOR_TYPE_TAG = 6
_ARGUMENT_SIZES = {24: 1, 25: 2, 26: 4, 27: 8}


def to_cbor_item(identity: Identity) -> CBORTag:
    return CBORTag(IDENTITY_CBOR_TAG, identity.to_bytes())


def encode_identity(identity: Identity) -> bytes:
    """Encode ``identity`` as a tagged CBOR byte string."""
    return cbor2.dumps(to_cbor_item(identity))


def decode_item(item: Any) -> Identity:
    """Decode an identity from an already-parsed CBOR item.

    Leading tags are unwrapped; the identity tag must be among them unless
    the payload is a text string.
    """
    tagged = False
    while isinstance(item, CBORTag):
        if item.tag == IDENTITY_CBOR_TAG:
            tagged = True
        item = item.value

    if isinstance(item, Identity):
        return item

    try:
        if isinstance(item, str):
            return Identity.from_text(item)
        if not tagged:
            logger.debug("rejected identity item: untagged %s", type(item).__name__)
            raise IdentityTaggingRequiredError()
        if not isinstance(item, (bytes, bytearray)):
            raise IdentityDecodeError(f"expected identity bytes, got {type(item).__name__}")
        return Identity.from_bytes(item)
    except IdentityDecodeError:
        raise
    except OmniIdentityError as exc:
        raise IdentityDecodeError("could not decode identity from bytes") from exc


def _skip_leading_tags(data: bytes) -> tuple[bool, int]:
    """Walk the tag headers in front of the payload without interpreting them.

    Returns whether the identity tag was among them and the payload offset.
    """
    tagged = False
    offset = 0
    while offset < len(data) and data[offset] >> 5 == _MAJOR_TYPE_TAG:
        info = data[offset] & 0x1F
        offset += 1
        if info < 24:
            tag = info
        elif info in _ARGUMENT_SIZES:
            size = _ARGUMENT_SIZES[info]
            if offset + size > len(data):
                raise IdentityDecodeError("malformed CBOR: truncated tag")
            tag = int.from_bytes(data[offset : offset + size], "big")
            offset += size
        else:
            raise IdentityDecodeError(f"malformed CBOR: invalid tag header 0x{info:02x}")
        if tag == IDENTITY_CBOR_TAG:
            tagged = True
    return tagged, offset


def decode_identity(data: bytes) -> Identity:
    """Decode a single CBOR-encoded identity.

    Leading tags are skipped on the raw bytes, so tags that cbor2 would
    otherwise interpret (dates, bignums, UUIDs) never touch the payload.
    """
    data = bytes(data)
    tagged, offset = _skip_leading_tags(data)
    try:
        item = cbor2.loads(data[offset:])
    except CBORDecodeError as exc:
        logger.debug("rejected identity item: malformed CBOR (%s)", exc)
        raise IdentityDecodeError(f"malformed CBOR: {exc}") from exc
    if tagged:
        item = CBORTag(IDENTITY_CBOR_TAG, item)
    return decode_item(item)


def cbor_default(encoder: Any, value: Any) -> None:
    """``default`` hook so identities can be nested in larger CBOR messages."""
    if not isinstance(value, Identity):
        raise TypeError(f"cannot serialize type {type(value).__name__}")
    encoder.encode(to_cbor_item(value))


def cbor_tag_hook(decoder: Any, tag: CBORTag) -> Any:
    """``tag_hook`` turning tag-10000 items back into identities."""
    if tag.tag != IDENTITY_CBOR_TAG:
        return tag
    return decode_item(tag)


def dumps(obj: Any, **kwargs: Any) -> bytes:
    """``cbor2.dumps`` with identity support."""
    return cbor2.dumps(obj, default=cbor_default, **kwargs)


def loads(data: bytes, **kwargs: Any) -> Any:
    """``cbor2.loads`` mapping tag-10000 items to :class:`Identity`."""
    return cbor2.loads(data, tag_hook=cbor_tag_hook, **kwargs)
