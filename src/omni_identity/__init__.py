"""omni-identity public surface."""

from omni_identity.cbor import (
    IDENTITY_CBOR_TAG,
    cbor_default,
    cbor_tag_hook,
    decode_identity,
    decode_item,
    encode_identity,
)
from omni_identity.crypto.keys import (
    CryptographyPublicKey,
    KeySource,
    PublicKey,
    RawPublicKey,
    as_public_key,
    key_hash,
)
from omni_identity.errors import (
    IdentityDecodeError,
    IdentityTaggingRequiredError,
    InvalidIdentityError,
    InvalidIdentityKindError,
    InvalidIdentityPrefixError,
    KeyEncodingError,
    OmniIdentityError,
)
from omni_identity.identity import Identity
from omni_identity.key_identity import KeyIdentity
from omni_identity.layout import MAX_IDENTITY_BYTE_LEN, SHA_OUTPUT_SIZE, IdentityKind
from omni_identity.text import ANONYMOUS_TEXT

__all__ = [
    "Identity",
    "IdentityKind",
    "KeyIdentity",
    "MAX_IDENTITY_BYTE_LEN",
    "SHA_OUTPUT_SIZE",
    "ANONYMOUS_TEXT",
    "IDENTITY_CBOR_TAG",
    "encode_identity",
    "decode_identity",
    "decode_item",
    "cbor_default",
    "cbor_tag_hook",
    "PublicKey",
    "KeySource",
    "RawPublicKey",
    "CryptographyPublicKey",
    "as_public_key",
    "key_hash",
    "OmniIdentityError",
    "InvalidIdentityError",
    "InvalidIdentityKindError",
    "InvalidIdentityPrefixError",
    "IdentityDecodeError",
    "IdentityTaggingRequiredError",
    "KeyEncodingError",
]
