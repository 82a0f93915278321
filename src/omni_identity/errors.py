"""Identity error types."""

from __future__ import annotations


class OmniIdentityError(ValueError):
    """Base identity error."""


class InvalidIdentityError(OmniIdentityError):
    """Identity bytes or text are malformed."""

    def __init__(self, message: str = "invalid identity") -> None:
        super().__init__(message)


class InvalidIdentityKindError(OmniIdentityError):
    """Tag byte does not select any identity kind."""

    def __init__(self, kind: int) -> None:
        super().__init__(f"invalid identity kind: {kind}")
        self.kind = kind


class InvalidIdentityPrefixError(OmniIdentityError):
    """Textual identity does not start with the identity prefix."""

    def __init__(self, text: str) -> None:
        super().__init__(f"invalid identity prefix: {text[:1]!r}")
        self.text = text


class IdentityDecodeError(OmniIdentityError):
    """Wire item could not be decoded into an identity."""


class IdentityTaggingRequiredError(IdentityDecodeError):
    """Byte-string identity was not marked with the identity tag."""

    def __init__(self) -> None:
        super().__init__("identities need to be tagged")


class KeyEncodingError(OmniIdentityError):
    """Key collaborator could not produce a deterministic public key encoding."""
