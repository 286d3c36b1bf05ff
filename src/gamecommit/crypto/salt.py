"""Salt generation for commitments.

Two strategies, both producing exactly SALT_LENGTH bytes:

1. Random: drawn from the OS CSPRNG. Never reuse a random salt across
   two records; shared salts let an observer correlate commitments.
2. Text: a human-chosen string, UTF-8 encoded, truncated to 32 bytes or
   right-padded with zero bytes. Deterministic and reproducible from the
   text alone, at the cost of entropy.
"""

from __future__ import annotations

import secrets

SALT_LENGTH = 32


class SaltError(ValueError):
    """A salt does not have the fixed length the contract expects."""


def random_salt() -> bytes:
    """Draw a fresh 32-byte salt from the OS CSPRNG."""
    return secrets.token_bytes(SALT_LENGTH)


def text_salt(text: str) -> bytes:
    """Encode a text salt as 32 bytes.

    Encodings of 32 bytes or more keep only the first 32 (silently);
    shorter encodings are zero-padded on the right. A multi-byte UTF-8
    character straddling the boundary is cut mid-sequence, exactly as
    the contract-side tooling does.
    """
    encoded = text.encode("utf-8")[:SALT_LENGTH]
    return encoded.ljust(SALT_LENGTH, b"\x00")


def salt_from_hex(value: str) -> bytes:
    """Parse a hex salt (optional 0x prefix) as stored in artifacts."""
    raw = value.strip()
    if raw[:2].lower() == "0x":
        raw = raw[2:]
    try:
        salt = bytes.fromhex(raw)
    except ValueError as exc:
        raise SaltError(f"Salt is not valid hex: {exc}") from exc
    return ensure_salt(salt)


def ensure_salt(salt: bytes) -> bytes:
    """Return `salt` as bytes, or raise SaltError if it is not 32 bytes."""
    if not isinstance(salt, (bytes, bytearray, memoryview)):
        raise SaltError(f"Salt must be bytes, got {type(salt).__name__}")
    salt = bytes(salt)
    if len(salt) != SALT_LENGTH:
        raise SaltError(f"Salt must be {SALT_LENGTH} bytes, got {len(salt)}")
    return salt
