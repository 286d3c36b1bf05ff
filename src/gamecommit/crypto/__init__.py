"""Cryptographic primitives — salts and keccak-256 commitments."""

from gamecommit.crypto.commitment_builder import (
    EncodingError,
    build_commitment,
    build_record,
    verify_commitment,
)
from gamecommit.crypto.salt import SALT_LENGTH, random_salt, text_salt

__all__ = [
    "EncodingError",
    "build_commitment",
    "build_record",
    "verify_commitment",
    "SALT_LENGTH",
    "random_salt",
    "text_salt",
]
