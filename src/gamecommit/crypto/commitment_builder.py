"""Commitment builder — encodes game facts and hashes them with the salt.

Preimage layout, identical to the contracts' compute_commitment():

    BE32(facts[0]) || BE32(facts[1]) || ... || salt (32 bytes)

Scene: 4 + 4 + 32 = 40 bytes. Case: 4 + 4 + 4 + 32 = 44 bytes.
The preimage is hashed with keccak-256; the 32-byte output is the
commitment. The builder is pure: no I/O, no randomness, and the same
(facts, salt) always yields the same digest.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence, Union

from web3 import Web3

from gamecommit.crypto.salt import SaltError, ensure_salt
from gamecommit.models.commitment import CommitmentRecord, GameMode

U32_MAX = 2**32 - 1
DIGEST_LENGTH = 32


class EncodingError(ValueError):
    """A value cannot be encoded into the commitment preimage."""


def encode_u32(value: int, name: str = "value") -> bytes:
    """Encode an unsigned 32-bit integer as 4 big-endian bytes."""
    # bool is an int subclass; True must not silently commit as 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise EncodingError(f"{name} must be an integer, got {type(value).__name__}")
    if not 0 <= value <= U32_MAX:
        raise EncodingError(f"{name} out of u32 range: {value}")
    return value.to_bytes(4, "big")


def encode_preimage(facts: Iterable[int], salt: bytes) -> bytes:
    """Concatenate the big-endian facts and the salt.

    Every fact and the salt are validated before anything is assembled.
    """
    encoded = [encode_u32(f, name=f"facts[{i}]") for i, f in enumerate(facts)]
    try:
        salt = ensure_salt(salt)
    except SaltError as exc:
        raise EncodingError(str(exc)) from exc
    return b"".join(encoded) + salt


def keccak256(data: bytes) -> bytes:
    return bytes(Web3.keccak(data))


def build_commitment(facts: Sequence[int], salt: bytes) -> bytes:
    """Compute the 32-byte commitment digest for `facts` and `salt`."""
    return keccak256(encode_preimage(facts, salt))


def digest_hex(digest: bytes) -> str:
    """Render a digest as 64 lowercase hex characters, no prefix."""
    if len(digest) != DIGEST_LENGTH:
        raise EncodingError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(digest)}")
    return bytes(digest).hex()


def parse_digest(value: Union[str, bytes]) -> bytes:
    """Accept a digest as raw bytes or hex (optional 0x prefix)."""
    if isinstance(value, str):
        raw = value.strip()
        if raw[:2].lower() == "0x":
            raw = raw[2:]
        try:
            value = bytes.fromhex(raw)
        except ValueError as exc:
            raise EncodingError(f"Digest is not valid hex: {exc}") from exc
    if len(value) != DIGEST_LENGTH:
        raise EncodingError(f"Digest must be {DIGEST_LENGTH} bytes, got {len(value)}")
    return bytes(value)


def verify_commitment(
    facts: Sequence[int],
    salt: bytes,
    expected: Union[str, bytes],
) -> bool:
    """Recompute the digest the way the ledger does and compare."""
    return build_commitment(facts, salt) == parse_digest(expected)


def build_record(
    mode: GameMode,
    instance_id: int,
    facts: Sequence[int],
    salt: bytes,
    tolerance: Optional[int] = None,
    timestamp_utc: Optional[datetime] = None,
) -> CommitmentRecord:
    """Validate inputs for `mode` and assemble a CommitmentRecord.

    Raises EncodingError for arity, range, tolerance or salt problems.
    """
    facts = tuple(facts)
    if len(facts) != len(mode.fact_names):
        raise EncodingError(
            f"{mode.value} commitments take {len(mode.fact_names)} facts "
            f"({', '.join(mode.fact_names)}), got {len(facts)}"
        )
    encode_u32(instance_id, name=mode.id_field)
    if mode.uses_tolerance:
        if tolerance is None:
            raise EncodingError(f"{mode.value} commitments require a tolerance")
        encode_u32(tolerance, name="tolerance")
    elif tolerance is not None:
        raise EncodingError(f"{mode.value} commitments do not take a tolerance")

    digest = build_commitment(facts, salt)

    if timestamp_utc is None:
        timestamp_utc = datetime.now(timezone.utc)

    return CommitmentRecord(
        instance_id=instance_id,
        mode=mode,
        facts=facts,
        salt=bytes(salt),
        digest=digest,
        created_utc=timestamp_utc.strftime("%Y-%m-%dT%H:%M:%SZ"),
        tolerance=tolerance,
    )
