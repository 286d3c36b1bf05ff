"""Commitment record model.

Every game instance (a scene in the location game, a case in the
deduction game) is bound to exactly one CommitmentRecord:

    digest = keccak256(BE32(facts[0]) || ... || BE32(facts[n-1]) || salt)

The digest is published on the ledger at setup time. The cleartext
facts and salt stay with the operator until resolution.

The record is immutable once constructed. Changing any field after the
digest has been submitted desynchronises the on-chain commitment from
the secret in hand and makes the instance unresolvable.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional


class GameMode(str, enum.Enum):
    """Game modes and their fixed fact layouts."""
    SCENE = "scene"  # location game: target point + tolerance radius
    CASE = "case"    # deduction game: suspect / weapon / room triple

    @property
    def fact_names(self) -> tuple[str, ...]:
        """Fact names in encoding order. The order is part of the wire format."""
        if self is GameMode.SCENE:
            return ("target_x", "target_y")
        return ("suspect_id", "weapon_id", "room_id")

    @property
    def artifact_prefix(self) -> str:
        return self.value

    @property
    def uses_tolerance(self) -> bool:
        return self is GameMode.SCENE

    @property
    def id_field(self) -> str:
        """Name of the instance identifier on the ledger."""
        return f"{self.value}_id"


@dataclass(frozen=True)
class CommitmentRecord:
    """The cleartext secret of one game instance plus its commitment.

    `tolerance` is stored alongside the commitment for scenes but is not
    part of the digest input.
    """
    instance_id: int
    mode: GameMode
    facts: tuple[int, ...]
    salt: bytes
    digest: bytes
    created_utc: str
    tolerance: Optional[int] = None

    def named_facts(self) -> dict[str, int]:
        """Return facts keyed by name, in encoding order."""
        return dict(zip(self.mode.fact_names, self.facts))

    @property
    def salt_hex(self) -> str:
        return self.salt.hex()

    @property
    def digest_hex(self) -> str:
        return self.digest.hex()

    def to_dict(self) -> dict[str, Any]:
        """Artifact representation. Every digest input is present by name."""
        data: dict[str, Any] = {
            "mode": self.mode.value,
            self.mode.id_field: self.instance_id,
        }
        data.update(self.named_facts())
        if self.tolerance is not None:
            data["tolerance"] = self.tolerance
        data["salt"] = self.salt_hex
        data["commitment"] = self.digest_hex
        data["created_utc"] = self.created_utc
        return data

    @staticmethod
    def from_dict(data: dict[str, Any]) -> CommitmentRecord:
        """Rebuild a record from its artifact representation.

        Raises KeyError for missing fields and ValueError for malformed
        ones. Integer fields must already be JSON integers: 500.9 or
        "150" are rejected rather than coerced. The digest is NOT
        recomputed here; see ArtifactStore.load.
        """
        mode = GameMode(data["mode"])
        salt = bytes.fromhex(data["salt"])
        digest = bytes.fromhex(data["commitment"])
        if mode.uses_tolerance:
            tolerance: Optional[int] = _int_field(data, "tolerance")
        elif "tolerance" in data:
            raise ValueError(f"{mode.value} artifacts do not carry a tolerance")
        else:
            tolerance = None
        return CommitmentRecord(
            instance_id=_int_field(data, mode.id_field),
            mode=mode,
            facts=tuple(_int_field(data, name) for name in mode.fact_names),
            salt=salt,
            digest=digest,
            created_utc=str(data["created_utc"]),
            tolerance=tolerance,
        )


def _int_field(data: dict[str, Any], key: str) -> int:
    value = data[key]
    # bool is an int subclass; type() keeps true/false out too
    if type(value) is not int:
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value
