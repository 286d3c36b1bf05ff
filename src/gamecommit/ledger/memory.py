"""In-process reference ledger.

Mirrors the deployed contracts closely enough to exercise the core
without a network:

- create_case rejects a second commitment for the same case ID.
- create_scene overwrites a scene, as the scene contract does, but an
  identical resubmission reports ALREADY_EXISTS.
- Resolution recomputes keccak256(facts || salt) and compares bytes.
"""

from __future__ import annotations

from typing import Optional

from gamecommit.crypto.commitment_builder import build_commitment
from gamecommit.ledger.interface import ResolveOutcome, SubmitOutcome
from gamecommit.models.commitment import CommitmentRecord, GameMode


class InMemoryLedger:
    """Dictionary-backed Ledger implementation."""

    def __init__(self) -> None:
        self._commitments: dict[tuple[GameMode, int], bytes] = {}
        self._tolerances: dict[int, int] = {}
        self.submissions: list[tuple[GameMode, int, str]] = []

    def submit_commitment(self, record: CommitmentRecord) -> SubmitOutcome:
        key = (record.mode, record.instance_id)
        self.submissions.append((record.mode, record.instance_id, record.digest_hex))
        existing = self._commitments.get(key)
        if existing is not None and (
            record.mode is GameMode.CASE or existing == record.digest
        ):
            return SubmitOutcome.ALREADY_EXISTS
        self._commitments[key] = record.digest
        if record.tolerance is not None:
            self._tolerances[record.instance_id] = record.tolerance
        return SubmitOutcome.OK

    def resolve(
        self,
        record: CommitmentRecord,
        session_id: int,
        player: Optional[str] = None,
    ) -> ResolveOutcome:
        stored = self._commitments.get((record.mode, record.instance_id))
        if stored is None:
            return ResolveOutcome.NOT_FOUND
        if build_commitment(record.facts, record.salt) == stored:
            return ResolveOutcome.MATCHED
        return ResolveOutcome.MISMATCHED

    def commitment_of(self, mode: GameMode, instance_id: int) -> Optional[bytes]:
        return self._commitments.get((mode, instance_id))

    def tolerance_of(self, scene_id: int) -> Optional[int]:
        return self._tolerances.get(scene_id)
