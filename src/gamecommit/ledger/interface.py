"""Ledger interface — what the commitment core requires from the chain.

The ledger stores a digest at setup time and, at resolution time,
recomputes it from the revealed facts and salt using the same encoding
as crypto.commitment_builder. The core never performs the comparison on
the ledger's behalf; it only has to supply byte-identical inputs.

Any transport (Soroban via the stellar CLI, the in-memory reference
ledger) must satisfy the Ledger Protocol. Retry and backoff are not
defined at this layer: a LedgerTransportError is fatal for the call
and it is up to the caller whether to try again.
"""

from __future__ import annotations

import enum
from typing import Optional, Protocol, runtime_checkable

from gamecommit.models.commitment import CommitmentRecord


class SubmitOutcome(str, enum.Enum):
    """Result of publishing a commitment."""
    OK = "ok"
    ALREADY_EXISTS = "already_exists"  # recoverable: set up previously


class ResolveOutcome(str, enum.Enum):
    """Result of revealing a commitment to the ledger."""
    MATCHED = "matched"
    MISMATCHED = "mismatched"
    NOT_FOUND = "not_found"


class LedgerError(Exception):
    """Base class for ledger failures."""


class LedgerTransportError(LedgerError):
    """The ledger could not be reached or returned something unusable."""


@runtime_checkable
class Ledger(Protocol):
    """Contract every ledger backend must satisfy."""

    def submit_commitment(self, record: CommitmentRecord) -> SubmitOutcome:
        """Publish `record.digest` for `record.instance_id`.

        Scene: create_scene(scene_id, target_commitment, tolerance).
        Case: create_case(case_id, commitment).

        Returns ALREADY_EXISTS when the instance was set up before.
        Raises LedgerTransportError for every other failure.
        """
        ...

    def resolve(
        self,
        record: CommitmentRecord,
        session_id: int,
        player: Optional[str] = None,
    ) -> ResolveOutcome:
        """Reveal `record`'s facts and salt for a game session.

        Scene: resolve_game(session_id, target_x, target_y, scene_salt).
        Case: accuse(session_id, player, suspect_id, weapon_id, room_id, salt).
        """
        ...
