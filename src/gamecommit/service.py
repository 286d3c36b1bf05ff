"""Commitment service — composes the pure core with ledger and storage I/O.

Setup order matters. The artifact is persisted BEFORE the digest is
submitted, so that:

1. A persistence failure aborts with nothing published.
2. A transport failure after persistence is safe to retry: re-running
   setup finds the artifact, reuses its salt, and resubmits the same
   digest instead of orphaning the published one with a fresh salt.

Error policy:
- Validation and persistence failures -> ServiceResult(success=False).
- Ledger ALREADY_EXISTS -> success, flagged in data["already_exists"].
- LedgerTransportError -> propagates unchanged to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from gamecommit.crypto.commitment_builder import EncodingError, build_record
from gamecommit.crypto.salt import random_salt
from gamecommit.ledger.interface import Ledger, ResolveOutcome, SubmitOutcome
from gamecommit.models.case_ids import validate_case_facts
from gamecommit.models.commitment import CommitmentRecord, GameMode
from gamecommit.persistence.artifact_store import ArtifactIntegrityError, ArtifactStore


@dataclass
class ServiceResult:
    """Result of a service operation."""
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)


class CommitmentService:
    """Setup, resolution and local verification of game commitments.

    Usage:
        service = CommitmentService(ledger, ArtifactStore(Path("artifacts")))
        result = service.setup(GameMode.SCENE, 1, (500, 300), tolerance=150)
        ...
        result = service.resolve(GameMode.SCENE, 1, session_id=42)
    """

    def __init__(self, ledger: Ledger, store: ArtifactStore) -> None:
        self._ledger = ledger
        self._store = store

    @property
    def store(self) -> ArtifactStore:
        return self._store

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup(
        self,
        mode: GameMode,
        instance_id: int,
        facts: Sequence[int],
        salt: Optional[bytes] = None,
        tolerance: Optional[int] = None,
        overwrite: bool = False,
    ) -> ServiceResult:
        """Commit to `facts` for one game instance and publish the digest.

        A random salt is drawn unless `salt` is given. If an artifact
        for the instance already exists it is reused when it describes
        the same secret, and refused otherwise unless `overwrite` is set.
        """
        facts = tuple(facts)
        try:
            candidate = build_record(
                mode,
                instance_id,
                facts,
                salt if salt is not None else random_salt(),
                tolerance=tolerance,
            )
        except EncodingError as exc:
            return ServiceResult(success=False, errors=[str(exc)])
        errors = self._validate(mode, facts)
        if errors:
            return ServiceResult(success=False, errors=errors)

        reused = False
        overwritten = False
        if self._store.exists(mode, instance_id) and not overwrite:
            try:
                existing = self._store.load(mode, instance_id)
            except ArtifactIntegrityError as exc:
                return ServiceResult(success=False, errors=[str(exc)])
            if not _same_secret(existing, candidate, salt_given=salt is not None):
                return ServiceResult(
                    success=False,
                    errors=[
                        f"Artifact for {mode.value} {instance_id} already exists "
                        f"with different values: {self._store.path_for(mode, instance_id)}. "
                        "Replacing it orphans any commitment already published."
                    ],
                )
            record = existing
            reused = True
        else:
            record = candidate
            try:
                persisted = self._store.persist(record, overwrite=overwrite)
            except OSError as exc:
                return ServiceResult(
                    success=False,
                    errors=[f"Failed to persist artifact, nothing submitted: {exc}"],
                )
            overwritten = persisted.overwritten

        outcome = self._ledger.submit_commitment(record)

        return ServiceResult(
            success=True,
            data={
                "record": record,
                "artifact": str(self._store.path_for(mode, instance_id)),
                "commitment": record.digest_hex,
                "salt": record.salt_hex,
                "reused_artifact": reused,
                "overwritten": overwritten,
                "already_exists": outcome is SubmitOutcome.ALREADY_EXISTS,
            },
        )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        mode: GameMode,
        instance_id: int,
        session_id: int,
        player: Optional[str] = None,
    ) -> ServiceResult:
        """Reveal the stored secret of an instance to the ledger."""
        loaded = self._load(mode, instance_id)
        if not loaded.success:
            return loaded
        record: CommitmentRecord = loaded.data["record"]

        outcome = self._ledger.resolve(record, session_id, player=player)
        data = {"record": record, "outcome": outcome, "session_id": session_id}
        if outcome is ResolveOutcome.MATCHED:
            return ServiceResult(success=True, data=data)
        if outcome is ResolveOutcome.NOT_FOUND:
            message = f"Ledger has no {mode.value} {instance_id} / session {session_id}"
        else:
            message = f"Ledger rejected the reveal for {mode.value} {instance_id}"
        return ServiceResult(success=False, errors=[message], data=data)

    def verify(self, mode: GameMode, instance_id: int) -> ServiceResult:
        """Recompute the stored commitment locally. No ledger access."""
        return self._load(mode, instance_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(self, mode: GameMode, instance_id: int) -> ServiceResult:
        try:
            record = self._store.load(mode, instance_id)
        except FileNotFoundError:
            return ServiceResult(
                success=False,
                errors=[f"No artifact at {self._store.path_for(mode, instance_id)}"],
            )
        except ArtifactIntegrityError as exc:
            return ServiceResult(success=False, errors=[str(exc)])
        return ServiceResult(
            success=True,
            data={"record": record, "commitment": record.digest_hex},
        )

    @staticmethod
    def _validate(mode: GameMode, facts: tuple[int, ...]) -> list[str]:
        """Game-level rules on top of the u32 encoding rules."""
        if mode is GameMode.CASE:
            return validate_case_facts(*facts)
        return []


def _same_secret(
    existing: CommitmentRecord,
    candidate: CommitmentRecord,
    salt_given: bool,
) -> bool:
    if existing.facts != candidate.facts or existing.tolerance != candidate.tolerance:
        return False
    return not salt_given or existing.salt == candidate.salt
