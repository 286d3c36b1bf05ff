"""Artifact store — durable cleartext records for later reveal.

The salt in an artifact is the only copy of the secret outside the
operator's memory. If it is lost after the digest reaches the ledger,
the instance can never be resolved. Therefore:

1. Writes are atomic: a temporary file in the target directory is
   written, flushed, fsync'd and then renamed over the target. A crash
   leaves either the previous file or the complete new one.
2. Existing artifacts are never replaced silently. Overwriting requires
   an explicit flag and is reported back to the caller.
3. Loading is fail-closed: the digest is recomputed from the stored
   cleartext and must match the stored digest.
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from gamecommit.crypto.commitment_builder import build_commitment
from gamecommit.models.commitment import CommitmentRecord, GameMode


class ArtifactExistsError(FileExistsError):
    """An artifact for this instance is already on disk."""


class ArtifactIntegrityError(ValueError):
    """A stored artifact is malformed or its digest does not recompute."""


@dataclass(frozen=True)
class PersistResult:
    """Outcome of a successful persist call."""
    path: Path
    overwritten: bool


class ArtifactStore:
    """One JSON artifact per game instance, keyed by mode and instance ID.

    Usage:
        store = ArtifactStore(Path("artifacts"))
        store.persist(record)
        record = store.load(GameMode.SCENE, 1)
    """

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, mode: GameMode, instance_id: int) -> Path:
        return self._directory / f"{mode.artifact_prefix}-{instance_id}.json"

    def exists(self, mode: GameMode, instance_id: int) -> bool:
        return self.path_for(mode, instance_id).exists()

    def persist(self, record: CommitmentRecord, overwrite: bool = False) -> PersistResult:
        """Write `record` atomically.

        Raises ArtifactExistsError if an artifact is present and
        `overwrite` is false. OSError propagates on write failure; no
        partial file is left behind.
        """
        target = self.path_for(record.mode, record.instance_id)
        existed = target.exists()
        if existed and not overwrite:
            raise ArtifactExistsError(
                f"Artifact already exists: {target} "
                "(it may hold the only copy of an already-submitted salt)"
            )

        self._directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(record.to_dict(), indent=2, sort_keys=False) + "\n"

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{target.name}.", suffix=".tmp", dir=self._directory,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        _fsync_directory(self._directory)

        return PersistResult(path=target, overwritten=existed)

    def load(self, mode: GameMode, instance_id: int) -> CommitmentRecord:
        """Load and integrity-check the artifact for an instance.

        Raises FileNotFoundError if absent, ArtifactIntegrityError if the
        content is malformed, belongs to another instance, or its digest
        does not recompute from the stored facts and salt.
        """
        path = self.path_for(mode, instance_id)
        with path.open("rb") as f:
            raw = f.read()

        try:
            record = CommitmentRecord.from_dict(json.loads(raw.decode("utf-8")))
        except (KeyError, ValueError, TypeError) as exc:
            raise ArtifactIntegrityError(f"Malformed artifact {path}: {exc}") from exc

        if record.mode is not mode or record.instance_id != instance_id:
            raise ArtifactIntegrityError(
                f"Artifact {path} describes {record.mode.value} "
                f"{record.instance_id}, expected {mode.value} {instance_id}"
            )

        try:
            expected = build_commitment(record.facts, record.salt)
        except ValueError as exc:
            raise ArtifactIntegrityError(f"Malformed artifact {path}: {exc}") from exc

        if expected != record.digest:
            raise ArtifactIntegrityError(
                f"Integrity check failed for {path}: stored commitment "
                f"{record.digest_hex} != computed {expected.hex()}"
            )
        return record


def _fsync_directory(directory: Path) -> None:
    """Persist the rename itself. Not supported on every platform."""
    if not hasattr(os, "O_DIRECTORY"):
        return
    fd = os.open(directory, os.O_RDONLY | os.O_DIRECTORY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
