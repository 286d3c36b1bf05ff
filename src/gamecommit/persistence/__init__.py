"""Persistence — artifact files holding the cleartext secrets."""

from gamecommit.persistence.artifact_store import (
    ArtifactExistsError,
    ArtifactIntegrityError,
    ArtifactStore,
    PersistResult,
)

__all__ = [
    "ArtifactExistsError",
    "ArtifactIntegrityError",
    "ArtifactStore",
    "PersistResult",
]
