"""Data models — commitment records and case vocabulary."""

from gamecommit.models.commitment import CommitmentRecord, GameMode

__all__ = ["CommitmentRecord", "GameMode"]
