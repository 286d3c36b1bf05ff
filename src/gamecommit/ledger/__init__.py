"""Ledger backends — the Ledger Protocol and its implementations."""

from gamecommit.ledger.interface import (
    Ledger,
    LedgerError,
    LedgerTransportError,
    ResolveOutcome,
    SubmitOutcome,
)
from gamecommit.ledger.memory import InMemoryLedger
from gamecommit.ledger.stellar_cli import StellarCliLedger

__all__ = [
    "Ledger",
    "LedgerError",
    "LedgerTransportError",
    "ResolveOutcome",
    "SubmitOutcome",
    "InMemoryLedger",
    "StellarCliLedger",
]
