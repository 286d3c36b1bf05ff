"""gamecommit — commit-reveal secrets for on-chain mini-games."""

__version__ = "0.1.0"
