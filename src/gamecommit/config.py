"""Ledger configuration — credentials, contract IDs and network endpoint.

Values come from a .env file (shared with the game frontends, hence the
VITE_-prefixed fallbacks) overlaid by the process environment. The
loaded LedgerConfig is passed explicitly to whatever needs it; nothing
downstream reads the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from gamecommit.models.commitment import GameMode

DEFAULT_NETWORK = "testnet"


class ConfigError(ValueError):
    """Required configuration is missing or inconsistent."""


# Preferred name first, frontend-compatible fallback second.
_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "admin_secret": ("ADMIN_SECRET", "VITE_DEV_ADMIN_SECRET"),
    "seek_contract_id": ("ZK_SEEK_CONTRACT_ID", "VITE_ZK_SEEK_CONTRACT_ID"),
    "detective_contract_id": ("ZK_DETECTIVE_CONTRACT_ID", "VITE_ZK_DETECTIVE_CONTRACT_ID"),
    "rpc_url": ("SOROBAN_RPC_URL", "VITE_SOROBAN_RPC_URL"),
    "network_passphrase": ("NETWORK_PASSPHRASE", "VITE_NETWORK_PASSPHRASE"),
    "network": ("STELLAR_NETWORK",),
    "artifacts_dir": ("ARTIFACTS_DIR",),
    "player_secret": ("PLAYER_SECRET",),
}


@dataclass(frozen=True)
class LedgerConfig:
    """Everything the ledger transport needs to act as the admin."""
    admin_secret: Optional[str] = None
    seek_contract_id: Optional[str] = None
    detective_contract_id: Optional[str] = None
    rpc_url: Optional[str] = None
    network_passphrase: Optional[str] = None
    network: str = DEFAULT_NETWORK
    artifacts_dir: Path = Path(".")
    # Signs accusations; the contract requires the accusing player's auth.
    player_secret: Optional[str] = None

    @staticmethod
    def from_env(
        env_file: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> LedgerConfig:
        """Load configuration from `env_file` and the environment.

        Process environment wins over the file. A missing env file is
        not an error; missing values are caught by validate().
        """
        merged: dict[str, str] = {}
        if env_file is not None and Path(env_file).exists():
            merged.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
        merged.update(os.environ if environ is None else environ)

        values: dict[str, str] = {}
        for attr, keys in _ENV_KEYS.items():
            for key in keys:
                value = merged.get(key, "").strip()
                if value:
                    values[attr] = value
                    break

        return LedgerConfig(
            admin_secret=values.get("admin_secret"),
            seek_contract_id=values.get("seek_contract_id"),
            detective_contract_id=values.get("detective_contract_id"),
            rpc_url=values.get("rpc_url"),
            network_passphrase=values.get("network_passphrase"),
            network=values.get("network", DEFAULT_NETWORK),
            artifacts_dir=Path(values.get("artifacts_dir", ".")),
            player_secret=values.get("player_secret"),
        )

    def contract_id_for(self, mode: GameMode) -> Optional[str]:
        if mode is GameMode.SCENE:
            return self.seek_contract_id
        return self.detective_contract_id

    def missing(self, mode: GameMode) -> list[str]:
        """Names of required variables that are unset for `mode`."""
        result: list[str] = []
        if not self.admin_secret:
            result.append(_ENV_KEYS["admin_secret"][0])
        if not self.contract_id_for(mode):
            attr = "seek_contract_id" if mode is GameMode.SCENE else "detective_contract_id"
            result.append(_ENV_KEYS[attr][0])
        return result

    def validate(self, mode: GameMode) -> None:
        """Raise ConfigError unless everything `mode` needs is present."""
        missing = self.missing(mode)
        if missing:
            raise ConfigError(f"Missing required configuration: {', '.join(missing)}")
        if self.rpc_url and not self.network_passphrase:
            raise ConfigError(
                f"{_ENV_KEYS['rpc_url'][0]} is set but "
                f"{_ENV_KEYS['network_passphrase'][0]} is not"
            )
