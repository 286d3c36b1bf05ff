"""Tests for ledger configuration loading and validation."""

from pathlib import Path

import pytest

from gamecommit.config import DEFAULT_NETWORK, ConfigError, LedgerConfig
from gamecommit.models.commitment import GameMode


class TestFromEnv:
    def test_reads_env_file(self, tmp_path) -> None:
        env = tmp_path / ".env"
        env.write_text(
            "ADMIN_SECRET=SADMIN\n"
            "ZK_SEEK_CONTRACT_ID=CSEEK\n"
            "ZK_DETECTIVE_CONTRACT_ID=CDET\n",
            encoding="utf-8",
        )
        config = LedgerConfig.from_env(env_file=env, environ={})
        assert config.admin_secret == "SADMIN"
        assert config.seek_contract_id == "CSEEK"
        assert config.detective_contract_id == "CDET"
        assert config.network == DEFAULT_NETWORK
        assert config.rpc_url is None

    def test_frontend_names_are_fallbacks(self, tmp_path) -> None:
        env = tmp_path / ".env"
        env.write_text(
            "VITE_DEV_ADMIN_SECRET=SVITE\n"
            "VITE_ZK_DETECTIVE_CONTRACT_ID=CVITE\n"
            "VITE_SOROBAN_RPC_URL=https://soroban-testnet.stellar.org\n"
            "VITE_NETWORK_PASSPHRASE=Test SDF Network ; September 2015\n",
            encoding="utf-8",
        )
        config = LedgerConfig.from_env(env_file=env, environ={})
        assert config.admin_secret == "SVITE"
        assert config.detective_contract_id == "CVITE"
        assert config.rpc_url == "https://soroban-testnet.stellar.org"
        assert config.network_passphrase == "Test SDF Network ; September 2015"

    def test_environment_overrides_file(self, tmp_path) -> None:
        env = tmp_path / ".env"
        env.write_text("ADMIN_SECRET=FROMFILE\n", encoding="utf-8")
        config = LedgerConfig.from_env(env_file=env, environ={"ADMIN_SECRET": "FROMENV"})
        assert config.admin_secret == "FROMENV"

    def test_missing_env_file_is_not_fatal(self, tmp_path) -> None:
        config = LedgerConfig.from_env(env_file=tmp_path / "absent.env", environ={})
        assert config.admin_secret is None

    def test_blank_values_ignored(self) -> None:
        config = LedgerConfig.from_env(
            environ={"ADMIN_SECRET": "  ", "VITE_DEV_ADMIN_SECRET": "SFALLBACK"},
        )
        assert config.admin_secret == "SFALLBACK"

    def test_player_secret(self) -> None:
        config = LedgerConfig.from_env(environ={"PLAYER_SECRET": "SPLAYER"})
        assert config.player_secret == "SPLAYER"
        assert LedgerConfig.from_env(environ={}).player_secret is None

    def test_artifacts_dir_and_network(self) -> None:
        config = LedgerConfig.from_env(
            environ={"ARTIFACTS_DIR": "out", "STELLAR_NETWORK": "futurenet"},
        )
        assert config.artifacts_dir == Path("out")
        assert config.network == "futurenet"


class TestValidate:
    def test_complete_config_passes(self) -> None:
        config = LedgerConfig(admin_secret="S", seek_contract_id="C")
        config.validate(GameMode.SCENE)

    def test_missing_everything_named(self) -> None:
        with pytest.raises(ConfigError) as exc:
            LedgerConfig().validate(GameMode.CASE)
        assert "ADMIN_SECRET" in str(exc.value)
        assert "ZK_DETECTIVE_CONTRACT_ID" in str(exc.value)

    def test_contract_is_per_mode(self) -> None:
        config = LedgerConfig(admin_secret="S", seek_contract_id="C")
        assert config.missing(GameMode.SCENE) == []
        assert config.missing(GameMode.CASE) == ["ZK_DETECTIVE_CONTRACT_ID"]

    def test_rpc_url_needs_passphrase(self) -> None:
        config = LedgerConfig(
            admin_secret="S", detective_contract_id="C", rpc_url="https://rpc",
        )
        with pytest.raises(ConfigError, match="NETWORK_PASSPHRASE"):
            config.validate(GameMode.CASE)
