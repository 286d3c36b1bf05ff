"""Soroban ledger transport via the `stellar` CLI.

Each operation is one blocking `stellar contract invoke` call:

    stellar contract invoke --id <contract> --source-account <secret>
        (--rpc-url <url> --network-passphrase <phrase> | --network <name>)
        -- <function> --<arg> <value> ...

Contract failures surface on stderr as either the error variant name
(e.g. "CaseAlreadyExists") or the numeric form "Error(Contract, #6)".
Both are recognised. Codes are per-contract, so classification depends
on which game mode is being invoked.

Every call is signed by the admin account except `accuse`, which the
contract authorises against the accusing player. It is signed with
LedgerConfig.player_secret when one is configured; otherwise the admin
account must itself be the player.
"""

from __future__ import annotations

import re
import subprocess
from typing import Callable, Optional, Sequence

from gamecommit.config import LedgerConfig
from gamecommit.ledger.interface import (
    LedgerTransportError,
    ResolveOutcome,
    SubmitOutcome,
)
from gamecommit.models.commitment import CommitmentRecord, GameMode

DEFAULT_TIMEOUT_SECONDS = 120

# Contract error enums (contracts/zk-seek, contracts/zk-detective).
SEEK_ERRORS: dict[str, int] = {
    "GameNotFound": 1,
    "SceneNotFound": 2,
    "SceneInactive": 3,
    "NotAllRevealed": 8,
    "GameAlreadyEnded": 10,
    "InvalidTargetReveal": 11,
}

DETECTIVE_ERRORS: dict[str, int] = {
    "GameNotFound": 1,
    "CaseNotFound": 2,
    "NotPlayer": 3,
    "GameAlreadyEnded": 4,
    "GameNotActive": 5,
    "CaseAlreadyExists": 6,
    "InvalidAccusationId": 7,
}

_CONTRACT_CODE = re.compile(r"Error\(Contract,\s*#(\d+)\)")

Runner = Callable[..., subprocess.CompletedProcess]


def _contract_error(stderr: str, table: dict[str, int]) -> Optional[str]:
    """Return the contract error variant named in `stderr`, if any."""
    for name in table:
        if name in stderr:
            return name
    match = _CONTRACT_CODE.search(stderr)
    if match:
        code = int(match.group(1))
        for name, value in table.items():
            if value == code:
                return name
    return None


class StellarCliLedger:
    """Ledger backed by a deployed Soroban contract.

    Usage:
        ledger = StellarCliLedger(config, GameMode.CASE)
        outcome = ledger.submit_commitment(record)

    `runner` defaults to subprocess.run and is injectable for tests.
    """

    def __init__(
        self,
        config: LedgerConfig,
        mode: GameMode,
        runner: Runner = subprocess.run,
        executable: str = "stellar",
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        config.validate(mode)
        self._config = config
        self._mode = mode
        self._contract_id = config.contract_id_for(mode)
        self._runner = runner
        self._executable = executable
        self._timeout = timeout
        self._errors = SEEK_ERRORS if mode is GameMode.SCENE else DETECTIVE_ERRORS

    @property
    def mode(self) -> GameMode:
        return self._mode

    # ------------------------------------------------------------------
    # Ledger protocol
    # ------------------------------------------------------------------

    def submit_commitment(self, record: CommitmentRecord) -> SubmitOutcome:
        self._check_mode(record)
        if record.mode is GameMode.SCENE:
            args = [
                "create_scene",
                "--scene_id", str(record.instance_id),
                "--target_commitment", record.digest_hex,
                "--tolerance", str(record.tolerance),
            ]
        else:
            args = [
                "create_case",
                "--case_id", str(record.instance_id),
                "--commitment", record.digest_hex,
            ]

        result = self._invoke(args)
        if result.returncode == 0:
            return SubmitOutcome.OK
        error = _contract_error(result.stderr or "", self._errors)
        if error == "CaseAlreadyExists":
            return SubmitOutcome.ALREADY_EXISTS
        raise self._failure(args[0], result)

    def resolve(
        self,
        record: CommitmentRecord,
        session_id: int,
        player: Optional[str] = None,
    ) -> ResolveOutcome:
        self._check_mode(record)
        facts = record.named_facts()
        if record.mode is GameMode.SCENE:
            args = [
                "resolve_game",
                "--session_id", str(session_id),
                "--target_x", str(facts["target_x"]),
                "--target_y", str(facts["target_y"]),
                "--scene_salt", record.salt_hex,
            ]
            not_found = {"GameNotFound", "SceneNotFound"}
            mismatch = {"InvalidTargetReveal"}
        else:
            if not player:
                raise ValueError("Case resolution requires the accusing player's address")
            args = [
                "accuse",
                "--session_id", str(session_id),
                "--player", player,
                "--suspect_id", str(facts["suspect_id"]),
                "--weapon_id", str(facts["weapon_id"]),
                "--room_id", str(facts["room_id"]),
                "--salt", record.salt_hex,
            ]
            not_found = {"GameNotFound", "CaseNotFound"}
            mismatch = set()

        result = self._invoke(args, source=self._source_for(args[0]))
        if result.returncode == 0:
            if record.mode is GameMode.CASE:
                return _parse_accuse_result(result.stdout or "", args[0])
            return ResolveOutcome.MATCHED

        error = _contract_error(result.stderr or "", self._errors)
        if error in not_found:
            return ResolveOutcome.NOT_FOUND
        if error in mismatch:
            return ResolveOutcome.MISMATCHED
        raise self._failure(args[0], result)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def base_command(self, source: Optional[str] = None) -> list[str]:
        """The invoke prefix, up to and including the `--` separator.

        `source` signs the transaction; the admin account by default.
        """
        cmd = [
            self._executable, "contract", "invoke",
            "--id", self._contract_id,
            "--source-account", source or self._config.admin_secret,
        ]
        if self._config.rpc_url:
            cmd += [
                "--rpc-url", self._config.rpc_url,
                "--network-passphrase", self._config.network_passphrase,
            ]
        else:
            cmd += ["--network", self._config.network]
        cmd.append("--")
        return cmd

    def _source_for(self, function: str) -> str:
        # accuse calls player.require_auth(); everything else is admin-only
        if function == "accuse" and self._config.player_secret:
            return self._config.player_secret
        return self._config.admin_secret

    def _invoke(
        self, args: Sequence[str], source: Optional[str] = None,
    ) -> subprocess.CompletedProcess:
        cmd = self.base_command(source) + list(args)
        try:
            return self._runner(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise LedgerTransportError(
                f"'{self._executable}' CLI not found on PATH"
            ) from exc
        except subprocess.TimeoutExpired as exc:
            raise LedgerTransportError(
                f"{args[0]} timed out after {self._timeout}s"
            ) from exc

    def _check_mode(self, record: CommitmentRecord) -> None:
        if record.mode is not self._mode:
            raise ValueError(
                f"Ledger configured for {self._mode.value}, got {record.mode.value} record"
            )

    def _failure(
        self, function: str, result: subprocess.CompletedProcess,
    ) -> LedgerTransportError:
        detail = (result.stderr or result.stdout or "").strip()
        for secret in (self._config.admin_secret, self._config.player_secret):
            if secret:
                detail = detail.replace(secret, "***")
        return LedgerTransportError(
            f"{function} failed (exit {result.returncode}): {detail or 'no output'}"
        )


def _parse_accuse_result(stdout: str, function: str) -> ResolveOutcome:
    """accuse returns a bool; the CLI prints it as the last output line."""
    lines = [line.strip() for line in stdout.strip().splitlines() if line.strip()]
    value = lines[-1].strip('"').lower() if lines else ""
    if value == "true":
        return ResolveOutcome.MATCHED
    if value == "false":
        return ResolveOutcome.MISMATCHED
    raise LedgerTransportError(f"{function} returned unexpected output: {stdout.strip()!r}")
