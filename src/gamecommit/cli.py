"""gamecommit CLI — operator commands for setting up and revealing secrets.

Usage:
    python -m gamecommit.cli create-scene 1 500 300 150
    python -m gamecommit.cli create-case --case-id 1 --suspect victor \\
        --weapon poison_vial --room bedroom --salt-text meridian_manor_salt_v1
    python -m gamecommit.cli resolve-scene --scene-id 1 --session-id 42
    python -m gamecommit.cli resolve-case --case-id 1 --session-id 7 --player G... \\
        --player-secret S...
    python -m gamecommit.cli verify scene 1
    python -m gamecommit.cli commitment 500 300 --salt-hex 00...00

Configuration is read from --env-file (default: .env) and the process
environment. See gamecommit.config for the variable names.
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Optional

from gamecommit.config import ConfigError, LedgerConfig
from gamecommit.crypto.commitment_builder import EncodingError, build_commitment
from gamecommit.crypto.salt import SaltError, salt_from_hex, text_salt
from gamecommit.ledger.interface import Ledger, LedgerError
from gamecommit.ledger.memory import InMemoryLedger
from gamecommit.ledger.stellar_cli import StellarCliLedger
from gamecommit.models.case_ids import ROOM_IDS, SUSPECT_IDS, WEAPON_IDS, resolve_case_token
from gamecommit.models.commitment import GameMode
from gamecommit.persistence.artifact_store import ArtifactStore
from gamecommit.service import CommitmentService, ServiceResult


DEFAULT_ENV_FILE = Path(".env")


def _fail(message: str) -> int:
    print(f"Failed: {message}", file=sys.stderr)
    return 1


def _fail_result(result: ServiceResult) -> int:
    return _fail("; ".join(result.errors))


def _load_config(args: argparse.Namespace) -> LedgerConfig:
    config = LedgerConfig.from_env(env_file=args.env_file)
    player_secret = getattr(args, "player_secret", None)
    if player_secret:
        config = dataclasses.replace(config, player_secret=player_secret)
    return config


def _make_store(args: argparse.Namespace, config: LedgerConfig) -> ArtifactStore:
    return ArtifactStore(args.artifacts_dir or config.artifacts_dir)


def _make_service(args: argparse.Namespace, mode: GameMode) -> CommitmentService:
    """Build a service for `mode`. Raises ConfigError before any I/O."""
    config = _load_config(args)
    ledger: Ledger
    if getattr(args, "dry_run", False):
        ledger = InMemoryLedger()
    else:
        ledger = StellarCliLedger(config, mode)
    return CommitmentService(ledger, _make_store(args, config))


def _salt_from_args(args: argparse.Namespace) -> Optional[bytes]:
    if getattr(args, "salt_text", None) is not None:
        return text_salt(args.salt_text)
    if getattr(args, "salt_hex", None) is not None:
        return salt_from_hex(args.salt_hex)
    return None


def _report_setup(result: ServiceResult, dry_run: bool) -> None:
    record = result.data["record"]
    print(f"{record.mode.value.capitalize()} {record.instance_id}")
    for name, value in record.named_facts().items():
        print(f"  {name}: {value}")
    if record.tolerance is not None:
        print(f"  tolerance: {record.tolerance}")
    print(f"  salt (hex): {record.salt_hex}")
    print(f"  commitment (hex): {record.digest_hex}")
    if result.data["reused_artifact"]:
        print(f"  reused existing artifact: {result.data['artifact']}")
    elif result.data["overwritten"]:
        print(f"  WARNING: overwrote existing artifact: {result.data['artifact']}")
    else:
        print(f"  saved to: {result.data['artifact']}")

    if dry_run:
        print("Dry run: commitment not submitted to the ledger.")
    elif result.data["already_exists"]:
        print(f"{record.mode.value.capitalize()} already exists on-chain (OK, skipping).")
    else:
        print(f"{record.mode.value.capitalize()} {record.instance_id} created.")
    print("SAVE THE ARTIFACT: the salt cannot be regenerated and is needed to resolve.")


def _run_setup(
    args: argparse.Namespace,
    mode: GameMode,
    instance_id: int,
    facts: tuple[int, ...],
    tolerance: Optional[int] = None,
) -> int:
    try:
        salt = _salt_from_args(args)
        service = _make_service(args, mode)
    except (ConfigError, SaltError) as exc:
        return _fail(str(exc))

    try:
        result = service.setup(
            mode, instance_id, facts,
            salt=salt, tolerance=tolerance, overwrite=args.force,
        )
    except LedgerError as exc:
        return _fail(f"ledger call failed, artifact kept for retry: {exc}")

    if not result.success:
        return _fail_result(result)
    _report_setup(result, args.dry_run)
    return 0


def cmd_create_scene(args: argparse.Namespace) -> int:
    return _run_setup(
        args, GameMode.SCENE, args.scene_id,
        (args.target_x, args.target_y), tolerance=args.tolerance,
    )


def cmd_create_case(args: argparse.Namespace) -> int:
    try:
        facts = (
            resolve_case_token(args.suspect, SUSPECT_IDS),
            resolve_case_token(args.weapon, WEAPON_IDS),
            resolve_case_token(args.room, ROOM_IDS),
        )
    except KeyError as exc:
        return _fail(exc.args[0])
    return _run_setup(args, GameMode.CASE, args.case_id, facts)


def _run_resolve(
    args: argparse.Namespace,
    mode: GameMode,
    instance_id: int,
    player: Optional[str] = None,
) -> int:
    try:
        service = _make_service(args, mode)
    except ConfigError as exc:
        return _fail(str(exc))

    try:
        result = service.resolve(mode, instance_id, args.session_id, player=player)
    except LedgerError as exc:
        return _fail(f"ledger call failed: {exc}")
    except ValueError as exc:
        return _fail(str(exc))

    if not result.success:
        return _fail_result(result)
    print(
        f"{mode.value.capitalize()} {instance_id} revealed for session "
        f"{args.session_id}: {result.data['outcome'].value}"
    )
    return 0


def cmd_resolve_scene(args: argparse.Namespace) -> int:
    return _run_resolve(args, GameMode.SCENE, args.scene_id)


def cmd_resolve_case(args: argparse.Namespace) -> int:
    return _run_resolve(args, GameMode.CASE, args.case_id, player=args.player)


def cmd_verify(args: argparse.Namespace) -> int:
    """Recompute an artifact's commitment without touching the ledger."""
    mode = GameMode(args.mode)
    store = _make_store(args, _load_config(args))
    service = CommitmentService(InMemoryLedger(), store)
    result = service.verify(mode, args.instance_id)
    if not result.success:
        return _fail_result(result)
    print(f"OK {store.path_for(mode, args.instance_id)}: {result.data['commitment']}")
    return 0


def cmd_commitment(args: argparse.Namespace) -> int:
    """Compute a digest from facts and salt. Pure: no config, no I/O."""
    try:
        salt = _salt_from_args(args)
        digest = build_commitment(args.facts, salt)
    except (EncodingError, SaltError) as exc:
        return _fail(str(exc))
    print(digest.hex())
    return 0


def _non_empty(value: str) -> str:
    if not value.strip():
        raise argparse.ArgumentTypeError("must not be empty")
    return value


def _add_salt_options(parser: argparse.ArgumentParser, required: bool = False) -> None:
    group = parser.add_mutually_exclusive_group(required=required)
    group.add_argument(
        "--salt-text",
        help="Text salt, UTF-8, zero-padded or truncated to 32 bytes",
    )
    group.add_argument("--salt-hex", help="32-byte salt as 64 hex characters")


def _add_setup_options(parser: argparse.ArgumentParser) -> None:
    _add_salt_options(parser)
    parser.add_argument(
        "--force", action="store_true",
        help="Replace an existing artifact with different values",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Build and save the artifact without submitting to the ledger",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamecommit",
        description="Commit-reveal setup for the scene and case mini-games",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="Path to the .env file (default: .env)",
    )
    parser.add_argument(
        "--artifacts-dir",
        type=Path,
        default=None,
        help="Directory for artifact files (default: ARTIFACTS_DIR or .)",
    )
    sub = parser.add_subparsers(dest="command")

    # create-scene
    p_scene = sub.add_parser("create-scene", help="Commit to a scene target")
    p_scene.add_argument("scene_id", type=int, nargs="?", default=1)
    p_scene.add_argument("target_x", type=int, nargs="?", default=500)
    p_scene.add_argument("target_y", type=int, nargs="?", default=300)
    p_scene.add_argument("tolerance", type=int, nargs="?", default=150)
    _add_setup_options(p_scene)

    # create-case
    p_case = sub.add_parser("create-case", help="Commit to a case solution")
    p_case.add_argument("--case-id", type=int, required=True, help="Case ID")
    p_case.add_argument("--suspect", required=True, help="Suspect name or ID")
    p_case.add_argument("--weapon", required=True, help="Weapon name or ID")
    p_case.add_argument("--room", required=True, help="Room name or ID")
    _add_setup_options(p_case)

    # resolve-scene
    p_rs = sub.add_parser("resolve-scene", help="Reveal a scene target for a game session")
    p_rs.add_argument("--scene-id", type=int, required=True, help="Scene ID")
    p_rs.add_argument("--session-id", type=int, required=True, help="Game session ID")

    # resolve-case
    p_rc = sub.add_parser("resolve-case", help="Submit the case solution as an accusation")
    p_rc.add_argument("--case-id", type=int, required=True, help="Case ID")
    p_rc.add_argument("--session-id", type=int, required=True, help="Game session ID")
    p_rc.add_argument(
        "--player", type=_non_empty, required=True, help="Accusing player's address",
    )
    p_rc.add_argument(
        "--player-secret",
        help="Secret key or stellar identity of --player; signs the accusation "
        "(default: PLAYER_SECRET, else the admin account, which must then be the player)",
    )

    # verify
    p_ver = sub.add_parser("verify", help="Recompute an artifact's commitment locally")
    p_ver.add_argument("mode", choices=[m.value for m in GameMode])
    p_ver.add_argument("instance_id", type=int)

    # commitment
    p_com = sub.add_parser("commitment", help="Compute a commitment digest")
    p_com.add_argument("facts", type=int, nargs="+", help="u32 facts in encoding order")
    _add_salt_options(p_com, required=True)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "create-scene": cmd_create_scene,
        "create-case": cmd_create_case,
        "resolve-scene": cmd_resolve_scene,
        "resolve-case": cmd_resolve_case,
        "verify": cmd_verify,
        "commitment": cmd_commitment,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
