"""Staking admin CLI entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from staking_admin.admin import StakingAdmin
from staking_admin.config import CLUSTERS, StakingConfig
from staking_admin.errors import StakingAdminError
from staking_admin.keys import load_keypair
from staking_admin.session import Session
from staking_admin.types import SubmissionResult
from staking_cli.idl import register_idl_subparser

logger = logging.getLogger(__name__)

AdminCommand = Callable[[StakingAdmin, argparse.Namespace], Awaitable[int]]


def _tag(level: str) -> str:
    return f"[{level}]"


def _print_status(level: str, message: str) -> None:
    print(f"{_tag(level)} {message}")


def _print_submission(result: SubmissionResult) -> None:
    if result.already_confirmed:
        _print_status("WARN", f"Already confirmed, not re-sent: {result.signature}")
    else:
        _print_status("OK", f"txHash: {result.signature}")


def _config_from_args(args: argparse.Namespace) -> StakingConfig:
    config = StakingConfig.from_env(args.env_file)
    if args.cluster:
        config.cluster = args.cluster
    if args.keypair:
        config.keypair_path = args.keypair
    if args.rpc:
        config.rpc_url = args.rpc
    return config


async def _run_with_admin(args: argparse.Namespace, command: AdminCommand) -> int:
    config = _config_from_args(args)
    co_signer = load_keypair(args.co_signer) if getattr(args, "co_signer", None) else None
    session = Session.connect(config.cluster, config.keypair_path, config.rpc_url)
    async with session:
        admin = StakingAdmin(session, compute_budgets=config.compute_budgets, co_signer=co_signer)
        return await command(admin, args)


def _admin_command(command: AdminCommand) -> Callable[[argparse.Namespace], int]:
    def handler(args: argparse.Namespace) -> int:
        return asyncio.run(_run_with_admin(args, command))

    return handler


async def _status(admin: StakingAdmin, args: argparse.Namespace) -> int:
    if args.full:
        info = (await admin.get_global_view()).to_dict()
    else:
        info = await admin.get_global_info()
    print(json.dumps(info, indent=2))
    return 0


async def _user_status(admin: StakingAdmin, args: argparse.Namespace) -> int:
    lookup = await admin.get_user_state(args.address)
    if lookup.is_missing:
        _print_status("WARN", f"User pool {lookup.address} not initialized")
        return 0
    if not lookup.is_found:
        _print_status("ERROR", f"Could not read user pool {lookup.address}: {lookup.error}")
        return 1
    print(json.dumps(lookup.value.to_dict(), indent=2))
    return 0


async def _init(admin: StakingAdmin, args: argparse.Namespace) -> int:
    _print_submission(await admin.init_project())
    return 0


async def _change_admin(admin: StakingAdmin, args: argparse.Namespace) -> int:
    _print_submission(await admin.change_admin(args.new_admin))
    return 0


async def _init_user(admin: StakingAdmin, args: argparse.Namespace) -> int:
    _print_submission(await admin.initialize_user_pool())
    return 0


async def _lock(admin: StakingAdmin, args: argparse.Namespace) -> int:
    _print_submission(await admin.lock_pnft(args.mint))
    return 0


async def _unlock(admin: StakingAdmin, args: argparse.Namespace) -> int:
    _print_submission(await admin.unlock_pnft(args.mint))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="staking", description="pNFT staking program admin CLI.")
    parser.add_argument("-e", "--env", "--cluster", dest="cluster", choices=CLUSTERS, help="Solana cluster (default: STAKING_CLUSTER or devnet).")
    parser.add_argument("-k", "--keypair", help="Signer key file (default: STAKING_KEYPAIR_PATH).")
    parser.add_argument("-r", "--rpc", help="Explicit RPC URL; overrides --cluster.")
    parser.add_argument("--env-file", type=Path, default=Path(".env"), help="dotenv file to load.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    status_parser = subparsers.add_parser("status", help="Show global pool info.")
    status_parser.add_argument("--full", action="store_true", help="Include every global pool field.")
    status_parser.set_defaults(func=_admin_command(_status))

    user_parser = subparsers.add_parser("user-status", help="Show a user pool.")
    user_parser.add_argument("-a", "--address", help="User address (default: signer).")
    user_parser.set_defaults(func=_admin_command(_user_status))

    init_parser = subparsers.add_parser("init", help="Initialize the global pool.")
    init_parser.set_defaults(func=_admin_command(_init))

    change_parser = subparsers.add_parser("change-admin", help="Transfer program admin.")
    change_parser.add_argument("new_admin", help="New admin address or key file.")
    change_parser.set_defaults(func=_admin_command(_change_admin))

    init_user_parser = subparsers.add_parser("init-user", help="Initialize the signer's user pool.")
    init_user_parser.set_defaults(func=_admin_command(_init_user))

    for name, handler, help_text in (
        ("lock", _lock, "Lock a programmable NFT."),
        ("unlock", _unlock, "Unlock a programmable NFT."),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("mint", help="NFT mint address.")
        sub.add_argument("--co-signer", help="Key file of an extra required signer.")
        sub.set_defaults(func=_admin_command(handler))

    register_idl_subparser(subparsers)

    return parser


def run(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        exit_code = args.func(args)
    except StakingAdminError as exc:
        _print_status("ERROR", f"{exc.code}: {exc.message}")
        exit_code = 1
    raise SystemExit(exit_code)
