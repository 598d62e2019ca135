"""IDL pin commands."""

from __future__ import annotations

import argparse

from staking_admin import integrity


def cmd_idl_verify(_: argparse.Namespace) -> int:
    integrity.verify_idl(fatal=False)
    idl = integrity.get_idl_dict()
    print(
        f"IDL OK: {integrity.compute_idl_hash()} "
        f"({idl['name']} v{idl['version']}, {len(idl['instructions'])} instructions)"
    )
    return 0


def cmd_idl_pin(_: argparse.Namespace) -> int:
    digest = integrity.pin_idl_hash()
    print(f"Pinned {integrity.IDL_PATH.name}: {digest}")
    return 0


def register_idl_subparser(subparsers: argparse._SubParsersAction) -> None:
    idl_parser = subparsers.add_parser("idl", help="Check or re-pin the embedded IDL.")
    idl_sub = idl_parser.add_subparsers(dest="idl_command", required=True)

    verify_parser = idl_sub.add_parser("verify", help="Compare the IDL with its pinned hash.")
    verify_parser.set_defaults(func=cmd_idl_verify)

    pin_parser = idl_sub.add_parser("pin", help="Rewrite the pinned hash from the current IDL.")
    pin_parser.set_defaults(func=cmd_idl_pin)
