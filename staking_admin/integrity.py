"""IDL hash enforcement for the embedded staking program schema.

The program client is built from ``idl/staking.json``. A drifted IDL silently
mis-encodes instructions and mis-decodes accounts, so the file is pinned by a
SHA-256 digest stored beside it and checked before every session bootstrap.
"""

from __future__ import annotations

import hashlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from anchorpy_core.idl import Idl

from staking_admin.errors import IDLIntegrityError

logger = logging.getLogger(__name__)

IDL_DIR = Path(__file__).resolve().parent / "idl"
IDL_PATH = IDL_DIR / "staking.json"
HASH_PATH = IDL_DIR / "staking.json.sha256"


def compute_idl_hash() -> str:
    """SHA-256 hex digest of the IDL file bytes."""
    return hashlib.sha256(IDL_PATH.read_bytes()).hexdigest()


def get_expected_hash() -> str:
    if not HASH_PATH.exists():
        raise FileNotFoundError(f"IDL hash file not found: {HASH_PATH}")
    return HASH_PATH.read_text(encoding="utf-8").strip()


def verify_idl(fatal: bool = True) -> bool:
    """Check the IDL against its pinned hash.

    Raises FileNotFoundError if the IDL is missing. On mismatch, exits the
    process when ``fatal`` is set, otherwise raises IDLIntegrityError.
    """
    if not IDL_PATH.exists():
        raise FileNotFoundError(f"IDL file not found: {IDL_PATH}")

    actual = compute_idl_hash()
    expected = get_expected_hash()
    if actual != expected:
        message = f"IDL hash mismatch: expected {expected[:16]}..., got {actual[:16]}..."
        logger.error(message)
        if fatal:
            sys.exit(message)
        raise IDLIntegrityError(message, {"expected": expected, "actual": actual})

    logger.debug(f"IDL verified: {actual[:16]}...")
    return True


def get_idl_dict() -> Dict[str, Any]:
    verify_idl(fatal=True)
    return json.loads(IDL_PATH.read_text(encoding="utf-8"))


def load_idl() -> Idl:
    """Verified IDL parsed for anchorpy."""
    verify_idl(fatal=False)
    return Idl.from_json(IDL_PATH.read_text(encoding="utf-8"))


def pin_idl_hash() -> str:
    """Rewrite the hash file from the current IDL bytes."""
    digest = compute_idl_hash()
    HASH_PATH.write_text(digest + "\n", encoding="utf-8")
    logger.info(f"Pinned IDL hash {digest[:16]}... to {HASH_PATH.name}")
    return digest
