"""Keypair loading and address parsing."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from staking_admin.errors import InvalidAddressError, InvalidAdminIdentifierError, KeyLoadError

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 64


def _keypair_from_bytes(raw: bytes, path: str) -> Keypair:
    if len(raw) != SECRET_KEY_LENGTH:
        raise KeyLoadError(
            f"Secret key in {path} has {len(raw)} bytes, expected {SECRET_KEY_LENGTH}",
            path=path,
        )
    try:
        return Keypair.from_bytes(raw)
    except ValueError as exc:
        raise KeyLoadError(f"Invalid secret key in {path}: {exc}", path=path) from exc


def load_keypair(path: Union[str, Path]) -> Keypair:
    """Load a keypair from a Solana CLI key file.

    The file holds either a JSON array of the 64 secret-key bytes (the
    ``solana-keygen`` format) or a single base58 string of the same bytes.
    """
    source = Path(path).expanduser()
    label = str(source)
    try:
        text = source.read_text(encoding="utf-8").strip()
    except FileNotFoundError as exc:
        raise KeyLoadError(f"Key file not found: {label}", path=label) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise KeyLoadError(f"Cannot read key file {label}: {exc}", path=label) from exc

    if text.startswith("["):
        try:
            data = json.loads(text)
            raw = bytes(data)
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            raise KeyLoadError(f"Key file {label} is not a JSON byte array", path=label) from exc
        return _keypair_from_bytes(raw, label)

    try:
        raw = base58.b58decode(text)
    except ValueError as exc:
        raise KeyLoadError(f"Key file {label} is neither a JSON array nor base58", path=label) from exc
    return _keypair_from_bytes(raw, label)


def parse_pubkey(value: Union[str, Pubkey]) -> Pubkey:
    if isinstance(value, Pubkey):
        return value
    try:
        return Pubkey.from_string(value.strip())
    except (ValueError, AttributeError) as exc:
        raise InvalidAddressError(f"Invalid address: {value!r}", value=str(value)) from exc


def resolve_admin_address(identifier: Union[str, Pubkey]) -> Pubkey:
    """Resolve a new-admin argument given as an address or a key file path."""
    try:
        return parse_pubkey(identifier)
    except InvalidAddressError:
        pass

    try:
        keypair = load_keypair(identifier)
    except KeyLoadError as exc:
        logger.debug(f"Admin identifier {identifier!r} is not a key file: {exc}")
        raise InvalidAdminIdentifierError(str(identifier)) from exc
    return keypair.pubkey()
