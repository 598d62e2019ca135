"""Deterministic account addresses for the staking program.

Only the derivations needed to locate accounts live here. The global pool is
a PDA; the user pool is a *seeded* address (``create_with_seed``) owned by
the program, created client-side before ``initialize_user_pool`` runs. The
remaining helpers locate the Token Metadata accounts a programmable NFT
lock/unlock touches.
"""

from __future__ import annotations

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from staking_admin.constants import (
    EDITION_SEED,
    GLOBAL_AUTHORITY_SEED,
    METADATA_SEED,
    PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_RECORD_SEED,
    USER_POOL_SEED,
)


def derive_global_pool_address(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    pda, _bump = Pubkey.find_program_address([GLOBAL_AUTHORITY_SEED.encode()], program_id)
    return pda


def derive_user_pool_address(user: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    return Pubkey.create_with_seed(user, USER_POOL_SEED, program_id)


def derive_metadata_address(mint: Pubkey) -> Pubkey:
    pda, _bump = Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return pda


def derive_edition_address(mint: Pubkey) -> Pubkey:
    pda, _bump = Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint), EDITION_SEED],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return pda


def derive_token_record_address(mint: Pubkey, token_account: Pubkey) -> Pubkey:
    pda, _bump = Pubkey.find_program_address(
        [
            METADATA_SEED,
            bytes(TOKEN_METADATA_PROGRAM_ID),
            bytes(mint),
            TOKEN_RECORD_SEED,
            bytes(token_account),
        ],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return pda


def derive_token_account(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Owner's associated token account for ``mint``."""
    return get_associated_token_address(owner, mint)
