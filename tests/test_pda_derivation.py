"""
test_pda_derivation.py - Tests for staking account address derivation.

Tests:
    1. derive_global_pool_address() is deterministic and off-curve
    2. derive_user_pool_address() matches create_with_seed("user-pool")
    3. Distinct users get distinct user pools
    4. Token Metadata derivations differ per mint and per seed
"""

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from staking_admin.constants import (
    GLOBAL_AUTHORITY_SEED,
    PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    USER_POOL_SEED,
)
from staking_admin.pda import (
    derive_edition_address,
    derive_global_pool_address,
    derive_metadata_address,
    derive_token_account,
    derive_token_record_address,
    derive_user_pool_address,
)


class TestGlobalPool:
    def test_deterministic(self):
        assert derive_global_pool_address() == derive_global_pool_address()

    def test_matches_find_program_address(self):
        expected, _ = Pubkey.find_program_address([b"global-authority"], PROGRAM_ID)
        assert GLOBAL_AUTHORITY_SEED == "global-authority"
        assert derive_global_pool_address(PROGRAM_ID) == expected

    def test_is_off_curve(self):
        """A PDA can never be a wallet key."""
        assert not derive_global_pool_address().is_on_curve()

    def test_depends_on_program_id(self):
        other_program = Keypair().pubkey()
        assert derive_global_pool_address(other_program) != derive_global_pool_address()


class TestUserPool:
    def test_is_seeded_address(self):
        user = Keypair().pubkey()
        expected = Pubkey.create_with_seed(user, "user-pool", PROGRAM_ID)
        assert USER_POOL_SEED == "user-pool"
        assert derive_user_pool_address(user) == expected

    def test_distinct_users_distinct_pools(self):
        a, b = Keypair().pubkey(), Keypair().pubkey()
        assert derive_user_pool_address(a) != derive_user_pool_address(b)

    def test_never_equals_global_pool(self):
        user = Keypair().pubkey()
        assert derive_user_pool_address(user) != derive_global_pool_address()


class TestTokenMetadataAccounts:
    def test_metadata_and_edition_differ(self):
        mint = Keypair().pubkey()
        assert derive_metadata_address(mint) != derive_edition_address(mint)

    def test_metadata_seed_layout(self):
        mint = Keypair().pubkey()
        expected, _ = Pubkey.find_program_address(
            [b"metadata", bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
            TOKEN_METADATA_PROGRAM_ID,
        )
        assert derive_metadata_address(mint) == expected

    def test_token_record_depends_on_token_account(self):
        mint = Keypair().pubkey()
        owner_a, owner_b = Keypair().pubkey(), Keypair().pubkey()
        record_a = derive_token_record_address(mint, derive_token_account(owner_a, mint))
        record_b = derive_token_record_address(mint, derive_token_account(owner_b, mint))
        assert record_a != record_b

    def test_token_account_is_per_owner_and_mint(self):
        owner = Keypair().pubkey()
        mint_a, mint_b = Keypair().pubkey(), Keypair().pubkey()
        assert derive_token_account(owner, mint_a) != derive_token_account(owner, mint_b)
