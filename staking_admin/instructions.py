"""Instruction builders for the staking program.

``InstructionBuilder`` is the capability the admin operations depend on, one
method per instruction kind. ``AnchorInstructionBuilder`` implements it on top
of the anchorpy program client, so the program-specific encoding (account
order, discriminators, borsh args) stays inside the IDL.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol, Sequence

from anchorpy import Context, Program
from solana.rpc.async_api import AsyncClient
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYS_PROGRAM_ID
from solders.system_program import CreateAccountWithSeedParams, create_account_with_seed
from solders.sysvar import INSTRUCTIONS as SYSVAR_INSTRUCTIONS
from solders.sysvar import RENT as SYSVAR_RENT
from spl.token.constants import TOKEN_PROGRAM_ID

from staking_admin.constants import (
    AUTH_RULES_PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    USER_POOL_SEED,
    USER_POOL_SIZE,
)
from staking_admin.pda import (
    derive_edition_address,
    derive_global_pool_address,
    derive_metadata_address,
    derive_token_account,
    derive_token_record_address,
    derive_user_pool_address,
)
from staking_admin.transactions import TransactionAssembler
from staking_admin.types import ComputeBudget

logger = logging.getLogger(__name__)


class InstructionBuilder(Protocol):
    def initialize(self, admin: Pubkey) -> Instruction: ...

    def change_admin(self, admin: Pubkey, new_admin: Pubkey) -> Instruction: ...

    async def initialize_user_pool(self, owner: Pubkey, connection: AsyncClient) -> List[Instruction]: ...

    async def lock_pnft(
        self,
        owner: Keypair,
        mint: Pubkey,
        connection: AsyncClient,
        budget: Optional[ComputeBudget] = None,
    ) -> bytes: ...

    async def unlock_pnft(
        self,
        owner: Keypair,
        mint: Pubkey,
        connection: AsyncClient,
        budget: Optional[ComputeBudget] = None,
    ) -> bytes: ...


class AnchorInstructionBuilder:
    def __init__(self, program: Program, auth_rules: Optional[Pubkey] = None):
        self._program = program
        # Token Metadata reads its own program id as "no rule set"
        self._auth_rules = auth_rules or TOKEN_METADATA_PROGRAM_ID

    @property
    def global_pool(self) -> Pubkey:
        return derive_global_pool_address(self._program.program_id)

    def initialize(self, admin: Pubkey) -> Instruction:
        return self._program.instruction["initialize"](
            ctx=Context(
                accounts={
                    "admin": admin,
                    "global_pool": self.global_pool,
                    "system_program": SYS_PROGRAM_ID,
                    "rent": SYSVAR_RENT,
                }
            )
        )

    def change_admin(self, admin: Pubkey, new_admin: Pubkey) -> Instruction:
        return self._program.instruction["change_admin"](
            new_admin,
            ctx=Context(accounts={"admin": admin, "global_pool": self.global_pool}),
        )

    async def initialize_user_pool(self, owner: Pubkey, connection: AsyncClient) -> List[Instruction]:
        """Create the seeded user-pool account, then let the program initialize it."""
        user_pool = derive_user_pool_address(owner, self._program.program_id)
        resp = await connection.get_minimum_balance_for_rent_exemption(USER_POOL_SIZE)
        lamports = resp.value
        logger.debug(f"User pool {user_pool}: {USER_POOL_SIZE} bytes, {lamports} lamports rent")

        create_ix = create_account_with_seed(
            CreateAccountWithSeedParams(
                from_pubkey=owner,
                to_pubkey=user_pool,
                base=owner,
                seed=USER_POOL_SEED,
                lamports=lamports,
                space=USER_POOL_SIZE,
                owner=self._program.program_id,
            )
        )
        init_ix = self._program.instruction["initialize_user_pool"](
            ctx=Context(accounts={"owner": owner, "user_pool": user_pool})
        )
        return [create_ix, init_ix]

    def _pnft_accounts(self, owner: Pubkey, mint: Pubkey) -> Dict[str, Pubkey]:
        token_account = derive_token_account(owner, mint)
        return {
            "owner": owner,
            "global_pool": self.global_pool,
            "user_pool": derive_user_pool_address(owner, self._program.program_id),
            "token_account": token_account,
            "token_mint": mint,
            "token_mint_edition": derive_edition_address(mint),
            "token_mint_record": derive_token_record_address(mint, token_account),
            "mint_metadata": derive_metadata_address(mint),
            "auth_rules": self._auth_rules,
            "sysvar_instructions": SYSVAR_INSTRUCTIONS,
            "system_program": SYS_PROGRAM_ID,
            "token_program": TOKEN_PROGRAM_ID,
            "token_metadata_program": TOKEN_METADATA_PROGRAM_ID,
            "auth_rules_program": AUTH_RULES_PROGRAM_ID,
        }

    def lock_pnft_instruction(self, owner: Pubkey, mint: Pubkey) -> Instruction:
        return self._program.instruction["lock_pnft"](
            ctx=Context(accounts=self._pnft_accounts(owner, mint))
        )

    def unlock_pnft_instruction(self, owner: Pubkey, mint: Pubkey) -> Instruction:
        return self._program.instruction["unlock_pnft"](
            ctx=Context(accounts=self._pnft_accounts(owner, mint))
        )

    async def _signed_bytes(
        self,
        instructions: Sequence[Instruction],
        owner: Keypair,
        connection: AsyncClient,
        budget: Optional[ComputeBudget],
    ) -> bytes:
        built = await TransactionAssembler(connection).build(instructions, owner, budget=budget)
        return bytes(built.transaction)

    async def lock_pnft(
        self,
        owner: Keypair,
        mint: Pubkey,
        connection: AsyncClient,
        budget: Optional[ComputeBudget] = None,
    ) -> bytes:
        """Owner-signed, serialized lock transaction."""
        ix = self.lock_pnft_instruction(owner.pubkey(), mint)
        return await self._signed_bytes([ix], owner, connection, budget)

    async def unlock_pnft(
        self,
        owner: Keypair,
        mint: Pubkey,
        connection: AsyncClient,
        budget: Optional[ComputeBudget] = None,
    ) -> bytes:
        ix = self.unlock_pnft_instruction(owner.pubkey(), mint)
        return await self._signed_bytes([ix], owner, connection, budget)
