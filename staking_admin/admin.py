"""Admin operations for the staking program, bound to an explicit session."""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Union

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from staking_admin.config import DEFAULT_COMPUTE_BUDGETS
from staking_admin.instructions import AnchorInstructionBuilder, InstructionBuilder
from staking_admin.keys import parse_pubkey, resolve_admin_address
from staking_admin.session import Session
from staking_admin.state import StateReader
from staking_admin.submission import Submitter
from staking_admin.transactions import TransactionAssembler
from staking_admin.types import (
    AccountLookup,
    ComputeBudget,
    GlobalPoolView,
    Operation,
    SubmissionResult,
    UserPoolView,
)

logger = logging.getLogger(__name__)


class StakingAdmin:
    """Exported operation set.

    ``compute_budgets`` maps each operation to the compute-budget prefix its
    transaction carries (``None`` for no prefix). ``co_signer``, when set,
    co-signs lock/unlock transactions on the raw submission path.
    """

    def __init__(
        self,
        session: Session,
        builder: Optional[InstructionBuilder] = None,
        compute_budgets: Optional[Dict[Operation, Optional[ComputeBudget]]] = None,
        co_signer: Optional[Keypair] = None,
    ):
        self.session = session
        self.builder = builder or AnchorInstructionBuilder(session.program)
        self.compute_budgets = dict(DEFAULT_COMPUTE_BUDGETS)
        if compute_budgets:
            self.compute_budgets.update(compute_budgets)
        self.co_signer = co_signer
        self.reader = StateReader(session.program)
        self.submitter = Submitter(session)
        self.assembler = TransactionAssembler(session.connection)

    @property
    def payer(self) -> Keypair:
        return self.session.payer

    async def _submit(self, operation: Operation, instructions: Sequence[Instruction]) -> SubmissionResult:
        built = await self.assembler.build(
            instructions,
            self.payer,
            budget=self.compute_budgets.get(operation),
        )
        return await self.submitter.send_and_confirm(
            built.transaction,
            last_valid_block_height=built.last_valid_block_height,
            operation=operation,
        )

    async def init_project(self) -> SubmissionResult:
        """Initialize the global pool with the session identity as admin."""
        ix = self.builder.initialize(self.payer.pubkey())
        return await self._submit(Operation.INITIALIZE, [ix])

    async def change_admin(self, new_admin: Union[str, Pubkey]) -> SubmissionResult:
        """``new_admin`` is a base58 address or a path to the new admin's key file."""
        new_admin_addr = resolve_admin_address(new_admin)
        logger.info(f"Changing admin to {new_admin_addr}")
        ix = self.builder.change_admin(self.payer.pubkey(), new_admin_addr)
        return await self._submit(Operation.CHANGE_ADMIN, [ix])

    async def initialize_user_pool(self) -> SubmissionResult:
        ixs = await self.builder.initialize_user_pool(self.payer.pubkey(), self.session.connection)
        return await self._submit(Operation.INITIALIZE_USER_POOL, ixs)

    async def lock_pnft(self, mint: Union[str, Pubkey]) -> SubmissionResult:
        tx_data = await self.builder.lock_pnft(
            self.payer,
            parse_pubkey(mint),
            self.session.connection,
            self.compute_budgets.get(Operation.LOCK_PNFT),
        )
        return await self.add_admin_sign_and_confirm(tx_data, operation=Operation.LOCK_PNFT)

    async def unlock_pnft(self, mint: Union[str, Pubkey]) -> SubmissionResult:
        tx_data = await self.builder.unlock_pnft(
            self.payer,
            parse_pubkey(mint),
            self.session.connection,
            self.compute_budgets.get(Operation.UNLOCK_PNFT),
        )
        return await self.add_admin_sign_and_confirm(tx_data, operation=Operation.UNLOCK_PNFT)

    async def add_admin_sign_and_confirm(
        self,
        tx_data: bytes,
        operation: Optional[Operation] = None,
    ) -> SubmissionResult:
        return await self.submitter.add_admin_sign_and_confirm(
            tx_data,
            co_signer=self.co_signer,
            operation=operation,
        )

    async def get_global_state(self) -> AccountLookup[GlobalPoolView]:
        return await self.reader.get_global_state()

    async def get_user_state(self, user: Optional[Union[str, Pubkey]] = None) -> AccountLookup[UserPoolView]:
        """Defaults to the session identity's user pool."""
        owner = parse_pubkey(user) if user is not None else self.payer.pubkey()
        return await self.reader.get_user_state(owner)

    async def get_global_view(self) -> GlobalPoolView:
        return await self.reader.get_global_view()

    async def get_global_info(self) -> Dict[str, str]:
        return await self.reader.get_global_info()
