"""Transaction assembly and compute-budget tests."""

import pytest
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair

from staking_admin.config import DEFAULT_COMPUTE_BUDGETS, INITIALIZE_BUDGET, uniform_compute_budgets
from staking_admin.constants import PROGRAM_ID
from staking_admin.transactions import TransactionAssembler, compute_budget_instructions
from staking_admin.types import ComputeBudget, Operation

from tests.conftest import TEST_BLOCKHASH, TEST_LAST_VALID_BLOCK_HEIGHT


def _program_ix(*signers):
    return Instruction(
        PROGRAM_ID,
        b"\x00",
        [AccountMeta(s, is_signer=True, is_writable=False) for s in signers],
    )


class TestComputeBudgetInstructions:
    def test_none_means_no_prefix(self):
        assert compute_budget_instructions(None) == []

    def test_price_then_limit(self):
        ixs = compute_budget_instructions(ComputeBudget(unit_price_micro_lamports=7, unit_limit=300_000))
        assert ixs == [set_compute_unit_price(7), set_compute_unit_limit(300_000)]

    def test_initialize_defaults(self):
        assert INITIALIZE_BUDGET.unit_price_micro_lamports == 5_000_000
        assert INITIALIZE_BUDGET.unit_limit == 200_000

    def test_only_initialize_budgeted_by_default(self):
        budgeted = [op for op, budget in DEFAULT_COMPUTE_BUDGETS.items() if budget is not None]
        assert budgeted == [Operation.INITIALIZE]

    def test_uniform_budgets_cover_every_operation(self):
        budgets = uniform_compute_budgets()
        assert set(budgets) == set(Operation)
        assert all(b == INITIALIZE_BUDGET for b in budgets.values())


class TestTransactionAssembler:
    @pytest.mark.asyncio
    async def test_build_signs_with_payer(self, fake_connection):
        payer = Keypair()
        built = await TransactionAssembler(fake_connection).build([_program_ix()], payer)

        tx = built.transaction
        assert tx.is_signed()
        assert tx.message.account_keys[0] == payer.pubkey()
        assert tx.message.recent_blockhash == TEST_BLOCKHASH
        assert built.last_valid_block_height == TEST_LAST_VALID_BLOCK_HEIGHT
        assert len(tx.message.instructions) == 1

    @pytest.mark.asyncio
    async def test_build_prepends_compute_budget(self, fake_connection):
        payer = Keypair()
        built = await TransactionAssembler(fake_connection).build(
            [_program_ix()], payer, budget=INITIALIZE_BUDGET
        )

        message = built.transaction.message
        program_ids = [message.account_keys[ix.program_id_index] for ix in message.instructions]
        budget_program = set_compute_unit_price(1).program_id
        assert program_ids == [budget_program, budget_program, PROGRAM_ID]

    @pytest.mark.asyncio
    async def test_missing_signer_slot_left_empty(self, fake_connection):
        payer, other = Keypair(), Keypair()
        built = await TransactionAssembler(fake_connection).build([_program_ix(other.pubkey())], payer)

        assert built.transaction.message.header.num_required_signatures == 2
        assert not built.transaction.is_signed()

    @pytest.mark.asyncio
    async def test_extra_signers(self, fake_connection):
        payer, other = Keypair(), Keypair()
        built = await TransactionAssembler(fake_connection).build(
            [_program_ix(other.pubkey())], payer, signers=[other]
        )

        assert built.transaction.is_signed()
