"""Transaction assembly: compute budget, blockhash, fee payer, signatures."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.transaction import Transaction

from staking_admin.types import ComputeBudget

logger = logging.getLogger(__name__)


def compute_budget_instructions(budget: Optional[ComputeBudget]) -> List[Instruction]:
    """Price then limit, the order the program's clients have always sent them."""
    if budget is None:
        return []
    return [
        set_compute_unit_price(budget.unit_price_micro_lamports),
        set_compute_unit_limit(budget.unit_limit),
    ]


@dataclass(frozen=True)
class BuiltTransaction:
    transaction: Transaction
    last_valid_block_height: int


class TransactionAssembler:
    def __init__(self, connection: AsyncClient):
        self._connection = connection

    async def latest_blockhash(self) -> Tuple[Hash, int]:
        resp = await self._connection.get_latest_blockhash(commitment=Confirmed)
        return resp.value.blockhash, resp.value.last_valid_block_height

    async def build(
        self,
        instructions: Sequence[Instruction],
        payer: Keypair,
        budget: Optional[ComputeBudget] = None,
        signers: Sequence[Keypair] = (),
    ) -> BuiltTransaction:
        """Assemble and sign with the payer (and any extra signers).

        Signing is partial: signer slots belonging to keys not supplied here
        stay empty so a co-signer can fill them later.
        """
        blockhash, last_valid = await self.latest_blockhash()
        ixs = compute_budget_instructions(budget) + list(instructions)
        message = Message.new_with_blockhash(ixs, payer.pubkey(), blockhash)
        tx = Transaction.new_unsigned(message)
        tx.partial_sign([payer, *signers], blockhash)
        logger.debug(
            f"Built tx with {len(ixs)} instructions, blockhash {blockhash}, "
            f"compute budget {'on' if budget else 'off'}"
        )
        return BuiltTransaction(transaction=tx, last_valid_block_height=last_valid)
