"""Submission pipeline: sign, broadcast, confirm.

Two paths exist. The provider path signs locally and hands the transaction
to the anchorpy provider, which broadcasts and waits for ``confirmed``. The
raw path takes already-serialized transaction bytes (lock/unlock), optionally
adds a co-signature, and broadcasts them itself.

There is no retry here. Every failure raises SubmissionError.
"""

from __future__ import annotations

import logging
from typing import Optional

from solana.exceptions import SolanaRpcException
from solana.rpc.commitment import Confirmed
from solana.rpc.core import RPCException, TransactionExpiredBlockheightExceededError, UnconfirmedTxError
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.signature import Signature
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from staking_admin.errors import CoSignerError, SubmissionError
from staking_admin.session import Session
from staking_admin.types import Operation, SubmissionResult, SubmissionStatus

logger = logging.getLogger(__name__)

RPC_ERRORS = (
    RPCException,
    SolanaRpcException,
    UnconfirmedTxError,
    TransactionExpiredBlockheightExceededError,
)

_LANDED = (TransactionConfirmationStatus.Confirmed, TransactionConfirmationStatus.Finalized)


def _op_name(operation: Optional[Operation]) -> Optional[str]:
    return operation.value if operation else None


class Submitter:
    def __init__(self, session: Session):
        self._session = session

    async def send_and_confirm(
        self,
        tx: Transaction,
        last_valid_block_height: Optional[int] = None,
        operation: Optional[Operation] = None,
    ) -> SubmissionResult:
        """Provider path: broadcast a payer-signed transaction and wait for confirmed.

        Preflight is skipped, so a program error only shows up in the landed
        signature's status; that status is checked before reporting success.
        """
        opts = TxOpts(
            skip_confirmation=False,
            skip_preflight=True,
            preflight_commitment=Confirmed,
            last_valid_block_height=last_valid_block_height,
        )
        op = _op_name(operation)
        signature = tx.signatures[0]
        try:
            signature = await self._session.provider.send(tx, opts)
            status = await self._existing_status(signature)
        except RPC_ERRORS as exc:
            raise SubmissionError(
                f"Transaction failed: {exc}",
                signature=str(signature),
                operation=op,
            ) from exc

        if status is not None and status.err is not None:
            logger.warning(f"Transaction {signature} failed: {status.err}")
            raise SubmissionError(
                f"Transaction {signature} failed: {status.err}",
                signature=str(signature),
                operation=op,
            )

        logger.info(f"txHash: {signature}")
        return SubmissionResult(signature=signature, status=SubmissionStatus.CONFIRMED, operation=operation)

    def _co_sign(self, tx: Transaction, co_signer: Keypair) -> None:
        message = tx.message
        required = list(message.account_keys[: message.header.num_required_signatures])
        if co_signer.pubkey() not in required:
            raise CoSignerError(
                f"Co-signer {co_signer.pubkey()} is not a required signer of this transaction",
                {"co_signer": str(co_signer.pubkey()), "required": [str(k) for k in required]},
            )
        tx.partial_sign([co_signer], message.recent_blockhash)
        logger.info(f"signed admin: {co_signer.pubkey()}")

    async def _existing_status(self, signature: Signature):
        if signature == Signature.default():
            return None
        resp = await self._session.connection.get_signature_statuses([signature])
        return resp.value[0] if resp.value else None

    async def add_admin_sign_and_confirm(
        self,
        tx_data: bytes,
        co_signer: Optional[Keypair] = None,
        operation: Optional[Operation] = None,
    ) -> SubmissionResult:
        """Raw path: deserialize, optionally co-sign, broadcast once, confirm.

        Bytes whose signature the cluster already holds at confirmed or
        finalized are reported as ALREADY_CONFIRMED and not re-broadcast.
        """
        op = _op_name(operation)
        try:
            tx = Transaction.from_bytes(tx_data)
        except ValueError as exc:
            raise SubmissionError(f"Cannot deserialize transaction: {exc}", operation=op) from exc

        if co_signer is not None:
            self._co_sign(tx, co_signer)
        if not tx.is_signed():
            raise SubmissionError("Transaction is missing required signatures", operation=op)

        signature = tx.signatures[0]
        try:
            status = await self._existing_status(signature)
            if status is not None and status.err is not None:
                raise SubmissionError(
                    f"Transaction {signature} already failed on-chain: {status.err}",
                    signature=str(signature),
                    operation=op,
                )
            if status is not None and status.confirmation_status in _LANDED:
                logger.info(f"Transaction already confirmed: {signature}")
                return SubmissionResult(
                    signature=signature,
                    status=SubmissionStatus.ALREADY_CONFIRMED,
                    operation=operation,
                )

            if status is None:
                opts = TxOpts(skip_preflight=False, preflight_commitment=Confirmed)
                resp = await self._session.connection.send_raw_transaction(bytes(tx), opts=opts)
                signature = resp.value
            else:
                logger.info(f"Transaction {signature} already processed, waiting for confirmation")

            confirmation = await self._session.connection.confirm_transaction(signature, Confirmed)
        except RPC_ERRORS as exc:
            raise SubmissionError(
                f"Transaction failed: {exc}", signature=str(signature), operation=op
            ) from exc

        confirmed = confirmation.value[0] if confirmation.value else None
        if confirmed is not None and confirmed.err is not None:
            raise SubmissionError(
                f"Transaction {signature} failed: {confirmed.err}",
                signature=str(signature),
                operation=op,
            )

        logger.info(f"Transaction confirmed: {signature}")
        return SubmissionResult(signature=signature, status=SubmissionStatus.CONFIRMED, operation=operation)
