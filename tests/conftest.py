"""
Shared fixtures for the staking admin test suite.

Nothing here talks to a cluster. ``FakeLedger`` stands in for the anchorpy
provider and program accounts: it applies initialize / change_admin
instructions it receives to an in-memory global pool table, so admin
operations can be exercised end to end with real instruction encoding.
"""

import hashlib
import json
import sys
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from anchorpy import Program
from anchorpy.error import AccountDoesNotExistError
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

from staking_admin.constants import PROGRAM_ID
from staking_admin.integrity import load_idl
from staking_admin.session import Session


TEST_BLOCKHASH = Hash(bytes([7] * 32))
TEST_LAST_VALID_BLOCK_HEIGHT = 1_000


def sighash(name: str) -> bytes:
    """Anchor instruction discriminator."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def write_keypair_file(path: Path, keypair: Keypair) -> Path:
    path.write_text(json.dumps(list(bytes(keypair))), encoding="utf-8")
    return path


def partially_signed_tx(payer: Keypair, extra_signer: Pubkey = None) -> Transaction:
    """Payer-signed transaction, optionally requiring a second signature."""
    accounts = []
    if extra_signer is not None:
        accounts.append(AccountMeta(extra_signer, is_signer=True, is_writable=False))
    ix = Instruction(PROGRAM_ID, b"\x01", accounts)
    message = Message.new_with_blockhash([ix], payer.pubkey(), TEST_BLOCKHASH)
    tx = Transaction.new_unsigned(message)
    tx.partial_sign([payer], TEST_BLOCKHASH)
    return tx


# ============================================================================
# Fake ledger
# ============================================================================

class FakeAccountClient:
    def __init__(self, store: dict):
        self._store = store

    async def fetch(self, address: Pubkey, commitment=None):
        if address not in self._store:
            raise AccountDoesNotExistError(f"Account {address} does not exist")
        return self._store[address]


class ProgramFailure(Exception):
    """Instruction rejected by the in-memory program."""


class FakeLedger:
    """Provider stand-in that executes staking instructions in memory.

    Sends skip preflight, so a rejected transaction still lands: its
    signature status carries ``err`` and no state changes.
    """

    def __init__(self, program_id: Pubkey = PROGRAM_ID):
        self.program_id = program_id
        self.global_pools = {}
        self.user_pools = {}
        self.statuses = {}
        self.sent = []

    def account_namespace(self) -> dict:
        return {
            "GlobalPool": FakeAccountClient(self.global_pools),
            "UserPool": FakeAccountClient(self.user_pools),
        }

    async def send(self, tx: Transaction, opts=None):
        signature = tx.signatures[0]
        try:
            self.apply(tx)
            err = None
        except ProgramFailure as exc:
            err = str(exc)
        self.statuses[signature] = SimpleNamespace(
            err=err, confirmation_status=TransactionConfirmationStatus.Confirmed
        )
        self.sent.append(tx)
        return signature

    async def get_signature_statuses(self, signatures):
        return SimpleNamespace(value=[self.statuses.get(s) for s in signatures])

    def apply(self, tx: Transaction) -> None:
        keys = tx.message.account_keys
        for ix in tx.message.instructions:
            if keys[ix.program_id_index] != self.program_id:
                continue
            accounts = [keys[i] for i in ix.accounts]
            discriminator, args = ix.data[:8], ix.data[8:]
            if discriminator == sighash("initialize"):
                if accounts[1] in self.global_pools:
                    raise ProgramFailure("account already in use")
                self.global_pools[accounts[1]] = SimpleNamespace(admin=accounts[0], total_locked_count=0)
            elif discriminator == sighash("change_admin"):
                pool = self.global_pools.get(accounts[1])
                if pool is None or pool.admin != accounts[0]:
                    raise ProgramFailure("InstructionError(0, Custom(6000))")
                pool.admin = Pubkey.from_bytes(args[:32])


# ============================================================================
# Connection / session fixtures
# ============================================================================

@pytest.fixture
def payer() -> Keypair:
    return Keypair()


@pytest.fixture
def keypair_file(tmp_path: Path, payer: Keypair) -> Path:
    return write_keypair_file(tmp_path / "id.json", payer)


@pytest.fixture
def fake_connection():
    """AsyncClient stand-in; every RPC the package uses is an AsyncMock."""
    connection = MagicMock()
    connection.get_latest_blockhash = AsyncMock(
        return_value=SimpleNamespace(
            value=SimpleNamespace(
                blockhash=TEST_BLOCKHASH,
                last_valid_block_height=TEST_LAST_VALID_BLOCK_HEIGHT,
            )
        )
    )
    connection.get_minimum_balance_for_rent_exemption = AsyncMock(
        return_value=SimpleNamespace(value=29_063_040)
    )
    connection.get_signature_statuses = AsyncMock(return_value=SimpleNamespace(value=[None]))
    connection.send_raw_transaction = AsyncMock(
        side_effect=lambda raw, opts=None: SimpleNamespace(value=Transaction.from_bytes(raw).signatures[0])
    )
    connection.confirm_transaction = AsyncMock(
        return_value=SimpleNamespace(value=[SimpleNamespace(err=None)])
    )
    connection.close = AsyncMock()
    return connection


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
def program(ledger: FakeLedger) -> Program:
    """Real anchorpy client over the embedded IDL, accounts served by the ledger."""
    client = Program(load_idl(), PROGRAM_ID, ledger)
    client.account = ledger.account_namespace()
    return client


@pytest.fixture
def session(fake_connection, payer: Keypair, ledger: FakeLedger, program: Program) -> Session:
    fake_connection.get_signature_statuses = AsyncMock(side_effect=ledger.get_signature_statuses)
    return Session(
        connection=fake_connection,
        payer=payer,
        provider=ledger,
        program=program,
        endpoint="http://127.0.0.1:8899",
    )


@pytest.fixture(autouse=True)
def clean_staking_env(monkeypatch):
    for name in (
        "STAKING_CLUSTER",
        "STAKING_RPC_URL",
        "STAKING_KEYPAIR_PATH",
        "STAKING_COMPUTE_BUDGET_ALL",
    ):
        monkeypatch.delenv(name, raising=False)
