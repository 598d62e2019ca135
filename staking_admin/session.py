"""Connection/session bootstrap."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from anchorpy import Program, Provider, Wallet
from anchorpy_core.idl import Idl
from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from staking_admin.config import resolve_endpoint
from staking_admin.constants import PROGRAM_ID
from staking_admin.integrity import load_idl
from staking_admin.keys import load_keypair

logger = logging.getLogger(__name__)

PROVIDER_OPTS = TxOpts(skip_preflight=True, preflight_commitment=Confirmed)


@dataclass
class Session:
    """Connection, signing identity and bound program client for one admin run."""
    connection: AsyncClient
    payer: Keypair
    provider: Provider
    program: Program
    endpoint: str

    @classmethod
    def connect(
        cls,
        cluster: str,
        keypair_path: Union[str, Path],
        rpc: Optional[str] = None,
    ) -> "Session":
        """Bind a session to ``rpc`` if given, otherwise to the named cluster."""
        endpoint = resolve_endpoint(cluster, rpc)
        payer = load_keypair(keypair_path)
        # no client is opened when the IDL fails verification
        idl = load_idl()
        connection = AsyncClient(endpoint, commitment=Confirmed)
        return cls.from_parts(connection, payer, endpoint=endpoint, idl=idl)

    @classmethod
    def from_parts(
        cls,
        connection: AsyncClient,
        payer: Keypair,
        endpoint: str = "",
        program_id: Pubkey = PROGRAM_ID,
        idl: Optional[Idl] = None,
    ) -> "Session":
        provider = Provider(connection, Wallet(payer), PROVIDER_OPTS)
        program = Program(idl if idl is not None else load_idl(), program_id, provider)

        logger.info(f"Wallet Address: {payer.pubkey()}")
        logger.info(f"ProgramId: {program.program_id}")
        return cls(
            connection=connection,
            payer=payer,
            provider=provider,
            program=program,
            endpoint=endpoint,
        )

    @property
    def payer_pubkey(self) -> Pubkey:
        return self.payer.pubkey()

    async def close(self) -> None:
        await self.connection.close()

    async def __aenter__(self) -> "Session":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
