"""Read-only access to staking program accounts."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, TypeVar

from anchorpy import Program
from anchorpy.error import AccountDoesNotExistError
from solana.rpc.commitment import Confirmed
from solders.pubkey import Pubkey

from staking_admin.errors import AccountFetchError, GlobalStateMissingError
from staking_admin.pda import derive_global_pool_address, derive_user_pool_address
from staking_admin.types import AccountLookup, GlobalPoolView, UserPoolView

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StateReader:
    """Fetches and decodes GlobalPool / UserPool accounts through the program client."""

    def __init__(self, program: Program):
        self._program = program

    async def _lookup(
        self,
        account_name: str,
        address: Pubkey,
        to_view: Callable[[Any], T],
    ) -> AccountLookup[T]:
        try:
            account = await self._program.account[account_name].fetch(address, Confirmed)
        except AccountDoesNotExistError:
            logger.debug(f"{account_name} {address} does not exist")
            return AccountLookup.not_found(address)
        except Exception as exc:
            logger.warning(f"Failed to fetch {account_name} {address}: {exc}")
            return AccountLookup.failed(address, exc)
        return AccountLookup.found(address, to_view(account))

    async def get_global_state(self) -> AccountLookup[GlobalPoolView]:
        address = derive_global_pool_address(self._program.program_id)
        logger.debug(f"globalPool: {address}")
        return await self._lookup("GlobalPool", address, GlobalPoolView.from_account)

    async def get_user_state(self, user: Pubkey) -> AccountLookup[UserPoolView]:
        address = derive_user_pool_address(user, self._program.program_id)
        logger.debug(f"userPoolKey: {address}")
        return await self._lookup("UserPool", address, UserPoolView.from_account)

    async def get_global_view(self) -> GlobalPoolView:
        """Decoded global pool; raises when it is absent or unreadable."""
        lookup = await self.get_global_state()
        if lookup.is_missing:
            raise GlobalStateMissingError(str(lookup.address))
        if not lookup.is_found:
            raise AccountFetchError(
                f"Could not read global pool {lookup.address}: {lookup.error}",
                address=str(lookup.address),
            ) from lookup.error
        return lookup.value

    async def get_global_info(self) -> Dict[str, str]:
        view = await self.get_global_view()
        return {"admin": str(view.admin)}
