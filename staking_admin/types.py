"""Typed views and result values."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from solders.pubkey import Pubkey
from solders.signature import Signature

T = TypeVar("T")


class Operation(Enum):
    """Transaction-producing operations."""
    INITIALIZE = "initialize"
    CHANGE_ADMIN = "change_admin"
    INITIALIZE_USER_POOL = "initialize_user_pool"
    LOCK_PNFT = "lock_pnft"
    UNLOCK_PNFT = "unlock_pnft"


@dataclass(frozen=True)
class ComputeBudget:
    unit_price_micro_lamports: int
    unit_limit: int


@dataclass(frozen=True)
class GlobalPoolView:
    admin: Pubkey
    total_locked_count: int = 0

    @classmethod
    def from_account(cls, account: Any) -> "GlobalPoolView":
        return cls(admin=account.admin, total_locked_count=int(account.total_locked_count))

    def to_dict(self) -> dict:
        return {"admin": str(self.admin), "total_locked_count": self.total_locked_count}


@dataclass(frozen=True)
class LockedItemView:
    mint: Pubkey
    lock_time: int


@dataclass(frozen=True)
class UserPoolView:
    owner: Pubkey
    item_count: int
    items: List[LockedItemView] = field(default_factory=list)

    @classmethod
    def from_account(cls, account: Any) -> "UserPoolView":
        count = int(account.item_count)
        items = [
            LockedItemView(mint=item.mint, lock_time=int(item.lock_time))
            for item in list(account.items)[:count]
        ]
        return cls(owner=account.owner, item_count=count, items=items)

    def to_dict(self) -> dict:
        return {
            "owner": str(self.owner),
            "item_count": self.item_count,
            "items": [{"mint": str(i.mint), "lock_time": i.lock_time} for i in self.items],
        }


class LookupStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class AccountLookup(Generic[T]):
    """Outcome of reading one program account.

    NOT_FOUND means the account has never been created. ERROR keeps the
    underlying cause (transport failure, discriminator mismatch).
    """
    status: LookupStatus
    address: Pubkey
    value: Optional[T] = None
    error: Optional[BaseException] = None

    @classmethod
    def found(cls, address: Pubkey, value: T) -> "AccountLookup[T]":
        return cls(status=LookupStatus.FOUND, address=address, value=value)

    @classmethod
    def not_found(cls, address: Pubkey) -> "AccountLookup[T]":
        return cls(status=LookupStatus.NOT_FOUND, address=address)

    @classmethod
    def failed(cls, address: Pubkey, error: BaseException) -> "AccountLookup[T]":
        return cls(status=LookupStatus.ERROR, address=address, error=error)

    @property
    def is_found(self) -> bool:
        return self.status is LookupStatus.FOUND

    @property
    def is_missing(self) -> bool:
        return self.status is LookupStatus.NOT_FOUND


class SubmissionStatus(Enum):
    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"


@dataclass(frozen=True)
class SubmissionResult:
    signature: Signature
    status: SubmissionStatus
    operation: Optional[Operation] = None

    @property
    def already_confirmed(self) -> bool:
        return self.status is SubmissionStatus.ALREADY_CONFIRMED
