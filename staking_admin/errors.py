"""Exception hierarchy for staking administration."""

from typing import Any, Dict, Optional


class StakingAdminError(Exception):
    """Base exception for all staking admin errors."""
    code: str = "STK_000"

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "message": self.message, "details": self.details}


class KeyLoadError(StakingAdminError):
    """Key file missing, unparsable, or not a valid secret key."""
    code = "KEY_001"

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message, {"path": path})
        self.path = path


class InvalidAddressError(StakingAdminError):
    """String is not a valid base58 public key."""
    code = "ADDR_001"

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message, {"value": value})
        self.value = value


class InvalidAdminIdentifierError(StakingAdminError):
    """New admin is neither a public key nor a loadable key file."""
    code = "ADDR_002"

    def __init__(self, identifier: str):
        super().__init__(
            f"Invalid admin identifier: {identifier!r} is neither an address nor a key file",
            {"identifier": identifier},
        )
        self.identifier = identifier


class IDLIntegrityError(StakingAdminError):
    """Embedded IDL does not match its pinned hash."""
    code = "IDL_001"


class AccountFetchError(StakingAdminError):
    """Account lookup failed for a reason other than the account being absent."""
    code = "ACCT_001"

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message, {"address": address})
        self.address = address


class GlobalStateMissingError(StakingAdminError):
    """Global pool has not been initialized."""
    code = "ACCT_002"

    def __init__(self, address: str):
        super().__init__(
            f"Global pool {address} does not exist; run init first",
            {"address": address},
        )
        self.address = address


class SubmissionError(StakingAdminError):
    """Broadcast or confirmation failed."""
    code = "TX_001"

    def __init__(self, message: str, signature: Optional[str] = None, operation: Optional[str] = None):
        super().__init__(message, {"signature": signature, "operation": operation})
        self.signature = signature
        self.operation = operation


class CoSignerError(StakingAdminError):
    """Co-signer is not one of the transaction's required signers."""
    code = "TX_002"


class ConfigError(StakingAdminError):
    """Configuration value is not usable (e.g. an unknown cluster name)."""
    code = "CFG_001"
