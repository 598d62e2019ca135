"""
pNFT staking program administration - solders/solana-py/AnchorPy based.

Startup sequence:
    1. integrity.verify_idl() - fail if the embedded IDL drifted from its pin
    2. Session.connect() - endpoint, signing identity, program client
    3. StakingAdmin(session) - transaction and state operations

The on-chain program owns all staking rules; this package only marshals
parameters, submits transactions and decodes accounts.
"""

from staking_admin.admin import StakingAdmin
from staking_admin.integrity import verify_idl
from staking_admin.session import Session

__all__ = ["Session", "StakingAdmin", "verify_idl"]
