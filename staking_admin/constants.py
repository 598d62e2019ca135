"""Fixed addresses, seeds and sizes shared with the on-chain staking program."""

from __future__ import annotations

from solders.pubkey import Pubkey

# Deployed staking program. Not configurable at runtime.
PROGRAM_ID_STR = "Fhds4rvEnTVCLx8dcjfgjbXQGNUjNi3CJY7A1XCX7QX5"
PROGRAM_ID = Pubkey.from_string(PROGRAM_ID_STR)

# Seeds must match the program's own derivation byte-for-byte
GLOBAL_AUTHORITY_SEED = "global-authority"
USER_POOL_SEED = "user-pool"

# UserPool layout: discriminator + owner + item_count + MAX_LOCKED_ITEMS * (mint + lock_time)
MAX_LOCKED_ITEMS = 100
USER_POOL_SIZE = 8 + 32 + 8 + MAX_LOCKED_ITEMS * (32 + 8)

TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")
AUTH_RULES_PROGRAM_ID = Pubkey.from_string("auth9SigNpDKz4sJJ1DfCTuZrZNSAgh9sFD3rboVmgg")

METADATA_SEED = b"metadata"
EDITION_SEED = b"edition"
TOKEN_RECORD_SEED = b"token_record"

# Compute budget used by the initialize-global path
DEFAULT_COMPUTE_UNIT_PRICE = 5_000_000  # micro-lamports per CU
DEFAULT_COMPUTE_UNIT_LIMIT = 200_000

COMMITMENT = "confirmed"

LOCALNET_URL = "http://127.0.0.1:8899"
