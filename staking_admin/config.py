"""Runtime configuration for staking administration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv
from solana.utils.cluster import cluster_api_url

from staking_admin.constants import (
    DEFAULT_COMPUTE_UNIT_LIMIT,
    DEFAULT_COMPUTE_UNIT_PRICE,
    LOCALNET_URL,
)
from staking_admin.errors import ConfigError
from staking_admin.types import ComputeBudget, Operation

logger = logging.getLogger(__name__)

CLUSTERS = ("devnet", "testnet", "mainnet-beta", "localnet")
DEFAULT_KEYPAIR_PATH = str(Path.home() / ".config" / "solana" / "id.json")

INITIALIZE_BUDGET = ComputeBudget(
    unit_price_micro_lamports=DEFAULT_COMPUTE_UNIT_PRICE,
    unit_limit=DEFAULT_COMPUTE_UNIT_LIMIT,
)

# Only the initialize-global path carries a compute-budget prefix by default.
DEFAULT_COMPUTE_BUDGETS: Dict[Operation, Optional[ComputeBudget]] = {
    Operation.INITIALIZE: INITIALIZE_BUDGET,
    Operation.CHANGE_ADMIN: None,
    Operation.INITIALIZE_USER_POOL: None,
    Operation.LOCK_PNFT: None,
    Operation.UNLOCK_PNFT: None,
}


def resolve_endpoint(cluster: str, rpc: Optional[str] = None) -> str:
    """Explicit RPC URL wins; otherwise map the cluster name to its public endpoint."""
    if rpc:
        return rpc
    if cluster == "localnet":
        return LOCALNET_URL
    if cluster not in CLUSTERS:
        raise ConfigError(
            f"Unknown cluster: {cluster} (expected one of {', '.join(CLUSTERS)})",
            {"cluster": cluster},
        )
    return cluster_api_url(cluster)


def uniform_compute_budgets(budget: ComputeBudget = INITIALIZE_BUDGET) -> Dict[Operation, Optional[ComputeBudget]]:
    return {operation: budget for operation in Operation}


@dataclass
class StakingConfig:
    cluster: str = "devnet"
    keypair_path: str = DEFAULT_KEYPAIR_PATH
    rpc_url: Optional[str] = None
    compute_budgets: Dict[Operation, Optional[ComputeBudget]] = field(
        default_factory=lambda: dict(DEFAULT_COMPUTE_BUDGETS)
    )

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "StakingConfig":
        if env_file is not None:
            # never overwrite variables already set in the process
            load_dotenv(env_file, override=False)

        budgets = dict(DEFAULT_COMPUTE_BUDGETS)
        if os.environ.get("STAKING_COMPUTE_BUDGET_ALL", "").lower() in ("1", "true", "yes"):
            budgets = uniform_compute_budgets()

        return cls(
            cluster=os.environ.get("STAKING_CLUSTER", "devnet"),
            keypair_path=os.environ.get("STAKING_KEYPAIR_PATH", DEFAULT_KEYPAIR_PATH),
            rpc_url=os.environ.get("STAKING_RPC_URL") or None,
            compute_budgets=budgets,
        )

    @property
    def endpoint(self) -> str:
        return resolve_endpoint(self.cluster, self.rpc_url)
