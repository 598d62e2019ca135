"""Command-line interface for the staking admin package."""
