"""Stellar/Soroban integration components."""

from hvym_launchpad.stellar.pool import SorobanFundingPool
from hvym_launchpad.stellar.submitter import SorobanSubmitter
from hvym_launchpad.stellar.token import SorobanToken, SorobanTokenProvider

__all__ = ["SorobanFundingPool", "SorobanSubmitter", "SorobanToken", "SorobanTokenProvider"]
