"""
Read-only REST queries for the Ault chain modules.
"""
from .context import RestContext, build_query, fetch_rest, pagination_params, segment
from .exchange import ExchangeApi
from .license import LicenseApi
from .miner import MinerApi
from .staking import StakingApi

__all__ = [
    "RestContext", "build_query", "fetch_rest", "pagination_params", "segment",
    "ExchangeApi", "LicenseApi", "MinerApi", "StakingApi",
]
