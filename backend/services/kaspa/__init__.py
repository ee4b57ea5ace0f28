"""Kaspa wallet sync package."""

from .errors import InvariantViolation, KaspaWalletError, ParameterError, TransientFetchError
from .wallet_scheduler import SYNC_ERROR, SYNC_OK, KaspaWalletScheduler

__all__ = [
    "InvariantViolation",
    "KaspaWalletError",
    "ParameterError",
    "TransientFetchError",
    "SYNC_ERROR",
    "SYNC_OK",
    "KaspaWalletScheduler",
]
