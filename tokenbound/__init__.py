"""tokenbound-core: accounts controlled by whoever holds a bound token."""

from tokenbound.account import Account
from tokenbound.registry import AccountRegistry
from tokenbound.types import AUTHORIZED, REJECTED, TBA_INTERFACE_ID, AssetBinding, Call

__version__ = "0.1.0"

__all__ = [
    "AUTHORIZED",
    "Account",
    "AccountRegistry",
    "AssetBinding",
    "Call",
    "REJECTED",
    "TBA_INTERFACE_ID",
]
