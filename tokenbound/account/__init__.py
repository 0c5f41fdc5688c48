from tokenbound.account.account import Account
from tokenbound.account.executor import CallExecutor
from tokenbound.account.guard import AuthorizationGuard
from tokenbound.account.lock import LockState
from tokenbound.account.resolver import OwnershipResolver
from tokenbound.account.state import AccountState

__all__ = [
    "Account",
    "AccountState",
    "AuthorizationGuard",
    "CallExecutor",
    "LockState",
    "OwnershipResolver",
]
