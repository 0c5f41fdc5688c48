# tokenbound/errors.py
# -*- coding: utf-8 -*-
"""
Error taxonomy of the token-bound account.

Every error is a synchronous, non-retriable rejection of the current
operation. Each class carries a stable ``code`` and structured ``details``
so callers and logs can tell rejections apart without parsing messages.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

__all__ = [
    "AccountError",
    "Unauthorized",
    "InvalidSignature",
    "InvalidSignatureLength",
    "AlreadyLocked",
    "AccountLocked",
    "ResolutionError",
    "InvalidImplementationPointer",
    "MulticallFailed",
    "Overflow",
    "LockDurationExceeded",
    "AccountAlreadyDeployed",
    "CallFailed",
]


class AccountError(Exception):
    """Base class for account rejections."""

    code: str = "ACCOUNT_ERROR"
    default_message: str = "account operation rejected"

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}, details={self.details!r})"


class Unauthorized(AccountError):
    code = "UNAUTHORIZED"
    default_message = "caller is not the owner of the bound token"


class InvalidSignature(AccountError):
    code = "INVALID_SIGNATURE"
    default_message = "signature rejected"


class InvalidSignatureLength(InvalidSignature):
    code = "INVALID_SIGNATURE_LENGTH"
    default_message = "signature must contain exactly two words"


class AlreadyLocked(AccountError):
    code = "ALREADY_LOCKED"
    default_message = "account is already locked"


class AccountLocked(AccountError):
    code = "ACCOUNT_LOCKED"
    default_message = "account is locked"


class ResolutionError(AccountError):
    code = "RESOLUTION_ERROR"
    default_message = "could not resolve the owner of the bound token"


class InvalidImplementationPointer(AccountError):
    code = "INVALID_IMPLEMENTATION"
    default_message = "implementation pointer must be non-zero"


class MulticallFailed(AccountError):
    code = "MULTICALL_FAILED"
    default_message = "multicall failed"

    def __init__(self, index: int, reason: str, **details: Any) -> None:
        super().__init__(f"call #{index} failed: {reason}", index=index, reason=reason, **details)
        self.index = index
        self.reason = reason


class Overflow(AccountError):
    code = "OVERFLOW"
    default_message = "u64 overflow"


class LockDurationExceeded(AccountError):
    code = "LOCK_DURATION_EXCEEDED"
    default_message = "lock duration exceeds the configured maximum"


class AccountAlreadyDeployed(AccountError):
    code = "ACCOUNT_ALREADY_DEPLOYED"
    default_message = "an account is already deployed at this address"


class CallFailed(Exception):
    """
    Raised by the execution host when an outbound call does not complete:
    unknown target, unknown entry point or a revert inside the callee.
    """

    def __init__(self, target: int, selector: str, reason: str) -> None:
        super().__init__(f"call to {hex(target)}::{selector} failed: {reason}")
        self.target = target
        self.selector = selector
        self.reason = reason
