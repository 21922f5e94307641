from __future__ import annotations
# appraisal/errors.py
"""
Error types for the appraisal session engine. Every precondition failure
aborts the whole call; nothing here is a retryable status value. Errors are
lightweight, serializable, and safe to surface over logs or a CLI.

Exports:
- AppraisalError (base)
- PhaseViolation
- DeadlineViolation
- AuthorizationViolation
- ConcealmentMismatch
- InsufficientBalance
- ArithmeticFault
- TransferFailed
- ReentrancyViolation
"""


from typing import Any, Dict, Mapping, Optional
import json


class AppraisalError(Exception):
    """Base class for appraisal engine errors."""

    code: str = "APPRAISAL_ERROR"

    def __init__(self, message: str = "", *, details: Optional[Mapping[str, Any]] = None) -> None:
        self.message = message or self.__class__.__name__
        self.details = dict(details or {})
        super().__init__(self.__str__())

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.details:
            try:
                packed = json.dumps(self.details, sort_keys=True, separators=(",", ":"), default=str)
            except (TypeError, ValueError):
                packed = str(self.details)
            return f"{self.code}: {self.message} [{packed}]"
        return f"{self.code}: {self.message}"


class PhaseViolation(AppraisalError):
    """The session or voter progression flag does not allow this action."""
    code = "APPRAISAL_PHASE_VIOLATION"

    def __init__(
        self,
        message: str = "wrong phase",
        *,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if expected is not None:
            d.setdefault("expected", expected)
        if actual is not None:
            d.setdefault("actual", actual)
        super().__init__(message, details=d)


class DeadlineViolation(AppraisalError):
    """An action was attempted outside of its valid time window."""
    code = "APPRAISAL_DEADLINE_VIOLATION"

    def __init__(
        self,
        message: str = "outside of time window",
        *,
        now: Optional[int] = None,
        boundary: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if now is not None:
            d["now"] = int(now)
        if boundary is not None:
            d["boundary"] = int(boundary)
        super().__init__(message, details=d)


class AuthorizationViolation(AppraisalError):
    """Caller lacks the role required for this action."""
    code = "APPRAISAL_UNAUTHORIZED"

    def __init__(
        self,
        message: str = "caller is not authorized",
        *,
        caller: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if caller is not None:
            d.setdefault("caller", caller)
        super().__init__(message, details=d)


class ConcealmentMismatch(AppraisalError):
    """A reveal does not reconstruct the stored commitment."""
    code = "APPRAISAL_CONCEALMENT_MISMATCH"


class InsufficientBalance(AppraisalError):
    """A stake, payment or withdrawal exceeds the available funds."""
    code = "APPRAISAL_INSUFFICIENT_BALANCE"

    def __init__(
        self,
        message: str = "insufficient balance",
        *,
        required: Optional[int] = None,
        available: Optional[int] = None,
        account: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if required is not None:
            d["required"] = int(required)
        if available is not None:
            d["available"] = int(available)
        if account is not None:
            d.setdefault("account", account)
        super().__init__(message, details=d)


class ArithmeticFault(AppraisalError):
    """Division by zero (nobody revealed) or an accounting underflow."""
    code = "APPRAISAL_ARITHMETIC_FAULT"


class TransferFailed(AppraisalError):
    """An outgoing fund transfer was refused by the recipient or the treasury."""
    code = "APPRAISAL_TRANSFER_FAILED"

    def __init__(
        self,
        message: str = "transfer failed",
        *,
        recipient: Optional[str] = None,
        amount: Optional[int] = None,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        d = dict(details or {})
        if recipient is not None:
            d["recipient"] = recipient
        if amount is not None:
            d["amount"] = int(amount)
        super().__init__(message, details=d)


class ReentrancyViolation(AppraisalError):
    """A mutating call was issued while another one was still in progress."""
    code = "APPRAISAL_REENTRANT"


__all__ = [
    "AppraisalError",
    "PhaseViolation",
    "DeadlineViolation",
    "AuthorizationViolation",
    "ConcealmentMismatch",
    "InsufficientBalance",
    "ArithmeticFault",
    "TransferFailed",
    "ReentrancyViolation",
]
