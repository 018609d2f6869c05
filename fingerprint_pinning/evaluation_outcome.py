from enum import Enum
from typing import Optional


class RejectionReasonEnum(Enum):
    """Why a certificate chain was not trusted.
    """

    # The TLS stack's own chain / hostname validation failed
    UPSTREAM_TRUST_FAILED = 1

    # The peer did not present any certificate
    EMPTY_CHAIN = 2

    # The chain is valid but none of its certificates is pinned
    NO_MATCHING_FINGERPRINT = 3


class EvaluationOutcome:
    """The result of evaluating a certificate chain: either accepted, or rejected with a reason.
    """

    def __init__(self, rejection_reason: Optional[RejectionReasonEnum] = None) -> None:
        self.rejection_reason = rejection_reason

    @classmethod
    def accept(cls) -> "EvaluationOutcome":
        return cls()

    @classmethod
    def reject(cls, reason: RejectionReasonEnum) -> "EvaluationOutcome":
        return cls(reason)

    @property
    def is_accepted(self) -> bool:
        return self.rejection_reason is None

    def __bool__(self) -> bool:
        return self.is_accepted

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EvaluationOutcome):
            return False
        return self.rejection_reason == other.rejection_reason

    def __hash__(self) -> int:
        return hash(self.rejection_reason)

    def __repr__(self) -> str:
        if self.rejection_reason is None:
            return "EvaluationOutcome(ACCEPTED)"
        return f"EvaluationOutcome(REJECTED: {self.rejection_reason.name})"


class ServerTrustEvaluationError(Exception):
    """Raised when a network layer expects an exception for a rejected certificate chain.
    """

    def __init__(self, host: str, reason: RejectionReasonEnum) -> None:
        super().__init__(f"Server trust evaluation failed for {host}: {reason.name}")
        self.host = host
        self.reason = reason
