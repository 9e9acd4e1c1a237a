"""Confirmation gate for risky candidates.

The policy ("does this candidate need the user's approval?") is kept
apart from the I/O ("ask the user"). The gate receives a ``Confirmer``
callable that presents a ``ConfirmationRequest`` and returns the user's
raw answer, so the policy can be tested without a terminal.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from vibesh.constants import HIGH_RISK_SCORE
from vibesh.logging import Loggers
from vibesh.pipeline.models import ActionCandidate, Mode

logger = Loggers.pipeline()


class ConfirmationStatus(Enum):
    """Status of a confirmation decision."""

    APPROVED = "approved"
    DECLINED = "declined"


@dataclass
class ConfirmationRequest:
    """What the user sees before approving a risky command."""

    id: str
    explanation: str
    risk_summary: str
    command: str
    risk_score: int
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def for_candidate(cls, candidate: ActionCandidate) -> "ConfirmationRequest":
        return cls(
            id=str(uuid.uuid4())[:8],
            explanation=candidate.explanation,
            risk_summary=candidate.risk_summary,
            command=candidate.display,
            risk_score=candidate.risk_score,
        )


Confirmer = Callable[[ConfirmationRequest], str | None]
"""Presents a request and returns the user's answer (None if none could be read)."""


class ConfirmationGate:
    """Decides whether to block on the user before execution.

    Example:
        gate = ConfirmationGate()
        gate.requires_confirmation(9, mode_is_yolo=False)  # True
        gate.requires_confirmation(9, mode_is_yolo=True)   # False
    """

    def __init__(self, threshold: int = HIGH_RISK_SCORE):
        """Initialize the gate.

        Args:
            threshold: Minimum risk score that requires confirmation
        """
        self.threshold = threshold

    def requires_confirmation(self, score: int, mode_is_yolo: bool) -> bool:
        """Check whether a score must be confirmed under the given mode flavour."""
        return score >= self.threshold and not mode_is_yolo

    @staticmethod
    def is_approval(answer: str | None) -> bool:
        """Only an exact, case-insensitive ``y`` approves."""
        if answer is None:
            return False
        return answer.strip().lower() == "y"

    def confirm(self, candidate: ActionCandidate, confirmer: Confirmer) -> ConfirmationStatus:
        """Ask the user about a candidate.

        Args:
            candidate: The candidate awaiting approval
            confirmer: Capability that asks the user

        Returns:
            APPROVED or DECLINED
        """
        request = ConfirmationRequest.for_candidate(candidate)
        answer = confirmer(request)
        status = (
            ConfirmationStatus.APPROVED
            if self.is_approval(answer)
            else ConfirmationStatus.DECLINED
        )
        if status is ConfirmationStatus.DECLINED:
            logger.info("confirmation_declined", request_id=request.id, command=request.command)
        return status

    def check(self, candidate: ActionCandidate, mode: Mode, confirmer: Confirmer) -> bool:
        """Apply the full gate.

        Returns:
            True if execution may proceed
        """
        if not self.requires_confirmation(candidate.risk_score, mode.is_yolo):
            return True
        return self.confirm(candidate, confirmer) is ConfirmationStatus.APPROVED
