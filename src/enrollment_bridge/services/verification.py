"""Pull-based payment verification for returning checkout sessions."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from enrollment_bridge.adapters.stripe_client import PaymentProcessor
from enrollment_bridge.domain.checkout import CheckoutSession
from enrollment_bridge.domain.errors import PaymentProcessorError, ReconciliationError
from enrollment_bridge.domain.models import EnrollmentRecord
from enrollment_bridge.services.enrollments import EnrollmentReconciler

logger = logging.getLogger(__name__)


class VerificationOutcome(StrEnum):
    """Distinct results of verifying a checkout session."""

    ENROLLED = "enrolled"
    NOT_PAID = "not_paid"
    ENROLLMENT_FAILED = "enrollment_failed"
    VERIFICATION_FAILED = "verification_failed"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification call along with what was observed."""

    outcome: VerificationOutcome
    session_id: str
    payment_status: str | None = None
    course_id: str | None = None
    user_id: str | None = None
    amount: Decimal | None = None
    payment_intent: str | None = None
    enrollment: EnrollmentRecord | None = None

    @property
    def success(self) -> bool:
        """Whether the buyer ended up enrolled in the course."""
        return self.outcome is VerificationOutcome.ENROLLED


@dataclass
class VerificationService:
    """Fetches session status from the processor and reconciles paid sessions."""

    processor: PaymentProcessor
    reconciler: EnrollmentReconciler

    def verify(self, session_id: str) -> VerificationResult:
        """Verify a checkout session and enroll the buyer when it is paid."""
        try:
            session = self.processor.retrieve_checkout_session(session_id)
        except PaymentProcessorError:
            logger.exception(
                "Failed to retrieve checkout session", extra={"session_id": session_id}
            )
            return VerificationResult(
                outcome=VerificationOutcome.VERIFICATION_FAILED, session_id=session_id
            )

        if not session.is_paid:
            return VerificationResult(
                outcome=VerificationOutcome.NOT_PAID,
                session_id=session.id,
                payment_status=session.payment_status,
            )
        return self._reconcile_paid(session)

    def _reconcile_paid(self, session: CheckoutSession) -> VerificationResult:
        course_id = session.metadata.get("courseId", "").strip()
        user_id = session.metadata.get("userId", "").strip()
        result = VerificationResult(
            outcome=VerificationOutcome.ENROLLMENT_FAILED,
            session_id=session.id,
            payment_status=session.payment_status,
            course_id=course_id,
            user_id=user_id,
            amount=session.amount,
            payment_intent=session.payment_intent,
        )
        if not course_id or not user_id:
            logger.error(
                "Paid session is missing enrollment metadata",
                extra={"session_id": session.id},
            )
            return result
        try:
            enrollment = self.reconciler.reconcile(
                user_id=user_id,
                course_id=course_id,
                amount=session.amount,
                payment_reference=session.id,
            )
        except ReconciliationError:
            logger.exception(
                "Payment succeeded but enrollment failed",
                extra={"session_id": session.id, "user_id": user_id},
            )
            return result
        return VerificationResult(
            outcome=VerificationOutcome.ENROLLED,
            session_id=session.id,
            payment_status=session.payment_status,
            course_id=course_id,
            user_id=user_id,
            amount=session.amount,
            payment_intent=session.payment_intent,
            enrollment=enrollment,
        )
