"""Idempotent reconciliation of confirmed payments into enrollments."""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from enrollment_bridge.domain.errors import DuplicateRecordError, ReconciliationError
from enrollment_bridge.domain.models import (
    ENROLLMENT_ACTIVE,
    PAYMENT_COMPLETED,
    PAYMENT_METHOD_STRIPE,
    EnrollmentRecord,
    PaymentRecord,
)

logger = logging.getLogger(__name__)


class EnrollmentRepository(Protocol):
    """Persistence interface for enrollments."""

    def find_enrollment(
        self, student_id: str, course_id: str
    ) -> EnrollmentRecord | None:
        """Return the enrollment for a student and course, if present."""

    def create_enrollment(
        self, student_id: str, course_id: str, status: str
    ) -> EnrollmentRecord:
        """Create and return a new enrollment."""


class PaymentRepository(Protocol):
    """Persistence interface for payments."""

    def find_payment(
        self, enrollment_id: str, transaction_id: str
    ) -> PaymentRecord | None:
        """Return the payment for an enrollment and transaction, if present."""

    def create_payment(  # noqa: PLR0913
        self,
        enrollment_id: str,
        amount: Decimal,
        payment_method: str,
        transaction_id: str,
        status: str,
    ) -> PaymentRecord:
        """Create and return a new payment."""


@dataclass
class EnrollmentReconciler:
    """Turns a confirmed payment into exactly one enrollment.

    Safe to call any number of times, from the webhook and the verification
    endpoint alike. Lookup and enrollment-creation failures raise
    ``ReconciliationError``; payment-record failures are logged only, so a
    granted enrollment is never lost once the user has paid.
    """

    enrollment_repository: EnrollmentRepository
    payment_repository: PaymentRepository
    payment_method: str = PAYMENT_METHOD_STRIPE

    def reconcile(
        self,
        user_id: str,
        course_id: str,
        amount: Decimal,
        payment_reference: str,
    ) -> EnrollmentRecord:
        """Ensure the user is enrolled in the course and return the enrollment."""
        existing = self._find_enrollment(user_id, course_id)
        if existing:
            self._ensure_payment(existing, amount, payment_reference)
            return existing

        try:
            created = self.enrollment_repository.create_enrollment(
                student_id=user_id, course_id=course_id, status=ENROLLMENT_ACTIVE
            )
        except DuplicateRecordError:
            logger.info(
                "Enrollment created concurrently, reusing existing row",
                extra={"user_id": user_id, "course_id": course_id},
            )
            concurrent = self._find_enrollment(user_id, course_id)
            if concurrent is None:
                raise ReconciliationError(
                    "Enrollment conflict reported but no enrollment found"
                ) from None
            self._ensure_payment(concurrent, amount, payment_reference)
            return concurrent
        except Exception as exc:
            raise ReconciliationError("Failed to create enrollment") from exc

        logger.info(
            "Enrollment created",
            extra={"enrollment_id": created.id, "user_id": user_id},
        )
        if amount > 0:
            self._record_payment(created, amount, payment_reference)
        return created

    def _find_enrollment(
        self, user_id: str, course_id: str
    ) -> EnrollmentRecord | None:
        try:
            return self.enrollment_repository.find_enrollment(user_id, course_id)
        except Exception as exc:
            raise ReconciliationError("Failed to look up enrollment") from exc

    def _ensure_payment(
        self, enrollment: EnrollmentRecord, amount: Decimal, payment_reference: str
    ) -> None:
        """Record a payment against an existing enrollment unless already present."""
        try:
            payment = self.payment_repository.find_payment(
                enrollment.id, payment_reference
            )
        except Exception as exc:
            raise ReconciliationError("Failed to look up payment") from exc
        if payment is None and amount > 0:
            self._record_payment(enrollment, amount, payment_reference)

    def _record_payment(
        self, enrollment: EnrollmentRecord, amount: Decimal, payment_reference: str
    ) -> None:
        try:
            self.payment_repository.create_payment(
                enrollment_id=enrollment.id,
                amount=amount,
                payment_method=self.payment_method,
                transaction_id=payment_reference,
                status=PAYMENT_COMPLETED,
            )
        except DuplicateRecordError:
            logger.info(
                "Payment already recorded",
                extra={
                    "enrollment_id": enrollment.id,
                    "transaction_id": payment_reference,
                },
            )
        except Exception:
            logger.exception(
                "Failed to record payment, keeping enrollment",
                extra={
                    "enrollment_id": enrollment.id,
                    "transaction_id": payment_reference,
                },
            )
