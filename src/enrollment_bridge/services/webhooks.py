"""Processing of signed payment processor webhook deliveries."""

import logging
from dataclasses import dataclass

from enrollment_bridge.adapters.stripe_client import PaymentProcessor
from enrollment_bridge.domain.checkout import CHECKOUT_COMPLETED_EVENT, WebhookEvent
from enrollment_bridge.domain.errors import (
    PaymentProcessorError,
    WebhookSignatureError,
)
from enrollment_bridge.services.enrollments import EnrollmentReconciler

logger = logging.getLogger(__name__)


@dataclass
class WebhookService:
    """Verifies webhook payloads and reconciles completed checkouts."""

    processor: PaymentProcessor
    reconciler: EnrollmentReconciler

    def handle_event(
        self, payload: bytes, signature: str | None
    ) -> WebhookEvent | None:
        """Verify and process a webhook delivery.

        Raises ``WebhookSignatureError`` when the delivery cannot be trusted.
        Verified events that cannot be mapped return ``None``. These and
        reconciliation failures are logged and never raised, so every verified
        delivery is acknowledged.
        """
        if not signature:
            raise WebhookSignatureError("Missing Stripe signature header")
        try:
            event = self.processor.construct_event(payload, signature)
        except PaymentProcessorError:
            logger.exception("Ignoring malformed webhook event")
            return None

        logger.info("Webhook event received", extra={"event_type": event.type})
        if event.type == CHECKOUT_COMPLETED_EVENT:
            self._handle_checkout_completed(event)
        return event

    def _handle_checkout_completed(self, event: WebhookEvent) -> None:
        session = event.session
        if session is None or not session.is_paid:
            logger.info(
                "Ignoring unpaid checkout session",
                extra={"session_id": session.id if session else None},
            )
            return
        course_id = session.metadata.get("courseId", "").strip()
        user_id = session.metadata.get("userId", "").strip()
        if not course_id or not user_id:
            logger.error(
                "Checkout session is missing enrollment metadata",
                extra={"session_id": session.id},
            )
            return
        try:
            enrollment = self.reconciler.reconcile(
                user_id=user_id,
                course_id=course_id,
                amount=session.amount,
                payment_reference=session.id,
            )
        except Exception:
            logger.exception(
                "Webhook reconciliation failed",
                extra={
                    "session_id": session.id,
                    "user_id": user_id,
                    "course_id": course_id,
                },
            )
            return
        logger.info(
            "Webhook enrollment reconciled",
            extra={"session_id": session.id, "enrollment_id": enrollment.id},
        )
