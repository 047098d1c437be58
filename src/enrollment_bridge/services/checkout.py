"""Checkout session creation for course purchases."""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from enrollment_bridge.adapters.stripe_client import PaymentProcessor
from enrollment_bridge.domain.checkout import (
    CheckoutLineItem,
    CheckoutSessionRequest,
    to_minor_units,
)
from enrollment_bridge.domain.errors import (
    CheckoutError,
    InvalidPriceError,
    MissingParametersError,
    PaymentProcessorError,
)

logger = logging.getLogger(__name__)

SESSION_ID_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"


@dataclass(frozen=True)
class CheckoutRedirect:
    """Result of opening a checkout session."""

    session_id: str
    redirect_url: str | None


@dataclass
class CheckoutService:
    """Opens processor checkout sessions that carry course/user metadata."""

    processor: PaymentProcessor
    frontend_url: str
    currency: str = "usd"

    def create_checkout(  # noqa: PLR0913
        self,
        course_id: str | None,
        course_title: str | None,
        course_price: object | None,
        user_id: str | None,
        success_url: str | None = None,
        cancel_url: str | None = None,
    ) -> CheckoutRedirect:
        """Create a checkout session for a single course purchase."""
        if not course_id or not course_title or course_price is None or not user_id:
            raise MissingParametersError("Missing required parameters")
        unit_amount = to_minor_units(parse_price(course_price))
        if unit_amount <= 0:
            raise InvalidPriceError("Course price must be greater than zero")

        request = CheckoutSessionRequest(
            line_item=CheckoutLineItem(
                name=course_title,
                unit_amount=unit_amount,
                currency=self.currency,
            ),
            success_url=success_url or self.default_success_url(),
            cancel_url=cancel_url or self.default_cancel_url(course_id),
            metadata={"courseId": str(course_id), "userId": str(user_id)},
        )
        try:
            session = self.processor.create_checkout_session(request)
        except PaymentProcessorError as exc:
            logger.exception(
                "Failed to create checkout session",
                extra={"course_id": course_id, "user_id": user_id},
            )
            raise CheckoutError("Failed to create checkout session") from exc
        logger.info(
            "Checkout session created",
            extra={"session_id": session.id, "course_id": course_id},
        )
        return CheckoutRedirect(session_id=session.id, redirect_url=session.url)

    def default_success_url(self) -> str:
        """Return the success redirect with the processor's session placeholder."""
        base = self.frontend_url.rstrip("/")
        return f"{base}/payment-success?session_id={SESSION_ID_PLACEHOLDER}"

    def default_cancel_url(self, course_id: str) -> str:
        """Return the redirect used when the user abandons checkout."""
        return f"{self.frontend_url.rstrip('/')}/courses/{course_id}"


def parse_price(raw: object) -> Decimal:
    """Parse a course price given as a number or numeric string."""
    if isinstance(raw, bool):
        raise InvalidPriceError("Course price must be a number")
    try:
        price = Decimal(str(raw).strip())
    except InvalidOperation as exc:
        raise InvalidPriceError("Course price must be a number") from exc
    if not price.is_finite():
        raise InvalidPriceError("Course price must be a number")
    return price
