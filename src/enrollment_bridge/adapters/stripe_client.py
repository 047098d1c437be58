"""Stripe payment processor client."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol

import stripe

from enrollment_bridge.domain.checkout import (
    CheckoutSession,
    CheckoutSessionRequest,
    WebhookEvent,
)
from enrollment_bridge.domain.errors import (
    PaymentProcessorError,
    WebhookSignatureError,
)


class PaymentProcessor(Protocol):
    """Interface for payment processor interactions."""

    def create_checkout_session(
        self, request: CheckoutSessionRequest
    ) -> CheckoutSession:
        """Open a checkout session and return it."""

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session by id."""

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify a signed webhook payload and return the event."""


@dataclass
class StripePaymentProcessor(PaymentProcessor):
    """Stripe-backed payment processor.

    The secret key is passed on every request instead of being assigned to
    ``stripe.api_key``, so several processors can coexist in one process.
    """

    api_key: str
    webhook_secret: str

    @classmethod
    def create(cls, api_key: str, webhook_secret: str) -> "StripePaymentProcessor":
        """Create a Stripe processor from configured secrets."""
        return cls(api_key=api_key, webhook_secret=webhook_secret)

    def create_checkout_session(
        self, request: CheckoutSessionRequest
    ) -> CheckoutSession:
        """Create a one-off card payment session with a single line item."""
        item = request.line_item
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": item.currency,
                            "product_data": {"name": item.name},
                            "unit_amount": item.unit_amount,
                        },
                        "quantity": item.quantity,
                    }
                ],
                success_url=request.success_url,
                cancel_url=request.cancel_url,
                metadata=dict(request.metadata),
            )
        except stripe.StripeError as exc:
            raise PaymentProcessorError("Stripe checkout creation failed") from exc
        return session_from_stripe(session)

    def retrieve_checkout_session(self, session_id: str) -> CheckoutSession:
        """Fetch a checkout session from Stripe."""
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self.api_key)
        except stripe.StripeError as exc:
            raise PaymentProcessorError("Stripe session retrieval failed") from exc
        try:
            return session_from_stripe(session)
        except (TypeError, ValueError) as exc:
            raise PaymentProcessorError("Malformed Stripe checkout session") from exc

    def construct_event(self, payload: bytes, signature: str) -> WebhookEvent:
        """Verify the Stripe signature header and parse the event."""
        try:
            event = stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret
            )
        except (ValueError, stripe.SignatureVerificationError) as exc:
            raise WebhookSignatureError("Invalid Stripe webhook signature") from exc
        event_type = str(_get(event, "type"))
        data_object = _get(_get(event, "data"), "object")
        session = None
        if event_type.startswith("checkout.session.") and data_object is not None:
            try:
                session = session_from_stripe(data_object)
            except (TypeError, ValueError) as exc:
                raise PaymentProcessorError(
                    "Malformed checkout session in webhook event"
                ) from exc
        return WebhookEvent(id=_get(event, "id"), type=event_type, session=session)


def session_from_stripe(obj: object) -> CheckoutSession:
    """Map a Stripe checkout session object onto the domain model."""
    metadata = {
        str(key): str(value)
        for key, value in _as_dict(_get(obj, "metadata")).items()
        if value is not None
    }
    amount_total = _get(obj, "amount_total")
    payment_intent = _get(obj, "payment_intent")
    if payment_intent is not None and not isinstance(payment_intent, str):
        payment_intent = _get(payment_intent, "id")
    return CheckoutSession(
        id=str(_get(obj, "id")),
        payment_status=_get(obj, "payment_status"),
        amount_total=int(amount_total) if amount_total is not None else None,
        metadata=metadata,
        url=_get(obj, "url"),
        payment_intent=str(payment_intent) if payment_intent else None,
    )


def _get(obj: object, key: str) -> object | None:
    """Read a field from a Stripe object or a plain mapping."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _as_dict(obj: object) -> dict[str, object]:
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return dict(to_dict())
    return {}
