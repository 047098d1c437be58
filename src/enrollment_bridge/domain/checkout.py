"""Domain models for payment processor checkout sessions."""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal

PAYMENT_STATUS_PAID = "paid"
CHECKOUT_COMPLETED_EVENT = "checkout.session.completed"

_MINOR_UNITS_PER_MAJOR = Decimal(100)


@dataclass(frozen=True)
class CheckoutLineItem:
    """Single priced line item for a checkout session."""

    name: str
    unit_amount: int
    currency: str
    quantity: int = 1


@dataclass(frozen=True)
class CheckoutSessionRequest:
    """Parameters used to open a checkout session with the processor."""

    line_item: CheckoutLineItem
    success_url: str
    cancel_url: str
    metadata: dict[str, str]


@dataclass(frozen=True)
class CheckoutSession:
    """Processor-owned checkout session, as read back by reference."""

    id: str
    payment_status: str | None
    amount_total: int | None
    metadata: dict[str, str] = field(default_factory=dict)
    url: str | None = None
    payment_intent: str | None = None

    @property
    def is_paid(self) -> bool:
        """Return True when the processor reports the session as paid."""
        return self.payment_status == PAYMENT_STATUS_PAID

    @property
    def amount(self) -> Decimal:
        """Return the session total in major currency units."""
        return to_major_units(self.amount_total or 0)


@dataclass(frozen=True)
class WebhookEvent:
    """Verified processor event."""

    id: str | None
    type: str
    session: CheckoutSession | None


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount into integer minor units (half to even)."""
    minor = (amount * _MINOR_UNITS_PER_MAJOR).quantize(
        Decimal(1), rounding=ROUND_HALF_EVEN
    )
    return int(minor)


def to_major_units(amount: int) -> Decimal:
    """Convert integer minor units into a major-unit decimal."""
    return Decimal(amount) / _MINOR_UNITS_PER_MAJOR
