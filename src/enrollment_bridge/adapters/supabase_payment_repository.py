"""Supabase-backed payment repository."""

from dataclasses import dataclass
from decimal import Decimal

from postgrest.exceptions import APIError
from supabase import Client

from enrollment_bridge.adapters.supabase_errors import is_unique_violation
from enrollment_bridge.domain.errors import DuplicateRecordError
from enrollment_bridge.domain.models import PaymentRecord
from enrollment_bridge.services.enrollments import PaymentRepository

_COLUMNS = "id, enrollment_id, amount, payment_method, transaction_id, status"


@dataclass
class SupabasePaymentRepository(PaymentRepository):
    """Supabase implementation for payment persistence."""

    client: Client

    def find_payment(
        self, enrollment_id: str, transaction_id: str
    ) -> PaymentRecord | None:
        """Return the payment for an enrollment and transaction, if present."""
        response = (
            self.client.table("payments")
            .select(_COLUMNS)
            .eq("enrollment_id", enrollment_id)
            .eq("transaction_id", transaction_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_payment(response.data[0])

    def create_payment(  # noqa: PLR0913
        self,
        enrollment_id: str,
        amount: Decimal,
        payment_method: str,
        transaction_id: str,
        status: str,
    ) -> PaymentRecord:
        """Create a payment row and return it."""
        try:
            response = (
                self.client.table("payments")
                .insert(
                    {
                        "enrollment_id": enrollment_id,
                        "amount": str(amount),
                        "payment_method": payment_method,
                        "transaction_id": transaction_id,
                        "status": status,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if is_unique_violation(exc):
                raise DuplicateRecordError("Payment already exists") from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create payment in Supabase")
        return _to_payment(response.data[0])


def _to_payment(row: dict[str, object]) -> PaymentRecord:
    return PaymentRecord(
        id=str(row["id"]),
        enrollment_id=str(row["enrollment_id"]),
        amount=Decimal(str(row["amount"])),
        payment_method=str(row["payment_method"]),
        transaction_id=str(row["transaction_id"]),
        status=str(row["status"]),
    )
