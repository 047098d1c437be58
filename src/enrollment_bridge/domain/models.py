"""Domain models for courses, enrollments and payments."""

from dataclasses import dataclass
from decimal import Decimal

ENROLLMENT_ACTIVE = "active"
PAYMENT_COMPLETED = "completed"
PAYMENT_METHOD_STRIPE = "stripe"
FREE_ENROLLMENT_REFERENCE = "free_enrollment"


@dataclass(frozen=True)
class CourseRecord:
    """Represents a course stored in the database."""

    id: str
    price: Decimal


@dataclass(frozen=True)
class EnrollmentRecord:
    """Represents a student's enrollment in a course."""

    id: str
    student_id: str
    course_id: str
    status: str


@dataclass(frozen=True)
class PaymentRecord:
    """Represents a completed payment attached to an enrollment."""

    id: str
    enrollment_id: str
    amount: Decimal
    payment_method: str
    transaction_id: str
    status: str
