"""Enrollment in zero-priced courses without the payment processor."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Protocol

from enrollment_bridge.domain.errors import (
    CourseNotFoundError,
    MissingParametersError,
    NotFreeCourseError,
    ReconciliationError,
)
from enrollment_bridge.domain.models import (
    FREE_ENROLLMENT_REFERENCE,
    CourseRecord,
    EnrollmentRecord,
)
from enrollment_bridge.services.enrollments import EnrollmentReconciler


class CourseRepository(Protocol):
    """Read-only access to courses."""

    def get_course(self, course_id: str) -> CourseRecord | None:
        """Return a course by id, if present."""


@dataclass
class FreeEnrollmentService:
    """Grants enrollment in free courses through the reconciler."""

    course_repository: CourseRepository
    reconciler: EnrollmentReconciler

    def enroll_free(
        self, user_id: str | None, course_id: str | None
    ) -> EnrollmentRecord:
        """Enroll a user in a free course."""
        if not user_id or not course_id:
            raise MissingParametersError("Missing required parameters")
        try:
            course = self.course_repository.get_course(course_id)
        except Exception as exc:
            raise ReconciliationError("Failed to look up course") from exc
        if course is None:
            raise CourseNotFoundError("Course not found")
        if course.price > 0:
            raise NotFreeCourseError(
                "This course is not free. Please use the checkout process."
            )
        return self.reconciler.reconcile(
            user_id=user_id,
            course_id=course_id,
            amount=Decimal(0),
            payment_reference=FREE_ENROLLMENT_REFERENCE,
        )
