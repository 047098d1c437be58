"""Supabase-backed enrollment repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from enrollment_bridge.adapters.supabase_errors import is_unique_violation
from enrollment_bridge.domain.errors import DuplicateRecordError
from enrollment_bridge.domain.models import EnrollmentRecord
from enrollment_bridge.services.enrollments import EnrollmentRepository


@dataclass
class SupabaseEnrollmentRepository(EnrollmentRepository):
    """Supabase implementation for enrollment persistence."""

    client: Client

    def find_enrollment(
        self, student_id: str, course_id: str
    ) -> EnrollmentRecord | None:
        """Return the enrollment for a student and course, if present."""
        response = (
            self.client.table("enrollments")
            .select("id, student_id, course_id, status")
            .eq("student_id", student_id)
            .eq("course_id", course_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _to_enrollment(response.data[0])

    def create_enrollment(
        self, student_id: str, course_id: str, status: str
    ) -> EnrollmentRecord:
        """Create an enrollment row and return it."""
        try:
            response = (
                self.client.table("enrollments")
                .insert(
                    {
                        "student_id": student_id,
                        "course_id": course_id,
                        "status": status,
                    }
                )
                .execute()
            )
        except APIError as exc:
            if is_unique_violation(exc):
                raise DuplicateRecordError("Enrollment already exists") from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create enrollment in Supabase")
        return _to_enrollment(response.data[0])


def _to_enrollment(row: dict[str, object]) -> EnrollmentRecord:
    return EnrollmentRecord(
        id=str(row["id"]),
        student_id=str(row["student_id"]),
        course_id=str(row["course_id"]),
        status=str(row["status"]),
    )
