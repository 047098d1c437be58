"""Supabase-backed course lookups."""

from dataclasses import dataclass
from decimal import Decimal

from supabase import Client

from enrollment_bridge.domain.models import CourseRecord
from enrollment_bridge.services.free_enrollment import CourseRepository


@dataclass
class SupabaseCourseRepository(CourseRepository):
    """Supabase implementation for reading courses."""

    client: Client

    def get_course(self, course_id: str) -> CourseRecord | None:
        """Return a course by id, if present."""
        response = (
            self.client.table("courses")
            .select("id, price")
            .eq("id", course_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        price = row.get("price")
        return CourseRecord(
            id=str(row["id"]),
            price=Decimal(str(price)) if price is not None else Decimal(0),
        )
