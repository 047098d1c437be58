"""Helpers for interpreting PostgREST errors raised through Supabase."""

from postgrest.exceptions import APIError

UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: APIError) -> bool:
    """Return True when PostgREST reports a unique-constraint violation."""
    return str(exc.code) == UNIQUE_VIOLATION
