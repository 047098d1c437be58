"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class CheckoutSessionPayload(BaseModel):
    """Body of a checkout session request.

    Fields are optional so that absent values are reported as missing
    parameters instead of schema validation errors.
    """

    model_config = ConfigDict(populate_by_name=True)

    course_id: str | int | None = Field(default=None, alias="courseId")
    course_title: str | None = Field(default=None, alias="courseTitle")
    course_price: float | str | None = Field(default=None, alias="coursePrice")
    user_id: str | int | None = Field(default=None, alias="userId")
    success_url: str | None = Field(default=None, alias="successUrl")
    cancel_url: str | None = Field(default=None, alias="cancelUrl")


class FreeEnrollmentPayload(BaseModel):
    """Body of a free enrollment request."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str | int | None = Field(default=None, alias="userId")
    course_id: str | int | None = Field(default=None, alias="courseId")
