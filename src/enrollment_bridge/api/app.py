"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from enrollment_bridge.api.models import CheckoutSessionPayload, FreeEnrollmentPayload
from enrollment_bridge.app_logging import configure_logging
from enrollment_bridge.config import parse_cors_origins
from enrollment_bridge.containers import AppContainer
from enrollment_bridge.domain.errors import (
    CheckoutError,
    CourseNotFoundError,
    InvalidPriceError,
    MissingParametersError,
    NotFreeCourseError,
    ReconciliationError,
    WebhookSignatureError,
)
from enrollment_bridge.domain.models import EnrollmentRecord
from enrollment_bridge.services.verification import (
    VerificationOutcome,
    VerificationResult,
)

ENROLLMENT_FAILED_MESSAGE = (
    "Payment successful but enrollment failed. Please contact support."
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_cors_origins(container.settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Report malformed request bodies as client errors."""
        fields = sorted(
            {
                err["loc"][1]
                for err in exc.errors()
                if len(err["loc"]) > 1 and isinstance(err["loc"][1], str)
            }
        )
        detail = "Invalid request body"
        if fields:
            detail = f"{detail}: " + ", ".join(fields)
        return JSONResponse(
            {"detail": detail}, status_code=status.HTTP_400_BAD_REQUEST
        )

    @app.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        """Liveness message."""
        return "Enrollment bridge is running"

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/create-checkout-session")
    async def create_checkout_session(
        payload: CheckoutSessionPayload, request: Request
    ) -> dict[str, str | None]:
        """Open a checkout session for a course purchase."""
        state_container: AppContainer = request.app.state.container
        try:
            redirect = state_container.checkout_service.create_checkout(
                course_id=_optional_str(payload.course_id),
                course_title=payload.course_title,
                course_price=payload.course_price,
                user_id=_optional_str(payload.user_id),
                success_url=payload.success_url,
                cancel_url=payload.cancel_url,
            )
        except (MissingParametersError, InvalidPriceError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except CheckoutError as exc:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create checkout session",
            ) from exc
        return {"id": redirect.session_id, "url": redirect.redirect_url}

    @app.post("/api/stripe-webhook")
    async def stripe_webhook(request: Request) -> dict[str, bool]:
        """Receive signed Stripe events; the raw body is needed for verification."""
        state_container: AppContainer = request.app.state.container
        payload = await request.body()
        signature = request.headers.get("stripe-signature")
        try:
            state_container.webhook_service.handle_event(payload, signature)
        except WebhookSignatureError as exc:
            logger.warning(
                "Rejected webhook delivery: %s",
                exc,
                extra={"client": request.client.host if request.client else None},
            )
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Webhook Error: {exc}",
            ) from exc
        return {"received": True}

    @app.get("/api/verify-payment/{session_id}")
    async def verify_payment(session_id: str, request: Request) -> JSONResponse:
        """Verify a checkout session and enroll the buyer when paid."""
        state_container: AppContainer = request.app.state.container
        result = state_container.verification_service.verify(session_id)
        return _verification_response(result)

    @app.post("/api/create-free-enrollment")
    async def create_free_enrollment(
        payload: FreeEnrollmentPayload, request: Request
    ) -> dict[str, object]:
        """Enroll a user in a zero-priced course."""
        state_container: AppContainer = request.app.state.container
        try:
            enrollment = state_container.free_enrollment_service.enroll_free(
                user_id=_optional_str(payload.user_id),
                course_id=_optional_str(payload.course_id),
            )
        except (MissingParametersError, NotFreeCourseError) as exc:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
            ) from exc
        except CourseNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
            ) from exc
        except ReconciliationError as exc:
            logger.exception(
                "Free enrollment failed",
                extra={"user_id": payload.user_id, "course_id": payload.course_id},
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to create enrollment",
            ) from exc
        return {"success": True, "enrollment": _enrollment_payload(enrollment)}

    return app


def _optional_str(value: str | int | None) -> str | None:
    if value is None:
        return None
    return str(value)


def _enrollment_payload(enrollment: EnrollmentRecord) -> dict[str, str]:
    """Serialize an enrollment for API responses."""
    return {
        "id": enrollment.id,
        "student_id": enrollment.student_id,
        "course_id": enrollment.course_id,
        "status": enrollment.status,
    }


def _verification_response(result: VerificationResult) -> JSONResponse:
    """Map a verification outcome onto the HTTP response contract."""
    if result.success and result.enrollment:
        return JSONResponse(
            {
                "success": True,
                "courseId": result.course_id,
                "userId": result.user_id,
                "amount": float(result.amount) if result.amount is not None else None,
                "paymentId": result.payment_intent,
                "transactionId": result.session_id,
                "enrollmentId": result.enrollment.id,
                "enrollment": _enrollment_payload(result.enrollment),
            }
        )
    if result.outcome is VerificationOutcome.NOT_PAID:
        return JSONResponse(
            {
                "success": False,
                "message": "Payment not completed",
                "paymentStatus": result.payment_status,
            }
        )
    if result.outcome is VerificationOutcome.ENROLLMENT_FAILED:
        return JSONResponse(
            {
                "success": False,
                "message": ENROLLMENT_FAILED_MESSAGE,
                "paymentStatus": result.payment_status,
                "transactionId": result.session_id,
            },
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return JSONResponse(
        {"success": False, "message": "Failed to verify payment"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
