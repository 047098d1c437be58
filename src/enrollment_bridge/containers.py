"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from enrollment_bridge.adapters.stripe_client import (
    PaymentProcessor,
    StripePaymentProcessor,
)
from enrollment_bridge.adapters.supabase_course_repository import (
    SupabaseCourseRepository,
)
from enrollment_bridge.adapters.supabase_enrollment_repository import (
    SupabaseEnrollmentRepository,
)
from enrollment_bridge.adapters.supabase_payment_repository import (
    SupabasePaymentRepository,
)
from enrollment_bridge.config import Settings
from enrollment_bridge.services.checkout import CheckoutService
from enrollment_bridge.services.enrollments import EnrollmentReconciler
from enrollment_bridge.services.free_enrollment import FreeEnrollmentService
from enrollment_bridge.services.verification import VerificationService
from enrollment_bridge.services.webhooks import WebhookService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    payment_processor: PaymentProcessor
    reconciler: EnrollmentReconciler
    checkout_service: CheckoutService
    webhook_service: WebhookService
    verification_service: VerificationService
    free_enrollment_service: FreeEnrollmentService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    enrollment_repository = SupabaseEnrollmentRepository(supabase_client)
    payment_repository = SupabasePaymentRepository(supabase_client)
    course_repository = SupabaseCourseRepository(supabase_client)
    payment_processor = StripePaymentProcessor.create(
        api_key=resolved_settings.stripe_secret_key,
        webhook_secret=resolved_settings.stripe_webhook_secret,
    )
    reconciler = EnrollmentReconciler(
        enrollment_repository=enrollment_repository,
        payment_repository=payment_repository,
    )
    checkout_service = CheckoutService(
        processor=payment_processor,
        frontend_url=resolved_settings.frontend_url,
        currency=resolved_settings.checkout_currency,
    )
    webhook_service = WebhookService(
        processor=payment_processor, reconciler=reconciler
    )
    verification_service = VerificationService(
        processor=payment_processor, reconciler=reconciler
    )
    free_enrollment_service = FreeEnrollmentService(
        course_repository=course_repository, reconciler=reconciler
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=resolved_settings,
        payment_processor=payment_processor,
        reconciler=reconciler,
        checkout_service=checkout_service,
        webhook_service=webhook_service,
        verification_service=verification_service,
        free_enrollment_service=free_enrollment_service,
        close_resources=close_resources,
    )
