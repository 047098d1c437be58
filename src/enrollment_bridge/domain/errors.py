"""Error types raised by services and adapters."""


class EnrollmentBridgeError(Exception):
    """Base class for application errors."""


class MissingParametersError(EnrollmentBridgeError, ValueError):
    """Required request fields were absent."""


class InvalidPriceError(EnrollmentBridgeError, ValueError):
    """A course price could not be used for checkout."""


class NotFreeCourseError(EnrollmentBridgeError, ValueError):
    """Free enrollment was requested for a paid course."""


class CourseNotFoundError(EnrollmentBridgeError, LookupError):
    """The requested course does not exist."""


class WebhookSignatureError(EnrollmentBridgeError):
    """A webhook delivery failed signature verification."""


class PaymentProcessorError(EnrollmentBridgeError):
    """The payment processor failed or was unreachable."""


class CheckoutError(PaymentProcessorError):
    """A checkout session could not be created."""


class DuplicateRecordError(EnrollmentBridgeError):
    """The data store rejected an insert on a uniqueness constraint."""


class ReconciliationError(EnrollmentBridgeError):
    """Enrollment state could not be looked up or created."""
