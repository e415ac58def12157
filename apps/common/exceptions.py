# apps/common/exceptions.py
"""
Error kinds raised by the identity and engagement services.

Services never deal in HTTP status codes. They raise one of the exceptions
below and the API layer (see apps.common.utils.custom_exception_handler)
decides how each kind is rendered.

Kinds:
- validation          → malformed or missing input
- not_found           → referenced video/account absent
- conflict            → duplicate email/username
- already_linked      → provider identity attached to a different account
- invalid_credentials → login failure (intentionally undifferentiated)
- self_subscription   → subscribing to your own channel
- provider_conflict   → email belongs to an account linked to another provider
- missing_email       → no usable email and none can be synthesized
- password_required   → unlinking would leave the account without a login
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    ALREADY_LINKED = "already_linked"
    INVALID_CREDENTIALS = "invalid_credentials"
    SELF_SUBSCRIPTION = "self_subscription"
    PROVIDER_CONFLICT = "provider_conflict"
    MISSING_EMAIL = "missing_email"
    PASSWORD_REQUIRED = "password_required"


class ServiceError(Exception):
    """Base class for every recoverable service failure."""

    kind = None
    default_message = "Request could not be completed"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self):
        data = {"code": self.kind.value, "message": self.message}
        if self.details:
            data["details"] = self.details
        return data


class InvalidInputError(ServiceError):
    kind = ErrorKind.VALIDATION
    default_message = "Invalid input"


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT
    default_message = "Resource already exists"


class AlreadyLinkedError(ConflictError):
    kind = ErrorKind.ALREADY_LINKED
    default_message = "This social account is already linked to another user"


class InvalidCredentialsError(ServiceError):
    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class SelfSubscriptionError(ServiceError):
    kind = ErrorKind.SELF_SUBSCRIPTION
    default_message = "Cannot subscribe to your own channel"


class ProviderConflictError(ServiceError):
    kind = ErrorKind.PROVIDER_CONFLICT
    default_message = "This email is already linked to a different sign-in provider"


class MissingEmailError(ServiceError):
    kind = ErrorKind.MISSING_EMAIL
    default_message = "The provider did not return an email address"


class PasswordRequiredError(ServiceError):
    kind = ErrorKind.PASSWORD_REQUIRED
    default_message = "Cannot unlink social account. Please set a password first."
