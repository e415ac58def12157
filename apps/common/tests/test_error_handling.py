# apps/common/tests/test_error_handling.py
"""
Tests for the error envelope and status mapping.
"""

from django.test import SimpleTestCase, TestCase
from rest_framework.exceptions import NotAuthenticated, ValidationError
from rest_framework.test import APIClient

from apps.common.exceptions import (
    AlreadyLinkedError,
    ConflictError,
    ErrorKind,
    InvalidCredentialsError,
    MissingEmailError,
    NotFoundError,
    PasswordRequiredError,
    ProviderConflictError,
    SelfSubscriptionError,
    ServiceError,
)
from apps.common.utils import ERROR_STATUS_CODES, custom_exception_handler


class ExceptionHandlerTestCase(SimpleTestCase):

    def test_every_kind_has_a_status(self):
        self.assertEqual(set(ERROR_STATUS_CODES), set(ErrorKind))

    def test_service_error_statuses(self):
        expected = {
            NotFoundError: 404,
            ConflictError: 409,
            AlreadyLinkedError: 409,
            ProviderConflictError: 409,
            InvalidCredentialsError: 401,
            SelfSubscriptionError: 400,
            MissingEmailError: 400,
            PasswordRequiredError: 400,
        }
        for error_class, status_code in expected.items():
            response = custom_exception_handler(error_class(), {})
            self.assertEqual(response.status_code, status_code, error_class.__name__)
            self.assertEqual(response.data["code"], error_class.kind.value)
            self.assertTrue(response.data["error"])

    def test_already_linked_is_a_conflict(self):
        self.assertTrue(issubclass(AlreadyLinkedError, ConflictError))
        self.assertTrue(issubclass(ConflictError, ServiceError))

    def test_details_included(self):
        response = custom_exception_handler(ConflictError("Email already exists", details={"field": "email"}), {})

        self.assertEqual(response.data["message"], "Email already exists")
        self.assertEqual(response.data["details"], {"field": "email"})

    def test_drf_validation_error(self):
        response = custom_exception_handler(ValidationError({"type": ["This field is required."]}), {})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "validation")
        self.assertEqual(response.data["details"], {"type": ["This field is required."]})

    def test_drf_detail_error(self):
        response = custom_exception_handler(NotAuthenticated(), {})

        self.assertEqual(response.status_code, 401)
        self.assertIn("message", response.data)

    def test_unhandled_error_is_500(self):
        with self.assertLogs("apps.common.utils", level="ERROR"):
            response = custom_exception_handler(RuntimeError("boom"), {})

        self.assertEqual(response.status_code, 500)
        self.assertNotIn("boom", response.data["message"])


class EnumsAPITestCase(TestCase):

    def test_enums_public(self):
        response = APIClient().get("/api/enums/")

        self.assertEqual(response.status_code, 200)
        providers = [p["value"] for p in response.data["auth_providers"]]
        self.assertEqual(providers, ["local", "google", "facebook", "github", "twitter"])
        self.assertEqual(response.data["password"], {"min_length": 6})
