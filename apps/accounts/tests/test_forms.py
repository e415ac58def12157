# apps/accounts/tests/test_forms.py
from django.contrib.auth import get_user_model
from django.test import TestCase

from apps.accounts.backends import EmailBackend
from apps.accounts.forms import AccountCreationForm

User = get_user_model()


class AccountCreationFormTestCase(TestCase):

    def form(self, **overrides):
        data = {
            "email": "Admin.Made@Example.com",
            "username": "admin_made",
            "channel_name": "Admin Made",
            "password1": "a-long-enough-pass",
            "password2": "a-long-enough-pass",
        }
        data.update(overrides)
        return AccountCreationForm(data=data)

    def test_creates_local_account(self):
        form = self.form()
        self.assertTrue(form.is_valid(), form.errors)

        user = form.save()

        self.assertEqual(user.email, "admin.made@example.com")
        self.assertEqual(user.auth_provider, "local")
        self.assertTrue(user.check_password("a-long-enough-pass"))

    def test_duplicate_email_any_case(self):
        User.objects.create_user(
            username="first", email="admin.made@example.com", password="secret123", channel_name="First"
        )

        form = self.form()

        self.assertFalse(form.is_valid())
        self.assertIn("email", form.errors)


class EmailBackendTestCase(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            username="staff", email="staff@example.com", password="secret123", channel_name="Staff"
        )

    def test_authenticate_with_email(self):
        backend = EmailBackend()

        self.assertEqual(backend.authenticate(None, username="STAFF@example.com", password="secret123"), self.user)
        self.assertIsNone(backend.authenticate(None, email="staff@example.com", password="wrong"))
        self.assertIsNone(backend.authenticate(None, email="staff@example.com", password=None))
