# apps/accounts/models.py
from dataclasses import dataclass
from typing import Optional

from django.contrib.auth.models import AbstractUser, UserManager
from django.core.validators import MinLengthValidator, RegexValidator
from django.db import models
from django.db.models import Q
from django.db.models.functions import Lower

from apps.common.validators import (
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
    normalize_email,
)


class AuthProvider(models.TextChoices):
    LOCAL = "local", "Email & Password"
    GOOGLE = "google", "Google"
    FACEBOOK = "facebook", "Facebook"
    GITHUB = "github", "GitHub"
    TWITTER = "twitter", "Twitter"


FEDERATED_PROVIDERS = frozenset(
    choice for choice in AuthProvider.values if choice != AuthProvider.LOCAL
)


@dataclass(frozen=True)
class LocalCredential:
    password_hash: Optional[str]


@dataclass(frozen=True)
class FederatedCredential:
    provider: str
    provider_subject_id: str


class AccountManager(UserManager):
    """Stores every email lowercased so uniqueness is case-insensitive."""

    @classmethod
    def normalize_email(cls, email):
        return normalize_email(email) or ""


class User(AbstractUser):
    """
    Account record.
    - Email is the login identifier and is unique regardless of credential kind
    - Credential is either local (password) or federated (provider + subject id)
    - subscriber_count mirrors the Subscription fact table and is only
      changed through apps.engagement.services.SubscriptionService
    """

    username = models.CharField(
        max_length=USERNAME_MAX_LENGTH,
        unique=True,
        validators=[
            MinLengthValidator(USERNAME_MIN_LENGTH),
            RegexValidator(r"^[a-z0-9_]+$", "Lowercase letters, digits and underscores only."),
        ],
        error_messages={"unique": "A user with that username already exists."},
    )
    email = models.EmailField(unique=True)

    auth_provider = models.CharField(
        max_length=20,
        choices=AuthProvider.choices,
        default=AuthProvider.LOCAL,
    )
    # Provider subject id; set only while auth_provider is not local
    social_id = models.CharField(max_length=255, blank=True, null=True)

    avatar = models.URLField(max_length=500, blank=True, null=True)
    channel_name = models.CharField(max_length=100)
    channel_description = models.TextField(max_length=1000, blank=True, default="")
    subscriber_count = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["auth_provider", "social_id"],
                condition=Q(social_id__isnull=False),
                name="uq_user_provider_subject",
            ),
            models.UniqueConstraint(Lower("email"), name="uq_user_email_ci"),
            models.CheckConstraint(
                condition=(
                    Q(auth_provider=AuthProvider.LOCAL, social_id__isnull=True)
                    | (~Q(auth_provider=AuthProvider.LOCAL) & Q(social_id__isnull=False))
                ),
                name="ck_user_credential_tag",
            ),
        ]

    def __str__(self):
        return self.email

    def save(self, *args, **kwargs):
        self.email = normalize_email(self.email)
        super().save(*args, **kwargs)

    @property
    def is_federated(self):
        return self.auth_provider != AuthProvider.LOCAL

    @property
    def credential(self):
        if self.is_federated:
            return FederatedCredential(self.auth_provider, self.social_id)
        return LocalCredential(self.password if self.has_usable_password() else None)

    def set_federated(self, provider, provider_subject_id):
        self.auth_provider = provider
        self.social_id = provider_subject_id

    def set_local(self):
        self.auth_provider = AuthProvider.LOCAL
        self.social_id = None
