# apps/accounts/services.py
"""
Identity service: turns a credential assertion into exactly one account.

Provides:
- Local registration and email/password login
- OAuth profile resolution (repeat login, link by email, or create)
- Explicit provider link/unlink
- Profile and password maintenance

Invariants enforced here and backstopped by the database:
- email is unique across all accounts, regardless of credential kind
- (auth_provider, social_id) is unique across federated accounts
- an OAuth identity never creates a second account, even under retry

Failures are raised as apps.common.exceptions.ServiceError subclasses.
"""

import hashlib
import logging
import re
import secrets
import string

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone

from apps.common.exceptions import (
    AlreadyLinkedError,
    ConflictError,
    InvalidCredentialsError,
    InvalidInputError,
    MissingEmailError,
    NotFoundError,
    PasswordRequiredError,
    ProviderConflictError,
)
from apps.common.validators import (
    USERNAME_MAX_LENGTH,
    clean_email,
    clean_password,
    clean_username,
    normalize_email,
    parse_id,
    require_fields,
)
from .models import FEDERATED_PROVIDERS, AuthProvider, User

logger = logging.getLogger(__name__)

PLACEHOLDER_EMAIL_DOMAIN = "placeholder.invalid"

USERNAME_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
USERNAME_SUFFIX_LENGTH = 6
USERNAME_LONG_SUFFIX_LENGTH = 12
USERNAME_ATTEMPTS = 5

CHANNEL_NAME_MAX_LENGTH = 100
CHANNEL_DESCRIPTION_MAX_LENGTH = 1000

_PLAIN_SUBJECT = re.compile(r"^[a-z0-9._-]+$")


def generate_username(base, suffix_length=USERNAME_SUFFIX_LENGTH):
    """
    Build a username that fits the 30 character limit.

    Format: cleaned base truncated to fit, underscore, random suffix.
    """
    cleaned = re.sub(r"[^a-z0-9_]", "_", (base or "").strip().lower()).strip("_") or "user"
    suffix = "".join(secrets.choice(USERNAME_SUFFIX_ALPHABET) for _ in range(suffix_length))
    max_base_length = USERNAME_MAX_LENGTH - 1 - suffix_length
    return f"{cleaned[:max_base_length]}_{suffix}"


def placeholder_email(provider, provider_subject_id):
    """
    Deterministic stand-in address for providers that share no email.

    Subject ids that are not already lowercase-safe are hashed so two ids
    differing only in case never map to the same address.
    """
    subject = str(provider_subject_id)
    local_part = f"{provider}_{subject}"
    if not _PLAIN_SUBJECT.match(subject) or len(local_part) > 64:
        local_part = f"{provider}_{hashlib.sha256(subject.encode()).hexdigest()[:24]}"
    return f"{local_part}@{PLACEHOLDER_EMAIL_DOMAIN}"


def is_placeholder_email(email):
    return bool(email) and email.endswith(f"@{PLACEHOLDER_EMAIL_DOMAIN}")


class IdentityService:
    """
    Service class for account creation, login and provider linking.

    Every method returns a User instance (or a plain value) and raises a
    ServiceError on failure.
    """

    # ========== LOOKUPS ==========

    @staticmethod
    def get_account(account_id):
        pk = parse_id(account_id, "User ID")
        user = User.objects.filter(pk=pk).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def find_by_provider(provider, provider_subject_id):
        return User.objects.filter(
            auth_provider=provider,
            social_id=provider_subject_id,
        ).first()

    @staticmethod
    def is_email_registered_with_different_provider(email, provider):
        """Check whether ``email`` belongs to an account using another provider."""
        return (
            User.objects.filter(email=normalize_email(email))
            .exclude(auth_provider=provider)
            .exists()
        )

    # ========== LOCAL CREDENTIALS ==========

    @classmethod
    def register_local(cls, username, email, password, channel_name, channel_description=None):
        """
        Register an email/password account.

        Raises:
            InvalidInputError: missing field, bad format, password under 6 chars
            ConflictError: email or username already taken
        """
        require_fields(
            {
                "username": username,
                "email": email,
                "password": password,
                "channel_name": channel_name,
            },
            ["username", "email", "password", "channel_name"],
        )
        username = clean_username(username)
        email = clean_email(email)
        clean_password(password)
        if is_placeholder_email(email):
            raise InvalidInputError("Please provide a valid email", details={"field": "email"})
        channel_name, channel_description = cls._clean_channel(channel_name, channel_description)

        existing = User.objects.filter(Q(email=email) | Q(username=username)).first()
        if existing:
            field = "Email" if existing.email == email else "Username"
            raise ConflictError(f"{field} already exists", details={"field": field.lower()})

        user = User(
            username=username,
            email=email,
            channel_name=channel_name,
            channel_description=channel_description or "",
        )
        user.set_password(password)
        try:
            with transaction.atomic():
                user.save()
        except IntegrityError:
            # A concurrent registration took the email or username first
            logger.warning(f"Registration race lost for {email}")
            raise ConflictError("Email or username already exists")

        logger.info(f"Registered local account {user.username} ({user.email})")
        return user

    @staticmethod
    def login_local(email, password):
        """
        Authenticate with email and password.

        Every failure path computes a password hash, so response time does not
        reveal whether the email exists.

        Raises:
            InvalidInputError: email or password missing
            InvalidCredentialsError: any authentication failure
        """
        require_fields({"email": email, "password": password}, ["email", "password"])
        email = normalize_email(email)

        user = User.objects.filter(email=email).first()
        if user is None or not user.has_usable_password():
            # Run the default password hasher to mitigate timing attacks
            User().set_password(password)
            logger.warning(f"Login failed for {email}: no local credential")
            raise InvalidCredentialsError()

        if not user.check_password(password) or not user.is_active:
            logger.warning(f"Login failed for {email}: bad password or inactive")
            raise InvalidCredentialsError()

        user.last_login = timezone.now()
        user.save(update_fields=["last_login"])
        logger.info(f"Successful login for user: {user.username}")
        return user

    @classmethod
    @transaction.atomic
    def change_password(cls, account_id, current_password, new_password):
        require_fields(
            {"current_password": current_password, "new_password": new_password},
            ["current_password", "new_password"],
        )
        user = cls._lock_account(account_id)
        if not user.check_password(current_password):
            raise InvalidCredentialsError("Current password is incorrect")
        clean_password(new_password, field="new_password")
        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        logger.info(f"Password changed for {user.username}")
        return user

    @classmethod
    @transaction.atomic
    def set_password(cls, account_id, new_password):
        """Give a federated account a password so it can later be unlinked."""
        user = cls._lock_account(account_id)
        if user.has_usable_password():
            raise ConflictError("A password is already set, use change password instead")
        clean_password(new_password)
        user.set_password(new_password)
        user.save(update_fields=["password", "updated_at"])
        logger.info(f"Password set for federated account {user.username}")
        return user

    # ========== OAUTH ==========

    @classmethod
    def resolve_oauth_profile(cls, profile):
        """
        Map a normalized OAuth profile onto exactly one account.

        Policy, in order:
        1. (provider, subject) already known → return that account unchanged
        2. email belongs to a local account → link the provider in place
           email belongs to an account linked elsewhere → ProviderConflictError
        3. otherwise create a federated account with a synthesized username

        Safe to retry: two concurrent first logins for the same identity end
        with one account, the loser re-reading the winner's row.
        """
        provider = cls._clean_provider(profile.provider)
        subject = cls._clean_subject(profile.provider_subject_id)

        try:
            return cls._resolve(provider, subject, profile)
        except IntegrityError:
            winner = cls.find_by_provider(provider, subject)
            if winner is not None:
                logger.warning(f"OAuth race on {provider}:{subject} resolved to user {winner.pk}")
                return winner
            raise ConflictError("Account could not be created, please retry")

    @classmethod
    @transaction.atomic
    def _resolve(cls, provider, subject, profile):
        # 1. Repeat login
        user = cls.find_by_provider(provider, subject)
        if user is not None:
            logger.debug(f"OAuth repeat login for {provider}:{subject} -> user {user.pk}")
            return user

        email = cls._usable_email(profile.email)
        synthesized = False
        if email is None:
            if provider not in cls._placeholder_providers():
                raise MissingEmailError(f"No email found in {provider} profile")
            email = placeholder_email(provider, subject)
            synthesized = True

        # 2. Link by email
        existing = User.objects.select_for_update().filter(email=email).first()
        if existing is not None:
            if existing.auth_provider == provider and existing.social_id == subject:
                # Committed by a concurrent first login after step 1 ran
                return existing
            if existing.is_federated:
                logger.warning(
                    f"OAuth {provider} login for {email} refused: account linked to {existing.auth_provider}"
                )
                raise ProviderConflictError(
                    f"This email is already linked to a {existing.auth_provider} account",
                    details={"provider": existing.auth_provider},
                )
            existing.set_federated(provider, subject)
            update_fields = ["auth_provider", "social_id", "updated_at"]
            if not existing.avatar and profile.avatar_url:
                existing.avatar = profile.avatar_url
                update_fields.append("avatar")
            with transaction.atomic():
                existing.save(update_fields=update_fields)
            logger.info(f"Linked {provider} identity to existing account {existing.username}")
            return existing

        # 3. Create
        return cls._create_federated(provider, subject, email, synthesized, profile)

    @classmethod
    def _create_federated(cls, provider, subject, email, synthesized, profile):
        base = profile.username_hint or profile.display_name
        if not base and not synthesized:
            base = email.split("@")[0]

        for username in cls._username_candidates(base):
            if User.objects.filter(username=username).exists():
                continue

            user = User(
                username=username,
                email=email,
                channel_name=(profile.display_name or username)[:CHANNEL_NAME_MAX_LENGTH],
                avatar=profile.avatar_url or None,
            )
            user.set_federated(provider, subject)
            user.set_unusable_password()
            try:
                with transaction.atomic():
                    user.save()
            except IntegrityError:
                winner = cls.find_by_provider(provider, subject)
                if winner is not None:
                    logger.warning(f"OAuth race on {provider}:{subject} resolved to user {winner.pk}")
                    return winner
                if User.objects.filter(email=email).exists():
                    raise ConflictError("An account with this email was just created, please retry")
                # Username taken between the check and the insert
                continue

            logger.info(f"Created {provider} account {user.username} ({user.email})")
            return user

        raise ConflictError("Could not generate a unique username, please retry")

    @staticmethod
    def _username_candidates(base):
        for _ in range(USERNAME_ATTEMPTS):
            yield generate_username(base)
        # Fall back to a much longer random component
        for _ in range(USERNAME_ATTEMPTS):
            yield generate_username(base, suffix_length=USERNAME_LONG_SUFFIX_LENGTH)

    @classmethod
    @transaction.atomic
    def link_provider(cls, account_id, provider, provider_subject_id):
        """
        Attach a provider identity to an account.

        Raises:
            NotFoundError: account does not exist
            AlreadyLinkedError: identity belongs to a different account
            ProviderConflictError: account is linked to another identity already
        """
        provider = cls._clean_provider(provider)
        subject = cls._clean_subject(provider_subject_id)
        user = cls._lock_account(account_id)

        owner = cls.find_by_provider(provider, subject)
        if owner is not None and owner.pk != user.pk:
            raise AlreadyLinkedError()
        if owner is not None:
            return user

        if user.is_federated:
            raise ProviderConflictError(
                f"Account is already linked to {user.auth_provider}, unlink it first",
                details={"provider": user.auth_provider},
            )

        user.set_federated(provider, subject)
        try:
            with transaction.atomic():
                user.save(update_fields=["auth_provider", "social_id", "updated_at"])
        except IntegrityError:
            raise AlreadyLinkedError()

        logger.info(f"Linked {provider} identity to {user.username}")
        return user

    @classmethod
    @transaction.atomic
    def unlink_provider(cls, account_id):
        """
        Detach the provider identity and fall back to the local password.

        Raises:
            NotFoundError: account does not exist
            PasswordRequiredError: no password set, the account would be locked out
        """
        user = cls._lock_account(account_id)
        if not user.is_federated:
            return user
        if not user.has_usable_password():
            raise PasswordRequiredError()

        provider = user.auth_provider
        user.set_local()
        user.save(update_fields=["auth_provider", "social_id", "updated_at"])
        logger.info(f"Unlinked {provider} identity from {user.username}")
        return user

    # ========== PROFILE ==========

    @classmethod
    @transaction.atomic
    def update_profile(cls, account_id, channel_name=None, channel_description=None, avatar=None):
        user = cls._lock_account(account_id)
        if channel_name is not None:
            user.channel_name, _ = cls._clean_channel(channel_name, None)
        if channel_description is not None:
            _, user.channel_description = cls._clean_channel(user.channel_name, channel_description)
        if avatar is not None:
            user.avatar = avatar or None
        user.save(update_fields=["channel_name", "channel_description", "avatar", "updated_at"])
        return user

    # ========== HELPERS ==========

    @staticmethod
    def _lock_account(account_id):
        pk = parse_id(account_id, "User ID")
        user = User.objects.select_for_update().filter(pk=pk).first()
        if user is None:
            raise NotFoundError("User not found")
        return user

    @staticmethod
    def _clean_provider(provider):
        provider = (provider or "").strip().lower()
        if provider not in FEDERATED_PROVIDERS:
            raise InvalidInputError(
                f"Unsupported provider: {provider or 'none'}",
                details={"supported": sorted(FEDERATED_PROVIDERS)},
            )
        return provider

    @staticmethod
    def _clean_subject(provider_subject_id):
        subject = str(provider_subject_id or "").strip()
        if not subject:
            raise InvalidInputError("Missing provider subject id")
        return subject

    @staticmethod
    def _usable_email(email):
        email = normalize_email(email)
        if not email:
            return None
        try:
            return clean_email(email)
        except InvalidInputError:
            return None

    @staticmethod
    def _placeholder_providers():
        return getattr(
            settings,
            "OAUTH_PLACEHOLDER_EMAIL_PROVIDERS",
            [AuthProvider.TWITTER.value, AuthProvider.FACEBOOK.value, AuthProvider.GITHUB.value],
        )

    @staticmethod
    def _clean_channel(channel_name, channel_description):
        channel_name = (channel_name or "").strip()
        if not channel_name:
            raise InvalidInputError("Channel name is required", details={"field": "channel_name"})
        if len(channel_name) > CHANNEL_NAME_MAX_LENGTH:
            raise InvalidInputError(
                f"Channel name cannot exceed {CHANNEL_NAME_MAX_LENGTH} characters",
                details={"field": "channel_name"},
            )
        if channel_description is not None:
            channel_description = channel_description.strip()
            if len(channel_description) > CHANNEL_DESCRIPTION_MAX_LENGTH:
                raise InvalidInputError(
                    f"Channel description cannot exceed {CHANNEL_DESCRIPTION_MAX_LENGTH} characters",
                    details={"field": "channel_description"},
                )
        return channel_name, channel_description
