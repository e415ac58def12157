import django.core.validators
import django.db.models.functions.text
import django.utils.timezone
from django.db import migrations, models

import apps.accounts.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                (
                    "is_superuser",
                    models.BooleanField(
                        default=False,
                        help_text="Designates that this user has all permissions without explicitly assigning them.",
                        verbose_name="superuser status",
                    ),
                ),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                (
                    "is_staff",
                    models.BooleanField(
                        default=False,
                        help_text="Designates whether the user can log into this admin site.",
                        verbose_name="staff status",
                    ),
                ),
                (
                    "is_active",
                    models.BooleanField(
                        default=True,
                        help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.",
                        verbose_name="active",
                    ),
                ),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                (
                    "username",
                    models.CharField(
                        error_messages={"unique": "A user with that username already exists."},
                        max_length=30,
                        unique=True,
                        validators=[
                            django.core.validators.MinLengthValidator(3),
                            django.core.validators.RegexValidator(
                                "^[a-z0-9_]+$", "Lowercase letters, digits and underscores only."
                            ),
                        ],
                    ),
                ),
                ("email", models.EmailField(max_length=254, unique=True)),
                (
                    "auth_provider",
                    models.CharField(
                        choices=[
                            ("local", "Email & Password"),
                            ("google", "Google"),
                            ("facebook", "Facebook"),
                            ("github", "GitHub"),
                            ("twitter", "Twitter"),
                        ],
                        default="local",
                        max_length=20,
                    ),
                ),
                ("social_id", models.CharField(blank=True, max_length=255, null=True)),
                ("avatar", models.URLField(blank=True, max_length=500, null=True)),
                ("channel_name", models.CharField(max_length=100)),
                ("channel_description", models.TextField(blank=True, default="", max_length=1000)),
                ("subscriber_count", models.PositiveIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "groups",
                    models.ManyToManyField(
                        blank=True,
                        help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.group",
                        verbose_name="groups",
                    ),
                ),
                (
                    "user_permissions",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Specific permissions for this user.",
                        related_name="user_set",
                        related_query_name="user",
                        to="auth.permission",
                        verbose_name="user permissions",
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("social_id__isnull", False)),
                        fields=("auth_provider", "social_id"),
                        name="uq_user_provider_subject",
                    ),
                    models.UniqueConstraint(
                        django.db.models.functions.text.Lower("email"),
                        name="uq_user_email_ci",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("auth_provider", "local"), ("social_id__isnull", True)),
                            models.Q(
                                models.Q(("auth_provider", "local"), _negated=True),
                                ("social_id__isnull", False),
                            ),
                            _connector="OR",
                        ),
                        name="ck_user_credential_tag",
                    ),
                ],
            },
            managers=[
                ("objects", apps.accounts.models.AccountManager()),
            ],
        ),
    ]
