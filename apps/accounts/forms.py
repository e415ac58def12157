# apps/accounts/forms.py
from django import forms
from django.contrib.auth.forms import UserChangeForm, UserCreationForm

from apps.common.validators import normalize_email
from .models import User


class AccountCreationForm(UserCreationForm):
    """Admin form for creating a local (email/password) account."""

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("email", "username", "channel_name")

    def clean_email(self):
        """Validate email uniqueness regardless of case."""
        email = normalize_email(self.cleaned_data.get("email"))
        if email and User.objects.filter(email=email).exists():
            raise forms.ValidationError("A user with that email already exists.")
        return email


class AccountChangeForm(UserChangeForm):

    class Meta(UserChangeForm.Meta):
        model = User
        fields = "__all__"
