#apps\accounts\serializers.py
from rest_framework import serializers

from .models import User


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.CharField()
    password = serializers.CharField(write_only=True)


class SignupRequestSerializer(serializers.Serializer):
    # Format checks happen in IdentityService so the error codes stay uniform
    username = serializers.CharField()
    email = serializers.CharField()
    password = serializers.CharField(write_only=True)
    channel_name = serializers.CharField()
    channel_description = serializers.CharField(required=False, allow_blank=True)


class ProfileUpdateSerializer(serializers.Serializer):
    channel_name = serializers.CharField(required=False)
    channel_description = serializers.CharField(required=False, allow_blank=True)
    avatar = serializers.URLField(required=False, allow_blank=True, max_length=500)


class PasswordRequestSerializer(serializers.Serializer):
    """
    current_password is required when the account already has a password;
    federated accounts without one only send new_password.
    """
    current_password = serializers.CharField(required=False, write_only=True)
    new_password = serializers.CharField(write_only=True)


class OAuthCallbackRequestSerializer(serializers.Serializer):
    code = serializers.CharField()
    redirect_uri = serializers.CharField()
    code_verifier = serializers.CharField(required=False)


class LinkProviderRequestSerializer(serializers.Serializer):
    provider = serializers.CharField()
    code = serializers.CharField()
    redirect_uri = serializers.CharField()
    code_verifier = serializers.CharField(required=False)


class TokenSerializer(serializers.Serializer):
    access = serializers.CharField()
    refresh = serializers.CharField()


class AccountSerializer(serializers.ModelSerializer):
    """Account as seen by its owner."""
    has_password = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "username",
            "email",
            "auth_provider",
            "avatar",
            "channel_name",
            "channel_description",
            "subscriber_count",
            "has_password",
            "date_joined",
        ]
        read_only_fields = fields

    def get_has_password(self, obj):
        return obj.has_usable_password()


class ChannelSummarySerializer(serializers.ModelSerializer):
    """Public view of an account acting as a channel."""

    class Meta:
        model = User
        fields = ["id", "username", "channel_name", "avatar", "subscriber_count"]
        read_only_fields = fields


class AuthResponseSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    message = serializers.CharField()
    tokens = TokenSerializer()
    user = AccountSerializer()


class OAuthAuthorizeQuerySerializer(serializers.Serializer):
    redirect_uri = serializers.CharField()
    # Generated when omitted; the frontend must compare it on the callback page
    state = serializers.CharField(required=False)
    code_challenge = serializers.CharField(required=False)
