# apps/accounts/api.py
import logging
import secrets

import requests
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from apps.common.exceptions import InvalidInputError
from .serializers import (
    AccountSerializer,
    AuthResponseSerializer,
    LinkProviderRequestSerializer,
    LoginRequestSerializer,
    OAuthAuthorizeQuerySerializer,
    OAuthCallbackRequestSerializer,
    PasswordRequestSerializer,
    ProfileUpdateSerializer,
    SignupRequestSerializer,
)
from .services import IdentityService

logger = logging.getLogger(__name__)

# --------------------------------------------------
# Utilities & Health Check
# --------------------------------------------------


@swagger_auto_schema(method="get", tags=["Health"], operation_description="Liveness probe.")
@api_view(["GET"])
@permission_classes([AllowAny])
def health_check(request):
    """Simple health check endpoint."""
    return Response({"status": "healthy", "message": "Video Platform Backend is running"})


def issue_tokens(user):
    refresh = RefreshToken.for_user(user)
    return {
        "access": str(refresh.access_token),
        "refresh": str(refresh),
    }


def auth_response(user, message, status=200):
    return Response(
        {
            "success": True,
            "message": message,
            "tokens": issue_tokens(user),
            "user": AccountSerializer(user).data,
        },
        status=status,
    )


def validated(serializer_class, data):
    """Run a request serializer; field errors go through the exception handler."""
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


def fetch_oauth_profile(adapters, provider, data):
    adapter = adapters.get(provider)
    if adapter is None:
        raise InvalidInputError(f"{provider} sign-in is not configured", details={"provider": provider})
    return adapter.fetch_profile(
        data["code"],
        data["redirect_uri"],
        data.get("code_verifier"),
    )


def provider_unavailable(provider, exc):
    logger.exception(f"{provider} OAuth request failed: {exc}")
    return Response(
        {
            "error": True,
            "status_code": 502,
            "message": f"Could not reach {provider}, please try again",
        },
        status=502,
    )


# --------------------------------------------------
# Email / Password Auth
# --------------------------------------------------


@swagger_auto_schema(
    method="post",
    tags=["Auth"],
    request_body=SignupRequestSerializer,
    responses={201: AuthResponseSerializer, 400: "Validation error", 409: "Email or username taken"},
    operation_description="Register a new account with email and password.",
)
@api_view(["POST"])
@permission_classes([AllowAny])
def signup_api(request):
    data = validated(SignupRequestSerializer, request.data)
    user = IdentityService.register_local(
        username=data["username"],
        email=data["email"],
        password=data["password"],
        channel_name=data["channel_name"],
        channel_description=data.get("channel_description"),
    )
    return auth_response(user, f"Welcome, {user.username}!", status=201)


@swagger_auto_schema(
    method="post",
    tags=["Auth"],
    request_body=LoginRequestSerializer,
    responses={
        200: openapi.Response(
            description="Login successful",
            examples={
                "application/json": {
                    "success": True,
                    "message": "Welcome back, john_doe!",
                    "tokens": {"access": "<access_jwt>", "refresh": "<refresh_jwt>"},
                    "user": {
                        "id": 1,
                        "username": "john_doe",
                        "email": "john@example.com",
                        "auth_provider": "local",
                        "channel_name": "John's Channel",
                        "subscriber_count": 0,
                        "has_password": True,
                    },
                }
            },
        ),
        400: "Email and password required",
        401: "Invalid credentials",
    },
    operation_description="Login with email and password to receive JWT tokens.",
)
@api_view(["POST"])
@permission_classes([AllowAny])
def login_api(request):
    data = validated(LoginRequestSerializer, request.data)
    user = IdentityService.login_local(data["email"], data["password"])
    return auth_response(user, f"Welcome back, {user.username}!")


class MeAPI(APIView):
    """Current account: read and partial update."""

    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(tags=["Auth"], operation_id="auth_me_get", responses={200: AccountSerializer})
    def get(self, request):
        return Response(AccountSerializer(request.user).data)

    @swagger_auto_schema(
        tags=["Auth"],
        operation_id="auth_me_update",
        request_body=ProfileUpdateSerializer,
        responses={200: AccountSerializer},
    )
    def patch(self, request):
        data = validated(ProfileUpdateSerializer, request.data)
        user = IdentityService.update_profile(
            request.user.pk,
            channel_name=data.get("channel_name"),
            channel_description=data.get("channel_description"),
            avatar=data.get("avatar"),
        )
        return Response(AccountSerializer(user).data)


@swagger_auto_schema(
    method="post",
    tags=["Auth"],
    request_body=PasswordRequestSerializer,
    responses={200: AccountSerializer, 400: "Validation error", 401: "Current password is incorrect"},
    operation_description=(
        "Change the password. Accounts created through a social provider that "
        "have no password yet can set one without current_password."
    ),
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def password_api(request):
    data = validated(PasswordRequestSerializer, request.data)
    if request.user.has_usable_password():
        user = IdentityService.change_password(
            request.user.pk, data.get("current_password"), data["new_password"]
        )
    else:
        user = IdentityService.set_password(request.user.pk, data["new_password"])
    return Response(AccountSerializer(user).data)


# --------------------------------------------------
# Social Login
# --------------------------------------------------


class OAuthAuthorizeAPI(APIView):
    """Build the provider authorization URL that starts a social login."""

    permission_classes = [AllowAny]
    authentication_classes = []
    adapters = {}

    @swagger_auto_schema(
        tags=["Social Login"],
        operation_id="oauth_authorize",
        query_serializer=OAuthAuthorizeQuerySerializer,
        responses={
            200: openapi.Response(
                description="Authorization URL",
                examples={
                    "application/json": {
                        "provider": "github",
                        "url": "https://github.com/login/oauth/authorize?response_type=code&...",
                        "state": "<opaque>",
                    }
                },
            ),
            400: "Provider not configured",
        },
    )
    def get(self, request, provider):
        provider = provider.lower()
        adapter = self.adapters.get(provider)
        if adapter is None:
            raise InvalidInputError(f"{provider} sign-in is not configured", details={"provider": provider})

        data = validated(OAuthAuthorizeQuerySerializer, request.query_params)
        state = data.get("state") or secrets.token_urlsafe(24)
        url = adapter.authorization_url(data["redirect_uri"], state, data.get("code_challenge"))
        return Response({"provider": provider, "url": url, "state": state})


class OAuthCallbackAPI(APIView):
    """
    Finish an authorization-code flow started by the frontend.

    The frontend redirects to the provider, receives the code on its own
    callback page and posts it here together with the redirect_uri it used.
    """

    permission_classes = [AllowAny]
    authentication_classes = []
    adapters = {}

    @swagger_auto_schema(
        tags=["Social Login"],
        operation_id="oauth_callback",
        request_body=OAuthCallbackRequestSerializer,
        responses={
            200: AuthResponseSerializer,
            400: "Bad code, unsupported provider or missing email",
            409: "Email already linked to a different provider",
            502: "Provider unreachable",
        },
    )
    def post(self, request, provider):
        provider = provider.lower()
        data = validated(OAuthCallbackRequestSerializer, request.data)
        try:
            profile = fetch_oauth_profile(self.adapters, provider, data)
        except requests.RequestException as exc:
            return provider_unavailable(provider, exc)

        user = IdentityService.resolve_oauth_profile(profile)
        return auth_response(user, f"Welcome, {user.username}!")


class LinkProviderAPI(APIView):
    """Attach a social identity to the signed-in account."""

    permission_classes = [IsAuthenticated]
    adapters = {}

    @swagger_auto_schema(
        tags=["Social Login"],
        operation_id="oauth_link",
        request_body=LinkProviderRequestSerializer,
        responses={
            200: AccountSerializer,
            409: "Identity linked to another account, or account already linked",
        },
    )
    def post(self, request):
        data = validated(LinkProviderRequestSerializer, request.data)
        provider = data["provider"].strip().lower()
        try:
            profile = fetch_oauth_profile(self.adapters, provider, data)
        except requests.RequestException as exc:
            return provider_unavailable(provider, exc)

        user = IdentityService.link_provider(
            request.user.pk, profile.provider, profile.provider_subject_id
        )
        return Response(AccountSerializer(user).data)


@swagger_auto_schema(
    method="post",
    tags=["Social Login"],
    responses={200: AccountSerializer, 400: "Set a password first"},
    operation_description="Detach the social identity; the account keeps its password login.",
)
@api_view(["POST"])
@permission_classes([IsAuthenticated])
def unlink_api(request):
    user = IdentityService.unlink_provider(request.user.pk)
    return Response(AccountSerializer(user).data)


class DecoratedTokenRefreshView(TokenRefreshView):
    @swagger_auto_schema(
        tags=["Auth"],
        operation_description="Refresh access token using refresh token",
        responses={
            200: openapi.Response(
                description="New access token",
                examples={"application/json": {"access": "<new_access_token>"}},
            )
        },
    )
    def post(self, request, *args, **kwargs):
        return super().post(request, *args, **kwargs)
