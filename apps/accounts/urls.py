# apps/accounts/urls.py
from django.conf import settings
from django.urls import path

from . import api
from .providers import build_provider_adapters

oauth_adapters = build_provider_adapters(settings.OAUTH_PROVIDERS)

urlpatterns = [
    path("signup/", api.signup_api, name="auth_signup"),
    path("login/", api.login_api, name="auth_login"),
    path("me/", api.MeAPI.as_view(), name="auth_me"),
    path("password/", api.password_api, name="auth_password"),
    path("token/refresh/", api.DecoratedTokenRefreshView.as_view(), name="token_refresh"),
    path(
        "oauth/<str:provider>/authorize/",
        api.OAuthAuthorizeAPI.as_view(adapters=oauth_adapters),
        name="oauth_authorize",
    ),
    path(
        "oauth/<str:provider>/callback/",
        api.OAuthCallbackAPI.as_view(adapters=oauth_adapters),
        name="oauth_callback",
    ),
    path("link/", api.LinkProviderAPI.as_view(adapters=oauth_adapters), name="oauth_link"),
    path("unlink/", api.unlink_api, name="oauth_unlink"),
]
