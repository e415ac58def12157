# apps/accounts/providers.py
"""
OAuth2 provider adapters.

Each provider returns a differently shaped profile. An adapter turns that raw
payload into an OAuthProfile before it reaches IdentityService, so identity
resolution never needs to know which provider it is talking to.

Adapters are plain instances built by build_provider_adapters() from the
OAUTH_PROVIDERS setting and handed to the callback view when the URL conf is
loaded. There is no module-level registry.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from apps.common.exceptions import InvalidInputError
from .models import AuthProvider

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


@dataclass(frozen=True)
class OAuthProfile:
    """Provider-neutral view of an OAuth login."""

    provider: str
    provider_subject_id: str
    display_name: str = ""
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    # Handle on the provider (GitHub login, Twitter username); preferred
    # over display_name when synthesizing a username
    username_hint: Optional[str] = None


class ProviderAdapter:
    """
    Base OAuth2 adapter: code → access token → profile payload → OAuthProfile.

    Subclasses set the endpoint urls and implement to_profile().
    """

    name = None
    authorize_url = None
    token_url = None
    profile_url = None
    scope = ()

    def __init__(self, client_id, client_secret, session=None):
        self.client_id = client_id
        self.client_secret = client_secret
        self.session = session or requests.Session()

    def __repr__(self):
        return f"<{self.__class__.__name__} client_id={self.client_id!r}>"

    def to_profile(self, payload):
        raise NotImplementedError

    def authorization_url(self, redirect_uri, state, code_challenge=None):
        """URL the frontend sends the browser to; the provider returns a code."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "scope": " ".join(self.scope),
            "state": state,
        }
        if code_challenge:
            params["code_challenge"] = code_challenge
            params["code_challenge_method"] = "S256"
        return requests.Request("GET", self.authorize_url, params=params).prepare().url

    def token_request_data(self, code, redirect_uri, code_verifier=None):
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        if code_verifier:
            data["code_verifier"] = code_verifier
        return data

    def exchange_code(self, code, redirect_uri, code_verifier=None):
        """Exchange an authorization code for an access token."""
        if not code:
            raise InvalidInputError("Missing authorization code")

        response = self.session.post(
            self.token_url,
            data=self.token_request_data(code, redirect_uri, code_verifier),
            headers={"Accept": "application/json"},
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code != 200:
            logger.warning(
                f"{self.name} token exchange failed: status={response.status_code}"
            )
            raise InvalidInputError(f"Could not complete {self.name} sign-in")

        access_token = response.json().get("access_token")
        if not access_token:
            logger.warning(f"{self.name} token response had no access_token")
            raise InvalidInputError(f"Could not complete {self.name} sign-in")
        return access_token

    def get_json(self, url, access_token, params=None):
        response = self.session.get(
            url,
            params=params,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code != 200:
            logger.warning(f"{self.name} profile request failed: status={response.status_code}")
            raise InvalidInputError(f"Could not load your {self.name} profile")
        return response.json()

    def fetch_payload(self, access_token):
        return self.get_json(self.profile_url, access_token)

    def fetch_profile(self, code, redirect_uri, code_verifier=None):
        access_token = self.exchange_code(code, redirect_uri, code_verifier)
        payload = self.fetch_payload(access_token)
        profile = self.to_profile(payload)
        logger.debug(f"Fetched {self.name} profile for subject {profile.provider_subject_id}")
        return profile


class GoogleAdapter(ProviderAdapter):
    """OpenID Connect userinfo: sub, email, email_verified, name, picture."""

    name = AuthProvider.GOOGLE.value
    authorize_url = "https://accounts.google.com/o/oauth2/v2/auth"
    token_url = "https://oauth2.googleapis.com/token"
    profile_url = "https://openidconnect.googleapis.com/v1/userinfo"
    scope = ("openid", "profile", "email")

    def to_profile(self, payload):
        email = payload.get("email")
        if payload.get("email_verified") is False:
            email = None

        name = payload.get("name", "")
        if not name:
            given = payload.get("given_name", "")
            family = payload.get("family_name", "")
            name = f"{given} {family}".strip()

        return OAuthProfile(
            provider=self.name,
            provider_subject_id=str(payload.get("sub") or ""),
            display_name=name,
            email=email,
            avatar_url=payload.get("picture"),
        )


class FacebookAdapter(ProviderAdapter):
    """Graph API /me with id, name, first_name, last_name, email, picture."""

    name = AuthProvider.FACEBOOK.value
    authorize_url = "https://www.facebook.com/v19.0/dialog/oauth"
    token_url = "https://graph.facebook.com/v19.0/oauth/access_token"
    profile_url = "https://graph.facebook.com/v19.0/me"
    scope = ("email", "public_profile")

    def fetch_payload(self, access_token):
        return self.get_json(
            self.profile_url,
            access_token,
            params={"fields": "id,name,first_name,last_name,email,picture.type(large)"},
        )

    def to_profile(self, payload):
        first_name = payload.get("first_name", "")
        last_name = payload.get("last_name", "")
        name = payload.get("name") or f"{first_name} {last_name}".strip()
        picture = (payload.get("picture") or {}).get("data") or {}

        return OAuthProfile(
            provider=self.name,
            provider_subject_id=str(payload.get("id") or ""),
            display_name=name,
            email=payload.get("email"),
            avatar_url=picture.get("url"),
            username_hint=first_name or None,
        )


class GitHubAdapter(ProviderAdapter):
    """REST /user; the email is often private and comes from /user/emails."""

    name = AuthProvider.GITHUB.value
    authorize_url = "https://github.com/login/oauth/authorize"
    token_url = "https://github.com/login/oauth/access_token"
    profile_url = "https://api.github.com/user"
    emails_url = "https://api.github.com/user/emails"
    scope = ("user:email",)

    def fetch_payload(self, access_token):
        payload = self.get_json(self.profile_url, access_token)
        if not payload.get("email"):
            emails = self.get_json(self.emails_url, access_token)
            primary = next(
                (e for e in emails if e.get("primary") and e.get("verified")),
                None,
            )
            if primary:
                payload = {**payload, "email": primary["email"]}
        return payload

    def to_profile(self, payload):
        login = payload.get("login")
        return OAuthProfile(
            provider=self.name,
            provider_subject_id=str(payload.get("id") or ""),
            display_name=payload.get("name") or login or "",
            email=payload.get("email"),
            avatar_url=payload.get("avatar_url"),
            username_hint=login,
        )


class TwitterAdapter(ProviderAdapter):
    """API v2 /users/me; Twitter almost never shares an email address."""

    name = AuthProvider.TWITTER.value
    authorize_url = "https://twitter.com/i/oauth2/authorize"
    token_url = "https://api.twitter.com/2/oauth2/token"
    profile_url = "https://api.twitter.com/2/users/me"
    scope = ("users.read", "tweet.read")

    def exchange_code(self, code, redirect_uri, code_verifier=None):
        if not code:
            raise InvalidInputError("Missing authorization code")

        # Confidential clients authenticate with HTTP basic auth
        data = self.token_request_data(code, redirect_uri, code_verifier)
        data.pop("client_secret")
        response = self.session.post(
            self.token_url,
            data=data,
            auth=(self.client_id, self.client_secret),
            timeout=REQUEST_TIMEOUT,
        )
        if response.status_code != 200:
            logger.warning(f"twitter token exchange failed: status={response.status_code}")
            raise InvalidInputError("Could not complete twitter sign-in")
        access_token = response.json().get("access_token")
        if not access_token:
            raise InvalidInputError("Could not complete twitter sign-in")
        return access_token

    def fetch_payload(self, access_token):
        return self.get_json(
            self.profile_url,
            access_token,
            params={"user.fields": "profile_image_url"},
        )

    def to_profile(self, payload):
        data = payload.get("data", payload)
        username = data.get("username")
        return OAuthProfile(
            provider=self.name,
            provider_subject_id=str(data.get("id") or ""),
            display_name=data.get("name") or username or "",
            email=data.get("email"),
            avatar_url=data.get("profile_image_url"),
            username_hint=username,
        )


ADAPTER_CLASSES = {
    AuthProvider.GOOGLE.value: GoogleAdapter,
    AuthProvider.FACEBOOK.value: FacebookAdapter,
    AuthProvider.GITHUB.value: GitHubAdapter,
    AuthProvider.TWITTER.value: TwitterAdapter,
}


def build_provider_adapters(config, session=None):
    """
    Build one adapter per provider that has client credentials configured.

    Args:
        config: dict like {"google": {"client_id": "...", "client_secret": "..."}}
        session: optional requests.Session shared by the adapters

    Returns:
        dict: provider name -> ProviderAdapter
    """
    adapters = {}
    for name, adapter_class in ADAPTER_CLASSES.items():
        credentials = (config or {}).get(name) or {}
        client_id = credentials.get("client_id")
        client_secret = credentials.get("client_secret")
        if client_id and client_secret:
            adapters[name] = adapter_class(client_id, client_secret, session=session)
            logger.info(f"{name} OAuth is configured.")
        else:
            logger.info(f"{name} OAuth is not configured.")
    return adapters
