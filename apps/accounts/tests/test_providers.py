# apps/accounts/tests/test_providers.py
"""
Tests for the OAuth provider adapters.

No network: a stub session stands in for requests.Session.
"""

from unittest.mock import MagicMock
from urllib.parse import parse_qs, urlsplit

from django.test import SimpleTestCase

from apps.accounts.providers import (
    FacebookAdapter,
    GitHubAdapter,
    GoogleAdapter,
    TwitterAdapter,
    build_provider_adapters,
)
from apps.common.exceptions import InvalidInputError


def fake_response(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {}
    return response


class ProfileMappingTestCase(SimpleTestCase):
    """Raw provider payload -> OAuthProfile."""

    def test_google(self):
        profile = GoogleAdapter("id", "secret").to_profile({
            "sub": "1098",
            "email": "ana@example.com",
            "email_verified": True,
            "given_name": "Ana",
            "family_name": "Lima",
            "picture": "https://lh3.example.com/ana.jpg",
        })

        self.assertEqual(profile.provider, "google")
        self.assertEqual(profile.provider_subject_id, "1098")
        self.assertEqual(profile.display_name, "Ana Lima")
        self.assertEqual(profile.email, "ana@example.com")
        self.assertEqual(profile.avatar_url, "https://lh3.example.com/ana.jpg")

    def test_google_unverified_email_dropped(self):
        profile = GoogleAdapter("id", "secret").to_profile({
            "sub": "1098",
            "email": "ana@example.com",
            "email_verified": False,
        })
        self.assertIsNone(profile.email)

    def test_facebook(self):
        profile = FacebookAdapter("id", "secret").to_profile({
            "id": 555,
            "first_name": "Bo",
            "last_name": "Chen",
            "picture": {"data": {"url": "https://graph.example.com/bo.jpg"}},
        })

        self.assertEqual(profile.provider_subject_id, "555")
        self.assertEqual(profile.display_name, "Bo Chen")
        self.assertIsNone(profile.email)
        self.assertEqual(profile.avatar_url, "https://graph.example.com/bo.jpg")
        self.assertEqual(profile.username_hint, "Bo")

    def test_github(self):
        profile = GitHubAdapter("id", "secret").to_profile({
            "id": 42,
            "login": "octocat",
            "name": None,
            "email": "octo@example.com",
            "avatar_url": "https://avatars.example.com/42",
        })

        self.assertEqual(profile.provider_subject_id, "42")
        self.assertEqual(profile.display_name, "octocat")
        self.assertEqual(profile.username_hint, "octocat")

    def test_twitter(self):
        profile = TwitterAdapter("id", "secret").to_profile({
            "data": {
                "id": "2244994945",
                "name": "Dev Team",
                "username": "devteam",
                "profile_image_url": "https://pbs.example.com/dev.jpg",
            }
        })

        self.assertEqual(profile.provider, "twitter")
        self.assertEqual(profile.provider_subject_id, "2244994945")
        self.assertIsNone(profile.email)
        self.assertEqual(profile.username_hint, "devteam")


class FetchProfileTestCase(SimpleTestCase):
    """Code exchange and profile requests."""

    def setUp(self):
        self.session = MagicMock()

    def test_github_fetch_uses_primary_verified_email(self):
        self.session.post.return_value = fake_response(payload={"access_token": "tok"})
        self.session.get.side_effect = [
            fake_response(payload={"id": 42, "login": "octocat", "email": None}),
            fake_response(payload=[
                {"email": "old@example.com", "primary": False, "verified": True},
                {"email": "octo@example.com", "primary": True, "verified": True},
            ]),
        ]
        adapter = GitHubAdapter("cid", "csecret", session=self.session)

        profile = adapter.fetch_profile("the-code", "https://app.example.com/cb")

        self.assertEqual(profile.email, "octo@example.com")
        token_call = self.session.post.call_args
        self.assertEqual(token_call.kwargs["data"]["code"], "the-code")
        self.assertEqual(token_call.kwargs["data"]["client_secret"], "csecret")
        profile_call = self.session.get.call_args_list[0]
        self.assertEqual(profile_call.kwargs["headers"]["Authorization"], "Bearer tok")

    def test_token_exchange_failure(self):
        self.session.post.return_value = fake_response(status_code=400, payload={"error": "bad_code"})
        adapter = GoogleAdapter("cid", "csecret", session=self.session)

        with self.assertRaises(InvalidInputError):
            adapter.fetch_profile("stale", "https://app.example.com/cb")

        self.session.get.assert_not_called()

    def test_token_response_without_access_token(self):
        self.session.post.return_value = fake_response(payload={"token_type": "bearer"})
        adapter = FacebookAdapter("cid", "csecret", session=self.session)

        with self.assertRaises(InvalidInputError):
            adapter.fetch_profile("code", "https://app.example.com/cb")

    def test_missing_code(self):
        adapter = GoogleAdapter("cid", "csecret", session=self.session)

        with self.assertRaises(InvalidInputError):
            adapter.exchange_code("", "https://app.example.com/cb")

        self.session.post.assert_not_called()

    def test_twitter_uses_basic_auth_and_pkce(self):
        self.session.post.return_value = fake_response(payload={"access_token": "tok"})
        self.session.get.return_value = fake_response(payload={"data": {"id": "7", "username": "jack"}})
        adapter = TwitterAdapter("cid", "csecret", session=self.session)

        profile = adapter.fetch_profile("code", "https://app.example.com/cb", code_verifier="verifier")

        self.assertEqual(profile.provider_subject_id, "7")
        token_call = self.session.post.call_args
        self.assertEqual(token_call.kwargs["auth"], ("cid", "csecret"))
        self.assertNotIn("client_secret", token_call.kwargs["data"])
        self.assertEqual(token_call.kwargs["data"]["code_verifier"], "verifier")

    def test_profile_request_failure(self):
        self.session.post.return_value = fake_response(payload={"access_token": "tok"})
        self.session.get.return_value = fake_response(status_code=401)
        adapter = GoogleAdapter("cid", "csecret", session=self.session)

        with self.assertRaises(InvalidInputError):
            adapter.fetch_profile("code", "https://app.example.com/cb")


class AuthorizationUrlTestCase(SimpleTestCase):

    def query(self, url):
        return {key: values[0] for key, values in parse_qs(urlsplit(url).query).items()}

    def test_google_url(self):
        url = GoogleAdapter("cid", "csecret").authorization_url("https://app.example.com/cb", "xyz")

        self.assertTrue(url.startswith("https://accounts.google.com/o/oauth2/v2/auth?"))
        params = self.query(url)
        self.assertEqual(params["client_id"], "cid")
        self.assertEqual(params["response_type"], "code")
        self.assertEqual(params["redirect_uri"], "https://app.example.com/cb")
        self.assertEqual(params["scope"], "openid profile email")
        self.assertEqual(params["state"], "xyz")
        self.assertNotIn("code_challenge", params)
        self.assertNotIn("csecret", url)

    def test_twitter_url_with_pkce(self):
        url = TwitterAdapter("cid", "csecret").authorization_url(
            "https://app.example.com/cb", "xyz", code_challenge="challenge"
        )

        params = self.query(url)
        self.assertEqual(params["code_challenge"], "challenge")
        self.assertEqual(params["code_challenge_method"], "S256")
        self.assertEqual(params["scope"], "users.read tweet.read")


class BuildAdaptersTestCase(SimpleTestCase):

    def test_only_configured_providers_enabled(self):
        adapters = build_provider_adapters({
            "google": {"client_id": "gid", "client_secret": "gsecret"},
            "github": {"client_id": "hid", "client_secret": ""},
        })

        self.assertEqual(set(adapters), {"google"})
        self.assertIsInstance(adapters["google"], GoogleAdapter)
        self.assertEqual(adapters["google"].client_id, "gid")

    def test_empty_config(self):
        self.assertEqual(build_provider_adapters(None), {})
