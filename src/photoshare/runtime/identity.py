"""
External identity and seeding clients.

GitHubIdentityProvider exchanges an OAuth authorization code for a token and
the account profile. The outcome is a tagged result: AuthSuccess with the
profile fields, or AuthFailure carrying the provider's message.

RandomUserClient fetches fake people from randomuser.me for seeding.
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Union

import httpx
from pydantic import BaseModel

from ..core.errors import ServiceError

logger = logging.getLogger(__name__)

GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_USER_URL = "https://api.github.com/user"
RANDOM_USER_URL = "https://randomuser.me/api/"


class AuthSuccess(BaseModel):
    """Token exchange succeeded."""
    kind: Literal["success"] = "success"
    access_token: str
    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class AuthFailure(BaseModel):
    """Provider rejected the exchange."""
    kind: Literal["failure"] = "failure"
    message: str


AuthResult = Union[AuthSuccess, AuthFailure]


class IdentityProvider:
    """Interface for authorization code exchange."""

    async def authorize(self, code: str) -> AuthResult:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class GitHubIdentityProvider(IdentityProvider):
    """
    GitHub OAuth code exchange.

    Flow:
    1. POST code + client credentials to the token endpoint
    2. GET the user profile with the issued token
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.http_client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_client = http_client is None

    async def close(self) -> None:
        """Close HTTP client if we own it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def authorize(self, code: str) -> AuthResult:
        try:
            token_response = await self.http_client.post(
                GITHUB_TOKEN_URL,
                json={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "code": code,
                },
                headers={"Accept": "application/json"},
            )
            token_data = token_response.json()
            failure = self._failure_from(token_data)
            if failure:
                return failure

            access_token = token_data.get("access_token")
            if not access_token:
                return AuthFailure(message="Identity provider did not return an access token")

            user_response = await self.http_client.get(
                GITHUB_USER_URL,
                headers={
                    "Authorization": f"token {access_token}",
                    "Accept": "application/json",
                },
            )
            profile = user_response.json()
            failure = self._failure_from(profile)
            if failure:
                return failure

        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"GitHub authorization failed: {e}")
            return AuthFailure(message=f"Identity provider unreachable: {e}")

        return AuthSuccess(
            access_token=access_token,
            login=profile["login"],
            name=profile.get("name"),
            avatar_url=profile.get("avatar_url"),
        )

    @staticmethod
    def _failure_from(data: Any) -> Optional[AuthFailure]:
        if not isinstance(data, dict):
            return AuthFailure(message="Unexpected identity provider response")
        if data.get("error"):
            return AuthFailure(message=data.get("error_description") or data["error"])
        if data.get("message"):
            return AuthFailure(message=data["message"])
        return None


class PeopleSource:
    """Interface for fake user generation."""

    async def fetch(self, count: int) -> list[dict[str, Any]]:
        raise NotImplementedError

    async def close(self) -> None:
        pass


class RandomUserClient(PeopleSource):
    """randomuser.me client returning raw result entries."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.http_client = http_client or httpx.AsyncClient(timeout=30.0)
        self._owns_client = http_client is None

    async def close(self) -> None:
        if self._owns_client:
            await self.http_client.aclose()

    async def fetch(self, count: int) -> list[dict[str, Any]]:
        try:
            response = await self.http_client.get(RANDOM_USER_URL, params={"results": count})
        except httpx.HTTPError as e:
            raise ServiceError("randomuser", None, str(e)) from e

        if response.status_code >= 400:
            raise ServiceError("randomuser", response.status_code, response.text)

        return response.json().get("results", [])


def person_to_user(person: dict[str, Any]) -> dict[str, Any]:
    """Map a randomuser.me entry onto a User document."""
    return {
        "githubLogin": person["login"]["username"],
        "name": f"{person['name']['first']} {person['name']['last']}",
        "avatar": person["picture"]["thumbnail"],
        "githubToken": person["login"]["sha1"],
    }
