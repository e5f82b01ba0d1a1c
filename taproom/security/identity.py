"""Resolve a third-party OAuth access token to the email it belongs to.

The login flow itself runs in the browser; the backend only asks the
provider's userinfo endpoint who the token belongs to.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from taproom.config import Settings, get_settings

log = logging.getLogger(__name__)


class IdentityError(Exception):
    pass


@dataclass(frozen=True)
class Identity:
    email: str
    name: str | None = None


class OAuthIdentityProvider:
    def __init__(self, userinfo_url: str, timeout: float = 10.0, transport: httpx.BaseTransport | None = None):
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self._transport = transport

    def resolve(self, access_token: str) -> Identity:
        if not access_token:
            raise IdentityError("Missing access token")
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.get(self.userinfo_url, headers={"Authorization": f"Bearer {access_token}"})
        except httpx.HTTPError as e:
            log.warning("Identity provider unreachable: %s", e)
            raise IdentityError("Identity provider is not available") from e

        if resp.status_code != 200:
            log.info("Identity provider rejected token: HTTP %s", resp.status_code)
            raise IdentityError("Access token was rejected")

        try:
            data = resp.json()
        except ValueError as e:
            raise IdentityError("Identity provider returned invalid JSON") from e

        email = str(data.get("email") or "").strip().lower()
        if not email:
            raise IdentityError("Identity provider returned no email")
        return Identity(email=email, name=data.get("name"))


def get_identity_provider() -> OAuthIdentityProvider:
    settings: Settings = get_settings()
    return OAuthIdentityProvider(settings.oauth_userinfo_url, timeout=settings.oauth_timeout_seconds)
