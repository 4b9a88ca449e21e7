"""
Google identity adapter - Implements IdentityProvider protocol.

Resolves a Google ID token through the tokeninfo introspection endpoint
using httpx. Signature checks happen on Google's side.
"""

import logging

import httpx

from nutrisnap.domain.exceptions import InternalError, InvalidTokenError
from nutrisnap.domain.ports import ExternalIdentity

logger = logging.getLogger(__name__)

GOOGLE_TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"


class GoogleIdentityProvider:
    """
    Implements IdentityProvider protocol via Google's tokeninfo endpoint.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        tokeninfo_url: str = GOOGLE_TOKENINFO_URL,
        client_id: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Args:
            tokeninfo_url: Introspection endpoint
            client_id: Expected audience; skipped when None
            timeout_seconds: Bound on the provider round trip
            transport: Optional httpx transport (tests)
        """
        self._url = tokeninfo_url
        self._client_id = client_id
        self._timeout = timeout_seconds
        self._transport = transport

    def verify(self, id_token: str) -> ExternalIdentity:
        if not id_token:
            raise InvalidTokenError("missing id token")

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.get(self._url, params={"id_token": id_token})
        except httpx.HTTPError as e:
            logger.error("Google tokeninfo request failed: %s", e)
            raise InternalError("identity provider unavailable") from e

        if response.status_code != 200:
            logger.warning("Google rejected ID token (status=%s)", response.status_code)
            raise InvalidTokenError("token rejected by provider")

        payload = response.json()
        email = payload.get("email")
        if not email:
            raise InvalidTokenError("token carries no email")
        if str(payload.get("email_verified", "")).lower() != "true":
            raise InvalidTokenError("email not verified by provider")
        if self._client_id and payload.get("aud") != self._client_id:
            logger.warning("Google ID token audience mismatch")
            raise InvalidTokenError("audience mismatch")

        return ExternalIdentity(
            email=email,
            name=payload.get("name") or email.split("@")[0],
            picture=payload.get("picture"),
        )
