"""
Session issuer - signed bearer tokens bound to a committed account.

Tokens are HS256 JWTs (PyJWT) carrying the account id and email with a
fixed expiry shared by every login path.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from .exceptions import InvalidTokenError
from .ports import Account


@dataclass(frozen=True)
class TokenClaims:
    """Decoded, validated token payload."""

    account_id: int
    email: str | None
    expires_at: datetime


@dataclass
class SessionIssuer:
    """Mints and validates bearer tokens."""

    secret_key: str
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(days=7)

    def issue(self, account: Account) -> str:
        now = datetime.now(timezone.utc)
        # PyJWT expects "sub" to be a string
        payload = {
            "sub": str(account.id),
            "id": account.id,
            "email": account.email,
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and validate a token.

        Raises:
            InvalidTokenError: If the token is empty, tampered, expired or
                carries no account id
        """
        if not token or not token.strip():
            raise InvalidTokenError("empty token")
        try:
            payload = jwt.decode(
                token.strip(),
                self.secret_key,
                algorithms=[self.algorithm],
                options={"require": ["exp", "sub"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e

        try:
            account_id = int(payload["sub"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("malformed subject") from e

        return TokenClaims(
            account_id=account_id,
            email=payload.get("email"),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
