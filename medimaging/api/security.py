"""
Security utilities for the MedImaging API.

This module provides bearer token generation and validation. Tokens are
stateless signed JWTs; the ``TokenManager`` is the single place to add a
revocation list or refresh scheme.
"""

from datetime import UTC, datetime, timedelta

from authlib.jose import JoseError, JsonWebToken
from fastapi.security import HTTPBearer

from medimaging.exceptions import InvalidTokenError
from medimaging.models import TokenClaims, User

# Configure bearer token scheme; missing tokens are reported by the gate itself
bearer_scheme = HTTPBearer(auto_error=False)


class TokenManager:
    """Issues and verifies signed session tokens.

    Args:
        secret_key: HMAC signing key
        algorithm: JWS algorithm, only this one is accepted on decode
        expire_hours: Token lifetime
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_hours: int = 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_hours = expire_hours
        self._jwt = JsonWebToken([algorithm])

    def create_access_token(self, user: User, expires_delta: timedelta | None = None) -> str:
        """Create a new JWT access token carrying id, username and role."""
        if expires_delta is None:
            expires_delta = timedelta(hours=self.expire_hours)
        expire = datetime.now(UTC) + expires_delta

        claims = TokenClaims(
            id=user.id,
            username=user.username,
            role=user.role,
            exp=int(expire.timestamp()),
        )
        header = {"alg": self.algorithm, "typ": "JWT"}
        encoded_jwt: bytes = self._jwt.encode(header, claims.model_dump(), self.secret_key)
        return encoded_jwt.decode()

    def decode_token(self, token: str) -> TokenClaims:
        """Decode and validate a JWT token.

        Raises:
            InvalidTokenError: On a bad signature, a malformed token or a past expiry
        """
        try:
            payload = self._jwt.decode(token, self.secret_key)
            payload.validate()
            claims = TokenClaims.model_validate(dict(payload))
        except (JoseError, ValueError) as e:
            raise InvalidTokenError() from e

        if claims.exp is None or claims.exp < int(datetime.now(UTC).timestamp()):
            raise InvalidTokenError()
        return claims
