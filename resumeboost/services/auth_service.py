"""Bearer token verification."""

import logging
from typing import Optional

import jwt

from config.settings import AUTH_JWT_AUDIENCE, AUTH_JWT_SECRET
from resumeboost.services.errors import AuthenticationError

logger = logging.getLogger(__name__)


class AuthService:
    """Resolve ``Authorization: Bearer <jwt>`` headers to a user id."""

    def __init__(
        self,
        secret: Optional[str] = AUTH_JWT_SECRET,
        audience: Optional[str] = AUTH_JWT_AUDIENCE,
    ) -> None:
        self._secret = secret
        self._audience = audience

    @staticmethod
    def extract_token(authorization_header: Optional[str]) -> str:
        if not authorization_header:
            raise AuthenticationError("No authorization header")
        scheme, _, token = authorization_header.strip().partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            raise AuthenticationError("Authorization header must use the Bearer scheme")
        return token.strip()

    def authenticate(self, authorization_header: Optional[str]) -> str:
        token = self.extract_token(authorization_header)
        if not self._secret:
            logger.error("AUTH_JWT_SECRET is not configured; rejecting token")
            raise AuthenticationError("Invalid user token")

        options = {"require": ["sub", "exp"], "verify_aud": bool(self._audience)}
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=["HS256"],
                audience=self._audience or None,
                options=options,
            )
        except jwt.PyJWTError as error:
            logger.warning(f"JWT verification failed: {error}")
            raise AuthenticationError("Invalid user token") from error

        user_id = claims.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid user token")
        return str(user_id)


auth_service = AuthService()
