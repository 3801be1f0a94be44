"""Security related functions."""

import logging

import httpx
import jwt
from fastapi import HTTPException, status
from jwt import InvalidTokenError

from app.core.config import settings

logger = logging.getLogger(__name__)


class ClerkAuthenticator:
    """
    Handles Clerk token verification.

    Tokens are RS256 JWTs signed with a key published in Clerk's JWKS
    document. The JWKS is fetched once with httpx and cached; a token whose
    ``kid`` is unknown triggers one refresh.

    :ivar clerk_api_url: The base URL of the Clerk API.
    :type clerk_api_url: str
    :ivar secret_key: The Clerk secret key used to authorize the JWKS request.
    :type secret_key: str
    """

    def __init__(self):
        self.clerk_api_url = str(settings.clerk_api_url).rstrip("/")
        self.secret_key = settings.clerk_secret_key
        self.verify_signature = settings.auth_verify_signature
        self._jwks: dict | None = None

    async def get_jwks(self, refresh: bool = False) -> dict:
        """Get JWKS from Clerk for token verification."""
        if self._jwks is None or refresh:
            headers = {"Authorization": f"Bearer {self.secret_key}"} if self.secret_key else {}
            async with httpx.AsyncClient(timeout=10.0) as client:
                response = await client.get(f"{self.clerk_api_url}/v1/jwks", headers=headers)
                response.raise_for_status()
                self._jwks = response.json()
        return self._jwks

    async def _signing_key(self, token: str):
        kid = jwt.get_unverified_header(token).get("kid")
        for refresh in (False, True):
            jwks = await self.get_jwks(refresh=refresh)
            for key in jwks.get("keys", []):
                if key.get("kid") == kid:
                    return jwt.PyJWK(key).key
        raise InvalidTokenError(f"No signing key found for kid {kid}")

    async def verify_token(self, token: str) -> dict:
        """
        Verifies a given JSON Web Token (JWT) issued by Clerk and returns its
        payload. Signature verification can be disabled for local development
        through ``AUTH_VERIFY_SIGNATURE=false``.

        :param token: The JWT token to be verified.
        :return: A dictionary containing the decoded payload of the token if validation succeeds.
        """
        try:
            if not self.verify_signature:
                return jwt.decode(
                    token,
                    options={"verify_signature": False, "verify_aud": False, "verify_exp": False},
                )
            key = await self._signing_key(token)
            return jwt.decode(token, key=key, algorithms=["RS256"], options={"verify_aud": False})
        except (InvalidTokenError, httpx.HTTPError) as e:
            logger.warning(f"Token verification failed: {str(e)}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"Invalid authentication token: {str(e)}",
                headers={"WWW-Authenticate": "Bearer"},
            ) from e


def user_type_from_claims(payload: dict) -> str:
    """Read the user's role from token claims, falling back to the configured default."""
    metadata = payload.get("public_metadata") or payload.get("metadata") or {}
    return payload.get("user_type") or metadata.get("user_type") or settings.default_user_type
