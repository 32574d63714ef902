"""Cognito access token verification against the user pool JWKS."""

from typing import Any

import requests
from aws_lambda_powertools import Logger
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from core.models.errors import InvalidTokenError, MalformedTokenError, TokenExpiredError

logger = Logger(UTC=True)

JWKS_TIMEOUT_SECONDS = 5


class CognitoTokenVerifier:
    """Verifies RS256 access tokens issued by one Cognito user pool.

    The JWKS document is fetched once, on first use, and kept for the
    lifetime of the process. Tests pass ``jwks`` directly.
    """

    def __init__(
        self,
        user_pool_id: str,
        client_id: str,
        region: str,
        *,
        jwks: dict[str, Any] | None = None,
    ) -> None:
        self.client_id = client_id
        self.issuer = f"https://cognito-idp.{region}.amazonaws.com/{user_pool_id}"
        self.jwks_url = f"{self.issuer}/.well-known/jwks.json"
        self._jwks = jwks

    def _signing_keys(self) -> list[dict[str, Any]]:
        if self._jwks is None:
            logger.info("Fetching JWKS", extra={"url": self.jwks_url})
            try:
                response = requests.get(self.jwks_url, timeout=JWKS_TIMEOUT_SECONDS)
                response.raise_for_status()
                self._jwks = response.json()
            except (requests.RequestException, ValueError) as exc:
                logger.error("Unable to fetch JWKS", extra={"error": str(exc)})
                raise InvalidTokenError() from exc

        return list(self._jwks.get("keys", []))

    def verify(self, token: str) -> dict[str, Any]:
        """Verify signature, issuer, expiry, token use and client id.

        Returns:
            The token claims

        Raises:
            MalformedTokenError: If the token cannot be decoded
            TokenExpiredError: If the token has expired
            InvalidTokenError: For any other verification failure
        """
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise MalformedTokenError() from exc

        kid = header.get("kid")
        key = next((k for k in self._signing_keys() if k.get("kid") == kid), None)
        if key is None:
            logger.warning("Token signed with unknown key", extra={"kid": kid})
            raise InvalidTokenError()

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=["RS256"],
                issuer=self.issuer,
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except JWTClaimsError as exc:
            logger.warning("Token claims rejected", extra={"error": str(exc)})
            raise InvalidTokenError() from exc
        except JWTError as exc:
            logger.warning("Token verification failed", extra={"error": str(exc)})
            raise InvalidTokenError() from exc

        if claims.get("token_use") != "access":
            raise InvalidTokenError()

        if claims.get("client_id") != self.client_id:
            raise InvalidTokenError()

        return claims
