"""
Warehouse authentication
Credential providers, selected by which secrets are configured
"""
import logging
import time
from abc import ABC, abstractmethod
from typing import List

import httpx
from cryptography.exceptions import UnsupportedAlgorithm
from jose.exceptions import JOSEError

from app.core.config import Settings
from app.core.errors import AuthFailure, scrub_secrets
from app.core.security import keypair_claims, sign_keypair_claims
from app.dtos.query import WarehouseCredential
from app.dtos.query.execution import CredentialKind

logger = logging.getLogger(__name__)

CLIENT_APP_ID = "SCODAC_NLQ"
CLIENT_APP_VERSION = "1.0.0"
LOGIN_PATH = "/session/v1/login-request"

# Snowflake's default session validity; the login response does not always say
SESSION_LIFETIME_SECONDS = 4 * 60 * 60


class CredentialProvider(ABC):
    """Produces a fresh warehouse credential for one request"""

    name: str = "credential"

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def authenticate(self, client: httpx.Client) -> WarehouseCredential:
        """
        Returns:
            A new credential (never cached)

        Raises:
            AuthFailure: credential could not be produced
        """


class KeyPairCredentialProvider(CredentialProvider):
    """Signed assertion (RS256 JWT) built locally from the configured key pair"""

    name = "keypair"

    def authenticate(self, client: httpx.Client) -> WarehouseCredential:
        s = self.settings
        try:
            claims = keypair_claims(
                s.SNOWFLAKE_ACCOUNT,
                s.SNOWFLAKE_USER,
                s.SNOWFLAKE_PRIVATE_KEY,
                s.SNOWFLAKE_PUBLIC_KEY or None,
                now=int(time.time()),
            )
            token = sign_keypair_claims(claims, s.SNOWFLAKE_PRIVATE_KEY)
        except (ValueError, TypeError, UnsupportedAlgorithm, JOSEError) as e:
            # cryptography raises ValueError for malformed or mismatched keys
            logger.error(f"Key-pair JWT could not be created: {type(e).__name__}")
            raise AuthFailure(details="Invalid key-pair configuration") from e

        logger.info(f"JWT created for issuer {claims['iss']}")

        return WarehouseCredential(
            kind=CredentialKind.KEYPAIR_JWT,
            token=token,
            expires_at=claims["exp"],
            issuer=claims["iss"],
            subject=claims["sub"],
        )


class SessionLoginCredentialProvider(CredentialProvider):
    """Session token obtained from the login endpoint with the account password"""

    name = "session"

    def authenticate(self, client: httpx.Client) -> WarehouseCredential:
        s = self.settings
        url = f"{s.snowflake_base_url}{LOGIN_PATH}"
        body = {
            "data": {
                "ACCOUNT_NAME": s.SNOWFLAKE_ACCOUNT,
                "LOGIN_NAME": s.SNOWFLAKE_USER,
                "PASSWORD": s.SNOWFLAKE_PASSWORD,
                "CLIENT_APP_ID": CLIENT_APP_ID,
                "CLIENT_APP_VERSION": CLIENT_APP_VERSION,
            }
        }

        logger.info("Snowflake: requesting session token")
        try:
            response = client.post(
                url,
                json=body,
                headers={"Content-Type": "application/json", "Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            logger.error(f"Snowflake login request failed: {e}")
            raise AuthFailure(details="Snowflake login endpoint unreachable") from e

        if not response.is_success:
            logger.error(f"Snowflake login error: {response.status_code}")
            raise AuthFailure(details=scrub_secrets(response.text))

        try:
            data = response.json()
        except ValueError as e:
            raise AuthFailure(details="Malformed login response") from e

        payload = data.get("data") or {}
        token = payload.get("token")
        if not token:
            logger.error(f"Snowflake login returned no token: {data.get('message')}")
            raise AuthFailure(
                error="Failed to get Snowflake session token",
                details=scrub_secrets(str(data.get("message") or "")) or None,
            )

        validity = payload.get("validityInSeconds") or payload.get("masterValidityInSeconds")
        lifetime = int(validity) if validity else SESSION_LIFETIME_SECONDS
        logger.info("Snowflake: session obtained")

        return WarehouseCredential(
            kind=CredentialKind.SESSION_TOKEN,
            token=token,
            expires_at=int(time.time()) + lifetime,
        )


def build_providers(settings: Settings) -> List[CredentialProvider]:
    """
    Ordered credential strategies for the configured secrets

    Key-pair first, session login second (also the fallback when the
    key-pair path is rejected). Empty when nothing is configured.
    """
    providers: List[CredentialProvider] = []
    if settings.has_keypair_auth:
        providers.append(KeyPairCredentialProvider(settings))
    if settings.has_password_auth:
        providers.append(SessionLoginCredentialProvider(settings))

    if not providers:
        logger.error(
            "Missing Snowflake credentials: "
            f"account={bool(settings.SNOWFLAKE_ACCOUNT)} user={bool(settings.SNOWFLAKE_USER)} "
            f"private_key={bool(settings.SNOWFLAKE_PRIVATE_KEY)} password={bool(settings.SNOWFLAKE_PASSWORD)}"
        )

    return providers
