import time
import logging
from typing import Dict, Optional

import httpx
from fastapi import Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pymongo.database import Database

from database import USERS, get_db
from errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

# --- Firebase ID Token Configuration ---
FIREBASE_JWKS_URL = "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"
ALGORITHM = "RS256"
KEYS_CACHE_SECONDS = 60 * 60
CLOCK_SKEW_SECONDS = 60

bearer_scheme = HTTPBearer(auto_error=False)


class FirebaseTokenVerifier:
    """
    Verifies Firebase ID tokens against Google's published signing keys.

    Keys are cached for an hour; a token signed with an unknown `kid` forces
    one early refresh, which covers Google's key rotation.
    """

    def __init__(self, project_id: Optional[str], http: httpx.AsyncClient, jwks_url: str = FIREBASE_JWKS_URL):
        self.project_id = project_id
        self.http = http
        self.jwks_url = jwks_url
        self._keys: Dict[str, dict] = {}
        self._fetched_at = 0.0

    async def _signing_keys(self, refresh: bool = False) -> Dict[str, dict]:
        expired = time.monotonic() - self._fetched_at > KEYS_CACHE_SECONDS
        if refresh or expired or not self._keys:
            try:
                res = await self.http.get(self.jwks_url, timeout=10.0)
                res.raise_for_status()
                jwks = res.json()
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Could not fetch Firebase signing keys: {e}")
                raise Unauthorized()
            self._keys = {key["kid"]: key for key in jwks.get("keys", []) if "kid" in key}
            self._fetched_at = time.monotonic()
        return self._keys

    async def verify(self, token: str) -> str:
        """Returns the verified email carried by `token`."""
        if not self.project_id:
            logger.error("FIREBASE_PROJECT_ID is not configured; rejecting token.")
            raise Unauthorized()

        try:
            kid = jwt.get_unverified_header(token).get("kid")
        except JWTError:
            raise Unauthorized()

        keys = await self._signing_keys()
        if kid not in keys:
            keys = await self._signing_keys(refresh=True)
        if kid not in keys:
            raise Unauthorized()

        try:
            claims = jwt.decode(
                token,
                keys[kid],
                algorithms=[ALGORITHM],
                audience=self.project_id,
                issuer=f"{FIREBASE_ISSUER_PREFIX}{self.project_id}",
            )
        except JWTError as e:
            logger.info(f"Rejected ID token: {e}")
            raise Unauthorized()

        now = time.time()
        for claim in ("iat", "auth_time"):
            issued = claims.get(claim)
            if issued is not None and (not isinstance(issued, (int, float)) or issued > now + CLOCK_SKEW_SECONDS):
                logger.info(f"Rejected ID token: '{claim}' is in the future")
                raise Unauthorized()

        email = claims.get("email")
        if not claims.get("sub") or not email:
            raise Unauthorized()
        return email


# --- Request Authentication ---
async def get_token_email(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise Unauthorized()
    return await request.app.state.verifier.verify(credentials.credentials)


async def get_current_user(
    email: str = Depends(get_token_email),
    db: Database = Depends(get_db),
) -> dict:
    user = await run_in_threadpool(db[USERS].find_one, {"email": email})
    if user is None:
        raise Unauthorized()
    return user


def verify_admin(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != "admin":
        raise Forbidden("Admin role required.")
    return current_user
