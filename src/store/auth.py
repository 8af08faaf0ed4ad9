"""
Remote Auth Client

Thin client for the hosted store's auth API (sign up, password sign in,
token introspection). Used by the users app for register/login/profile.
"""

import logging
from typing import Dict, Optional, Union
import httpx

from src.store.client import decode_body, fault_from_response, fault_from_transport, EMPTY_BODY
from src.store.results import FaultKind, Record, StoreFault

logger = logging.getLogger(__name__)

DUPLICATE_ACCOUNT_CODES = ("user_already_exists", "email_exists")


def is_duplicate_account(fault: StoreFault) -> bool:
    # older auth servers only say so in the message
    if fault.kind != FaultKind.REMOTE_REJECTED:
        return False
    return fault.code in DUPLICATE_ACCOUNT_CODES or "already registered" in (fault.details or "")


class AuthClient:
    """
    Remote auth client.

    **Remote Interface**:

    1. POST /signup                     - Register credentials
    2. POST /token?grant_type=password  - Exchange credentials for an access token
    3. GET  /user                       - Resolve an access token to its user
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        http_client: httpx.AsyncClient,
        auth_path: str = "/auth/v1",
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.http_client = http_client
        self.auth_path = "/" + auth_path.strip("/")

    def _build_headers(self, access_token: Optional[str] = None) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {access_token or self.api_key}",
            "Content-Type": "application/json",
        }

    async def _call(
        self,
        method: str,
        path: str,
        what: str,
        json: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
        access_token: Optional[str] = None,
        rejected_message: Optional[str] = None,
    ) -> Union[Record, StoreFault]:
        url = f"{self.base_url}{self.auth_path}{path}"
        try:
            response = await self.http_client.request(
                method, url, json=json, params=params, headers=self._build_headers(access_token)
            )
        except httpx.RequestError as e:
            logger.error(f"Failed to connect to auth service: {str(e)}", extra={"url": url})
            return fault_from_transport(e, what)

        if response.is_error:
            logger.warning(
                f"Auth call failed: {response.status_code}",
                extra={"url": url, "status_code": response.status_code}
            )
            if rejected_message and response.status_code in (400, 401, 403):
                return StoreFault(
                    kind=FaultKind.REMOTE_REJECTED,
                    message=rejected_message,
                    status_code=response.status_code,
                )
            return fault_from_response(response, what)

        body = decode_body(response, what)
        if isinstance(body, StoreFault):
            return body
        if body is EMPTY_BODY or not isinstance(body, dict):
            return StoreFault(
                kind=FaultKind.REMOTE_UNAVAILABLE,
                message=f"Auth service returned no data while trying to {what}",
                status_code=response.status_code,
            )
        return body

    async def sign_up(self, email: str, password: str) -> Union[Record, StoreFault]:
        """
        Register credentials with the auth service.

        An email that already has an account comes back as a CONFLICT fault.
        """
        logger.info("Signing up user", extra={"email": email})
        result = await self._call(
            "POST", "/signup", "sign up", json={"email": email, "password": password}
        )
        if isinstance(result, StoreFault) and is_duplicate_account(result):
            return StoreFault(
                kind=FaultKind.CONFLICT,
                message="User already registered",
                code=result.code,
                status_code=result.status_code,
            )
        return result

    async def sign_in(self, email: str, password: str) -> Union[Record, StoreFault]:
        """
        Exchange email and password for an access token.

        Wrong credentials come back as a REMOTE_REJECTED fault.
        """
        logger.info("Signing in user", extra={"email": email})
        return await self._call(
            "POST",
            "/token",
            "sign in",
            json={"email": email, "password": password},
            params={"grant_type": "password"},
            rejected_message="Invalid credentials",
        )

    async def get_user(self, access_token: str) -> Union[Record, StoreFault]:
        """Resolve an access token to the user it belongs to."""
        return await self._call(
            "GET",
            "/user",
            "resolve access token",
            access_token=access_token,
            rejected_message="Invalid or expired token",
        )
