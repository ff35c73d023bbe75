"""HTTP client for the authentication service, as used by the login views."""

import logging
from typing import Optional

import httpx

from errors import AuthAPIError
from schemas import SendOTPResponse, VerifyOTPResponse

logger = logging.getLogger(__name__)


class AuthAPI:
    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _post(self, path: str, payload: dict) -> dict:
        try:
            async with self._get_client() as client:
                response = await client.post(path, json=payload)
        except httpx.RequestError as e:
            logger.error("Auth service unavailable: %s", e)
            raise AuthAPIError(str(e)) from e

        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            raise AuthAPIError(f"Unexpected response from auth service ({response.status_code})", response.status_code)
        return data

    async def send_otp(self, phone: str) -> SendOTPResponse:
        data = await self._post("/send-otp", {"phone": phone})
        return SendOTPResponse.model_validate(data)

    async def verify_otp(self, phone: str, otp: str) -> VerifyOTPResponse:
        data = await self._post("/verify-otp", {"phone": phone, "otp": otp})
        return VerifyOTPResponse.model_validate(data)
