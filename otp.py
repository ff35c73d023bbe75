"""OTP delivery and verification.

The auth service forwards to one of these providers:

- ``TwilioVerifyProvider`` calls the Twilio Verify v2 REST API (SMS channel).
- ``StaticOTPProvider`` accepts one fixed code; used for local demos when no
  Twilio credentials are configured.
"""

import logging
from typing import Optional

import httpx

from config import Settings
from errors import OTPProviderError

logger = logging.getLogger(__name__)


def format_phone(phone: str, country_code: str = "+91") -> str:
    """Prefix ``country_code`` unless the number is already in E.164 form."""
    phone = phone.strip()
    return phone if phone.startswith("+") else f"{country_code}{phone}"


class OTPProvider:
    async def send_code(self, phone: str) -> str:
        """Send a code to ``phone`` and return the verification id."""
        raise NotImplementedError

    async def check_code(self, phone: str, code: str) -> bool:
        """Return True when ``code`` is approved for ``phone``."""
        raise NotImplementedError


class StaticOTPProvider(OTPProvider):
    def __init__(self, code: str = "1234"):
        self.code = code

    async def send_code(self, phone: str) -> str:
        logger.info("Demo OTP requested for %s", phone)
        return f"demo-{phone}"

    async def check_code(self, phone: str, code: str) -> bool:
        return code == self.code


class TwilioVerifyProvider(OTPProvider):
    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        service_sid: str,
        base_url: str = "https://verify.twilio.com/v2",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.service_sid = service_sid
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.base_url}/Services/{self.service_sid}",
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _post(self, path: str, data: dict) -> dict:
        try:
            async with self._get_client() as client:
                response = await client.post(path, data=data)
        except httpx.RequestError as e:
            logger.error("Twilio Verify unavailable: %s", e)
            raise OTPProviderError(f"Verification service unavailable: {e}") from e
        return _handle_response(response)

    async def send_code(self, phone: str) -> str:
        logger.info("Sending OTP to %s", phone)
        data = await self._post("/Verifications", {"To": phone, "Channel": "sms"})
        logger.info("OTP sent to %s: status=%s", phone, data.get("status"))
        return data["sid"]

    async def check_code(self, phone: str, code: str) -> bool:
        logger.info("Verifying OTP for %s", phone)
        data = await self._post("/VerificationCheck", {"To": phone, "Code": code})
        approved = data.get("status") == "approved"
        if not approved:
            logger.info("OTP for %s not approved: status=%s", phone, data.get("status"))
        return approved


def _handle_response(response: httpx.Response) -> dict:
    if response.is_success:
        return response.json()
    try:
        message = response.json().get("message") or "Verification failed"
    except ValueError:
        message = response.text or "Verification failed"
    logger.warning("Twilio Verify error %s: %s", response.status_code, message)
    raise OTPProviderError(message, response.status_code)


def build_provider(settings: Settings) -> OTPProvider:
    if settings.twilio_configured:
        return TwilioVerifyProvider(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            service_sid=settings.twilio_verify_service_sid,
            base_url=settings.twilio_verify_url,
            timeout=settings.otp_timeout,
        )
    logger.warning("Twilio credentials missing; using demo OTP provider")
    return StaticOTPProvider(settings.demo_otp)
