"""
Phone login and OTP entry.

``LoginForm`` takes a 10 digit mobile number and asks the auth service to
send a code. ``OtpForm`` collects the four digits, submits them as soon as
the fourth one is in and, on approval, opens the session. Both forms ignore
a submit while a previous one is still awaiting the service.
"""
import logging
import re
from typing import Callable, List, Optional

from auth_api import AuthAPI
from errors import AuthAPIError, Redirect
from schemas import epoch_ms, utcnow
from session import SessionStore

logger = logging.getLogger(__name__)

PHONE_LENGTH = 10
OTP_LENGTH = 4
RESEND_COOLDOWN = 60


class LoginForm:
    def __init__(self, api: AuthAPI, country_code: str = "+91"):
        self.api = api
        self.country_code = country_code
        self.phone = ""
        self.error = ""
        self.loading = False
        self.redirect_to: Optional[str] = None

    def set_phone(self, value: str) -> None:
        self.phone = re.sub(r"\D", "", value or "")[:PHONE_LENGTH]

    @property
    def can_submit(self) -> bool:
        return not self.loading and len(self.phone) == PHONE_LENGTH

    def validate(self) -> Optional[str]:
        if not self.phone.strip():
            return "Please enter mobile number"
        if len(self.phone) != PHONE_LENGTH:
            return "Mobile number must be 10 digits"
        return None

    async def submit(self) -> Optional[str]:
        """Send the OTP; returns the formatted phone when the code went out."""
        if self.loading:
            return None
        self.error = ""
        problem = self.validate()
        if problem:
            self.error = problem
            return None

        formatted = f"{self.country_code}{self.phone}"
        self.loading = True
        try:
            response = await self.api.send_otp(formatted)
        except AuthAPIError as e:
            logger.warning("Send OTP failed for %s: %s", formatted, e)
            self.error = "Server error. Please try again."
            return None
        finally:
            self.loading = False

        if not response.success:
            self.error = response.message or "Failed to send OTP"
            return None
        self.redirect_to = "/otp-verification"
        return formatted


class OtpForm:
    def __init__(self, api: AuthAPI, session: SessionStore, phone: Optional[str], clock: Callable = utcnow):
        if not phone:
            raise Redirect("/login", "No phone number to verify")
        self.api = api
        self.session = session
        self.phone = phone
        self.clock = clock
        self.digits: List[str] = [""] * OTP_LENGTH
        self.focus_index = 0
        self.time_left = RESEND_COOLDOWN
        self.is_verifying = False
        self.is_resending = False
        self.error = ""
        self.success = ""
        self.redirect_to: Optional[str] = None

    @property
    def code(self) -> str:
        return "".join(self.digits)

    @property
    def countdown(self) -> str:
        return f"{self.time_left // 60}:{self.time_left % 60:02d}"

    @property
    def can_resend(self) -> bool:
        return self.time_left <= 0 and not self.is_resending

    def _reset_digits(self) -> None:
        self.digits = [""] * OTP_LENGTH
        self.focus_index = 0

    async def enter(self, index: int, value: str) -> None:
        if self.is_verifying or (value and not value.isdigit()):
            return
        if len(value) > 1:
            pasted = value[:OTP_LENGTH]
            for offset, char in enumerate(pasted):
                if index + offset < OTP_LENGTH:
                    self.digits[index + offset] = char
            self.focus_index = min(index + len(pasted), OTP_LENGTH - 1)
        else:
            self.digits[index] = value
            if value and index < OTP_LENGTH - 1:
                self.focus_index = index + 1

        if len(self.code) == OTP_LENGTH and not self.is_verifying:
            await self.verify(self.code)

    def backspace(self, index: int) -> None:
        if self.is_verifying:
            return
        if not self.digits[index] and index > 0:
            self.focus_index = index - 1
        else:
            self.digits[index] = ""

    async def verify(self, code: Optional[str] = None) -> bool:
        if self.is_verifying:
            return False
        code = self.code if code is None else code
        if len(code) != OTP_LENGTH:
            self.error = "Please enter 4-digit OTP"
            return False

        self.is_verifying = True
        self.error = ""
        self.success = ""
        try:
            response = await self.api.verify_otp(self.phone, code)
        except AuthAPIError as e:
            logger.warning("OTP verification failed for %s: %s", self.phone, e)
            self.error = "Network error. Try again."
            self._reset_digits()
            return False
        finally:
            self.is_verifying = False

        if not response.success:
            self.error = response.message or "Invalid OTP"
            self._reset_digits()
            return False

        token = response.token or f"token_{self.phone}_{epoch_ms(self.clock())}"
        self.session.login(self.phone, token)
        self.success = "OTP verified! Redirecting..."
        self.redirect_to = "/dashboard"
        return True

    def tick(self, seconds: int = 1) -> None:
        self.time_left = max(0, self.time_left - seconds)

    async def resend(self) -> bool:
        if not self.can_resend:
            return False
        self.is_resending = True
        self.error = ""
        self.success = ""
        try:
            response = await self.api.send_otp(self.phone)
        except AuthAPIError:
            self.error = "Network error. Try again."
            return False
        finally:
            self.is_resending = False

        if not response.success:
            self.error = "Failed to resend OTP"
            return False
        self.success = "OTP sent!"
        self._reset_digits()
        self.time_left = RESEND_COOLDOWN
        return True
