import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:5174",
    "https://food-ordering-portal.vercel.app",
]


class Settings(BaseModel):
    port: int = 5000
    allowed_origins: List[str] = Field(default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS))
    log_level: str = "INFO"

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_verify_service_sid: Optional[str] = None
    twilio_verify_url: str = "https://verify.twilio.com/v2"
    otp_timeout: float = Field(10.0, gt=0)
    default_country_code: str = "+91"
    demo_otp: str = "1234"

    database_url: Optional[str] = None
    database_name: Optional[str] = None

    auth_api_url: str = "http://localhost:5000/api/auth"
    razorpay_key_id: str = "YOUR_RAZORPAY_KEY_ID"

    @property
    def twilio_configured(self) -> bool:
        return bool(self.twilio_account_sid and self.twilio_auth_token and self.twilio_verify_service_sid)


def _split(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [v.strip() for v in value.split(",") if v.strip()]


def load_settings() -> Settings:
    env = {
        "port": os.getenv("PORT"),
        "allowed_origins": _split(os.getenv("ALLOWED_ORIGINS")),
        "log_level": os.getenv("LOG_LEVEL"),
        "twilio_account_sid": os.getenv("TWILIO_ACCOUNT_SID"),
        "twilio_auth_token": os.getenv("TWILIO_AUTH_TOKEN"),
        "twilio_verify_service_sid": os.getenv("TWILIO_VERIFY_SERVICE_SID"),
        "twilio_verify_url": os.getenv("TWILIO_VERIFY_URL"),
        "otp_timeout": os.getenv("OTP_TIMEOUT"),
        "default_country_code": os.getenv("DEFAULT_COUNTRY_CODE"),
        "demo_otp": os.getenv("DEMO_OTP"),
        "database_url": os.getenv("DATABASE_URL"),
        "database_name": os.getenv("DATABASE_NAME"),
        "auth_api_url": os.getenv("AUTH_API_URL"),
        "razorpay_key_id": os.getenv("RAZORPAY_KEY_ID"),
    }
    return Settings(**{k: v for k, v in env.items() if v not in (None, "")})


@lru_cache
def get_settings() -> Settings:
    return load_settings()
