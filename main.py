import base64
import logging
import os
import time

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_settings
from errors import OTPProviderError
from otp import OTPProvider, build_provider, format_phone
from schemas import OTPRequest, OTPVerify, SendOTPResponse, VerifyOTPResponse

logger = logging.getLogger(__name__)

settings = get_settings()

app = FastAPI(title="Student Canteen Auth API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------ Helpers -------------
_provider = None


def get_otp_provider() -> OTPProvider:
    global _provider
    if _provider is None:
        _provider = build_provider(get_settings())
    return _provider


def issue_token(phone: str) -> str:
    """Opaque session marker handed to the client; not a credential."""
    raw = f"{phone}:{int(time.time() * 1000)}"
    return base64.b64encode(raw.encode()).decode()


# ------------ Routes -------------
@app.on_event("startup")
def on_startup():
    logging.basicConfig(level=get_settings().log_level)
    logger.info("Auth API starting; allowed origins: %s", ", ".join(settings.allowed_origins))


@app.get("/", tags=["health"])
def read_root():
    return {"message": "Backend is running!"}


@app.get("/api/health", tags=["health"])
def health():
    return {"status": "ok"}


# ---------- Auth (OTP) ----------
@app.post("/api/auth/send-otp", tags=["auth"], response_model=SendOTPResponse, response_model_exclude_none=True)
async def send_otp(payload: OTPRequest, provider: OTPProvider = Depends(get_otp_provider)):
    if not payload.phone.strip():
        return SendOTPResponse(success=False, message="Phone required")

    phone = format_phone(payload.phone, get_settings().default_country_code)
    try:
        verification_id = await provider.send_code(phone)
    except OTPProviderError as e:
        return SendOTPResponse(success=False, message=e.message)

    return SendOTPResponse(success=True, message="OTP sent", verification_id=verification_id)


@app.post("/api/auth/verify-otp", tags=["auth"], response_model=VerifyOTPResponse, response_model_exclude_none=True)
async def verify_otp(payload: OTPVerify, provider: OTPProvider = Depends(get_otp_provider)):
    if not payload.phone.strip() or not payload.otp.strip():
        return VerifyOTPResponse(success=False, message="Missing phone or OTP")

    phone = format_phone(payload.phone, get_settings().default_country_code)
    try:
        approved = await provider.check_code(phone, payload.otp.strip())
    except OTPProviderError as e:
        return VerifyOTPResponse(success=False, message=e.message)

    if not approved:
        return VerifyOTPResponse(success=False, message="Invalid OTP")

    logger.info("OTP verified for %s", phone)
    return VerifyOTPResponse(success=True, message="OTP Verified", token=issue_token(phone))


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", settings.port))
    uvicorn.run(app, host="0.0.0.0", port=port)
