"""
Student Canteen Schemas

Each Pydantic model describes one shape kept in the portal's key-value store
or exchanged with the authentication service. Stored JSON uses camelCase keys,
so multi-word fields carry an alias.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


Category = Literal["Breakfast", "Meals", "Snacks", "Beverages"]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class OrderStatus(str, Enum):
    COMPLETED = "Completed"
    PENDING = "Pending"
    PROCESSING = "Processing"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentMethod(str, Enum):
    RAZORPAY = "razorpay"
    UPI = "upi"
    COD = "cod"

    @property
    def label(self) -> str:
        return PAYMENT_METHOD_LABELS[self]


PAYMENT_METHOD_LABELS = {
    PaymentMethod.RAZORPAY: "Razorpay",
    PaymentMethod.UPI: "UPI Payment",
    PaymentMethod.COD: "Cash on Delivery",
}


class Session(BaseModel):
    phone: str = Field(..., min_length=1, description="E.164-like phone number")
    token: str = Field(..., min_length=1, description="Opaque client-chosen session marker")

    @property
    def is_authenticated(self) -> bool:
        return bool(self.phone) and bool(self.token)


class CatalogItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0, description="Unique item id")
    name: str
    price: int = Field(..., ge=0, description="Price in whole rupees")
    category: Category
    description: str = ""
    image: Optional[str] = Field(None, description="Image URL")
    rating: float = Field(0.0, ge=0.0, le=5.0)
    popular: Optional[bool] = None


class CartLine(CatalogItem):
    model_config = ConfigDict(frozen=False)

    quantity: int = Field(1, ge=1, description="Units of this item in the cart")

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class Order(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., description="Creation time in epoch milliseconds")
    items: List[CartLine]
    subtotal: int = Field(..., ge=0)
    delivery_fee: int = Field(..., ge=0, alias="deliveryFee")
    tax: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    date: str = Field(..., description="Human readable creation time")
    timestamp: datetime = Field(..., description="Creation instant, stored as ISO-8601 UTC")
    payment_id: str = Field(..., alias="paymentId")
    payment_method: str = Field(..., alias="paymentMethod")
    status: OrderStatus = OrderStatus.PENDING

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

    @field_serializer("timestamp")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_timestamp(value)


# ------------ Authentication service payloads -------------
class OTPRequest(BaseModel):
    phone: str = ""


class OTPVerify(BaseModel):
    phone: str = ""
    otp: str = ""


class SendOTPResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str = ""
    verification_id: Optional[str] = Field(None, alias="verificationId")


class VerifyOTPResponse(BaseModel):
    success: bool
    message: str = ""
    token: Optional[str] = None
