from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class SellerInfo(BaseModel):
    name: Optional[str] = None
    email: EmailStr
    image: Optional[str] = None


class PlantCreate(BaseModel):
    # sellers may attach extra listing fields; they are stored as given
    model_config = ConfigDict(extra="allow")

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    category: str
    seller: SellerInfo


class CustomerInfo(BaseModel):
    email: EmailStr
    name: Optional[str] = None
    image: Optional[str] = None


class PaymentInfo(BaseModel):
    plantId: str
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    price: float = Field(..., gt=0)
    quantity: int = Field(1, ge=1)
    category: Optional[str] = None
    customer: CustomerInfo


class CheckoutSessionResponse(BaseModel):
    url: str


class PaymentSuccess(BaseModel):
    sessionId: str = Field(..., min_length=1)


class PaymentSuccessResponse(BaseModel):
    transactionId: str
    orderId: str
