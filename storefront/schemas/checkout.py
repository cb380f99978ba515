from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class CheckoutRequest(BaseModel):
    session_id: Optional[str] = None
    user_id: Optional[int] = None

    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: EmailStr
    customer_phone: str = Field(min_length=3, max_length=50)

    address_line1: str = Field(min_length=1, max_length=255)
    address_line2: Optional[str] = Field(default=None, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    postal_code: str = Field(min_length=1, max_length=20)
    country: str = Field(min_length=1, max_length=100)

    # Membership is checked by the checkout service so unknown values get
    # their own error kinds instead of a generic validation failure.
    delivery_method: str
    payment_method: str

    def contact(self) -> dict:
        return {
            "customer_name": self.customer_name,
            "customer_email": str(self.customer_email),
            "customer_phone": self.customer_phone,
        }

    def address(self) -> dict:
        return {
            "address_line1": self.address_line1,
            "address_line2": self.address_line2,
            "city": self.city,
            "postal_code": self.postal_code,
            "country": self.country,
        }
