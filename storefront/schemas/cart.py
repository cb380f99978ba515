from pydantic import BaseModel, Field, StrictInt
from typing import Optional


class CartAddRequest(BaseModel):
    product_id: StrictInt
    quantity: StrictInt = Field(default=1, ge=1)
    session_id: Optional[str] = None


class CartUpdateRequest(BaseModel):
    quantity: StrictInt = Field(ge=0)
    session_id: Optional[str] = None
