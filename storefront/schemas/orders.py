from pydantic import BaseModel


class OrderStatusRequest(BaseModel):
    status: str
