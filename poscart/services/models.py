"""Catalog Models - Pydantic models for entities read from the data store."""
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, field_validator

from poscart.services.money import parse_decimal


class Product(BaseModel):
    """Product snapshot as read from the catalog."""
    id: str
    name: str
    price: Decimal
    stock_quantity: int = 0
    is_active: bool = True
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    image_url: Optional[str] = None
    low_stock_threshold: Optional[int] = None

    class Config:
        extra = "ignore"  # Ignore unknown columns from DB

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        price = parse_decimal(v)
        if price < 0:
            raise ValueError("price cannot be negative")
        return price

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def default_missing_stock(cls, v):
        return 0 if v is None else v

    @field_validator("is_active", mode="before")
    @classmethod
    def default_missing_active(cls, v):
        # Rows without the flag are treated as sellable
        return True if v is None else v

    @property
    def is_low_stock(self) -> bool:
        if self.low_stock_threshold is None:
            return False
        return self.stock_quantity <= self.low_stock_threshold
