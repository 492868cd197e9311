from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowerdesk.app.core.constants import status_label
from flowerdesk.app.core.text import sanitize_user_input

TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# --- Склад ---
class FlowerCreate(BaseModel):
    flower: str = Field(..., min_length=1, max_length=255)
    amount: int = Field(..., gt=0)


class FlowerUpdate(BaseModel):
    flower: Optional[str] = Field(None, min_length=1, max_length=255)
    amount: Optional[int] = Field(None, ge=0)


# --- Списания ---
class WriteoffCreate(BaseModel):
    flower: str = Field(..., min_length=1, max_length=255)
    amount: int = Field(..., gt=0)


# --- Заметки ---
class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: str) -> str:
        return sanitize_user_input(v)


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = Field(None, min_length=1)

    @field_validator("content")
    @classmethod
    def sanitize_content(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v)


# --- Заказы ---
class LineItemIn(BaseModel):
    flower: str = Field(..., min_length=1, max_length=255)
    amount: int = Field(..., ge=1)


class OrderHeaderIn(BaseModel):
    """Order header as sent by the UI. Every field is optional here; the service decides what is required."""
    model_config = ConfigDict(populate_by_name=True)

    sender: Optional[str] = Field(None, alias="from", max_length=255)
    recipient: Optional[str] = Field(None, alias="to", max_length=255)
    address: Optional[str] = Field(None, max_length=1000)
    scheduled_at: Optional[datetime] = Field(None, alias="dateTime")
    time_from: Optional[str] = Field(None, alias="timeFrom", pattern=TIME_PATTERN)
    time_to: Optional[str] = Field(None, alias="timeTo", pattern=TIME_PATTERN)
    notes: Optional[str] = None
    status: Optional[str] = None
    is_pickup: Optional[bool] = Field(None, alias="pickup")
    is_showcase: Optional[bool] = Field(None, alias="showcase")

    @field_validator("time_from", "time_to", mode="before")
    @classmethod
    def empty_time_is_none(cls, v):
        # The UI sends "" for an unset time input
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("scheduled_at")
    @classmethod
    def naive_datetime(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Stored without time zone, as UTC."""
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

    @field_validator("address", "notes")
    @classmethod
    def sanitize_text_fields(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_user_input(v, max_length=5000)

    @field_validator("status")
    @classmethod
    def known_status(cls, v: Optional[str]) -> Optional[str]:
        return status_label(v)


class OrderCreate(BaseModel):
    order: OrderHeaderIn
    items: List[LineItemIn] = Field(..., min_length=1)


class OrderUpdate(BaseModel):
    order: OrderHeaderIn = Field(default_factory=OrderHeaderIn)
    # None keeps the current line items
    items: Optional[List[LineItemIn]] = None


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, v: str) -> str:
        return status_label(v)


class StockCheckIn(BaseModel):
    items: List[LineItemIn]
    order_id: Optional[int] = Field(None, alias="orderId")

    model_config = ConfigDict(populate_by_name=True)


# --- Букеты ---
class BouquetHeaderIn(BaseModel):
    description: Optional[str] = Field(None, max_length=2000)
    photo: Optional[str] = None


class BouquetCreate(BaseModel):
    bouquet: BouquetHeaderIn = Field(default_factory=BouquetHeaderIn)
    items: List[LineItemIn] = Field(..., min_length=1)


class BouquetUpdate(BaseModel):
    description: Optional[str] = Field(None, max_length=2000)
    photo: Optional[str] = None
