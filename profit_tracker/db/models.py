"""
Pydantic models for database entities.
Store credentials are kept in SQLite alongside the store (encrypted at rest on VPS).
"""

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
import uuid


class SyncStatus(str, Enum):
    """Status of a sync history entry."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class AdPlatform(str, Enum):
    """Advertising platform of an ad account."""
    FACEBOOK = "facebook"
    GOOGLE = "google"
    INSTAGRAM = "instagram"
    TIKTOK = "tiktok"
    OTHER = "other"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class User(BaseModel):
    """A dashboard account; owns stores and ad accounts."""
    id: str = Field(default_factory=generate_uuid)
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Store(BaseModel):
    """A connected WooCommerce store."""
    id: str = Field(default_factory=generate_uuid)
    user_id: str
    name: str
    url: str  # e.g., "https://shop.example.com"
    consumer_key: str  # ck_...
    consumer_secret: str  # cs_...
    last_sync_at: Optional[datetime] = None
    auto_sync_enabled: bool = False
    sync_frequency_hours: int = 24
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class StoreCreate(BaseModel):
    """Input for connecting a new store."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    consumer_key: str = Field(min_length=1)
    consumer_secret: str = Field(min_length=1)
    auto_sync_enabled: bool = False
    sync_frequency_hours: int = Field(default=24, ge=1)


class StoreUpdate(BaseModel):
    """Input for updating a store."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, min_length=1)
    url: Optional[str] = Field(default=None, min_length=1)
    consumer_key: Optional[str] = Field(default=None, min_length=1)
    consumer_secret: Optional[str] = Field(default=None, min_length=1)
    auto_sync_enabled: Optional[bool] = None
    sync_frequency_hours: Optional[int] = Field(default=None, ge=1)


class Order(BaseModel):
    """An order imported from a store."""
    id: str = Field(default_factory=generate_uuid)
    store_id: str
    woo_order_id: str
    order_date: datetime
    total: float
    cost: float
    profit: float
    status: str
    shipping_cost: float = 0.0
    tax: float = 0.0
    discount: float = 0.0
    customer_email: Optional[str] = None
    items_count: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class AdAccount(BaseModel):
    """An advertising platform account."""
    id: str = Field(default_factory=generate_uuid)
    user_id: str
    name: str
    platform: AdPlatform
    created_at: datetime = Field(default_factory=datetime.utcnow)


class AdAccountCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    platform: AdPlatform = AdPlatform.FACEBOOK


class AdSpend(BaseModel):
    """Money spent on one ad account on one day."""
    id: str = Field(default_factory=generate_uuid)
    ad_account_id: str
    store_id: Optional[str] = None
    spend_date: date
    amount: float
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class AdSpendCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    ad_account_id: str = Field(min_length=1)
    store_id: Optional[str] = None
    spend_date: date = Field(default_factory=date.today)
    amount: float = Field(ge=0)

    @field_validator("store_id")
    @classmethod
    def blank_store_means_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class SyncHistory(BaseModel):
    """One sync attempt for a store."""
    id: str = Field(default_factory=generate_uuid)
    store_id: str
    sync_type: str = "orders"
    status: SyncStatus = SyncStatus.PENDING
    records_synced: int = 0
    error_message: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    completed_at: Optional[datetime] = None


class Snapshot(BaseModel):
    """Everything one user owns, loaded in a single pass."""
    stores: List[Store] = []
    orders: List[Order] = []
    ad_accounts: List[AdAccount] = []
    ad_spends: List[AdSpend] = []

    def store(self, store_id: str) -> Optional[Store]:
        return next((s for s in self.stores if s.id == store_id), None)
