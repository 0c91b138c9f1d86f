"""
Webhook and withdrawal Pydantic schemas.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class WebhookCreateRequest(BaseModel):
    url: Optional[str] = None
    subscribed_events: List[str] = []


class WebhookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    url: str
    subscribed_events: List[str]
    created_at: Optional[datetime] = None


class WebhookListResponse(BaseModel):
    webhooks: List[WebhookResponse]


class WithdrawalResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    wallet: str
    token: str
    amount_raw: str
    tx_hash: str
    created_at: Optional[datetime] = None


class WithdrawalListResponse(BaseModel):
    withdrawals: List[WithdrawalResponse]
