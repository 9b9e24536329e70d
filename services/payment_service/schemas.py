from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from .models import PaymentStatus


class PaymentCreate(BaseModel):
    partner_id: int = Field(gt=0)
    # Whole currency units; the processor rejects fractions
    amount: Decimal = Field(gt=0, max_digits=13, decimal_places=0)
    # Card data is forwarded encrypted to the processor; only bin/last4 are stored.
    card_number: str = Field(pattern=r"^[0-9][0-9\- ]{10,21}[0-9]$", repr=False)
    birth_date: str = Field(pattern=r"^([0-9]{6}|[0-9]{8})$", repr=False)
    expiry: str = Field(pattern=r"^(0[1-9]|1[0-2])[0-9]{2}$", repr=False)
    password: str = Field(pattern=r"^[0-9]{2}$", repr=False)


class PaymentResponse(BaseModel):
    id: int
    partner_id: int
    amount: Decimal
    applied_fee_rate: Decimal
    fee_amount: Decimal
    net_amount: Decimal
    card_bin: Optional[str]
    card_last4: Optional[str]
    approval_code: Optional[str]
    approved_at: Optional[datetime]
    status: PaymentStatus
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentSummaryResponse(BaseModel):
    count: int
    total_amount: Decimal
    total_net_amount: Decimal

    class Config:
        from_attributes = True


class QueryResponse(BaseModel):
    items: List[PaymentResponse] = []
    summary: PaymentSummaryResponse
    next_cursor: Optional[str] = None
    has_next: bool
