"""
Processor (PG) adapter contract.

approve() never raises for processor outcomes: it returns one of the
ApprovalOutcome variants and the caller branches on the data.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

from services.payment_service.models import PaymentStatus


@dataclass(frozen=True)
class CardData:
    card_number: str = field(repr=False)
    birth_date: str = field(repr=False)
    expiry: str = field(repr=False)
    password: str = field(repr=False)

    @property
    def digits(self) -> str:
        return "".join(ch for ch in self.card_number if ch.isdigit())

    @property
    def bin(self) -> str:
        return self.digits[:6]

    @property
    def last4(self) -> str:
        return self.digits[-4:]


@dataclass(frozen=True)
class PgApproveRequest:
    partner_id: int
    amount: Decimal
    card: CardData


@dataclass(frozen=True)
class Approved:
    approval_code: str
    approved_at: datetime
    status: PaymentStatus = PaymentStatus.APPROVED


@dataclass(frozen=True)
class Declined:
    reason: str
    error_code: Optional[str] = None


@dataclass(frozen=True)
class TransportFault:
    detail: str


@dataclass(frozen=True)
class ConfigurationError:
    detail: str


ApprovalOutcome = Union[Approved, Declined, TransportFault, ConfigurationError]


class PgClient(ABC):
    """One external payment-authorization provider."""

    name: str = "pg"

    @abstractmethod
    def supports(self, partner_id: int) -> bool:
        ...

    @abstractmethod
    async def approve(self, request: PgApproveRequest) -> ApprovalOutcome:
        ...

    async def aclose(self) -> None:
        return None
