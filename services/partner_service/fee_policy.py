"""
Fee schedule resolution and fee arithmetic.

fee = round_half_up(amount * percentage) + fixed_fee
net = amount - fee

The percentage component is rounded to the currency's minor unit before the
fixed fee is added. The rule is visible in stored payments, so it must not
change silently.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

import structlog

from shared.errors import FeePolicyNotFoundError
from shared.money import ZERO, quantize_minor, to_decimal

from .models import FeePolicy
from .repository import FeePolicyRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FeeBreakdown:
    rate: Decimal
    fee: Decimal
    net: Decimal


def calculate_fee(amount: Decimal, policy: FeePolicy) -> FeeBreakdown:
    amount = to_decimal(amount)
    if amount <= ZERO:
        raise ValueError(f"Payment amount must be positive, got {amount}")

    rate = to_decimal(policy.percentage)
    fee = quantize_minor(amount * rate) + to_decimal(policy.fixed_fee)
    return FeeBreakdown(rate=rate, fee=fee, net=amount - fee)


class FeePolicyResolver:

    def __init__(self, fee_policy_repository: FeePolicyRepository):
        self.fee_policy_repository = fee_policy_repository

    async def resolve(self, partner_id: int, as_of: Optional[datetime] = None) -> FeePolicy:
        as_of = as_of or datetime.now(timezone.utc)
        policy = await self.fee_policy_repository.find_effective_policy(partner_id, as_of)
        if policy is None:
            logger.error("fee_policy_missing", partner_id=partner_id, as_of=as_of.isoformat())
            raise FeePolicyNotFoundError(partner_id)
        return policy
