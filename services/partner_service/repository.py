from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import FeePolicy, Partner


class PartnerRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, partner_id: int) -> Optional[Partner]:
        result = await self.db.execute(select(Partner).where(Partner.id == partner_id))
        return result.scalars().first()


class FeePolicyRepository:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_effective_policy(self, partner_id: int, as_of: datetime) -> Optional[FeePolicy]:
        """Latest policy whose effective_from is not after as_of."""
        result = await self.db.execute(
            select(FeePolicy)
            .where(FeePolicy.partner_id == partner_id)
            .where(FeePolicy.effective_from <= as_of)
            .order_by(FeePolicy.effective_from.desc())
            .limit(1)
        )
        return result.scalars().first()
