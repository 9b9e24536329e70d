from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.sql import func

from shared.config.database import DB_SCHEMA, Base


class Partner(Base):
    __tablename__ = "partners"
    __table_args__ = {"schema": DB_SCHEMA}

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(64), unique=True, nullable=False)
    name = Column(String(255), nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class FeePolicy(Base):
    __tablename__ = "partner_fee_policies"
    # One activation instant per partner
    __table_args__ = (
        UniqueConstraint("partner_id", "effective_from", name="uq_fee_policy_partner_effective"),
        {"schema": DB_SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey(f"{DB_SCHEMA}.partners.id"), nullable=False, index=True)
    effective_from = Column(DateTime(timezone=True), nullable=False)
    percentage = Column(Numeric(10, 6), nullable=False)  # 0.0235 == 2.35%
    fixed_fee = Column(Numeric(15, 2), nullable=True)
