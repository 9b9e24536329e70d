import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Numeric, String

from shared.config.database import DB_SCHEMA, Base


class PaymentStatus(str, enum.Enum):
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"


class Payment(Base):
    """One terminal payment attempt. Written once, never updated."""

    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_created_at_id", "created_at", "id"),
        {"schema": DB_SCHEMA},
    )

    id = Column(Integer, primary_key=True, index=True)
    partner_id = Column(Integer, ForeignKey(f"{DB_SCHEMA}.partners.id"), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    applied_fee_rate = Column(Numeric(10, 6), nullable=False)
    fee_amount = Column(Numeric(15, 2), nullable=False)
    net_amount = Column(Numeric(15, 2), nullable=False)
    card_bin = Column(String(8), nullable=True)
    card_last4 = Column(String(4), nullable=True)
    approval_code = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(PaymentStatus, native_enum=False, length=16), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)  # millisecond precision, see cursor.py
    updated_at = Column(DateTime(timezone=True), nullable=False)
