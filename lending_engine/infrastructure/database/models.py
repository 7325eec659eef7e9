"""SQLAlchemy ORM models for trust, tier policy and borrower standing tables"""

import uuid
from sqlalchemy import (
    Column,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

# Three decimals covers BHD, KWD and the other 3-exponent currencies
Money = Numeric(16, 3)


class BusinessProfileRow(Base):
    """Business lender and its lending defaults"""

    __tablename__ = "business_profile"

    id = Column(Text, primary_key=True)
    business_name = Column(Text, nullable=False)
    first_time_borrower_amount = Column(Money, nullable=True)
    max_loan_amount = Column(Money, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    allow_first_time_borrowers = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    tier_policies = relationship("LenderTierPolicy", back_populates="business", cascade="all, delete-orphan")


class LenderTierPolicy(Base):
    """Per-tier borrowing ceiling configured by a lender"""

    __tablename__ = "lender_tier_policy"
    __table_args__ = (UniqueConstraint("lender_id", "tier_id", name="uq_lender_tier"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    lender_id = Column(Text, ForeignKey("business_profile.id", ondelete="CASCADE"), nullable=False, index=True)
    tier_id = Column(Integer, nullable=False)
    max_loan_amount = Column(Money, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    business = relationship("BusinessProfileRow", back_populates="tier_policies")


class BorrowerBusinessTrust(Base):
    """Trust record for one borrower at one business; `version` guards concurrent updates"""

    __tablename__ = "borrower_business_trust"
    __table_args__ = (UniqueConstraint("borrower_id", "business_id", name="uq_borrower_business"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    borrower_id = Column(Text, nullable=False, index=True)
    business_id = Column(Text, ForeignKey("business_profile.id", ondelete="CASCADE"), nullable=False)
    completed_loan_count = Column(Integer, nullable=False, default=0)
    has_graduated = Column(Boolean, nullable=False, default=False)
    trust_status = Column(Text, nullable=False, default="new")
    total_borrowed = Column(Money, nullable=False, default=0)
    total_repaid = Column(Money, nullable=False, default=0)
    default_count = Column(Integer, nullable=False, default=0)
    on_time_payment_count = Column(Integer, nullable=False, default=0)
    late_payment_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class BorrowerStandingRow(Base):
    """Borrower's global personal-lending tier and vouch-based trust tier"""

    __tablename__ = "borrower_standing"

    borrower_id = Column(Text, primary_key=True)
    borrowing_tier = Column(Integer, nullable=False, default=1)
    loans_at_current_tier = Column(Integer, nullable=False, default=0)
    total_loans_completed = Column(Integer, nullable=False, default=0)
    trust_tier = Column(Integer, nullable=False, default=1)
    version = Column(Integer, nullable=False, default=1)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class Loan(Base):
    """Loan summary used for outstanding-debt aggregation"""

    __tablename__ = "loan"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    borrower_id = Column(Text, nullable=False, index=True)
    lender_type = Column(Text, nullable=False)  # "personal" or "business"
    business_id = Column(Text, ForeignKey("business_profile.id"), nullable=True)
    amount = Column(Money, nullable=False)
    amount_paid = Column(Money, nullable=False, default=0)
    amount_remaining = Column(Money, nullable=True)
    status = Column(Text, nullable=False, default="active")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
