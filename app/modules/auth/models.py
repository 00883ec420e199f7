# app/modules/auth/models.py

from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from app.core.database import Base
import datetime
from enum import Enum as PyEnum


def _utcnow():
    return datetime.datetime.now(datetime.timezone.utc)


class UserRole(str, PyEnum):
    CLIENT = "client"
    ACCOUNT_MANAGER = "account_manager"


class SubscriptionTier(str, PyEnum):
    FREE = "free"
    PRO = "pro"


class SubscriptionStatus(str, PyEnum):
    ACTIVE = "ACTIVE"
    CANCELLED = "CANCELLED"
    SUSPENDED = "SUSPENDED"
    EXPIRED = "EXPIRED"


class User(Base):
    __tablename__ = "user"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(100), nullable=True)
    role = Column(
        String(50),
        nullable=False,
        default=UserRole.CLIENT.value  # Use .value explicitly for default
    )
    subscription_tier = Column(String(20), nullable=False, default=SubscriptionTier.FREE.value)
    subscription_status = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    keywords = relationship("Keyword", back_populates="user",
                            cascade="all, delete-orphan", passive_deletes=True)
    tender_views = relationship("TenderView", back_populates="user",
                                cascade="all, delete-orphan", passive_deletes=True)

    # Add check constraint to match SQL definition
    __table_args__ = (
        CheckConstraint(
            "role IN ('client', 'account_manager')",
            name="chk_user_role"
        ),
        CheckConstraint(
            "subscription_tier IN ('free', 'pro')",
            name="chk_user_subscription_tier"
        ),
    )

    @property
    def is_pro(self) -> bool:
        """Paid features are unlocked only for an active pro subscription"""
        return (
            self.subscription_tier == SubscriptionTier.PRO.value
            and self.subscription_status == SubscriptionStatus.ACTIVE.value
        )

    def __repr__(self):
        return f"<User id={self.id} email={self.email}>"
