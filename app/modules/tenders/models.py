from sqlalchemy import (Column, String, Integer, BigInteger, Boolean, DateTime,
                        ForeignKey, UniqueConstraint, JSON)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class Tender(Base):
    """A procurement case, identified by its unit_id and job_number"""
    __tablename__ = "tenders"

    # "unit_id=<unit_id>&job_number=<job_number>", see tender_helpers.build_tender_id
    id = Column(String(512), primary_key=True)
    tags = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    versions = relationship("TenderVersion", back_populates="tender",
                            cascade="all, delete-orphan", passive_deletes=True,
                            order_by="TenderVersion.date.desc()")
    views = relationship("TenderView", back_populates="tender",
                         cascade="all, delete-orphan", passive_deletes=True)

class TenderVersion(Base):
    """One dated, typed snapshot of a tender as published by the procurement API"""
    __tablename__ = "tender_versions"

    id = Column(Integer, primary_key=True, index=True)
    tender_id = Column(String(512), ForeignKey("tenders.id", ondelete="CASCADE"), nullable=False, index=True)
    # YYYYMMDD as reported by the API
    date = Column(BigInteger, nullable=False)
    # Raw announcement type label, or "unknown" when the record has none
    type = Column(String(255), nullable=False)
    # Display category: bidding / awarded / failed / delivery
    category = Column(String(20), nullable=False)
    data = Column(JSON, nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    tender = relationship("Tender", back_populates="versions")

    # The same announcement is stored once per tender
    __table_args__ = (
        UniqueConstraint('tender_id', 'date', 'type', name='uq_tender_version'),
    )

class TenderView(Base):
    """A user's inbox/archive state for a tender; a tender is visible to a user only through a view"""
    __tablename__ = "tender_views"

    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True)
    tender_id = Column(String(512), ForeignKey("tenders.id", ondelete="CASCADE"), primary_key=True, index=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_highlighted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    tender = relationship("Tender", back_populates="views")
    user = relationship("User", back_populates="tender_views")
