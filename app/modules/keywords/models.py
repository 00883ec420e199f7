from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.core.database import Base

class Keyword(Base):
    """A search term a user follows; inactive keywords are kept for re-activation"""
    __tablename__ = "keywords"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="keywords")

    # A user follows a normalized keyword text only once
    __table_args__ = (
        UniqueConstraint('user_id', 'text', name='uq_user_keyword'),
    )

    def __repr__(self):
        return f"<Keyword user_id={self.user_id} text={self.text}>"
