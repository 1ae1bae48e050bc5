"""Transaction model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from app.database import Base, TimestampMixin

TRANSACTION_TYPES = ("income", "expense")


class Transaction(TimestampMixin, Base):
    """A single income or expense entry."""

    __tablename__ = "transaction"
    __table_args__ = (Index("ix_transaction_user_id_date", "user_id", "date"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False)
    trans_category_id = Column(Integer, ForeignKey("trans_category.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency = Column(String(3), nullable=False)
    type = Column(String(16), nullable=False)  # income, expense
    description = Column(String(128), nullable=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow)

    trans_category = relationship("TransCategory", lazy="joined")
