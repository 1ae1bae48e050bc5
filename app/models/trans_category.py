"""Transaction category model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from app.database import Base

CATEGORY_TYPES = ("default", "custom")


class TransCategory(Base):
    """Category a transaction is filed under.

    ``default`` categories are shared by every user and have no owner;
    ``custom`` categories belong to the user who created them.
    """

    __tablename__ = "trans_category"
    __table_args__ = (UniqueConstraint("name", "type", "user_id", name="uq_trans_category_name_type_user"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=True, index=True)
    name = Column(String(64), nullable=False)
    description = Column(String(128), nullable=True)
    type = Column(String(16), nullable=False, default="custom")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
