"""Transaction category service."""

import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.trans_category import TransCategory
from app.models.transaction import Transaction

logger = logging.getLogger("finance_tracker")

DEFAULT_CATEGORIES = [
    ("Salary", "Regular income from employment"),
    ("Freelance", "Income from side work and contracts"),
    ("Investments", "Dividends, interest and returns"),
    ("Food", "Groceries and dining out"),
    ("Rent", "Housing rent and maintenance"),
    ("Utilities", "Electricity, water, internet and phone"),
    ("Transport", "Fuel, fares and vehicle costs"),
    ("Shopping", "Clothing and general purchases"),
    ("Entertainment", "Movies, subscriptions and hobbies"),
    ("Health", "Medical bills and insurance"),
    ("Education", "Courses, books and fees"),
    ("Other", "Anything that does not fit elsewhere"),
]


class TransCategoryService:
    """Handles default and user-defined transaction categories."""

    def seed_default_categories(self, db: Session) -> int:
        """Insert missing default categories. Safe to run repeatedly. Returns number inserted."""
        existing = {name for (name,) in db.query(TransCategory.name).filter(TransCategory.type == "default")}
        added = 0
        for name, description in DEFAULT_CATEGORIES:
            if name in existing:
                continue
            db.add(TransCategory(name=name, description=description, type="default", user_id=None))
            added += 1
        db.commit()
        if added:
            logger.info("Seeded %d default transaction categories", added)
        return added

    def create(
        self, db: Session, user_id: int, role: str, name: str, description: str | None, category_type: str
    ) -> TransCategory:
        """Create a category. Only admins may add shared default categories."""
        if category_type == "default" and role != "admin":
            raise ForbiddenError("Only administrators can create default categories")

        owner_id = None if category_type == "default" else user_id
        owner_filter = TransCategory.user_id.is_(None) if owner_id is None else TransCategory.user_id == owner_id
        duplicate = (
            db.query(TransCategory)
            .filter(TransCategory.name == name, TransCategory.type == category_type, owner_filter)
            .first()
        )
        if duplicate:
            raise ConflictError("Category already exists")

        category = TransCategory(name=name, description=description, type=category_type, user_id=owner_id)
        db.add(category)
        db.commit()
        db.refresh(category)
        return category

    def list_all(self, db: Session, user_id: int) -> list[TransCategory]:
        """Default categories plus the user's own."""
        return (
            db.query(TransCategory)
            .filter(or_(TransCategory.user_id == user_id, TransCategory.type == "default"))
            .order_by(TransCategory.type, TransCategory.name)
            .all()
        )

    def get_visible(self, db: Session, category_id: int, user_id: int) -> TransCategory:
        """Fetch a category the user may file transactions under."""
        category = (
            db.query(TransCategory)
            .filter(
                TransCategory.id == category_id,
                or_(TransCategory.user_id == user_id, TransCategory.type == "default"),
            )
            .first()
        )
        if not category:
            raise NotFoundError("Transaction category not found")
        return category

    def update(self, db: Session, category_id: int, user_id: int, role: str, changes: dict) -> TransCategory:
        category = self._get_editable(db, category_id, user_id, role)
        if changes.get("name"):
            category.name = changes["name"]
        if "description" in changes:
            category.description = changes["description"]
        db.commit()
        db.refresh(category)
        return category

    def delete(self, db: Session, category_id: int, user_id: int, role: str) -> TransCategory:
        category = self._get_editable(db, category_id, user_id, role)
        in_use = db.query(Transaction.id).filter(Transaction.trans_category_id == category.id).first()
        if in_use:
            raise ConflictError("Category is used by existing transactions")
        db.delete(category)
        db.commit()
        return category

    def _get_editable(self, db: Session, category_id: int, user_id: int, role: str) -> TransCategory:
        category = self.get_visible(db, category_id, user_id)
        if category.type == "default" and role != "admin":
            raise ForbiddenError("Default categories can not be modified")
        return category


_trans_category_service: TransCategoryService | None = None


def get_trans_category_service() -> TransCategoryService:
    """Get singleton transaction category service instance."""
    global _trans_category_service
    if _trans_category_service is None:
        _trans_category_service = TransCategoryService()
    return _trans_category_service
