"""Transaction service: CRUD, date-window listing and aggregate reports."""

from collections import defaultdict
from datetime import datetime, timedelta

from sqlalchemy import extract, func
from sqlalchemy.orm import Query, Session

from app.errors import BadRequestError, NotFoundError
from app.models.trans_category import TransCategory
from app.models.transaction import Transaction
from app.services.trans_category import get_trans_category_service

TIME_UNITS = ("hour", "day", "week", "month", "year", "fy")
MAX_UNITS = {"hour": 24 * 90, "day": 90, "week": 12, "month": 36, "year": 5, "fy": 5}
FISCAL_YEAR_START_MONTH = 4  # April


def date_range_for_last(time_unit: str, units: int, now: datetime | None = None) -> tuple[datetime, datetime]:
    """Return (start, end) covering the last ``units`` of ``time_unit`` up to now.

    Hours, days and weeks count back exactly. Months, years and fiscal years
    snap the start to the first day of the period.
    """
    if time_unit not in TIME_UNITS:
        raise BadRequestError(f"Time unit must be one of: {', '.join(TIME_UNITS)}")
    if units < 0:
        raise BadRequestError("units must be a non-negative integer")
    limit = MAX_UNITS.get(time_unit)
    if limit is not None and units > limit:
        raise BadRequestError(f"Maximum units for {time_unit} is {limit}")

    now = now or datetime.utcnow()
    if time_unit == "hour":
        start = now - timedelta(hours=units)
    elif time_unit == "day":
        start = now - timedelta(days=units)
    elif time_unit == "week":
        start = now - timedelta(weeks=units)
    elif time_unit == "month":
        year = now.year - units // 12
        month = now.month - units % 12
        if month < 1:
            year -= 1
            month += 12
        start = datetime(year, month, 1)
    elif time_unit == "year":
        start = datetime(now.year - units, 1, 1)
    else:
        fy_start_year = now.year - 1 if now.month < FISCAL_YEAR_START_MONTH else now.year
        start = datetime(fy_start_year - units, FISCAL_YEAR_START_MONTH, 1)
    return start, now


def _apply_date_range(query: Query, start: datetime | None, end: datetime | None) -> Query:
    if start and end and start > end:
        raise BadRequestError("startDate must not be after endDate")
    if start:
        query = query.filter(Transaction.date >= start)
    if end:
        query = query.filter(Transaction.date <= end)
    return query


class TransactionService:
    """Handles a user's income and expense records."""

    def create(self, db: Session, user_id: int, default_currency: str, data: dict) -> Transaction:
        category = get_trans_category_service().get_visible(db, data["trans_category_id"], user_id)
        transaction = Transaction(
            user_id=user_id,
            trans_category_id=category.id,
            amount=data["amount"],
            currency=(data.get("currency") or default_currency).upper(),
            type=data["type"],
            description=data.get("description"),
            date=data.get("date") or datetime.utcnow(),
        )
        db.add(transaction)
        db.commit()
        db.refresh(transaction)
        return transaction

    def list_all(self, db: Session, user_id: int) -> list[Transaction]:
        return self.list_by_date_range(db, user_id)

    def list_by_date_range(
        self, db: Session, user_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> list[Transaction]:
        """Transactions within [start, end], newest first. Either bound may be omitted."""
        query = db.query(Transaction).filter(Transaction.user_id == user_id)
        query = _apply_date_range(query, start, end)
        return query.order_by(Transaction.date.desc(), Transaction.id.desc()).all()

    def list_by_last_n_units(self, db: Session, user_id: int, time_unit: str, units: int) -> list[Transaction]:
        start, end = date_range_for_last(time_unit, units)
        return self.list_by_date_range(db, user_id, start, end)

    def get(self, db: Session, transaction_id: int, user_id: int) -> Transaction:
        transaction = (
            db.query(Transaction).filter(Transaction.id == transaction_id, Transaction.user_id == user_id).first()
        )
        if not transaction:
            raise NotFoundError("Transaction not found")
        return transaction

    def update(self, db: Session, transaction_id: int, user_id: int, changes: dict) -> Transaction:
        transaction = self.get(db, transaction_id, user_id)
        if changes.get("trans_category_id") is not None:
            category = get_trans_category_service().get_visible(db, changes["trans_category_id"], user_id)
            transaction.trans_category_id = category.id
        for field in ("amount", "type", "date"):
            if changes.get(field) is not None:
                setattr(transaction, field, changes[field])
        if "description" in changes:
            transaction.description = changes["description"]
        if changes.get("currency"):
            transaction.currency = changes["currency"].upper()
        db.commit()
        db.refresh(transaction)
        return transaction

    def delete(self, db: Session, transaction_id: int, user_id: int) -> Transaction:
        transaction = self.get(db, transaction_id, user_id)
        db.delete(transaction)
        db.commit()
        return transaction

    # --- Reports ---

    def get_summary(
        self,
        db: Session,
        user_id: int,
        currency: str,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> dict:
        """Total income, total expenses and the resulting balance."""
        query = db.query(Transaction.type, func.sum(Transaction.amount)).filter(Transaction.user_id == user_id)
        query = _apply_date_range(query, start, end)
        totals = {tx_type: float(total or 0) for tx_type, total in query.group_by(Transaction.type).all()}

        income = round(totals.get("income", 0.0), 2)
        expenses = round(totals.get("expense", 0.0), 2)
        return {
            "total_income": income,
            "total_expenses": expenses,
            "current_balance": round(income - expenses, 2),
            "currency": currency,
        }

    def get_year_month_list(self, db: Session, user_id: int) -> list[dict]:
        """Distinct (year, month) pairs that have transactions, newest first."""
        year = extract("year", Transaction.date).label("year")
        month = extract("month", Transaction.date).label("month")
        rows = (
            db.query(year, month)
            .filter(Transaction.user_id == user_id)
            .distinct()
            .order_by(year.desc(), month.desc())
            .all()
        )
        return [{"year": int(y), "month": int(m)} for y, m in rows]

    def get_category_summary_by_date_range(
        self, db: Session, user_id: int, start: datetime | None = None, end: datetime | None = None
    ) -> list[dict]:
        """Totals per (category, type), sorted by category name."""
        query = (
            db.query(
                TransCategory.name,
                Transaction.type,
                func.sum(Transaction.amount),
                func.count(Transaction.id),
            )
            .join(TransCategory, Transaction.trans_category_id == TransCategory.id)
            .filter(Transaction.user_id == user_id)
        )
        query = _apply_date_range(query, start, end)
        rows = query.group_by(TransCategory.name, Transaction.type).order_by(TransCategory.name, Transaction.type)
        return [
            {
                "trans_category_name": name,
                "type": tx_type,
                "total_amount": round(float(total or 0), 2),
                "count": count,
            }
            for name, tx_type, total, count in rows.all()
        ]

    def get_category_summary_by_last_n_units(self, db: Session, user_id: int, time_unit: str, units: int) -> list[dict]:
        start, end = date_range_for_last(time_unit, units)
        return self.get_category_summary_by_date_range(db, user_id, start, end)

    def get_monthly_category_summary(self, db: Session, user_id: int, months: int) -> list[dict]:
        """Per-month category totals for the last ``months`` months, newest month first."""
        start, end = date_range_for_last("month", months)
        year = extract("year", Transaction.date)
        month = extract("month", Transaction.date)
        query = (
            db.query(
                year,
                month,
                TransCategory.name,
                Transaction.type,
                func.sum(Transaction.amount),
                func.count(Transaction.id),
            )
            .join(TransCategory, Transaction.trans_category_id == TransCategory.id)
            .filter(Transaction.user_id == user_id)
        )
        query = _apply_date_range(query, start, end)
        rows = query.group_by(year, month, TransCategory.name, Transaction.type).all()

        by_month: dict[str, list[dict]] = defaultdict(list)
        for y, m, name, tx_type, total, count in rows:
            by_month[f"{int(y):04d}-{int(m):02d}"].append(
                {
                    "category_name": name,
                    "type": tx_type,
                    "total_amount": round(float(total or 0), 2),
                    "count": count,
                }
            )

        return [
            {"month": key, "transactions": sorted(by_month[key], key=lambda item: item["category_name"])}
            for key in sorted(by_month, reverse=True)
        ]


_transaction_service: TransactionService | None = None


def get_transaction_service() -> TransactionService:
    """Get singleton transaction service instance."""
    global _transaction_service
    if _transaction_service is None:
        _transaction_service = TransactionService()
    return _transaction_service
