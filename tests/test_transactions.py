"""Tests for transaction endpoints and reporting helpers."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.errors import BadRequestError
from app.models.trans_category import TransCategory
from app.services.transaction import date_range_for_last


@pytest.fixture(name="categories")
def categories_fixture(client: TestClient, db_session: Session) -> dict:
    """Map of default category name -> id (seeded at startup)."""
    return {c.name: c.id for c in db_session.query(TransCategory).filter(TransCategory.type == "default")}


def _add(client: TestClient, user: dict, category_id: int, amount: float, tx_type: str = "expense", **extra):
    body = {"transCategoryId": category_id, "amount": amount, "type": tx_type, **extra}
    response = client.post("/api/trans/", json=body, headers=user["headers"])
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateTransaction:
    """Tests for recording transactions."""

    def test_create(self, client: TestClient, test_user: dict, categories: dict):
        data = _add(
            client,
            test_user,
            categories["Food"],
            42.5,
            description="Groceries",
            date="2026-01-15T10:00:00Z",
        )
        assert data["amount"] == 42.5
        assert data["type"] == "expense"
        assert data["currency"] == "INR"
        assert data["description"] == "Groceries"
        assert data["date"].startswith("2026-01-15T10:00:00")
        assert data["transCategory"]["name"] == "Food"

    def test_create_converts_offset_to_utc(self, client: TestClient, test_user: dict, categories: dict):
        data = _add(client, test_user, categories["Food"], 10, date="2026-01-15T15:30:00+05:30")
        assert data["date"].startswith("2026-01-15T10:00:00")

    def test_create_uses_explicit_currency(self, client: TestClient, test_user: dict, categories: dict):
        data = _add(client, test_user, categories["Salary"], 1000, "income", currency="usd")
        assert data["currency"] == "USD"

    def test_create_defaults_to_preferred_currency(self, client: TestClient, test_user: dict, categories: dict):
        client.patch(f"/api/users/{test_user['id']}", json={"preferredCurrency": "EUR"}, headers=test_user["headers"])
        data = _add(client, test_user, categories["Food"], 5)
        assert data["currency"] == "EUR"

    def test_create_rejects_non_positive_amount(self, client: TestClient, test_user: dict, categories: dict):
        response = client.post(
            "/api/trans/",
            json={"transCategoryId": categories["Food"], "amount": 0, "type": "expense"},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert "amount" in response.json()["errors"]

    def test_create_rejects_unknown_type(self, client: TestClient, test_user: dict, categories: dict):
        response = client.post(
            "/api/trans/",
            json={"transCategoryId": categories["Food"], "amount": 5, "type": "transfer"},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert "type" in response.json()["errors"]

    def test_create_with_unknown_category(self, client: TestClient, test_user: dict):
        response = client.post(
            "/api/trans/",
            json={"transCategoryId": 999999, "amount": 5, "type": "expense"},
            headers=test_user["headers"],
        )
        assert response.status_code == 404

    def test_create_with_other_users_category(self, client: TestClient, test_user: dict, other_user: dict):
        category_id = client.post(
            "/api/trans-categories/", json={"name": "Private"}, headers=other_user["headers"]
        ).json()["id"]
        response = client.post(
            "/api/trans/",
            json={"transCategoryId": category_id, "amount": 5, "type": "expense"},
            headers=test_user["headers"],
        )
        assert response.status_code == 404

    def test_create_requires_auth(self, client: TestClient, categories: dict):
        response = client.post("/api/trans/", json={"transCategoryId": categories["Food"], "amount": 5, "type": "expense"})
        assert response.status_code == 401


class TestListTransactions:
    """Tests for listing transactions."""

    def test_list_all_newest_first(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 1, date="2026-01-01T00:00:00Z")
        _add(client, test_user, categories["Food"], 2, date="2026-03-01T00:00:00Z")
        _add(client, test_user, categories["Food"], 3, date="2026-02-01T00:00:00Z")

        response = client.get("/api/trans/all", headers=test_user["headers"])
        assert response.status_code == 200
        assert [t["amount"] for t in response.json()] == [2, 3, 1]

    def test_users_are_isolated(self, client: TestClient, test_user: dict, other_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 10)
        _add(client, other_user, categories["Food"], 20)

        response = client.get("/api/trans/all", headers=test_user["headers"])
        assert [t["amount"] for t in response.json()] == [10]

    def test_list_by_date_range(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 1, date="2026-01-10T00:00:00Z")
        _add(client, test_user, categories["Food"], 2, date="2026-02-10T00:00:00Z")
        _add(client, test_user, categories["Food"], 3, date="2026-03-10T00:00:00Z")

        response = client.get(
            "/api/trans/list-by-date-range",
            params={"startDate": "2026-02-01T00:00:00Z", "endDate": "2026-02-28T23:59:59Z"},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert [t["amount"] for t in response.json()] == [2]

    def test_list_by_date_range_inverted(self, client: TestClient, test_user: dict):
        response = client.get(
            "/api/trans/list-by-date-range",
            params={"startDate": "2026-03-01T00:00:00Z", "endDate": "2026-02-01T00:00:00Z"},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "startDate must not be after endDate"

    def test_list_by_time_unit(self, client: TestClient, test_user: dict, categories: dict):
        recent = (datetime.utcnow() - timedelta(days=2)).isoformat() + "Z"
        old = (datetime.utcnow() - timedelta(days=20)).isoformat() + "Z"
        _add(client, test_user, categories["Food"], 1, date=recent)
        _add(client, test_user, categories["Food"], 2, date=old)

        response = client.get(
            "/api/trans/list-by-time-unit",
            params={"timeUnit": "week", "units": 1},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert [t["amount"] for t in response.json()] == [1]

    def test_list_by_time_unit_over_limit(self, client: TestClient, test_user: dict):
        response = client.get(
            "/api/trans/list-by-time-unit",
            params={"timeUnit": "day", "units": 91},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Maximum units for day is 90"

    def test_huge_hour_window_is_rejected(self, client: TestClient, test_user: dict):
        for path in ("/api/trans/list-by-time-unit", "/api/trans/category-summary-last-n-units"):
            response = client.get(
                path,
                params={"timeUnit": "hour", "units": 10**12},
                headers=test_user["headers"],
            )
            assert response.status_code == 400
            assert response.json()["detail"] == "Maximum units for hour is 2160"

    def test_list_by_unknown_time_unit(self, client: TestClient, test_user: dict):
        response = client.get(
            "/api/trans/list-by-time-unit",
            params={"timeUnit": "decade", "units": 1},
            headers=test_user["headers"],
        )
        assert response.status_code == 400
        assert "timeUnit" in response.json()["errors"]


class TestModifyTransaction:
    """Tests for updating and deleting transactions."""

    def test_update(self, client: TestClient, test_user: dict, categories: dict):
        tx = _add(client, test_user, categories["Food"], 10, description="Lunch")
        response = client.patch(
            f"/api/trans/{tx['id']}",
            json={"amount": 12.75, "transCategoryId": categories["Entertainment"], "description": None},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        data = response.json()
        assert data["amount"] == 12.75
        assert data["transCategory"]["name"] == "Entertainment"
        assert data["description"] is None
        assert data["type"] == "expense"

    def test_update_ignores_null_required_fields(self, client: TestClient, test_user: dict, categories: dict):
        tx = _add(client, test_user, categories["Food"], 10)
        response = client.patch(
            f"/api/trans/{tx['id']}",
            json={"amount": None, "type": None},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert response.json()["amount"] == 10
        assert response.json()["type"] == "expense"

    def test_update_other_users_transaction(self, client: TestClient, test_user: dict, other_user: dict, categories: dict):
        tx = _add(client, other_user, categories["Food"], 10)
        response = client.patch(f"/api/trans/{tx['id']}", json={"amount": 1}, headers=test_user["headers"])
        assert response.status_code == 404

    def test_delete(self, client: TestClient, test_user: dict, categories: dict):
        tx = _add(client, test_user, categories["Food"], 10)
        response = client.delete(f"/api/trans/{tx['id']}", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["id"] == tx["id"]
        assert client.get("/api/trans/all", headers=test_user["headers"]).json() == []

    def test_delete_missing(self, client: TestClient, test_user: dict):
        response = client.delete("/api/trans/999999", headers=test_user["headers"])
        assert response.status_code == 404
        assert response.json()["detail"] == "Transaction not found"


class TestReports:
    """Tests for summary and aggregate endpoints."""

    def test_summary(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Salary"], 5000, "income")
        _add(client, test_user, categories["Freelance"], 750.5, "income")
        _add(client, test_user, categories["Rent"], 2000, "expense")
        _add(client, test_user, categories["Food"], 300.25, "expense")

        response = client.get("/api/trans/summary", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json() == {
            "totalIncome": 5750.5,
            "totalExpenses": 2300.25,
            "currentBalance": 3450.25,
            "currency": "INR",
        }

    def test_summary_empty(self, client: TestClient, test_user: dict):
        data = client.get("/api/trans/summary", headers=test_user["headers"]).json()
        assert data["totalIncome"] == 0
        assert data["totalExpenses"] == 0
        assert data["currentBalance"] == 0

    def test_year_month_list(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 1, date="2025-12-05T00:00:00Z")
        _add(client, test_user, categories["Food"], 2, date="2026-02-05T00:00:00Z")
        _add(client, test_user, categories["Food"], 3, date="2026-02-20T00:00:00Z")

        response = client.get("/api/trans/year-month-list", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json() == [{"year": 2026, "month": 2}, {"year": 2025, "month": 12}]

    def test_category_summary_by_date_range(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 10, date="2026-02-01T00:00:00Z")
        _add(client, test_user, categories["Food"], 15, date="2026-02-02T00:00:00Z")
        _add(client, test_user, categories["Salary"], 900, "income", date="2026-02-03T00:00:00Z")
        _add(client, test_user, categories["Rent"], 500, date="2025-01-01T00:00:00Z")

        response = client.get(
            "/api/trans/category-summary-date-range",
            params={"startDate": "2026-01-01T00:00:00Z", "endDate": "2026-12-31T00:00:00Z"},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert response.json() == [
            {"transCategoryName": "Food", "type": "expense", "totalAmount": 25, "count": 2},
            {"transCategoryName": "Salary", "type": "income", "totalAmount": 900, "count": 1},
        ]

    def test_category_summary_last_n_units(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 10)
        _add(client, test_user, categories["Food"], 5, date="2020-01-01T00:00:00Z")

        response = client.get(
            "/api/trans/category-summary-last-n-units",
            params={"timeUnit": "month", "units": 1},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        assert response.json() == [{"transCategoryName": "Food", "type": "expense", "totalAmount": 10, "count": 1}]

    def test_monthly_category_summary(self, client: TestClient, test_user: dict, categories: dict):
        _add(client, test_user, categories["Food"], 10)
        _add(client, test_user, categories["Food"], 20)
        _add(client, test_user, categories["Salary"], 100, "income")

        response = client.get(
            "/api/trans/monthly-category-summary",
            params={"months": 0},
            headers=test_user["headers"],
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["month"] == datetime.utcnow().strftime("%Y-%m")
        assert data[0]["transactions"] == [
            {"categoryName": "Food", "type": "expense", "totalAmount": 30, "count": 2},
            {"categoryName": "Salary", "type": "income", "totalAmount": 100, "count": 1},
        ]


class TestDateRangeForLast:
    """Tests for the rolling window calculation."""

    NOW = datetime(2026, 2, 15, 13, 30, 0)

    def test_hours(self):
        assert date_range_for_last("hour", 6, self.NOW) == (datetime(2026, 2, 15, 7, 30, 0), self.NOW)

    def test_days(self):
        assert date_range_for_last("day", 7, self.NOW)[0] == datetime(2026, 2, 8, 13, 30, 0)

    def test_weeks(self):
        assert date_range_for_last("week", 2, self.NOW)[0] == datetime(2026, 2, 1, 13, 30, 0)

    def test_months_snap_to_first_day(self):
        assert date_range_for_last("month", 0, self.NOW)[0] == datetime(2026, 2, 1)
        assert date_range_for_last("month", 3, self.NOW)[0] == datetime(2025, 11, 1)
        assert date_range_for_last("month", 14, self.NOW)[0] == datetime(2024, 12, 1)

    def test_years(self):
        assert date_range_for_last("year", 1, self.NOW)[0] == datetime(2025, 1, 1)

    def test_fiscal_year_before_april(self):
        assert date_range_for_last("fy", 0, self.NOW)[0] == datetime(2025, 4, 1)

    def test_fiscal_year_after_april(self):
        assert date_range_for_last("fy", 1, datetime(2026, 7, 1))[0] == datetime(2025, 4, 1)

    def test_limits(self):
        with pytest.raises(BadRequestError, match="Maximum units for month is 36"):
            date_range_for_last("month", 37, self.NOW)
        with pytest.raises(BadRequestError):
            date_range_for_last("fortnight", 1, self.NOW)
        with pytest.raises(BadRequestError):
            date_range_for_last("day", -1, self.NOW)

    def test_hour_limit(self):
        assert date_range_for_last("hour", 2160, self.NOW)[0] == datetime(2025, 11, 17, 13, 30, 0)
        with pytest.raises(BadRequestError, match="Maximum units for hour is 2160"):
            date_range_for_last("hour", 100_000_000, self.NOW)
