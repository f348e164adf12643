import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from splitpal.core.exceptions import LedgerIntegrityError
from splitpal.models.expense import Expense
from splitpal.models.expense_share import ExpenseShare
from splitpal.schemas.expense import ExpenseCreate
from splitpal.services.expense_services import create_expense
from splitpal.services.group_services import add_member, create_group


class TestGroups:

    async def test_create_and_list(self, client, trip):
        res = await client.get("/api/v1/groups/")

        assert res.status_code == 200
        assert res.json() == [{"id": trip["group"], "name": "Goa Trip", "members_count": 3}]

    async def test_duplicate_name_rejected(self, client, trip):
        res = await client.post("/api/v1/groups/", json={"name": "Goa Trip"})

        assert res.status_code == 400
        assert res.json()["detail"]["field"] == "name"

    async def test_blank_name_rejected(self, client):
        res = await client.post("/api/v1/groups/", json={"name": "  "})

        assert res.status_code == 400

    async def test_detail_lists_members(self, client, trip):
        res = await client.get(f"/api/v1/groups/{trip['group']}")

        body = res.json()
        assert res.status_code == 200
        assert [m["name"] for m in body["members"]] == ["Asha", "Bala", "Chitra"]
        assert body["members"][0]["upi_id"] == "asha@okbank"
        assert body["expenses"] == []

    async def test_missing_group(self, client):
        res = await client.get("/api/v1/groups/404")

        assert res.status_code == 404

    async def test_update_member_upi(self, client, trip):
        res = await client.patch(
            f"/api/v1/groups/{trip['group']}/members/{trip['Bala']}",
            json={"upi_id": "bala@ybl"},
        )

        assert res.status_code == 200
        assert res.json()["upi_id"] == "bala@ybl"
        assert res.json()["name"] == "Bala"

    async def test_member_name_required(self, client, trip):
        res = await client.post(f"/api/v1/groups/{trip['group']}/members", json={"name": ""})

        assert res.status_code == 400
        assert res.json()["detail"]["field"] == "name"


class TestExpenses:

    async def test_equal_split_is_stored_with_shares(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/expenses",
            json={
                "description": "Dinner",
                "amount": 100,
                "paid_by": trip["Asha"],
                "participants": [trip["Asha"], trip["Bala"], trip["Chitra"]],
                "date": "2024-03-01",
            },
        )

        assert res.status_code == 201
        body = res.json()
        assert body["payer_name"] == "Asha"
        assert body["date"] == "2024-03-01"
        assert [s["amount"] for s in body["shares"]] == [33.34, 33.33, 33.33]

    async def test_exact_split(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/expenses",
            json={
                "description": "Hotel",
                "amount": "250.00",
                "paid_by": trip["Bala"],
                "strategy": "exact",
                "splits": [
                    {"member_id": trip["Bala"], "amount": "150.00"},
                    {"member_id": trip["Chitra"], "amount": "100.00"},
                ],
            },
        )

        assert res.status_code == 201
        assert {s["member_id"]: s["amount"] for s in res.json()["shares"]} == {
            trip["Bala"]: 150.0,
            trip["Chitra"]: 100.0,
        }

    async def test_listing_is_newest_first(self, client, trip):
        for description, day in (("Old", "2024-03-01"), ("New", "2024-03-04")):
            await client.post(
                f"/api/v1/groups/{trip['group']}/expenses",
                json={
                    "description": description,
                    "amount": 20,
                    "paid_by": trip["Asha"],
                    "participants": [trip["Bala"]],
                    "date": day,
                },
            )

        res = await client.get(f"/api/v1/groups/{trip['group']}/expenses")

        assert [e["description"] for e in res.json()] == ["New", "Old"]

    async def test_validation_error_names_the_field(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/expenses",
            json={"description": "Snacks", "amount": 0, "paid_by": trip["Asha"], "participants": [trip["Asha"]]},
        )

        assert res.status_code == 400
        assert res.json()["detail"] == {"field": "amount", "message": "Amount must be greater than 0"}

        listed = await client.get(f"/api/v1/groups/{trip['group']}/expenses")
        assert listed.json() == []

    async def test_oversized_amount_is_a_validation_error(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/expenses",
            json={"description": "Villa", "amount": "1e30", "paid_by": trip["Asha"], "participants": [trip["Asha"]]},
        )

        assert res.status_code == 400
        assert res.json()["detail"] == {"field": "amount", "message": "Amount must not exceed 9999999999.99"}

    async def test_unparseable_body_is_rejected(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/expenses",
            json={"description": "Snacks", "amount": "lots", "paid_by": trip["Asha"]},
        )

        assert res.status_code == 422

    async def test_expense_for_missing_group(self, client):
        res = await client.post(
            "/api/v1/groups/999/expenses",
            json={"description": "Snacks", "amount": 10, "paid_by": 1, "participants": [1]},
        )

        assert res.status_code == 404


async def test_failed_commit_leaves_no_partial_expense(db, monkeypatch):
    group = await create_group(db, "Flatmates")
    asha = await add_member(db, group.id, "Asha")
    bala = await add_member(db, group.id, "Bala")

    async def broken_commit(self):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(AsyncSession, "commit", broken_commit)

    with pytest.raises(LedgerIntegrityError):
        await create_expense(
            db,
            group.id,
            ExpenseCreate(description="Rent", amount=1000, paid_by=asha.id, participants=[asha.id, bala.id]),
        )

    assert await db.scalar(select(func.count(Expense.id))) == 0
    assert await db.scalar(select(func.count(ExpenseShare.id))) == 0


class TestSettlements:

    async def test_record_and_history(self, client, trip):
        group = trip["group"]
        for amount in (10, 20, 30):
            res = await client.post(
                f"/api/v1/groups/{group}/settlements",
                json={"paid_by": trip["Bala"], "paid_to": trip["Asha"], "amount": amount},
            )
            assert res.status_code == 201
            assert res.json()["status"] == "completed"

        res = await client.get(f"/api/v1/groups/{group}/settlements", params={"page": 1, "limit": 2})

        body = res.json()
        assert body["total"] == 3
        assert [s["amount"] for s in body["settlements"]] == [30.0, 20.0]

        res = await client.get(f"/api/v1/groups/{group}/settlements", params={"page": 2, "limit": 2})
        assert [s["amount"] for s in res.json()["settlements"]] == [10.0]

    async def test_cannot_settle_with_yourself(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/settlements",
            json={"paid_by": trip["Bala"], "paid_to": trip["Bala"], "amount": 10},
        )

        assert res.status_code == 400
        assert res.json()["detail"]["message"] == "Cannot settle with yourself"

    async def test_amount_must_be_positive(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/settlements",
            json={"paid_by": trip["Bala"], "paid_to": trip["Asha"], "amount": -3},
        )

        assert res.status_code == 400
        assert res.json()["detail"]["field"] == "amount"

    async def test_oversized_amount_is_a_validation_error(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/settlements",
            json={"paid_by": trip["Bala"], "paid_to": trip["Asha"], "amount": "1e30"},
        )

        assert res.status_code == 400
        assert res.json()["detail"]["field"] == "amount"

        history = await client.get(f"/api/v1/groups/{trip['group']}/settlements")
        assert history.json()["total"] == 0

    async def test_receiver_must_be_in_group(self, client, trip):
        res = await client.post(
            f"/api/v1/groups/{trip['group']}/settlements",
            json={"paid_by": trip["Bala"], "paid_to": 999, "amount": 3},
        )

        assert res.status_code == 400
        assert res.json()["detail"]["field"] == "paid_to"
