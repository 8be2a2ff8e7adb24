"""
Tests for the in-memory application repository.
"""
import re
from datetime import date

import pytest

from visa_fees.domain.entities import Application, InvalidApplicationError
from visa_fees.repositories.application_repository import (
    DEMO_APPLICATIONS,
    InMemoryApplicationRepository,
    generate_application_id,
)


def make_application(**overrides):
    fields = {
        "full_name": "Leila Mansouri",
        "passport_number": "K2345678",
        "address": "Celovška cesta 20, Ljubljana",
        "application_date": date(2024, 2, 29),
        "amount_paid": 95.0,
    }
    fields.update(overrides)
    return Application(**fields)


def test_generate_application_id_format():
    assert re.fullmatch(r"app-[0-9a-f]{12}", generate_application_id())


def test_demo_data():
    repository = InMemoryApplicationRepository.with_demo_data()

    assert len(repository) == 3
    assert [a.id for a in DEMO_APPLICATIONS] == ["app-01", "app-02", "app-03"]


@pytest.mark.asyncio
async def test_demo_data_is_copied_per_repository():
    first = InMemoryApplicationRepository.with_demo_data()
    second = InMemoryApplicationRepository.with_demo_data()

    await first.delete("app-01")

    assert await second.get_by_id("app-01") is not None


@pytest.mark.asyncio
async def test_insert_assigns_id_and_prepends():
    repository = InMemoryApplicationRepository()

    older = await repository.insert(make_application())
    newer = await repository.insert(make_application(full_name="Yacine Brahimi"))

    assert older.id.startswith("app-")
    assert [a.id for a in await repository.list()] == [newer.id, older.id]


@pytest.mark.asyncio
async def test_insert_ignores_given_id():
    repository = InMemoryApplicationRepository()

    stored = await repository.insert(make_application(id="app-client-chosen"))

    assert stored.id != "app-client-chosen"


@pytest.mark.asyncio
async def test_list_returns_a_copy():
    repository = InMemoryApplicationRepository([make_application(id="app-01")])

    snapshot = await repository.list()
    snapshot.clear()

    assert len(await repository.list()) == 1


@pytest.mark.asyncio
async def test_get_by_id_missing():
    repository = InMemoryApplicationRepository()

    assert await repository.get_by_id("app-nope") is None


@pytest.mark.asyncio
async def test_update_merges_and_keeps_position_and_id():
    repository = InMemoryApplicationRepository([
        make_application(id="app-01"),
        make_application(id="app-02", full_name="Nadia Ould"),
    ])

    updated = await repository.update("app-02", {"amount_paid": 120.0, "id": "app-99"})

    assert updated.id == "app-02"
    assert updated.amount_paid == 120.0
    assert updated.full_name == "Nadia Ould"
    assert [a.id for a in await repository.list()] == ["app-01", "app-02"]


@pytest.mark.asyncio
async def test_update_missing_returns_none():
    repository = InMemoryApplicationRepository()

    assert await repository.update("app-01", {"amount_paid": 10.0}) is None


@pytest.mark.asyncio
async def test_update_enforces_invariants():
    repository = InMemoryApplicationRepository([make_application(id="app-01")])

    with pytest.raises(InvalidApplicationError):
        await repository.update("app-01", {"amount_paid": 0})

    assert (await repository.get_by_id("app-01")).amount_paid == 95.0


@pytest.mark.asyncio
async def test_delete():
    repository = InMemoryApplicationRepository([make_application(id="app-01")])

    assert await repository.delete("app-01") is True
    assert await repository.delete("app-01") is False
    assert len(repository) == 0


class TestApplicationEntity:

    def test_invariants(self):
        with pytest.raises(InvalidApplicationError, match="Full name"):
            make_application(full_name="Al")
        with pytest.raises(InvalidApplicationError, match="passport"):
            make_application(passport_number="Q1234567")
        with pytest.raises(InvalidApplicationError, match="Address"):
            make_application(address="abc")
        with pytest.raises(InvalidApplicationError, match="Amount"):
            make_application(amount_paid=-1)

    def test_malformed_id(self):
        with pytest.raises(ValueError):
            make_application(id="42")

    def test_to_dict(self):
        application = make_application(id="app-01")

        assert application.to_dict() == {
            "id": "app-01",
            "fullName": "Leila Mansouri",
            "passportNumber": "K2345678",
            "address": "Celovška cesta 20, Ljubljana",
            "applicationDate": "2024-02-29",
            "amountPaid": 95.0,
        }
