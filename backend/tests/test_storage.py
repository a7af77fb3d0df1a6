"""
Storage layer tests against a real SQLite database
"""

import pytest

from travelmarket.core.errors import ConstraintViolation
from travelmarket.db.seed import SEED_DESTINATIONS


async def make_user(storage, username, role="traveler"):
    return await storage.create_user(
        username=username,
        email=f"{username}@example.com",
        password="not-a-real-hash",
        full_name=username.title(),
        role=role,
    )


@pytest.mark.asyncio
async def test_create_user_assigns_id_and_timestamp(storage):
    user = await make_user(storage, "asha")

    assert user.id is not None
    assert user.created_at is not None
    assert user.role == "traveler"

    fetched = await storage.get_user(user.id)
    assert fetched.username == "asha"
    assert (await storage.get_user_by_email("asha@example.com")).id == user.id
    assert (await storage.get_user_by_username("asha")).id == user.id


@pytest.mark.asyncio
async def test_lookups_return_none_for_absent_rows(storage):
    assert await storage.get_user(999) is None
    assert await storage.get_user_by_username("nobody") is None
    assert await storage.get_agency(1) is None
    assert await storage.get_travel_preference(1) is None
    assert await storage.get_message(1) is None
    assert await storage.get_travel_packages_by_agency_id(1) == []


@pytest.mark.asyncio
async def test_duplicate_username_is_a_constraint_violation(storage):
    await make_user(storage, "asha")
    with pytest.raises(ConstraintViolation):
        await storage.create_user(
            username="asha",
            email="other@example.com",
            password="x",
            full_name="Other",
        )


@pytest.mark.asyncio
async def test_dangling_foreign_key_is_a_constraint_violation(storage):
    with pytest.raises(ConstraintViolation):
        await storage.create_travel_preference(user_id=12345, travelers=2)

    user = await make_user(storage, "asha")
    with pytest.raises(ConstraintViolation):
        await storage.create_message(sender_id=user.id, receiver_id=999, content="hello?")


@pytest.mark.asyncio
async def test_partial_update_changes_only_given_fields(storage):
    user = await make_user(storage, "ravi")
    agency = await storage.create_agency(
        user_id=user.id,
        company_name="Ravi Travels",
        description="Backwater cruises",
        phone_number="555-0100",
    )

    updated = await storage.update_agency(agency.id, description="Houseboats", phone_number=None)

    assert updated.description == "Houseboats"
    assert updated.phone_number == "555-0100"
    assert updated.company_name == "Ravi Travels"
    assert updated.verified is False
    assert await storage.update_agency(999, description="nope") is None


@pytest.mark.asyncio
async def test_seed_destinations_is_idempotent(storage):
    assert await storage.seed_destinations() == len(SEED_DESTINATIONS)
    assert await storage.seed_destinations() == 0

    destinations = await storage.get_all_destinations()
    names = [d.name for d in destinations]
    assert len(destinations) == len(SEED_DESTINATIONS)
    assert sorted(names) == sorted(d["name"] for d in SEED_DESTINATIONS)


@pytest.mark.asyncio
async def test_seed_is_skipped_when_any_destination_exists(storage):
    await storage.create_destination(name="Leh", country="India")
    assert await storage.seed_destinations() == 0
    assert len(await storage.get_all_destinations()) == 1


@pytest.mark.asyncio
async def test_preferences_default_and_filter_by_user(storage):
    await storage.seed_destinations()
    asha = await make_user(storage, "asha")
    ravi = await make_user(storage, "ravi")

    pref = await storage.create_travel_preference(
        user_id=asha.id, destination_id=1, budget=50000,
        preferences={"pace": "slow", "interests": ["food", "temples"]},
    )
    await storage.create_travel_preference(user_id=ravi.id, additional_destination="Ladakh")

    assert pref.status == "pending"
    assert pref.travelers == 1
    assert pref.preferences["interests"] == ["food", "temples"]

    mine = await storage.get_travel_preferences_by_user_id(asha.id)
    assert [p.id for p in mine] == [pref.id]
    assert len(await storage.get_all_travel_preferences()) == 2


@pytest.mark.asyncio
async def test_packages_by_agency_and_preference(storage):
    traveler = await make_user(storage, "asha")
    owner = await make_user(storage, "ravi", role="agency")
    agency = await storage.create_agency(user_id=owner.id, company_name="Ravi Travels")
    pref = await storage.create_travel_preference(user_id=traveler.id, travelers=2)

    offer = await storage.create_travel_package(
        agency_id=agency.id, preference_id=pref.id, title="Kerala Backwaters", price=42000,
    )
    await storage.create_travel_package(agency_id=agency.id, title="Generic Goa", price=15000)

    assert offer.package_type == "standard"
    assert offer.price_per_person is True
    assert [p.id for p in await storage.get_travel_packages_by_preference_id(pref.id)] == [offer.id]
    assert len(await storage.get_travel_packages_by_agency_id(agency.id)) == 2


@pytest.mark.asyncio
async def test_messages_between_users_in_both_directions(storage):
    asha = await make_user(storage, "asha")
    ravi = await make_user(storage, "ravi")
    meera = await make_user(storage, "meera")

    first = await storage.create_message(sender_id=asha.id, receiver_id=ravi.id, content="Hi")
    second = await storage.create_message(sender_id=ravi.id, receiver_id=asha.id, content="Hello")
    await storage.create_message(sender_id=meera.id, receiver_id=asha.id, content="Unrelated")

    conversation = await storage.get_messages_between_users(asha.id, ravi.id)
    assert [m.id for m in conversation] == [first.id, second.id]
    assert len(await storage.get_messages_by_user_id(asha.id)) == 3
    assert first.read is False

    marked = await storage.mark_message_as_read(first.id)
    assert marked.read is True
    assert await storage.mark_message_as_read(999) is None


@pytest.mark.asyncio
async def test_get_users_by_ids(storage):
    asha = await make_user(storage, "asha")
    ravi = await make_user(storage, "ravi")
    await make_user(storage, "meera")

    users = await storage.get_users_by_ids([ravi.id, asha.id])
    assert [u.username for u in users] == ["asha", "ravi"]
    assert await storage.get_users_by_ids([]) == []


@pytest.mark.asyncio
async def test_value_too_large_for_column_is_a_constraint_violation(storage):
    user = await make_user(storage, "asha")
    with pytest.raises(ConstraintViolation):
        await storage.create_travel_preference(user_id=user.id, budget=2**63)

    pref = await storage.create_travel_preference(user_id=user.id, budget=1000)
    with pytest.raises(ConstraintViolation):
        await storage.update_travel_preference(pref.id, budget=2**63)
    assert (await storage.get_travel_preference(pref.id)).budget == 1000


@pytest.mark.asyncio
async def test_email_lookup_ignores_case(storage):
    user = await storage.create_user(
        username="bob", email="Bob@example.com", password="x", full_name="Bob",
    )
    assert (await storage.get_user_by_email("Bob@Example.COM")).id == user.id
    assert (await storage.get_user_by_email("bob@example.com")).id == user.id
