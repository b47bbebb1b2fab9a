import pytest

from app.models.records import (
    BLOOD_TYPE,
    DONOR,
    DONOR_TRANSACTION,
    HOSPITAL,
    KINDS,
    CastError,
    FieldSpec,
    FieldType,
    get_kind,
)
from app.services.record_store import RecordStore, RecordStoreError


def test_kind_registry():
    """Six kinds, each with its own collection and key field."""
    assert [kind.name for kind in KINDS] == [
        "BloodType", "Hospital", "Donor", "Recipient",
        "DonorTransaction", "RecipientTransaction"
    ]
    assert len({kind.collection for kind in KINDS}) == 6
    assert DONOR.key_field == "Donor_ID"
    assert DONOR.number_fields == ["Age"]
    assert DONOR_TRANSACTION.key_field == "Transaction_ID"
    assert get_kind("donor-transactions") is DONOR_TRANSACTION
    assert get_kind("Hospital") is HOSPITAL

    with pytest.raises(KeyError):
        get_kind("patients")


@pytest.mark.parametrize("value, expected", [
    (30, 30),
    (30.5, 30.5),
    ("30", 30.0),
    ("  18 ", 18.0),
    ("", None),
    ("   ", None),
    ("1e3", 1000.0),
    (".5", 0.5),
    ("+7", 7.0),
    (True, 1),
    (False, 0),
    (None, None),
])
def test_number_cast(value, expected):
    assert FieldSpec("Age", FieldType.NUMBER).cast(value) == expected


@pytest.mark.parametrize("value", ["thirty", "NaN", "inf", "1_000", "12abc", [30], {"years": 30}])
def test_number_cast_failure(value):
    with pytest.raises(CastError) as exc_info:
        FieldSpec("Age", FieldType.NUMBER).cast(value)

    assert exc_info.value.field == "Age"
    assert exc_info.value.expected == "Number"


@pytest.mark.parametrize("value, expected", [
    ("O+", "O+"),
    ("", ""),
    (42, "42"),
    (42.0, "42"),
    (4.5, "4.5"),
    (True, "true"),
    (False, "false"),
])
def test_string_cast(value, expected):
    assert FieldSpec("Name").cast(value) == expected


@pytest.mark.parametrize("value", [["a"], {"first": "Jane"}])
def test_string_cast_failure(value):
    with pytest.raises(CastError):
        FieldSpec("Name").cast(value)


def test_kind_cast_drops_undeclared_and_absent_fields():
    record = DONOR.cast({
        "Donor_ID": "D1",
        "Name": None,
        "Age": "",
        "Nickname": "JJ",
        "_id": "abc"
    })

    assert record == {"Donor_ID": "D1"}


@pytest.mark.asyncio
async def test_create_then_list(test_session):
    store = RecordStore(test_session, BLOOD_TYPE)

    created = await store.create({"Blood_Type_ID": "BT1", "Name": "O+"})

    assert created["Blood_Type_ID"] == "BT1"
    assert created["Name"] == "O+"
    assert len(created["_id"]) == 32

    assert await store.list() == [created]
    assert await store.count() == 1


@pytest.mark.asyncio
async def test_list_empty(test_session):
    store = RecordStore(test_session, HOSPITAL)

    assert await store.list() == []
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_integral_numbers_listed_as_int(test_session):
    store = RecordStore(test_session, DONOR)

    await store.create({"Donor_ID": "D1", "Age": "25"})
    await store.create({"Donor_ID": "D2", "Age": 19.5})

    ages = [record["Age"] for record in await store.list()]
    assert ages == [25, 19.5]
    assert isinstance(ages[0], int)


@pytest.mark.asyncio
async def test_duplicate_keys_are_stored(test_session):
    store = RecordStore(test_session, DONOR)

    first = await store.create({"Donor_ID": "D1", "Name": "A"})
    second = await store.create({"Donor_ID": "D1", "Name": "B"})

    assert first["_id"] != second["_id"]
    assert await store.count() == 2


@pytest.mark.asyncio
async def test_cast_failure_raises_store_error(test_session):
    store = RecordStore(test_session, DONOR)

    with pytest.raises(RecordStoreError) as exc_info:
        await store.create({"Donor_ID": "D1", "Age": "old"})

    assert exc_info.value.message == "Failed to add donor"
    assert exc_info.value.operation == "create"
    assert isinstance(exc_info.value.cause, CastError)
    assert await store.count() == 0


@pytest.mark.asyncio
async def test_store_fault_raises_store_error(broken_session):
    store = RecordStore(broken_session, HOSPITAL)

    with pytest.raises(RecordStoreError) as exc_info:
        await store.create({"Hospital_ID": "H1"})

    assert exc_info.value.message == "Failed to add hospital"
    broken_session.rollback.assert_awaited_once()

    with pytest.raises(RecordStoreError) as exc_info:
        await store.list()

    assert exc_info.value.message == "Failed to fetch hospitals"
