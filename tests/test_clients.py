import pytest

from database.models import ClientPaymentRecord
from services import client_service as cs


def test_add_client_normalizes_fields(in_memory_db):
    client = cs.add_client(name="  Priya   Sharma ", contact_number="98765 43210", email="")

    assert client.name == "Priya Sharma"
    assert client.contact_number == "9876543210"
    assert client.email is None


def test_add_client_requires_name_and_phone(in_memory_db):
    with pytest.raises(ValueError, match="name"):
        cs.add_client(contact_number="9876543210")
    with pytest.raises(ValueError):
        cs.add_client(name="Priya", contact_number="123")
    with pytest.raises(ValueError, match="email"):
        cs.add_client(name="Priya", contact_number="9876543210", email="nope")


def test_duplicate_phone(in_memory_db, make_client):
    existing = make_client(contact_number="9876543210")

    with pytest.raises(cs.DuplicatePhoneError) as exc:
        cs.add_client(name="Other", contact_number="98765-43210")
    assert exc.value.existing.id == existing.id
    assert exc.value.contact_number == "9876543210"

    duplicate = cs.add_client(name="Other", contact_number="9876543210", allow_duplicate=True)
    assert duplicate.id != existing.id


def test_search_clients(in_memory_db, make_client):
    make_client(name="Asha Rao", contact_number="9000000001")
    make_client(name="Ravi Kumar", contact_number="9000000002")

    assert [c.name for c in cs.search_clients("Asha")] == ["Asha Rao"]
    assert [c.name for c in cs.search_clients("0002")] == ["Ravi Kumar"]
    assert [c.name for c in cs.search_clients()] == ["Asha Rao", "Ravi Kumar"]


def test_update_client(in_memory_db, make_client):
    client = make_client()
    cs.update_client(client, notes="VIP", contact_number="")

    client = cs.get_client_by_id(client.id)
    assert client.notes == "VIP"
    assert client.contact_number.startswith("98765")


def test_delete_client_guards(in_memory_db, make_client, make_booking):
    lonely = make_client()
    cs.delete_client(lonely.id)
    assert cs.get_client_by_id(lonely.id) is None
    with pytest.raises(cs.ClientNotFoundError):
        cs.delete_client(lonely.id)

    # SQLite может переиспользовать освободившийся id
    booking = make_booking()
    with pytest.raises(ValueError):
        cs.delete_client(booking.client_id)
    assert cs.get_client_by_id(booking.client_id) is not None


def test_delete_client_with_payments(in_memory_db, make_client):
    client = make_client()
    ClientPaymentRecord.create(client=client, amount=10, payment_date="2025-06-01")
    with pytest.raises(ValueError):
        cs.delete_client(client.id)


def test_require_client(in_memory_db):
    with pytest.raises(cs.ClientNotFoundError):
        cs.require_client(1)
