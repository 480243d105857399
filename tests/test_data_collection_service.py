import pytest

from services import data_collection_service as dcs


def test_add_toggle_and_progress(make_event, make_staff, make_assignment):
    event = make_event()
    member = make_staff()
    make_assignment(event, member)
    raw = dcs.add_item(event.id, "  Raw photos card A ", staff_id=member.id)
    dcs.add_item(event.id, "Drone footage")

    assert raw.item == "Raw photos card A"
    progress = dcs.collection_progress(event.id)
    assert (progress.items_received, progress.items_total) == (0, 2)
    assert (progress.staff_received, progress.staff_total) == (0, 1)
    assert progress.all_received is False

    row = dcs.toggle_item(raw.id, received_by="Manager")
    assert row.received is True
    assert row.received_by == "Manager"
    assert row.received_at is not None
    assert dcs.collection_progress(event.id).percentage == 33

    row = dcs.toggle_item(raw.id)
    assert row.received is False
    assert row.received_at is None
    assert row.received_by is None


def test_all_received(make_event):
    event = make_event()
    item = dcs.add_item(event.id, "Card")
    assert dcs.collection_progress(event.id).all_received is False
    dcs.toggle_item(item.id)
    progress = dcs.collection_progress(event.id)
    assert progress.all_received is True
    assert progress.percentage == 100


def test_empty_checklist_is_not_complete(make_event):
    progress = dcs.collection_progress(make_event().id)
    assert progress.all_received is False
    assert progress.percentage == 0


def test_add_item_validation(make_event):
    event = make_event()
    with pytest.raises(ValueError):
        dcs.add_item(event.id, "   ")
    with pytest.raises(LookupError):
        dcs.add_item(999, "Card")
    with pytest.raises(LookupError):
        dcs.add_item(event.id, "Card", staff_id=999)


def test_missing_item(in_memory_db):
    with pytest.raises(dcs.DataCollectionItemNotFoundError):
        dcs.toggle_item(1)
    assert dcs.delete_item(1) is False
