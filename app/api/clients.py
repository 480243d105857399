from fastapi import APIRouter, Depends

from services import client_service
from services.access_control import CurrentUser
from services.snapshot import SnapshotStore

from ..db import get_session, get_store, route_guard
from ..schemas import ClientCreate, ClientRead, ClientUpdate

router = APIRouter(prefix="/clients", tags=["clients"], dependencies=[Depends(get_session)])

guard = route_guard("/bookings")


@router.get("/", response_model=list[ClientRead])
def read_clients(search: str = "", user: CurrentUser = Depends(guard)):
    return list(client_service.search_clients(search))


@router.post("/", response_model=ClientRead)
def add_client(
    client_in: ClientCreate,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    data = client_in.model_dump(exclude={"allow_duplicate"})
    client = client_service.add_client(allow_duplicate=client_in.allow_duplicate, **data)
    store.invalidate("clients")
    return client


@router.get("/{client_id}", response_model=ClientRead)
def read_client(client_id: int, user: CurrentUser = Depends(guard)):
    return client_service.require_client(client_id)


@router.put("/{client_id}", response_model=ClientRead)
def edit_client(
    client_id: int,
    client_in: ClientUpdate,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    client = client_service.require_client(client_id)
    client = client_service.update_client(client, **client_in.model_dump(exclude_none=True))
    store.invalidate("clients")
    return client


@router.delete("/{client_id}")
def remove_client(
    client_id: int,
    user: CurrentUser = Depends(guard),
    store: SnapshotStore = Depends(get_store),
):
    client_service.delete_client(client_id)
    store.invalidate("clients")
    return {"status": "deleted"}
