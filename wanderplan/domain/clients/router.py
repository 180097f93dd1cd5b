"""Client router - CRM client endpoints"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from ...shared.pagination import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ...shared.validators import parse_csv
from .schemas import ClientCreate, ClientStatus, ClientUpdate, client_response
from .service import ClientService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/crm/clients", tags=["CRM Clients"])


def get_client_service(db: Session = Depends(get_db)) -> ClientService:
    """Dependency injection for ClientService"""
    return ClientService(db)


@router.get("")
async def list_clients(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    q: Optional[str] = Query(None, max_length=200),
    status: Optional[ClientStatus] = Query(None),
    tags: Optional[str] = Query(None),
    sort: Literal["firstName", "lastName", "email", "createdAt"] = Query("createdAt"),
    order: Literal["asc", "desc"] = Query("desc"),
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    """List the agent's clients with search, filters and pagination"""
    result = service.list_clients(
        current_user, page, limit, q, status, parse_csv(tags), sort, order
    )
    result["clients"] = [client_response(c) for c in result["clients"]]
    return result


@router.post("", status_code=201)
async def create_client(
    data: ClientCreate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    client = service.create_client(data, current_user)
    return {"client": client_response(client)}


@router.get("/{client_id}")
async def get_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    return {"client": client_response(service.get_owned_client(client_id, current_user))}


@router.patch("/{client_id}")
async def update_client(
    client_id: str,
    data: ClientUpdate,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    client = service.update_client(client_id, data, current_user)
    return {"client": client_response(client)}


@router.delete("/{client_id}", status_code=204)
async def delete_client(
    client_id: str,
    current_user: User = Depends(get_current_user),
    service: ClientService = Depends(get_client_service),
):
    service.delete_client(client_id, current_user)
    return Response(status_code=204)


__all__ = ["router", "list_clients", "create_client", "get_client", "update_client", "delete_client"]
