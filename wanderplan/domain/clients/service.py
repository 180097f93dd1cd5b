"""Client service - Business logic for CRM clients"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...errors import api_error
from ...models import User
from ...models_crm import CrmClient
from ...shared.pagination import clamp_limit, total_pages
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

FIELD_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "phone": "phone",
    "status": "status",
    "source": "source",
    "tags": "tags",
    "notes": "notes",
}


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClientRepository()

    def get_owned_client(self, client_id: str, user: User) -> CrmClient:
        """Load a client and make sure it belongs to the caller"""
        client = self.repo.get_client(self.db, client_id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        if client.user_id != user.id:
            raise HTTPException(status_code=403, detail="You do not have access to this client")
        return client

    def list_clients(
        self,
        user: User,
        page: int,
        limit: int,
        search: Optional[str],
        status: Optional[str],
        tags: list[str],
        sort: str,
        order: str,
    ) -> dict:
        clients, total = self.repo.search_clients(
            self.db, user.id, page, limit, search, status, tags, sort, order
        )
        return {
            "clients": clients,
            "total": total,
            "page": page,
            "limit": clamp_limit(limit),
            "totalPages": total_pages(total, limit),
        }

    def create_client(self, data: ClientCreate, user: User) -> CrmClient:
        if self.repo.get_by_email(self.db, user.id, data.email):
            raise api_error(409, "A client with this email address already exists", code="CONFLICT")

        client = self.repo.create_client(
            self.db,
            user.id,
            first_name=data.firstName,
            last_name=data.lastName,
            email=data.email,
            phone=data.phone or None,
            status=data.status,
            source=data.source or None,
            tags=data.tags,
            notes=data.notes or None,
        )
        logger.info(f"✅ CRM client {client.id} created for user {user.id}")
        return client

    def update_client(self, client_id: str, data: ClientUpdate, user: User) -> CrmClient:
        client = self.get_owned_client(client_id, user)
        updates = data.model_dump(exclude_unset=True)

        if updates.get("email") and updates["email"] != client.email:
            existing = self.repo.get_by_email(self.db, user.id, updates["email"])
            if existing and existing.id != client.id:
                raise api_error(
                    409, "A client with this email address already exists", code="CONFLICT"
                )

        # firstName, lastName, email and status are required columns
        required = {"firstName", "lastName", "email", "status"}
        changes = {
            FIELD_MAP[key]: value
            for key, value in updates.items()
            if key in FIELD_MAP and not (key in required and value is None)
        }
        if "tags" in changes and changes["tags"] is None:
            changes["tags"] = []

        client = self.repo.update_client(self.db, client, **changes)
        logger.info(f"✅ CRM client {client_id} updated")
        return client

    def delete_client(self, client_id: str, user: User) -> None:
        client = self.get_owned_client(client_id, user)
        invoices, proposals = self.repo.count_documents(self.db, client.id)
        if invoices or proposals:
            raise api_error(
                409,
                "Cannot delete a client with existing invoices or proposals",
                code="CONFLICT",
                details={"invoices": invoices, "proposals": proposals},
            )
        self.repo.delete_client(self.db, client)
        logger.info(f"🗑️ CRM client {client_id} deleted by {user.id}")
