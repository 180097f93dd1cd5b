"""Client repository - Database operations for CRM clients"""

from typing import Optional

from sqlalchemy import String, cast, or_
from sqlalchemy.orm import Session

from ...models_crm import CrmClient, Invoice, Proposal
from ...shared.pagination import paginate
from ...utils.sanitization import escape_like

SORT_COLUMNS = {
    "firstName": CrmClient.first_name,
    "lastName": CrmClient.last_name,
    "email": CrmClient.email,
    "createdAt": CrmClient.created_at,
}


class ClientRepository:
    """Repository for client database operations"""

    @staticmethod
    def search_clients(
        db: Session,
        user_id: str,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        status: Optional[str] = None,
        tags: Optional[list[str]] = None,
        sort: str = "createdAt",
        order: str = "desc",
    ) -> tuple[list[CrmClient], int]:
        """Search and filter the agent's clients"""
        query = db.query(CrmClient).filter(CrmClient.user_id == user_id)

        if search:
            pattern = f"%{escape_like(search)}%"
            query = query.filter(
                or_(
                    CrmClient.first_name.ilike(pattern, escape="\\"),
                    CrmClient.last_name.ilike(pattern, escape="\\"),
                    CrmClient.email.ilike(pattern, escape="\\"),
                    CrmClient.source.ilike(pattern, escape="\\"),
                )
            )

        if status:
            query = query.filter(CrmClient.status == status)

        if tags:
            # tags is a JSON list; any-of match against its serialized form
            tags_text = cast(CrmClient.tags, String)
            query = query.filter(
                or_(*[tags_text.like(f'%"{escape_like(t)}"%', escape="\\") for t in tags])
            )

        column = SORT_COLUMNS.get(sort, CrmClient.created_at)
        query = query.order_by(column.asc() if order == "asc" else column.desc())
        return paginate(query, page, limit)

    @staticmethod
    def get_client(db: Session, client_id: str) -> Optional[CrmClient]:
        return db.query(CrmClient).filter(CrmClient.id == client_id).first()

    @staticmethod
    def get_by_email(db: Session, user_id: str, email: str) -> Optional[CrmClient]:
        return (
            db.query(CrmClient)
            .filter(CrmClient.user_id == user_id, CrmClient.email == email)
            .first()
        )

    @staticmethod
    def create_client(db: Session, user_id: str, **client_data) -> CrmClient:
        client = CrmClient(user_id=user_id, **client_data)
        db.add(client)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def update_client(db: Session, client: CrmClient, **updates) -> CrmClient:
        for key, value in updates.items():
            setattr(client, key, value)
        db.commit()
        db.refresh(client)
        return client

    @staticmethod
    def count_documents(db: Session, client_id: str) -> tuple[int, int]:
        """(invoices, proposals) still attached to the client, ignoring soft-deleted ones"""
        invoices = (
            db.query(Invoice)
            .filter(Invoice.client_id == client_id, Invoice.deleted_at.is_(None))
            .count()
        )
        proposals = (
            db.query(Proposal)
            .filter(Proposal.client_id == client_id, Proposal.deleted_at.is_(None))
            .count()
        )
        return invoices, proposals

    @staticmethod
    def delete_client(db: Session, client: CrmClient) -> None:
        db.delete(client)
        db.commit()
