"""
Ownership-scoped CRUD shared by videos, tweets and comments.

Mutations put the owner check in the statement's WHERE clause, so a row that
does not exist and a row owned by someone else produce the same 404.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID
import math

from fastapi import status
from sqlalchemy import delete, update
from sqlalchemy.orm import Query, Session

from clipnest.utils.api_error import ApiError, not_found_or_unauthorized
from clipnest.utils.validators import parse_object_id

MAX_PAGE_SIZE = 100


@dataclass
class PageResult:
    """Rows of one page plus the numbers needed to render pagination."""
    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def clamp_paging(page: int, limit: int) -> tuple:
    """Normalise page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    return max(page, 1), min(max(limit, 1), MAX_PAGE_SIZE)


class OwnedResourceService:
    """Base service for resources that carry an immutable owner_id."""

    model = None
    kind = "Resource"

    # Wire name -> column attribute accepted as sortBy
    sort_columns: Dict[str, str] = {
        "createdAt": "created_at",
        "updatedAt": "updated_at",
    }

    def __init__(self, db: Session):
        self.db = db

    def parse_id(self, raw_id) -> UUID:
        return parse_object_id(raw_id, self.kind.lower())

    def get(self, raw_id):
        """Fetch one row by id, 404 when absent."""
        resource_id = self.parse_id(raw_id)
        obj = self.db.query(self.model).filter(self.model.id == resource_id).first()
        if not obj:
            raise ApiError(status.HTTP_404_NOT_FOUND, f"{self.kind} not found")
        return obj

    def get_owned(self, raw_id, owner_id: UUID):
        """Fetch one row only if the actor owns it."""
        resource_id = self.parse_id(raw_id)
        obj = self.db.query(self.model).filter(
            self.model.id == resource_id,
            self.model.owner_id == owner_id
        ).first()
        if not obj:
            raise not_found_or_unauthorized(self.kind)
        return obj

    def create(self, owner_id: UUID, **values):
        """Persist a new row owned by the actor and return it re-fetched."""
        obj = self.model(owner_id=owner_id, **values)
        self.db.add(obj)
        self.db.commit()
        return self.get(obj.id)

    def update_owned(self, raw_id, owner_id: UUID, values: Dict[str, Any]):
        """
        Apply values with a single UPDATE ... WHERE id AND owner_id.

        Raises:
            ApiError: 404 when no row matched
        """
        resource_id = self.parse_id(raw_id)
        values = dict(values, updated_at=datetime.utcnow())

        result = self.db.execute(
            update(self.model)
            .where(self.model.id == resource_id, self.model.owner_id == owner_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise not_found_or_unauthorized(self.kind)

        self.db.commit()
        self.db.expire_all()
        return self.get(resource_id)

    def delete_owned(self, raw_id, owner_id: UUID) -> UUID:
        """
        Delete the row and its dependents in one transaction.

        Dependents are removed first; if the owner-scoped delete matches
        nothing the whole transaction is rolled back.
        """
        resource_id = self.parse_id(raw_id)

        self.delete_dependents(resource_id)
        result = self.db.execute(
            delete(self.model)
            .where(self.model.id == resource_id, self.model.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            self.db.rollback()
            raise not_found_or_unauthorized(self.kind)

        self.db.commit()
        self.db.expire_all()
        return resource_id

    def delete_dependents(self, resource_id: UUID):
        """Hook for rows without a foreign key back to this resource (likes)."""

    def paginate(
        self,
        query: Query,
        page: int = 1,
        limit: int = 10,
        sort_by: Optional[str] = "createdAt",
        sort_type: Optional[str] = "desc"
    ) -> PageResult:
        """
        Sort and slice a query with offset (page-1)*limit.

        Unknown sort keys fall back to createdAt.
        """
        page, limit = clamp_paging(page, limit)
        column = getattr(self.model, self.sort_columns.get(sort_by or "", "created_at"))
        order = column.asc() if (sort_type or "").lower() == "asc" else column.desc()

        total = query.order_by(None).count()
        items = query.order_by(order, self.model.id).offset((page - 1) * limit).limit(limit).all()

        return PageResult(items=items, total=total, page=page, limit=limit)
