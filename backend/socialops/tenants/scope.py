"""Tenant-scoped data access.

Every query issued on behalf of a tenant member goes through `TenantScope`,
which ANDs ``model.tenant_id == <tenant>`` onto whatever the caller asks for.
Cross-tenant access exists only as `PlatformScope`, which can be obtained by
a SUPER_ADMIN principal and nobody else.
"""

import logging
from typing import Any, Iterable, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import ColumnElement, Select

from socialops.auth.principal import Principal
from socialops.core.errors import Forbidden, NotFound

logger = logging.getLogger(__name__)

MEDIA_LIST_LIMIT = 100


def _default_order(model) -> list:
    created_at = getattr(model, "created_at", None)
    return [created_at.desc()] if created_at is not None else []


def _apply_listing(stmt: Select, model, order_by, limit: int | None) -> Select:
    if order_by is None:
        order = _default_order(model)
    elif isinstance(order_by, (list, tuple)):
        order = list(order_by)
    else:
        order = [order_by]
    if order:
        stmt = stmt.order_by(*order)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


class TenantScope:
    def __init__(self, db: Session, tenant_id: str):
        if not tenant_id:
            raise ValueError("TenantScope requires a tenant id")
        self.db = db
        self.tenant_id = tenant_id

    @classmethod
    def for_principal(cls, db: Session, principal: Principal) -> "TenantScope":
        if not principal.tenant_id:
            raise NotFound("No tenant found")
        return cls(db, principal.tenant_id)

    def _criteria(self, model, criteria: Iterable[ColumnElement]) -> list:
        tenant_col = getattr(model, "tenant_id", None)
        if tenant_col is None:
            raise TypeError(f"{model.__name__} is not tenant-scoped")
        return [tenant_col == self.tenant_id, *criteria]

    def select(self, model, *criteria: ColumnElement) -> Select:
        return select(model).where(*self._criteria(model, criteria))

    def find_many(
        self,
        model,
        *criteria: ColumnElement,
        order_by: Any = None,
        limit: int | None = None,
    ) -> Sequence[Any]:
        stmt = _apply_listing(self.select(model, *criteria), model, order_by, limit)
        return self.db.execute(stmt).scalars().all()

    def find_first(self, model, *criteria: ColumnElement, order_by: Any = None):
        stmt = _apply_listing(self.select(model, *criteria), model, order_by, 1)
        return self.db.execute(stmt).scalars().first()

    def count(self, model, *criteria: ColumnElement) -> int:
        stmt = select(func.count()).select_from(model).where(*self._criteria(model, criteria))
        return int(self.db.execute(stmt).scalar_one() or 0)

    def create(self, model, **values):
        if values.get("tenant_id", self.tenant_id) != self.tenant_id:
            raise ValueError("Refusing to create a row for another tenant")
        values["tenant_id"] = self.tenant_id
        row = model(**values)
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def update(self, model, *criteria: ColumnElement, values: dict[str, Any]) -> list:
        if "tenant_id" in values:
            raise ValueError("tenant_id cannot be changed through a scoped update")
        rows = list(self.find_many(model, *criteria))
        for row in rows:
            for key, value in values.items():
                setattr(row, key, value)
            self.db.add(row)
        self.db.commit()
        for row in rows:
            self.db.refresh(row)
        return rows

    def upsert(
        self,
        model,
        match: dict[str, Any],
        *,
        create: dict[str, Any],
        update: dict[str, Any],
    ):
        criteria = [getattr(model, key) == value for key, value in match.items()]
        row = self.find_first(model, *criteria)
        if row is None:
            return self.create(model, **match, **create)
        rows = self.update(model, getattr(model, "id") == row.id, values=update)
        return rows[0]

    def delete_many(self, model, *criteria: ColumnElement) -> int:
        stmt = delete(model).where(*self._criteria(model, criteria))
        result = self.db.execute(stmt)
        self.db.commit()
        return int(result.rowcount or 0)


class PlatformScope:
    """Unscoped access for platform operators. Never the default path."""

    def __init__(self, db: Session, principal: Principal):
        if not principal.is_super_admin:
            raise Forbidden("Cross-tenant access requires SUPER_ADMIN")
        self.db = db
        self.principal = principal

    @classmethod
    def for_principal(cls, db: Session, principal: Principal) -> "PlatformScope":
        return cls(db, principal)

    def _audit(self, action: str, model) -> None:
        logger.info(
            "Cross-tenant %s on %s by user=%s",
            action,
            getattr(model, "__tablename__", model),
            self.principal.id,
        )

    def get(self, model, row_id: str):
        self._audit("read", model)
        return self.db.get(model, row_id)

    def find_many(
        self,
        model,
        *criteria: ColumnElement,
        order_by: Any = None,
        limit: int | None = None,
    ) -> Sequence[Any]:
        self._audit("read", model)
        stmt = _apply_listing(select(model).where(*criteria), model, order_by, limit)
        return self.db.execute(stmt).scalars().all()

    def count(self, model, *criteria: ColumnElement) -> int:
        self._audit("count", model)
        stmt = select(func.count()).select_from(model).where(*criteria)
        return int(self.db.execute(stmt).scalar_one() or 0)

    def execute(self, stmt, *, model):
        self._audit("query", model)
        return self.db.execute(stmt)

    def save(self, row):
        self._audit("write", type(row))
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    def delete_many(self, model, *criteria: ColumnElement, commit: bool = True) -> int:
        self._audit("delete", model)
        result = self.db.execute(delete(model).where(*criteria))
        if commit:
            self.db.commit()
        return int(result.rowcount or 0)
