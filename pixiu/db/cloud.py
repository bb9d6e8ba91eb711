"""Storage of registered clusters."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Mapping

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session

from pixiu.db.models import Cloud
from pixiu.errors import RecordNotFound


class CloudRepository:
    """Create, read, update and delete rows of the clouds table."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def create(self, obj: Cloud) -> Cloud:
        """Insert ``obj`` with fresh timestamps and return it."""
        now = datetime.now()
        obj.gmt_create = now
        obj.gmt_modified = now
        with self._session_factory() as session:
            session.add(obj)
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
        return obj

    def update(self, cid: int, resource_version: int, updates: Mapping[str, Any]) -> None:
        """Apply ``updates`` to the cloud if its version still equals ``resource_version``."""
        values = dict(updates)
        values["gmt_modified"] = datetime.now()
        values["resource_version"] = resource_version + 1
        with self._session_factory() as session:
            session.execute(
                update(Cloud)
                .where(Cloud.id == cid, Cloud.resource_version == resource_version)
                .values(**values)
            )
            session.commit()

    def delete(self, cid: int) -> None:
        """Remove the cloud with id ``cid``; a missing row is not an error."""
        with self._session_factory() as session:
            session.execute(delete(Cloud).where(Cloud.id == cid))
            session.commit()

    def get(self, cid: int) -> Cloud:
        """Return the cloud with id ``cid`` or raise RecordNotFound."""
        with self._session_factory() as session:
            obj = session.scalars(
                select(Cloud).where(Cloud.id == cid).order_by(Cloud.id).limit(1)
            ).first()
        if obj is None:
            raise RecordNotFound(f"cloud {cid} not found")
        return obj

    def list(self) -> list[Cloud]:
        """Return every cloud."""
        with self._session_factory() as session:
            return list(session.scalars(select(Cloud).order_by(Cloud.id)))

    def page_list(self, page: int, page_size: int) -> tuple[list[Cloud], int]:
        """Return one page of clouds (pages start at 1) and the total count."""
        with self._session_factory() as session:
            items = list(
                session.scalars(
                    select(Cloud)
                    .order_by(Cloud.id)
                    .limit(page_size)
                    .offset((page - 1) * page_size)
                )
            )
        return items, self.count()

    def count(self) -> int:
        """Return the number of clouds."""
        with self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(Cloud)) or 0