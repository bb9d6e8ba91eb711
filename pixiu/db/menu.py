"""Storage of menus and buttons, returned as parent/child trees."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, Optional

from sqlalchemy import delete, inspect, or_, select, update
from sqlalchemy.orm import Session

from pixiu.db.models import Menu, RoleMenu
from pixiu.errors import RecordNotFound, RecordNotUpdated

SessionFactory = Callable[[], Session]

_SYSTEM_FIELDS = frozenset({"id", "gmt_create", "gmt_modified", "resource_version"})


def _versioned_update(
    session_factory: SessionFactory, model: type, obj: Any, object_id: int
) -> None:
    """Write the non-empty fields of ``obj`` to row ``object_id`` under optimistic locking.

    Only fields holding something other than None, 0 or "" are written. The row
    must still carry the version held by ``obj``; the version is then raised by one.
    """
    current = obj.resource_version or 0
    now = datetime.now()
    obj.resource_version = current + 1
    obj.gmt_modified = now

    values: dict[str, Any] = {}
    for attr in inspect(model).column_attrs:
        if attr.key in _SYSTEM_FIELDS:
            continue
        value = getattr(obj, attr.key)
        if value not in (None, 0, ""):
            values[attr.key] = value
    values["gmt_modified"] = now
    values["resource_version"] = current + 1

    conditions = [model.id == object_id, model.resource_version == current]
    if obj.id:
        conditions.append(model.id == obj.id)

    with session_factory() as session:
        result = session.execute(
            update(model)
            .where(*conditions)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        session.commit()
    if result.rowcount == 0:
        raise RecordNotUpdated("update failed")


def build_menu_tree(menus: Iterable[Menu], pid: int) -> list[Menu]:
    """Return the menus whose parent is ``pid``, each with its descendants as children."""
    menus = list(menus)
    tree = []
    for node in menus:
        if node.parent_id == pid:
            node.children = build_menu_tree(menus, node.id)
            tree.append(node)
    return tree


class MenuRepository:
    """Create, read, update and delete rows of the menus table."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def create(self, obj: Menu) -> Menu:
        """Insert ``obj`` and return it with its id filled in."""
        with self._session_factory() as session:
            session.add(obj)
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
        return obj

    def update(self, obj: Menu, mid: int) -> None:
        """Update menu ``mid`` from the non-empty fields of ``obj``."""
        _versioned_update(self._session_factory, Menu, obj, mid)

    def delete(self, mid: int) -> None:
        """Remove menu ``mid``, its direct children and its role links in one transaction."""
        with self._session_factory() as session, session.begin():
            session.execute(delete(RoleMenu).where(RoleMenu.menu_id == mid))
            session.execute(delete(Menu).where(or_(Menu.id == mid, Menu.parent_id == mid)))

    def get(self, mid: int) -> Menu:
        """Return menu ``mid`` or raise RecordNotFound."""
        with self._session_factory() as session:
            obj = session.scalars(
                select(Menu).where(Menu.id == mid).order_by(Menu.id).limit(1)
            ).first()
        if obj is None:
            raise RecordNotFound(f"menu {mid} not found")
        return obj

    def list(self) -> list[Menu]:
        """Return all menus as a tree of top-level entries."""
        with self._session_factory() as session:
            menus = list(session.scalars(select(Menu).order_by(Menu.id)))
        return build_menu_tree(menus, 0)

    def get_by_ids(self, mids: Iterable[int]) -> list[Menu]:
        """Return the menus whose ids are in ``mids``."""
        with self._session_factory() as session:
            return list(
                session.scalars(select(Menu).where(Menu.id.in_(list(mids))).order_by(Menu.id))
            )

    def get_by_url_method(self, url: str, method: str) -> Optional[Menu]:
        """Return the menu for ``url`` and ``method``, or None if there is none."""
        with self._session_factory() as session:
            return session.scalars(
                select(Menu)
                .where(Menu.url == url, Menu.method == method)
                .order_by(Menu.id)
                .limit(1)
            ).first()