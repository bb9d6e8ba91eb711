"""Storage of roles and of the menus each role may use."""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.orm import Session

from pixiu.db.menu import _versioned_update, build_menu_tree
from pixiu.db.models import Menu, Role, RoleMenu, UserRole
from pixiu.errors import RecordNotFound

SessionFactory = Callable[[], Session]


def build_role_tree(roles: Iterable[Role], pid: int) -> list[Role]:
    """Return the roles whose parent is ``pid``, each with its descendants as children."""
    roles = list(roles)
    tree = []
    for node in roles:
        if node.parent_id == pid:
            node.children = build_role_tree(roles, node.id)
            tree.append(node)
    return tree


class RoleRepository:
    """Create, read, update and delete roles and their menu assignments."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def create(self, obj: Role) -> Role:
        """Insert ``obj`` and return it with its id filled in."""
        with self._session_factory() as session:
            session.add(obj)
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
        return obj

    def update(self, obj: Role, rid: int) -> None:
        """Update role ``rid`` from the non-empty fields of ``obj``."""
        _versioned_update(self._session_factory, Role, obj, rid)

    def delete(self, rid: int) -> None:
        """Remove role ``rid``, its direct children, its menu links and user bindings."""
        with self._session_factory() as session, session.begin():
            role_ids = list(
                session.scalars(select(Role.id).where(or_(Role.id == rid, Role.parent_id == rid)))
            )
            session.execute(delete(RoleMenu).where(RoleMenu.role_id == rid))
            session.execute(delete(Role).where(or_(Role.id == rid, Role.parent_id == rid)))
            session.execute(delete(UserRole).where(UserRole.role_id.in_(role_ids + [rid])))

    def get(self, rid: int) -> list[Role]:
        """Return role ``rid`` with its direct children, highest sequence first."""
        with self._session_factory() as session:
            roles = list(
                session.scalars(
                    select(Role)
                    .where(or_(Role.id == rid, Role.parent_id == rid))
                    .order_by(Role.sequence.desc(), Role.id)
                )
            )
        return build_role_tree(roles, 0)

    def list(self) -> list[Role]:
        """Return all roles as a tree of top-level entries."""
        with self._session_factory() as session:
            roles = list(session.scalars(select(Role).order_by(Role.id)))
        return build_role_tree(roles, 0)

    def get_menus_by_role_id(self, rid: int) -> list[Menu]:
        """Return the menus assigned to role ``rid`` as a tree."""
        with self._session_factory() as session:
            menus = list(
                session.scalars(
                    select(Menu)
                    .join(RoleMenu, Menu.id == RoleMenu.menu_id)
                    .where(RoleMenu.role_id == rid)
                    .distinct()
                    .order_by(Menu.parent_id.asc(), Menu.sequence.asc(), Menu.id)
                )
            )
        return build_menu_tree(menus, 0)

    def set_role(self, role_id: int, menu_ids: Iterable[int]) -> None:
        """Replace the menus of ``role_id`` with ``menu_ids`` in one transaction."""
        with self._session_factory() as session, session.begin():
            session.execute(delete(RoleMenu).where(RoleMenu.role_id == role_id))
            session.add_all(RoleMenu(role_id=role_id, menu_id=mid) for mid in menu_ids)

    def get_roles_by_menu_id(self, menu_id: int) -> list[int]:
        """Return the ids of the roles that may use menu ``menu_id``."""
        with self._session_factory() as session:
            return list(
                session.scalars(
                    select(RoleMenu.role_id)
                    .where(RoleMenu.menu_id == menu_id)
                    .order_by(RoleMenu.id)
                )
            )

    def get_role_by_name(self, name: str) -> Optional[Role]:
        """Return the role called ``name``, or None if there is none."""
        with self._session_factory() as session:
            return session.scalars(
                select(Role).where(Role.name == name).order_by(Role.id).limit(1)
            ).first()

    def _get_one(self, rid: int) -> Role:
        with self._session_factory() as session:
            obj = session.get(Role, rid)
        if obj is None:
            raise RecordNotFound(f"role {rid} not found")
        return obj