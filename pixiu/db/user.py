"""Storage of users, their roles and the menus those roles open."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Iterable, Mapping

from sqlalchemy import delete, or_, select, update
from sqlalchemy.orm import Session

from pixiu.db.menu import build_menu_tree
from pixiu.db.models import Menu, Role, RoleMenu, User, UserRole
from pixiu.db.role import build_role_tree
from pixiu.errors import RecordNotFound, RecordNotUpdated

SessionFactory = Callable[[], Session]


class UserRepository:
    """Create, read, update and delete users and their role assignments."""

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory

    def create(self, obj: User) -> User:
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

    def update(self, uid: int, resource_version: int, updates: Mapping[str, Any]) -> None:
        """Apply ``updates`` if the user's version equals ``resource_version``.

        Raises RecordNotUpdated when no row matched.
        """
        values = dict(updates)
        values["gmt_modified"] = datetime.now()
        values["resource_version"] = resource_version + 1
        with self._session_factory() as session:
            result = session.execute(
                update(User)
                .where(User.id == uid, User.resource_version == resource_version)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            session.commit()
        if result.rowcount == 0:
            raise RecordNotUpdated()

    def delete(self, uid: int) -> None:
        """Remove user ``uid``; a missing row is not an error."""
        with self._session_factory() as session:
            session.execute(delete(User).where(User.id == uid))
            session.commit()

    def get(self, uid: int) -> User:
        """Return user ``uid`` or raise RecordNotFound."""
        return self._first(User.id == uid, f"user {uid} not found")

    def list(self) -> list[User]:
        """Return every user."""
        with self._session_factory() as session:
            return list(session.scalars(select(User).order_by(User.id)))

    def get_by_name(self, name: str) -> User:
        """Return the user called ``name`` or raise RecordNotFound."""
        return self._first(User.name == name, f"user {name!r} not found")

    def get_roles_by_user(self, uid: int) -> list[Role]:
        """Return the user's roles and their direct children as a tree."""
        assigned = select(UserRole.role_id).where(UserRole.user_id == uid)
        with self._session_factory() as session:
            roles = list(
                session.scalars(
                    select(Role)
                    .where(or_(Role.id.in_(assigned), Role.parent_id.in_(assigned)))
                    .order_by(Role.id.asc(), Role.sequence.desc())
                )
            )
        return build_role_tree(roles, 0)

    def set_user_roles(self, uid: int, role_ids: Iterable[int]) -> None:
        """Replace the roles of user ``uid`` with ``role_ids`` in one transaction."""
        with self._session_factory() as session, session.begin():
            session.execute(delete(UserRole).where(UserRole.user_id == uid))
            session.add_all(UserRole(user_id=uid, role_id=rid) for rid in role_ids)

    def get_buttons_by_user_id(self, uid: int, menu_id: int) -> list[Menu]:
        """Return the enabled buttons under ``menu_id`` that the user's roles allow."""
        with self._session_factory() as session:
            return list(
                session.scalars(
                    self._menus_for_user(uid)
                    .where(Menu.menu_type == 2, Menu.status == 1, Menu.parent_id == menu_id)
                    .order_by(Menu.parent_id.asc(), Menu.sequence.asc(), Menu.id)
                )
            )

    def get_left_menus_by_user_id(self, uid: int) -> list[Menu]:
        """Return the enabled side menus that the user's roles allow, as a tree."""
        with self._session_factory() as session:
            menus = list(
                session.scalars(
                    self._menus_for_user(uid)
                    .where(Menu.menu_type == 1, Menu.status == 1)
                    .order_by(Menu.parent_id.asc(), Menu.sequence.desc(), Menu.id)
                )
            )
        return build_menu_tree(menus, 0)

    @staticmethod
    def _menus_for_user(uid: int):
        return (
            select(Menu)
            .join(RoleMenu, Menu.id == RoleMenu.menu_id)
            .join(UserRole, UserRole.role_id == RoleMenu.role_id)
            .where(UserRole.user_id == uid)
            .distinct()
        )

    def _first(self, condition, message: str) -> User:
        with self._session_factory() as session:
            obj = session.scalars(
                select(User).where(condition).order_by(User.id).limit(1)
            ).first()
        if obj is None:
            raise RecordNotFound(message)
        return obj