"""Database tables for clouds, users, roles, menus and access rules."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, Index, Integer, SmallInteger, String, Text, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base shared by every table of the application."""


class _ModelMixin:
    """Identity, timestamps and optimistic-locking version common to all tables."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gmt_create: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    gmt_modified: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resource_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class _TreeNode:
    """Gives a row an in-memory ``children`` list that is never stored."""

    @property
    def children(self) -> list:
        return self.__dict__.setdefault("_children", [])

    @children.setter
    def children(self, value) -> None:
        self.__dict__["_children"] = list(value)


class Cloud(_ModelMixin, Base):
    """A registered Kubernetes cluster."""

    __tablename__ = "clouds"
    __table_args__ = (Index("idx_clouds_name", "name", unique=True),)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    status: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    cloud_type: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    kube_version: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    kube_config: Mapped[str] = mapped_column(Text, nullable=False, default="")
    node_number: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    resources: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extension: Mapped[str] = mapped_column(Text, nullable=False, default="")


class User(_ModelMixin, Base):
    """An account that may sign in."""

    __tablename__ = "users"
    __table_args__ = (Index("idx_users_name", "name", unique=True),)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    password: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    role: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    extension: Mapped[str] = mapped_column(Text, nullable=False, default="")


class Menu(_TreeNode, _ModelMixin, Base):
    """A menu entry or button; ``menu_type`` 1 is a side menu, 2 a button, 3 hidden."""

    __tablename__ = "menus"

    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    memo: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    url: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    menu_type: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    icon: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    method: Mapped[str] = mapped_column(String(32), nullable=False, default="")


class RoleMenu(_ModelMixin, Base):
    """Links a role to a menu it may use."""

    __tablename__ = "role_menus"

    role_id: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_id: Mapped[int] = mapped_column(Integer, nullable=False)


class Role(_TreeNode, _ModelMixin, Base):
    """A role; ``status`` 0 means disabled and 1 enabled."""

    __tablename__ = "roles"

    memo: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    sequence: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    parent_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)


class Rule(_ModelMixin, Base):
    """An access-control policy line: role, path and method in columns v0 to v2."""

    __tablename__ = "rules"

    ptype: Mapped[str] = mapped_column("ptype", String(100), nullable=False, default="")
    role: Mapped[str] = mapped_column("v0", String(100), nullable=False, default="")
    path: Mapped[str] = mapped_column("v1", String(100), nullable=False, default="")
    method: Mapped[str] = mapped_column("v2", String(100), nullable=False, default="")
    v3: Mapped[str] = mapped_column("v3", String(100), nullable=False, default="")
    v4: Mapped[str] = mapped_column("v4", String(100), nullable=False, default="")
    v5: Mapped[str] = mapped_column("v5", String(100), nullable=False, default="")


class UserRole(_ModelMixin, Base):
    """Links a user to one of their roles."""

    __tablename__ = "user_roles"

    user_id: Mapped[int] = mapped_column(Integer, nullable=False)
    role_id: Mapped[int] = mapped_column(Integer, nullable=False)


def _stamp_create(mapper, connection, target) -> None:
    now = datetime.now()
    target.gmt_create = now
    target.gmt_modified = now


def _stamp_update(mapper, connection, target) -> None:
    target.gmt_modified = datetime.now()


for _cls in (Menu, RoleMenu, Role, Rule, UserRole):
    event.listen(_cls, "before_insert", _stamp_create)
    event.listen(_cls, "before_update", _stamp_update)


def init_db(engine: Engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)


__all__: List[str] = [
    "Base",
    "Cloud",
    "User",
    "Menu",
    "RoleMenu",
    "Role",
    "Rule",
    "UserRole",
    "init_db",
]