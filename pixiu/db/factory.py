"""Single entry point to every repository of the application."""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.orm import Session

from pixiu.db import authentication as _authentication
from pixiu.db.authentication import AuthenticationRepository, Enforcer
from pixiu.db.cloud import CloudRepository
from pixiu.db.menu import MenuRepository
from pixiu.db.role import RoleRepository
from pixiu.db.user import UserRepository


class DaoFactory:
    """Hands out repositories that share one session factory and one enforcer."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        enforcer: Optional[Enforcer] = None,
    ) -> None:
        self._session_factory = session_factory
        self._enforcer = enforcer

    def user(self) -> UserRepository:
        return UserRepository(self._session_factory)

    def cloud(self) -> CloudRepository:
        return CloudRepository(self._session_factory)

    def role(self) -> RoleRepository:
        return RoleRepository(self._session_factory)

    def menu(self) -> MenuRepository:
        return MenuRepository(self._session_factory)

    def authentication(self) -> AuthenticationRepository:
        """Return the access-control repository, using the shared enforcer if none was given."""
        enforcer = self._enforcer or _authentication.policy
        if enforcer is None:
            raise RuntimeError("policy enforcer has not been initialised")
        return AuthenticationRepository(enforcer)