"""Access-policy operations exposed to the application."""

from __future__ import annotations

from typing import Any, Iterable

from pixiu.core.menu import _log_errors
from pixiu.db.authentication import Enforcer
from pixiu.db.models import Menu


class PolicyService:
    """Assigns roles to users and permissions to roles."""

    def __init__(self, factory: Any) -> None:
        self._factory = factory

    def enforcer(self) -> Enforcer:
        """Return the shared policy enforcer."""
        return self._factory.authentication().enforcer

    def add_role_for_user(self, user_id: int, role_ids: Iterable[int]) -> None:
        with _log_errors():
            self._factory.authentication().add_role_for_user(user_id, role_ids)

    def set_role_permission(self, role_id: int, menus: Iterable[Menu]) -> bool:
        with _log_errors():
            return self._factory.authentication().set_role_permission(role_id, menus)

    def delete_role(self, role_id: int) -> None:
        with _log_errors():
            self._factory.authentication().delete_role(role_id)

    def delete_role_permission(self, *args: str) -> None:
        with _log_errors():
            self._factory.authentication().delete_role_permission(*args)