"""Role management on top of the role repository and access rules."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from pixiu import log
from pixiu.core.menu import _log_errors
from pixiu.db.models import Menu, Role


class RoleService:
    """Creates, edits and removes roles and grants them menus."""

    def __init__(self, factory: Any) -> None:
        self._factory = factory

    def create(self, obj: Role) -> Role:
        with _log_errors():
            return self._factory.role().create(obj)

    def update(self, role: Role, rid: int) -> None:
        with _log_errors():
            self._factory.role().update(role, rid)

    def delete(self, rid: int) -> None:
        """Drop the access rules of role ``rid``, then the role and its links."""
        with _log_errors():
            self._factory.authentication().delete_role(rid)
            self._factory.role().delete(rid)

    def get(self, rid: int) -> list[Role]:
        with _log_errors():
            return self._factory.role().get(rid)

    def list(self) -> list[Role]:
        with _log_errors():
            return self._factory.role().list()

    def get_menus_by_role_id(self, rid: int) -> list[Menu]:
        with _log_errors():
            return self._factory.role().get_menus_by_role_id(rid)

    def set_role(self, role_id: int, menu_ids: Iterable[int]) -> None:
        """Grant ``role_id`` exactly the menus ``menu_ids`` and their access rules.

        If storing the menu links fails, the rules just added are removed again.
        """
        menu_ids = list(menu_ids)
        with _log_errors():
            menus = self._factory.menu().get_by_ids(menu_ids)
            if not self._factory.authentication().set_role_permission(role_id, menus):
                return
        try:
            self._factory.role().set_role(role_id, menu_ids)
        except Exception as exc:
            log.logger.error("%s", exc)
            auth = self._factory.authentication()
            for menu in menus:
                try:
                    auth.delete_role_permission(menu.url, menu.method)
                except Exception as cleanup_exc:
                    log.logger.error("%s", cleanup_exc)
                    break
            raise

    def get_roles_by_menu_id(self, menu_id: int) -> list[int]:
        with _log_errors():
            return self._factory.role().get_roles_by_menu_id(menu_id)

    def get_role_by_name(self, name: str) -> Optional[Role]:
        with _log_errors():
            return self._factory.role().get_role_by_name(name)

    def exists(self, name: str) -> bool:
        """Return True if a role called ``name`` exists."""
        try:
            role = self._factory.role().get_role_by_name(name)
        except Exception as exc:
            log.logger.error("%s", exc)
            return False
        if role is None:
            log.logger.error("role %s does not exist", name)
            return False
        return True