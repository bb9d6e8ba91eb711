"""Role-based access control with policies kept in the rules table."""

from __future__ import annotations

import re
import threading
from typing import Callable, Iterable, Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from pixiu.db.models import Menu, Rule

SessionFactory = Callable[[], Session]

SUPER_USER = "21220821"
_ATTRS = ("role", "path", "method", "v3", "v4", "v5")
_MAX_ROLE_DEPTH = 10
_PERMISSION_MENU_TYPES = (2, 3)

policy: Optional["Enforcer"] = None


def regex_match(key1: str, key2: str) -> bool:
    """Return True if the regular expression ``key2`` matches somewhere in ``key1``."""
    return re.search(key2, key1) is not None


def key_match2(key1: str, key2: str) -> bool:
    """Match path ``key1`` against pattern ``key2`` with ``/*`` and ``:name`` segments."""
    pattern = key2.replace("/*", "/.*")
    pattern = re.sub(r":[^/]+", "[^/]+", pattern)
    return regex_match(key1, "^" + pattern + "$")


def _matches(rule: Sequence[str], index: int, values: Sequence[str]) -> bool:
    return all(
        value == "" or (index + offset < len(rule) and rule[index + offset] == value)
        for offset, value in enumerate(values)
    )


class Enforcer:
    """Decides whether a subject may perform an action on a path.

    A request is allowed when the subject, directly or through its roles, holds
    a permission whose path matches by :func:`key_match2` and whose method
    matches by :func:`regex_match`; the super user is always allowed.
    """

    def __init__(self, session_factory: SessionFactory) -> None:
        self._session_factory = session_factory
        self._rules: dict[str, list[tuple[str, ...]]] = {"p": [], "g": []}
        self._lock = threading.RLock()

    def load_policy(self) -> None:
        """Replace the in-memory policy with the contents of the rules table."""
        with self._session_factory() as session:
            rows = list(session.scalars(select(Rule).order_by(Rule.id)))
        loaded: dict[str, list[tuple[str, ...]]] = {"p": [], "g": []}
        for row in rows:
            if row.ptype not in loaded:
                continue
            values = [getattr(row, attr) or "" for attr in _ATTRS]
            while values and values[-1] == "":
                values.pop()
            rule = tuple(values)
            if rule not in loaded[row.ptype]:
                loaded[row.ptype].append(rule)
        with self._lock:
            self._rules = loaded

    def enforce(self, sub: str, obj: str, act: str) -> bool:
        """Return True if ``sub`` may perform ``act`` on ``obj``."""
        if sub == SUPER_USER:
            return True
        with self._lock:
            permissions = list(self._rules["p"])
            subjects = self._roles_of(sub)
        return any(
            len(rule) >= 3
            and rule[0] in subjects
            and key_match2(obj, rule[1])
            and regex_match(act, rule[2])
            for rule in permissions
        )

    def add_role_for_user(self, user: str, role: str) -> bool:
        """Give ``user`` the role ``role``; False if it already had it."""
        return self._add("g", (user, role))

    def delete_roles_for_user(self, user: str) -> bool:
        """Remove every role of ``user``; False if it had none."""
        return self._remove_filtered("g", 0, (user,))

    def add_permission_for_user(self, user: str, *args: str) -> bool:
        """Grant ``user`` the permission ``args``; False if already granted."""
        return self._add("p", (user, *args))

    def delete_permissions_for_user(self, user: str) -> bool:
        """Remove every permission of ``user``; False if it had none."""
        return self._remove_filtered("p", 0, (user,))

    def delete_role(self, role: str) -> bool:
        """Remove ``role`` from all users and drop its permissions."""
        removed_links = self._remove_filtered("g", 1, (role,))
        removed_permissions = self._remove_filtered("p", 0, (role,))
        return removed_links or removed_permissions

    def delete_permission(self, *args: str) -> bool:
        """Remove the permission ``args`` from every subject holding it."""
        return self._remove_filtered("p", 1, args)

    def _roles_of(self, name: str) -> set[str]:
        found = {name}
        frontier = {name}
        for _ in range(_MAX_ROLE_DEPTH):
            following = {
                rule[1] for rule in self._rules["g"] if len(rule) >= 2 and rule[0] in frontier
            } - found
            if not following:
                break
            found |= following
            frontier = following
        return found

    def _add(self, ptype: str, rule: tuple[str, ...]) -> bool:
        with self._lock:
            if rule in self._rules[ptype]:
                return False
            with self._session_factory() as session, session.begin():
                session.add(Rule(ptype=ptype, **dict(zip(_ATTRS, rule))))
            self._rules[ptype].append(rule)
            return True

    def _remove_filtered(self, ptype: str, index: int, values: Sequence[str]) -> bool:
        conditions = [Rule.ptype == ptype]
        for offset, value in enumerate(values):
            if value:
                conditions.append(getattr(Rule, _ATTRS[index + offset]) == value)
        with self._lock:
            with self._session_factory() as session, session.begin():
                session.execute(delete(Rule).where(*conditions))
            kept = [rule for rule in self._rules[ptype] if not _matches(rule, index, values)]
            removed = len(kept) != len(self._rules[ptype])
            self._rules[ptype] = kept
            return removed


class AuthenticationRepository:
    """Assigns roles to users and menu permissions to roles."""

    def __init__(self, enforcer: Enforcer) -> None:
        self.enforcer = enforcer

    def add_role_for_user(self, user_id: int, role_ids: Iterable[int]) -> None:
        """Replace the roles of ``user_id`` with ``role_ids``.

        Nothing is assigned when the user held no roles to replace.
        """
        user = str(user_id)
        if not self.enforcer.delete_roles_for_user(user):
            return
        for role_id in role_ids:
            if not self.enforcer.add_role_for_user(user, str(role_id)):
                break

    def set_role_permission(self, role_id: int, menus: Iterable[Menu]) -> bool:
        """Replace the permissions of ``role_id`` with those of its button and hidden menus."""
        role = str(role_id)
        self.enforcer.delete_permissions_for_user(role)
        for menu in menus:
            if menu.menu_type in _PERMISSION_MENU_TYPES:
                if not self.enforcer.add_permission_for_user(role, menu.url, menu.method):
                    break
        return True

    def delete_role(self, role_id: int) -> None:
        """Drop the permissions of ``role_id`` and, if it had any, the role itself."""
        role = str(role_id)
        if not self.enforcer.delete_permissions_for_user(role):
            return
        self.enforcer.delete_role(role)

    def delete_role_permission(self, *args: str) -> None:
        """Remove the permission ``args`` (path, method) from every role."""
        self.enforcer.delete_permission(*args)


def init_policy_enforcer(session_factory: SessionFactory) -> Enforcer:
    """Create the shared enforcer, load its policy and return it."""
    global policy
    enforcer = Enforcer(session_factory)
    enforcer.load_policy()
    policy = enforcer
    return enforcer