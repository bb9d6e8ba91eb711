"""Menu management on top of the menu repository and access rules."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

from pixiu import log
from pixiu.db.models import Menu


@contextmanager
def _log_errors() -> Iterator[None]:
    """Log any exception raised in the block and let it propagate."""
    try:
        yield
    except Exception as exc:
        log.logger.error("%s", exc)
        raise


class MenuService:
    """Creates, edits and removes menus, keeping access rules in step."""

    def __init__(self, factory: Any) -> None:
        self._factory = factory

    def create(self, obj: Menu) -> Menu:
        with _log_errors():
            return self._factory.menu().create(obj)

    def update(self, menu: Menu, mid: int) -> None:
        with _log_errors():
            self._factory.menu().update(menu, mid)

    def delete(self, mid: int) -> None:
        """Remove menu ``mid`` and the access rules for its path and method."""
        with _log_errors():
            menu = self._factory.menu().get(mid)
            self._factory.authentication().delete_role_permission(menu.url, menu.method)
            self._factory.menu().delete(mid)

    def get(self, mid: int) -> Menu:
        with _log_errors():
            return self._factory.menu().get(mid)

    def list(self) -> list[Menu]:
        with _log_errors():
            return self._factory.menu().list()

    def get_by_ids(self, mids: Iterable[int]) -> list[Menu]:
        with _log_errors():
            return self._factory.menu().get_by_ids(mids)

    def get_by_url_method(self, url: str, method: str) -> Optional[Menu]:
        return self._factory.menu().get_by_url_method(url, method)

    def exists(self, menu_id: int) -> bool:
        """Return True if menu ``menu_id`` can be read."""
        try:
            self._factory.menu().get(menu_id)
        except Exception as exc:
            log.logger.error("%s", exc)
            return False
        return True