"""The application core: one object handing out every service."""

from __future__ import annotations

from typing import Any, Callable, Optional

from pixiu.clients import ClientRegistry
from pixiu.core.cicd import CicdService
from pixiu.core.cloud import CloudService
from pixiu.core.menu import MenuService
from pixiu.core.policy import PolicyService
from pixiu.core.role import RoleService

TIME_LAYOUT = "%Y-%m-%d %H:%M:%S.%f"

core_v1: Optional["Pixiu"] = None


class Pixiu:
    """Holds configuration, storage and drivers, and builds services on them."""

    def __init__(
        self,
        config: Any,
        factory: Any,
        cicd_driver: Any = None,
        clients: Optional[ClientRegistry] = None,
        client_builder: Optional[Callable[[bytes], Any]] = None,
    ) -> None:
        self.config = config
        self.factory = factory
        self.cicd_driver = cicd_driver
        self.clients = clients if clients is not None else ClientRegistry()
        self.client_builder = client_builder

    def cicd(self) -> CicdService:
        return CicdService(self.cicd_driver)

    def cloud(self) -> CloudService:
        """Return cluster operations; every call shares the same client registry."""
        return CloudService(self.factory, self.clients, self.client_builder)

    def role(self) -> RoleService:
        return RoleService(self.factory)

    def menu(self) -> MenuService:
        return MenuService(self.factory)

    def policy(self) -> PolicyService:
        return PolicyService(self.factory)


def setup(config: Any, factory: Any, cicd_driver: Any = None) -> Pixiu:
    """Create the shared application core and return it."""
    global core_v1
    core_v1 = Pixiu(config, factory, cicd_driver)
    return core_v1