import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pixiu.core.role import RoleService
from pixiu.db.authentication import Enforcer
from pixiu.db.factory import DaoFactory
from pixiu.db.models import Menu, Role, init_db
from pixiu.errors import RecordNotUpdated


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'role.db'}")
    init_db(engine)
    yield sessionmaker(bind=engine, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def enforcer(session_factory):
    result = Enforcer(session_factory)
    result.load_policy()
    return result


@pytest.fixture
def factory(session_factory, enforcer):
    return DaoFactory(session_factory, enforcer)


@pytest.fixture
def service(factory):
    return RoleService(factory)


class _FailingRoles:
    def set_role(self, role_id, menu_ids):
        raise RuntimeError("storage unavailable")


class _FailingRoleFactory:
    def __init__(self, inner):
        self._inner = inner

    def menu(self):
        return self._inner.menu()

    def authentication(self):
        return self._inner.authentication()

    def role(self):
        return _FailingRoles()


def test_create_and_get_tree(service):
    parent = service.create(Role(name="admin"))
    child = service.create(Role(name="ops", parent_id=parent.id))
    tree = service.get(parent.id)
    assert [r.id for r in tree] == [parent.id]
    assert [r.id for r in tree[0].children] == [child.id]


def test_list(service):
    a = service.create(Role(name="a"))
    b = service.create(Role(name="b"))
    assert sorted(r.id for r in service.list()) == sorted([a.id, b.id])


def test_update_and_stale_update(service):
    created = service.create(Role(name="admin"))
    first = service.get(created.id)[0]
    second = service.get(created.id)[0]
    first.memo = "changed"
    service.update(first, created.id)
    assert service.get(created.id)[0].memo == "changed"
    second.memo = "other"
    with pytest.raises(RecordNotUpdated):
        service.update(second, created.id)


def test_set_role_grants_menus_and_rules(service, factory, enforcer):
    role = service.create(Role(name="admin"))
    menu = factory.menu().create(
        Menu(name="users", url="/api/users", method="GET", menu_type=2)
    )
    service.set_role(role.id, [menu.id])
    assert [m.id for m in service.get_menus_by_role_id(role.id)] == [menu.id]
    assert service.get_roles_by_menu_id(menu.id) == [role.id]
    assert enforcer.enforce(str(role.id), "/api/users", "GET")


def test_set_role_removes_rules_when_storage_fails(factory, enforcer):
    menu = factory.menu().create(
        Menu(name="users", url="/api/users", method="GET", menu_type=2)
    )
    failing = RoleService(_FailingRoleFactory(factory))
    with pytest.raises(RuntimeError):
        failing.set_role(5, [menu.id])
    assert not enforcer.enforce("5", "/api/users", "GET")


def test_delete_removes_role_and_rules(service, factory, enforcer):
    role = service.create(Role(name="admin"))
    menu = factory.menu().create(
        Menu(name="users", url="/api/users", method="GET", menu_type=2)
    )
    service.set_role(role.id, [menu.id])
    enforcer.add_role_for_user("5", str(role.id))
    assert enforcer.enforce("5", "/api/users", "GET")
    service.delete(role.id)
    assert not enforcer.enforce("5", "/api/users", "GET")
    assert service.get(role.id) == []
    assert service.get_menus_by_role_id(role.id) == []


def test_get_role_by_name_and_exists(service):
    created = service.create(Role(name="admin"))
    assert service.get_role_by_name("admin").id == created.id
    assert service.get_role_by_name("nobody") is None
    assert service.exists("admin")
    assert not service.exists("nobody")