import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from pixiu.db.menu import MenuRepository
from pixiu.db.models import Menu, Role, UserRole, init_db
from pixiu.db.role import RoleRepository, build_role_tree
from pixiu.errors import RecordNotUpdated


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'pixiu.db'}")
    init_db(engine)
    yield sessionmaker(engine)
    engine.dispose()


@pytest.fixture
def repo(session_factory):
    return RoleRepository(session_factory)


@pytest.fixture
def menus(session_factory):
    return MenuRepository(session_factory)


def test_create_and_get_returns_tree_sorted_by_sequence(repo):
    root = repo.create(Role(name="admin", sequence=1))
    repo.create(Role(name="low", parent_id=root.id, sequence=1))
    repo.create(Role(name="high", parent_id=root.id, sequence=5))

    tree = repo.get(root.id)
    assert [r.name for r in tree] == ["admin"]
    assert [r.name for r in tree[0].children] == ["high", "low"]


def test_list_returns_all_roots(repo):
    a = repo.create(Role(name="a"))
    repo.create(Role(name="a-child", parent_id=a.id))
    repo.create(Role(name="b"))
    tree = repo.list()
    assert [r.name for r in tree] == ["a", "b"]
    assert [r.name for r in tree[0].children] == ["a-child"]


def test_update_and_stale_update(repo):
    role = repo.create(Role(name="ops", memo="keep"))
    repo.update(Role(name="operators"), role.id)
    fetched = repo.get_role_by_name("operators")
    assert fetched.id == role.id
    assert fetched.memo == "keep"
    with pytest.raises(RecordNotUpdated):
        repo.update(Role(name="again", resource_version=0), role.id)


def test_delete_removes_children_menus_and_user_bindings(repo, menus, session_factory):
    root = repo.create(Role(name="root"))
    repo.create(Role(name="child", parent_id=root.id))
    other = repo.create(Role(name="other"))
    menu = menus.create(Menu(name="m"))
    repo.set_role(root.id, [menu.id])
    with session_factory() as session:
        session.add(UserRole(user_id=3, role_id=root.id))
        session.add(UserRole(user_id=3, role_id=other.id))
        session.commit()

    repo.delete(root.id)

    assert [r.name for r in repo.list()] == ["other"]
    assert repo.get_roles_by_menu_id(menu.id) == []
    with session_factory() as session:
        remaining = list(session.scalars(select(UserRole.role_id)))
    assert remaining == [other.id]


def test_set_role_replaces_menus(repo, menus):
    role = repo.create(Role(name="dev"))
    m1 = menus.create(Menu(name="m1"))
    m2 = menus.create(Menu(name="m2", parent_id=m1.id))
    m3 = menus.create(Menu(name="m3"))

    repo.set_role(role.id, [m1.id, m2.id])
    tree = repo.get_menus_by_role_id(role.id)
    assert [m.name for m in tree] == ["m1"]
    assert [m.name for m in tree[0].children] == ["m2"]
    assert repo.get_roles_by_menu_id(m1.id) == [role.id]

    repo.set_role(role.id, [m3.id])
    assert repo.get_roles_by_menu_id(m1.id) == []
    assert [m.name for m in repo.get_menus_by_role_id(role.id)] == ["m3"]


def test_get_role_by_name_missing_is_none(repo):
    repo.create(Role(name="present"))
    assert repo.get_role_by_name("absent") is None
    assert repo.get_role_by_name("present").name == "present"


def test_build_role_tree_without_database():
    roles = [
        Role(id=1, parent_id=0, name="a"),
        Role(id=2, parent_id=1, name="b"),
        Role(id=3, parent_id=2, name="c"),
    ]
    tree = build_role_tree(roles, 0)
    assert [r.name for r in tree] == ["a"]
    assert [r.name for r in tree[0].children[0].children] == ["c"]
    assert [r.name for r in build_role_tree(roles, 2)] == ["c"]