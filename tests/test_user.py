import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pixiu.db.menu import MenuRepository
from pixiu.db.models import Menu, Role, User, init_db
from pixiu.db.role import RoleRepository
from pixiu.db.user import UserRepository
from pixiu.errors import RecordNotFound, RecordNotUpdated, is_not_update

password = "password"


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'pixiu.db'}")
    init_db(engine)
    yield sessionmaker(engine)
    engine.dispose()


@pytest.fixture
def repo(session_factory):
    return UserRepository(session_factory)


@pytest.fixture
def roles(session_factory):
    return RoleRepository(session_factory)


@pytest.fixture
def menus(session_factory):
    return MenuRepository(session_factory)


def _user(repo, name):
    return repo.create(User(name=name, email=f"{name}@example.com", password=password))


def test_create_and_get(repo):
    user = _user(repo, "alice")
    assert user.gmt_create == user.gmt_modified
    fetched = repo.get(user.id)
    assert fetched.name == "alice"
    assert fetched.email == "alice@example.com"
    assert repo.get_by_name("alice").id == user.id


def test_get_missing_raises(repo):
    with pytest.raises(RecordNotFound):
        repo.get(42)
    with pytest.raises(RecordNotFound):
        repo.get_by_name("nobody")


def test_update_bumps_version_and_rejects_stale(repo):
    user = _user(repo, "bob")
    repo.update(user.id, user.resource_version, {"email": "new@example.com"})
    fetched = repo.get(user.id)
    assert fetched.email == "new@example.com"
    assert fetched.resource_version == user.resource_version + 1

    with pytest.raises(RecordNotUpdated) as info:
        repo.update(user.id, user.resource_version, {"email": "stale@example.com"})
    assert is_not_update(info.value)
    assert repo.get(user.id).email == "new@example.com"


def test_delete_and_list(repo):
    a = _user(repo, "a")
    _user(repo, "b")
    repo.delete(a.id)
    assert [u.name for u in repo.list()] == ["b"]
    with pytest.raises(RecordNotFound):
        repo.get(a.id)


def test_set_user_roles_and_role_tree(repo, roles):
    user = _user(repo, "carol")
    parent = roles.create(Role(name="parent"))
    roles.create(Role(name="child", parent_id=parent.id))
    other = roles.create(Role(name="other"))

    repo.set_user_roles(user.id, [parent.id])
    tree = repo.get_roles_by_user(user.id)
    assert [r.name for r in tree] == ["parent"]
    assert [r.name for r in tree[0].children] == ["child"]

    repo.set_user_roles(user.id, [other.id])
    assert [r.name for r in repo.get_roles_by_user(user.id)] == ["other"]


def test_buttons_filtered_by_type_status_and_role(repo, roles, menus):
    user = _user(repo, "dave")
    outsider = _user(repo, "erin")
    page = menus.create(Menu(name="page", menu_type=1, status=1))
    b1 = menus.create(Menu(name="b1", parent_id=page.id, menu_type=2, status=1))
    b2 = menus.create(Menu(name="b2", parent_id=page.id, menu_type=2, status=0))
    menus.create(Menu(name="b3", parent_id=page.id, menu_type=2, status=1))
    role = roles.create(Role(name="viewer"))
    roles.set_role(role.id, [page.id, b1.id, b2.id])
    repo.set_user_roles(user.id, [role.id])

    assert [m.name for m in repo.get_buttons_by_user_id(user.id, page.id)] == ["b1"]
    assert repo.get_buttons_by_user_id(outsider.id, page.id) == []


def test_left_menus_form_tree(repo, roles, menus):
    user = _user(repo, "frank")
    top = menus.create(Menu(name="top", menu_type=1, status=1))
    sub = menus.create(Menu(name="sub", parent_id=top.id, menu_type=1, status=1))
    hidden = menus.create(Menu(name="hidden", menu_type=1, status=0))
    role = roles.create(Role(name="staff"))
    roles.set_role(role.id, [top.id, sub.id, hidden.id])
    repo.set_user_roles(user.id, [role.id])

    tree = repo.get_left_menus_by_user_id(user.id)
    assert [m.name for m in tree] == ["top"]
    assert [m.name for m in tree[0].children] == ["sub"]