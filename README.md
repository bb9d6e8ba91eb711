# pixiu

Service layer for a Kubernetes administration platform. It covers
registering clusters ("clouds"), managing CI/CD jobs on a Jenkins-style
server, menus, roles, and role-based access policies. Records are stored
with SQLAlchemy 2. Cluster kubeconfig data is stored AES-encrypted.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `pixiu.cipher`: `encrypt(data)` turns bytes or text into base64 AES-128-CBC
  ciphertext. `decrypt(text)` turns that text back into bytes. Malformed input
  raises `ValueError`.
- `pixiu.lru`: `LRUCache(capacity)` is a thread-safe least-recently-used cache
  with `add`, `get`, `in` and `len()`. A capacity of zero or less raises
  `ValueError`.
- `pixiu.util`:
  - `parse_int64` returns 0 for an empty string. It raises `ValueError` on bad
    syntax or on a value outside the signed 64-bit range.
  - `is_directory_exists`, `is_file_exists` and `ensure_directory_exists` check
    for and create paths.
- `pixiu.log`:
  - `register(log_type, log_dir, log_level)` replaces the module-level
    `logger` and `access_log`.
  - `log_type` may be `"stdout"` (the default for any other value), `"stderr"`
    or `"file"`.
  - With `"file"`, output goes to `pixiu.log` and `access.log` in `log_dir`.
    These files rotate at 500 MB, keep 3 backups, and have backups older than
    7 days pruned.
  - `log_level` may be `"warn"` or `"error"`. Anything else means `info`.
  - `new_logger(LogConfig(...))` builds a single logger.
  - `ConsoleFormatter` writes tab-separated time, level, caller and message.
- `pixiu.errors`:
  - The errors are `RecordNotFound`, `RecordNotUpdated` (a version conflict on
    update) and `ClientNotFound`.
  - `is_not_found` and `is_not_update` check these errors and their chained
    causes.
- `pixiu.templates`: `render_job_config(style, git)` renders the job XML from a
  `GitSource` (git URL, credentials id, branch, script path). A style of
  `"PipLineStyle"` gives a pipeline job. Any other style gives a free-style
  job.
- `pixiu.db.models`:
  - The tables are `Cloud`, `User`, `Menu`, `RoleMenu`, `Role`, `Rule` and
    `UserRole`, all on the declarative `Base`.
  - `init_db(engine)` creates them.
  - `Menu` and `Role` carry an in-memory `children` list that is used for
    trees.
- `pixiu.db.cloud`, `pixiu.db.menu`, `pixiu.db.role`, `pixiu.db.user` hold the
  repositories `CloudRepository`, `MenuRepository`, `RoleRepository` and
  `UserRepository`.
  - Each takes a session factory.
  - Menu and role updates use optimistic locking on `resource_version`. User
    updates do the same.
  - `build_menu_tree` and `build_role_tree` arrange rows by `parent_id`.
- `pixiu.db.authentication`:
  - `Enforcer` keeps `p` (permission) and `g` (role) rules in the `rules`
    table.
  - A request `(sub, obj, act)` is allowed when one of the subject's roles
    holds a permission whose path matches by `key_match2` and whose method
    matches by `regex_match`.
  - `AuthenticationRepository` maps user, role and menu ids onto those rules.
  - `init_policy_enforcer(session_factory)` creates, loads and records the
    shared enforcer.
- `pixiu.db.factory`: `DaoFactory(session_factory, enforcer)` hands out every
  repository. If no enforcer is given, it uses the one set by
  `init_policy_enforcer`.
- `pixiu.core.menu`, `pixiu.core.role`, `pixiu.core.policy` hold
  `MenuService`, `RoleService` and `PolicyService`. These log errors, re-raise
  them, and keep access rules in step with menus and roles.
  - Deleting a menu removes its rules.
  - `RoleService.set_role` grants the rules. It removes them again if storing
    the menu links fails.
- `pixiu.clients`: `ClientRegistry` is a thread-safe map of cloud name to
  cluster client.
- `pixiu.kubernetes.nodes`:
  - `node_to_summary(node)` turns a node in the cluster API's JSON shape into a
    `NodeSummary`. The summary holds name, Ready status, roles, creation time,
    kubelet version, internal IP, OS image, kernel version and container
    runtime.
  - `NodeService` reads nodes through a client.
- `pixiu.core.cloud`: `CloudService` works with `CloudSpec`, `CloudView` and
  `PageOptions`.
  - `create` validates a `CloudSpec`, builds a client from the kubeconfig, and
    lists the nodes. It then records the cluster with its version and node
    count, and registers the client.
  - `list` returns every cluster, or a page as `{"data": [...], "total": n}`.
  - `load` rebuilds clients from the stored clusters.
  - `nodes(cloud)` returns a `NodeService`.
- `pixiu.core.cicd`: `CicdService(driver, poll_interval)` provides job, view and
  node operations. `run_job` polls until the build finishes. A `CicdJob` holds
  the name, style and `GitSource` of a job to create.
- `pixiu.core.app`:
  - `Pixiu(config, factory, cicd_driver, clients, client_builder)` hands out
    the services. Every `cloud()` call shares one `ClientRegistry`.
  - `setup(config, factory, cicd_driver)` creates the shared instance,
    `core_v1`.

## Example

```python
from pixiu.cipher import encrypt, decrypt
from pixiu.lru import LRUCache

token = encrypt(b"kubeconfig contents")
assert decrypt(token) == b"kubeconfig contents"

cache = LRUCache(2)
cache.add("a", 1)
cache.add("b", 2)
cache.add("c", 3)       # evicts "a"
assert "a" not in cache
assert cache.get("c") == 3
```

Setting up storage and the services:

```python
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from pixiu.core.role import RoleService
from pixiu.db.authentication import init_policy_enforcer
from pixiu.db.factory import DaoFactory
from pixiu.db.models import Role, init_db

engine = create_engine("sqlite://")
init_db(engine)
sessions = sessionmaker(engine)

factory = DaoFactory(sessions, init_policy_enforcer(sessions))
roles = RoleService(factory)
roles.create(Role(name="admin"))
print([role.name for role in roles.list()])
```

## What it does not do

This is a library only.

- It has no command-line program and no HTTP API or server.
- It has no configuration-file loading.
- It contains no Kubernetes or Jenkins client of its own:
  - `CloudService` and `Pixiu` need a `client_builder`. This is a callable that
    takes kubeconfig bytes and returns an object with `list_nodes()` and
    `get_node(name)`.
  - `CicdService` needs a driver object that talks to the automation server.
- `CloudService.update` accepts a request and changes nothing.
- Cluster resources other than nodes are not covered.