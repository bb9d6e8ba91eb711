import threading

from pixiu.clients import ClientRegistry


def test_get_missing_returns_none():
    registry = ClientRegistry()
    assert registry.get("absent") is None


def test_add_then_get():
    registry = ClientRegistry()
    client = object()
    registry.add("prod", client)
    assert registry.get("prod") is client
    assert "prod" in registry
    assert len(registry) == 1


def test_update_replaces_client():
    registry = ClientRegistry()
    first, second = object(), object()
    registry.add("prod", first)
    registry.update("prod", second)
    assert registry.get("prod") is second
    assert len(registry) == 1


def test_delete_removes_and_ignores_missing():
    registry = ClientRegistry()
    registry.add("prod", object())
    registry.delete("prod")
    registry.delete("never-there")
    assert registry.get("prod") is None
    assert len(registry) == 0


def test_iteration_lists_keys():
    registry = ClientRegistry()
    registry.add("a", 1)
    registry.add("b", 2)
    assert sorted(registry) == ["a", "b"]


def test_concurrent_adds_are_all_kept():
    registry = ClientRegistry()

    def worker(start):
        for number in range(start, start + 100):
            registry.add(f"c{number}", number)

    threads = [threading.Thread(target=worker, args=(n * 100,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert len(registry) == 400
    assert registry.get("c399") == 399