import json

from stairup.services.token_store import FileTokenStore, InMemoryTokenStore, build_token_store


def test_invalidate_clears_only_the_rejected_token():
    store = InMemoryTokenStore("old")

    assert store.invalidate("old") is True
    assert store.invalidate("old") is False
    assert store.is_authenticated() is False


def test_invalidate_keeps_a_newer_token():
    store = InMemoryTokenStore("old")
    store.set("new")

    assert store.invalidate("old") is False
    assert store.get() == "new"


def test_file_store_persists_and_removes_token(tmp_path):
    path = tmp_path / "auth" / "token.json"
    store = FileTokenStore(path)
    assert store.get() is None

    store.set("abc")
    assert json.loads(path.read_text()) == {"auth_token": "abc"}
    assert FileTokenStore(path).get() == "abc"

    store.clear()
    assert not path.exists()
    assert store.is_authenticated() is False


def test_build_token_store_picks_backend(tmp_path):
    assert isinstance(build_token_store(None), InMemoryTokenStore)
    assert isinstance(build_token_store(str(tmp_path / "t.json")), FileTokenStore)
