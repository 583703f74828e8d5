"""Unit tests for workdeck_planner.engine.token_store — Encrypted token persistence."""

import json

import pytest

from workdeck_planner.engine.token_store import TokenStore, mask_token


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "storage.json"


class TestTokenStore:

    def test_load_when_absent(self, store_path):
        assert TokenStore(store_path).load() is None

    def test_save_and_load_across_instances(self, store_path):
        TokenStore(store_path).save("  abc.def.ghi  ")
        assert TokenStore(store_path).load() == "abc.def.ghi"

    def test_value_encrypted_on_disk(self, store_path):
        TokenStore(store_path).save("plain-secret-token")
        raw = store_path.read_text(encoding="utf-8")
        assert "plain-secret-token" not in raw
        assert "workdeck_token" in json.loads(raw)

    def test_empty_token_rejected(self, store_path):
        with pytest.raises(ValueError):
            TokenStore(store_path).save("   ")

    def test_clear(self, store_path):
        store = TokenStore(store_path)
        store.save("token-1")
        assert store.clear() is True
        assert store.load() is None
        assert store.clear() is False

    def test_keys_are_independent(self, store_path):
        TokenStore(store_path, key="a").save("token-a")
        TokenStore(store_path, key="b").save("token-b")
        assert TokenStore(store_path, key="a").load() == "token-a"
        assert TokenStore(store_path, key="b").load() == "token-b"

    def test_other_secret_cannot_decrypt(self, store_path):
        TokenStore(store_path, secret_key="one").save("token-1")
        assert TokenStore(store_path, secret_key="two").load() is None

    def test_env_secret_takes_precedence(self, store_path, monkeypatch):
        monkeypatch.setenv("WORKDECK_SECRET_KEY", "from-env")
        TokenStore(store_path, secret_key="ignored").save("token-1")
        assert TokenStore(store_path, secret_key="other").load() == "token-1"

    def test_corrupted_file_ignored(self, store_path):
        store_path.write_text("{not json", encoding="utf-8")
        store = TokenStore(store_path)
        assert store.load() is None
        store.save("fresh")
        assert store.load() == "fresh"

    @pytest.mark.parametrize("value", [123, ["abc"], {"token": "abc"}, True])
    def test_non_string_value_ignored(self, store_path, value):
        store_path.write_text(json.dumps({"workdeck_token": value}), encoding="utf-8")
        store = TokenStore(store_path)
        assert store.load() is None
        store.save("fresh")
        assert store.load() == "fresh"


class TestMaskToken:

    def test_not_set(self):
        assert mask_token(None) == "(not set)"
        assert mask_token("") == "(not set)"

    def test_short_token_fully_masked(self):
        assert mask_token("abcd") == "****"

    def test_long_token(self):
        assert mask_token("abcdefghijkl") == "abcd…ijkl"
