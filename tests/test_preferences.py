"""Tests for the key-value store and the services built on it."""

from unittest.mock import AsyncMock, patch

import pytest

from tuning_catalog.core.enums import Language
from tuning_catalog.services.preferences import (
    ImportHistory,
    InMemoryKeyValueStore,
    LanguagePreference,
    SupabaseKeyValueStore,
    create_store,
)


class TestInMemoryStore:
    async def test_get_set_delete(self):
        store = InMemoryKeyValueStore()
        assert await store.get("missing") is None
        await store.set("k", {"a": 1})
        assert await store.get("k") == {"a": 1}
        await store.delete("k")
        assert await store.get("k") is None

    async def test_values_are_copied(self):
        store = InMemoryKeyValueStore()
        value = {"items": [1]}
        await store.set("k", value)
        value["items"].append(2)
        fetched = await store.get("k")
        fetched["items"].append(3)
        assert await store.get("k") == {"items": [1]}

    async def test_delete_missing_key(self):
        await InMemoryKeyValueStore().delete("nothing")


class TestSupabaseStore:
    async def test_keys_are_namespaced(self):
        with patch("tuning_catalog.db.kv.kv_get", new=AsyncMock(return_value="en")) as get, \
                patch("tuning_catalog.db.kv.kv_set", new=AsyncMock()) as set_, \
                patch("tuning_catalog.db.kv.kv_delete", new=AsyncMock()) as delete:
            store = SupabaseKeyValueStore(namespace="prefs")
            assert await store.get("language:abc") == "en"
            await store.set("language:abc", "de")
            await store.delete("language:abc")

        get.assert_awaited_once_with("prefs:language:abc")
        set_.assert_awaited_once_with("prefs:language:abc", "de")
        delete.assert_awaited_once_with("prefs:language:abc")

    async def test_unavailable_table_falls_back_to_memory(self):
        failing = AsyncMock(side_effect=RuntimeError('relation "kv_store" does not exist'))
        with patch("tuning_catalog.db.kv.kv_get", new=failing), \
                patch("tuning_catalog.db.kv.kv_set", new=failing):
            store = create_store("supabase")
            preference = LanguagePreference(store)
            assert (await preference.get("abc")).value == "sv"
            await preference.set("abc", "en")
            assert (await preference.get("abc")).value == "en"

        assert store.unavailable
        failing.assert_awaited_once()

    async def test_without_fallback_errors_propagate(self):
        failing = AsyncMock(side_effect=RuntimeError("down"))
        with patch("tuning_catalog.db.kv.kv_get", new=failing):
            with pytest.raises(RuntimeError):
                await SupabaseKeyValueStore().get("k")

    def test_create_store(self):
        assert isinstance(create_store("memory"), InMemoryKeyValueStore)
        assert isinstance(create_store("supabase"), SupabaseKeyValueStore)


class TestImportHistory:
    async def test_newest_first(self):
        history = ImportHistory(InMemoryKeyValueStore())
        await history.record("compare", {"missing": 3})
        await history.record("import", {"created": 2})
        entries = await history.entries()
        assert [e["kind"] for e in entries] == ["import", "compare"]
        assert entries[0]["created"] == 2
        assert "timestamp" in entries[0]

    async def test_bounded(self):
        history = ImportHistory(InMemoryKeyValueStore(), max_entries=3)
        for n in range(5):
            await history.record("import", {"n": n})
        assert [e["n"] for e in await history.entries()] == [4, 3, 2]

    async def test_clear(self):
        history = ImportHistory(InMemoryKeyValueStore())
        await history.record("import", {})
        await history.clear()
        assert await history.entries() == []

    async def test_unexpected_stored_value(self):
        store = InMemoryKeyValueStore()
        await store.set(ImportHistory.KEY, "corrupt")
        assert await ImportHistory(store).entries() == []


class TestLanguagePreference:
    async def test_default_is_swedish(self):
        prefs = LanguagePreference(InMemoryKeyValueStore())
        assert await prefs.get("client-1") is Language.SV

    async def test_set_and_get(self):
        prefs = LanguagePreference(InMemoryKeyValueStore())
        assert await prefs.set("client-1", " EN ") is Language.EN
        assert await prefs.get("client-1") is Language.EN
        assert await prefs.get("client-2") is Language.SV

    async def test_unsupported_language(self):
        prefs = LanguagePreference(InMemoryKeyValueStore())
        with pytest.raises(ValueError):
            await prefs.set("client-1", "fr")
