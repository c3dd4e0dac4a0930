from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from translator.errors import PersistenceError
from translator.models import WhitelistEntry
from translator.storage.whitelist import WhitelistStore


def _write(path, document) -> None:
    path.write_text(json.dumps(document), encoding="utf-8")


class TestLoad:
    def test_load_valid_entries(self, tmp_path):
        path = tmp_path / "whitelist.json"
        _write(path, {"users": [
            {"id": 555, "target_lang": "FR", "service": "DeepL"},
            {"id": "777", "targetLanguage": "ru", "service": "chatgpt",
             "pronouns": "she/her", "comment": "Anna"},
        ]})

        entries = WhitelistStore(path).load()

        assert set(entries) == {555, 777}
        assert entries[555].service == "deepl"
        assert entries[555].pronouns == "none"
        assert entries[777].target_lang == "ru"
        assert entries[777].pronouns == "she/her"
        assert entries[777].comment == "Anna"

    @pytest.mark.parametrize("missing", ["id", "target_lang", "service"])
    def test_entries_missing_required_fields_are_dropped(self, tmp_path, missing):
        full = {"id": 1, "target_lang": "DE", "service": "deepl"}
        broken = {k: v for k, v in full.items() if k != missing}
        path = tmp_path / "whitelist.json"
        _write(path, {"users": [broken, {"id": 2, "target_lang": "EN", "service": "chatgpt"}]})

        entries = WhitelistStore(path).load()

        assert list(entries) == [2]

    def test_non_numeric_id_is_dropped(self, tmp_path):
        path = tmp_path / "whitelist.json"
        _write(path, {"users": [{"id": "abc", "target_lang": "DE", "service": "deepl"}]})
        assert WhitelistStore(path).load() == {}

    def test_missing_file_yields_empty(self, tmp_path):
        store = WhitelistStore(tmp_path / "nope.json")
        assert store.load() == {}
        assert len(store) == 0

    def test_malformed_json_yields_empty(self, tmp_path):
        path = tmp_path / "whitelist.json"
        path.write_text("{not json", encoding="utf-8")
        assert WhitelistStore(path).load() == {}

    def test_document_without_users_list_yields_empty(self, tmp_path):
        path = tmp_path / "whitelist.json"
        _write(path, {"users": {"id": 1}})
        assert WhitelistStore(path).load() == {}


class TestMutations:
    def test_upsert_replaces_existing_entry(self, tmp_path):
        store = WhitelistStore(tmp_path / "w.json")
        store.upsert(1, WhitelistEntry(target_lang="FR", service="deepl"))
        store.upsert(1, WhitelistEntry(target_lang="DE", service="chatgpt"))
        assert len(store) == 1
        assert store.get(1).target_lang == "DE"

    def test_remove(self, tmp_path):
        store = WhitelistStore(tmp_path / "w.json")
        store.upsert(1, WhitelistEntry(target_lang="FR", service="deepl"))
        assert store.remove(1) is True
        assert store.remove(1) is False
        assert store.get(1) is None

    def test_mutations_do_not_touch_disk(self, tmp_path):
        path = tmp_path / "w.json"
        store = WhitelistStore(path)
        store.upsert(1, WhitelistEntry(target_lang="FR", service="deepl"))
        assert not path.exists()


class TestSave:
    @pytest.mark.parametrize("entry", [
        WhitelistEntry(target_lang="FR", service="deepl"),
        WhitelistEntry(target_lang="pt-BR", service="chatgpt", pronouns="they/them",
                       comment="from the book club"),
    ])
    def test_save_then_load_reproduces_entry(self, tmp_path, entry):
        path = tmp_path / "w.json"
        store = WhitelistStore(path)
        store.upsert(555, entry)
        store.save()

        reloaded = WhitelistStore(path).load()

        assert reloaded == {555: entry}

    def test_save_writes_users_document(self, tmp_path):
        path = tmp_path / "w.json"
        store = WhitelistStore(path)
        store.upsert(9, WhitelistEntry(target_lang="ES", service="deepl"))
        store.save()

        document = json.loads(path.read_text(encoding="utf-8"))

        assert document == {"users": [{
            "id": 9, "target_lang": "ES", "service": "deepl",
            "pronouns": "none", "comment": "",
        }]}
        assert [p.name for p in tmp_path.iterdir()] == ["w.json"]

    def test_save_overwrites_prior_content(self, tmp_path):
        path = tmp_path / "w.json"
        _write(path, {"users": [{"id": 1, "target_lang": "FR", "service": "deepl"}]})
        store = WhitelistStore(path)
        store.load()
        store.remove(1)
        store.save()

        assert WhitelistStore(path).load() == {}

    def test_failed_save_raises_and_keeps_memory(self, tmp_path):
        path = tmp_path / "w.json"
        store = WhitelistStore(path)
        store.upsert(1, WhitelistEntry(target_lang="FR", service="deepl"))

        with patch("translator.storage.whitelist.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(PersistenceError):
                store.save()

        assert store.degraded is True
        assert store.get(1) is not None
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_successful_save_clears_degraded(self, tmp_path):
        store = WhitelistStore(tmp_path / "w.json")
        store.degraded = True
        store.save()
        assert store.degraded is False
