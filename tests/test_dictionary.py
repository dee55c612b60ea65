# tests/test_dictionary.py
import json
import os
import pickle
import random
import threading

import pytest

from slangdict.dictionary import AddOption, AddResult, SlangDictionary
from slangdict.history import SearchKind
from slangdict.lexicon import LexicalStore
from slangdict.quiz import QuizMode
from slangdict.termio import load_terms


def defs(d, key):
    return d.store.find_by_key(key).definitions


# add policy ----------------------------------------------------------------


def test_add_new_word(dictionary):
    assert dictionary.add("Sus", "suspicious|shady\nuntrustworthy") is AddResult.ADDED
    assert defs(dictionary, "Sus") == ["suspicious", "shady", "untrustworthy"]
    assert [t.key for t in dictionary.search_by_definition("shady")] == ["Sus"]


@pytest.mark.parametrize("word,raw", [
    ("", "something"),
    ("   ", "something"),
    (None, "something"),
    ("NEW", ""),
    ("NEW", " | \n "),
    ("NEW", None),
])
def test_add_rejects_blank_input(dictionary, word, raw):
    assert dictionary.add(word, raw) is AddResult.FAILED
    assert dictionary.store.find_by_key("NEW") is None


@pytest.mark.parametrize("option", [None, AddOption.CANCEL, "CANCEL"])
def test_add_existing_without_overwrite_or_duplicate(dictionary, option):
    assert dictionary.add("LOL", "league of legends", option) is AddResult.EXISTS
    assert defs(dictionary, "LOL") == ["laugh out loud", "lots of love"]


def test_add_overwrite(dictionary):
    assert dictionary.add("lol", "league of legends", AddOption.OVERWRITE) is AddResult.OVERWRITTEN
    assert defs(dictionary, "LOL") == ["league of legends"]
    assert "lol" not in dictionary.store
    assert dictionary.search_by_definition("laugh") == []


def test_add_duplicate_appends_new_definitions(dictionary):
    result = dictionary.add("LOL", "lots of love|league of legends", "DUPLICATE")
    assert result is AddResult.DUPLICATED
    assert defs(dictionary, "LOL") == ["laugh out loud", "lots of love", "league of legends"]
    assert [t.key for t in dictionary.search_by_definition("legends")] == ["LOL"]


def test_add_unknown_option_raises(dictionary):
    with pytest.raises(ValueError):
        dictionary.add("LOL", "x", "MERGE")


# edit / delete -------------------------------------------------------------


def test_edit_definitions(dictionary):
    assert dictionary.edit("brb", "BRB", "be right there")
    assert defs(dictionary, "BRB") == ["be right there"]


def test_edit_rename(dictionary):
    assert dictionary.edit("BRB", "BRT", "be right there")
    assert dictionary.store.find_by_key("BRB") is None
    assert [t.key for t in dictionary.search_by_definition("there")] == ["BRT"]


def test_edit_rename_case_only(dictionary):
    assert dictionary.edit("Salty", "SALTY", "bitter or upset")
    assert dictionary.store.keys().count("SALTY") == 1
    assert "Salty" not in dictionary.store


@pytest.mark.parametrize("old,new,raw", [
    ("NOPE", "NOPE", "x"),
    ("BRB", "", "x"),
    ("BRB", None, "x"),
    (None, "BRB", "x"),
    ("BRB", "BRB", " | "),
    ("BRB", "AFK", "be right back"),
])
def test_edit_rejected(dictionary, old, new, raw):
    before = dictionary.all_terms()
    assert not dictionary.edit(old, new, raw)
    assert dictionary.all_terms() == before


def test_delete(dictionary):
    assert dictionary.delete("goat")
    assert dictionary.store.find_by_key("GOAT") is None
    assert not dictionary.delete("GOAT")
    assert not dictionary.delete("")
    assert not dictionary.delete(None)


# search and history ----------------------------------------------------------


def test_search_by_word_records_history(dictionary):
    assert dictionary.search_by_word(" afk ").key == "AFK"
    assert dictionary.search_by_word("nope") is None
    assert dictionary.search_by_word("   ") is None
    entries = dictionary.get_history()
    assert [(e.query, e.kind, e.result_keys) for e in entries] == [
        ("nope", SearchKind.BY_WORD, ()),
        ("afk", SearchKind.BY_WORD, ("AFK",)),
    ]


def test_search_by_definition_records_history(dictionary):
    found = dictionary.search_by_definition("of")
    assert [t.key for t in found] == ["GOAT", "LOL"]
    assert dictionary.search_by_definition("") == []
    (entry,) = dictionary.get_history()
    assert entry.kind is SearchKind.BY_DEFINITION
    assert entry.result_keys == ("GOAT", "LOL")


def test_history_survives_later_edits(dictionary):
    dictionary.search_by_definition("laugh")
    dictionary.delete("LOL")
    assert dictionary.get_history()[0].result_keys == ("LOL",)


def test_combined_search(dictionary):
    dictionary.add("Love", "strong affection")
    results = dictionary.search("love")
    assert [t.key for t in results] == ["Love", "LOL"]


def test_history_delete_and_clear(dictionary):
    for q in ["LOL", "BRB", "AFK"]:
        dictionary.search_by_word(q)
    assert dictionary.delete_history(1)
    assert [e.query for e in dictionary.get_history()] == ["AFK", "LOL"]
    assert not dictionary.delete_history(9)
    dictionary.clear_history()
    assert dictionary.get_history() == ()


def test_random(dictionary):
    assert dictionary.random().key in dictionary.store
    assert SlangDictionary(store=LexicalStore(), term_path=None, index_path=None,
                           history_path=None).random() is None


# backup / reset --------------------------------------------------------------


def test_backup_and_reset(dictionary):
    dictionary.backup()
    dictionary.add("Sus", "suspicious")
    dictionary.delete("LOL")
    dictionary.reset()
    assert dictionary.store.find_by_key("Sus") is None
    assert [t.key for t in dictionary.search_by_definition("laugh")] == ["LOL"]
    assert ("LOL", ["laugh out loud", "lots of love"]) in load_terms(dictionary.term_path)


def test_lol_scenario(tmp_path):
    d = SlangDictionary(term_path=str(tmp_path / "slang.txt"),
                        index_path=str(tmp_path / "def_index.pkl"),
                        history_path=str(tmp_path / "history.json"))
    d.load()
    assert d.add("LOL", "laugh out loud|lots of love") is AddResult.ADDED
    d.backup()
    assert [t.key for t in d.search_by_definition("laugh")] == ["LOL"]
    assert d.delete("LOL")
    assert d.search_by_definition("laugh") == []
    d.reset()
    assert [t.key for t in d.search_by_definition("laugh")] == ["LOL"]


# persistence -----------------------------------------------------------------


def test_mutations_are_saved(dictionary, tmp_path):
    dictionary.add("Sus", "suspicious")
    records = dict(load_terms(dictionary.term_path))
    assert records["Sus"] == ["suspicious"]
    assert records["LOL"] == ["laugh out loud", "lots of love"]
    assert os.path.exists(dictionary.index_path)


def test_load_round_trip(dictionary, tmp_path):
    dictionary.add("Sus", "suspicious")
    dictionary.search_by_definition("laugh")

    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    assert fresh.load() == 7
    assert fresh.store.index == dictionary.store.index
    assert [t.key for t in fresh.search_by_definition("suspic")] == ["Sus"]
    assert [e.query for e in fresh.get_history()] == ["suspic", "laugh"]


def test_load_rebuilds_index_after_term_file_edit(dictionary):
    dictionary.save()
    with open(dictionary.term_path, "a", encoding="utf-8") as f:
        f.write("NGL`not gonna lie\n")
    later = os.path.getmtime(dictionary.index_path) + 10
    os.utime(dictionary.term_path, (later, later))

    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    fresh.load()
    assert [t.key for t in fresh.search_by_definition("gonna")] == ["NGL"]
    assert fresh.store.index.is_consistent_with(fresh.store.terms)


def test_load_missing_files_starts_empty(tmp_path):
    d = SlangDictionary(term_path=str(tmp_path / "none.txt"),
                        index_path=str(tmp_path / "none.pkl"),
                        history_path=str(tmp_path / "none.json"))
    assert d.load() == 0
    assert len(d) == 0
    assert d.get_history() == ()


def test_load_ignores_corrupt_history(dictionary):
    with open(dictionary.history_path, "w", encoding="utf-8") as f:
        f.write("{not json")
    dictionary.save()
    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    assert fresh.load() == 6
    assert fresh.get_history() == ()


def test_save_failure_keeps_memory_change(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("", encoding="utf-8")
    d = SlangDictionary(term_path=str(blocker / "slang.txt"),
                        index_path=str(blocker / "def_index.pkl"),
                        history_path=str(blocker / "history.json"))
    assert d.add("Sus", "suspicious") is AddResult.ADDED
    assert d.search_by_word("sus").key == "Sus"
    assert d.save() is False


def test_autosave_off_writes_nothing(tmp_path):
    d = SlangDictionary(term_path=str(tmp_path / "slang.txt"),
                        index_path=str(tmp_path / "def_index.pkl"),
                        history_path=str(tmp_path / "history.json"),
                        autosave=False)
    d.add("Sus", "suspicious")
    d.search_by_word("sus")
    assert not os.listdir(tmp_path)
    assert d.save()
    assert load_terms(d.term_path) == [("Sus", ["suspicious"])]


# quiz ------------------------------------------------------------------------


def test_quiz_question_and_check(dictionary):
    q = dictionary.quiz_question(QuizMode.WORD_TO_DEFINITION, rng=random.Random(3))
    assert q.answer in q.options
    assert dictionary.check_answer(q.key, QuizMode.WORD_TO_DEFINITION, q.answer)
    assert not dictionary.check_answer("NOPE", QuizMode.WORD_TO_DEFINITION, q.answer)

    q = dictionary.quiz_question("DEFINITION_TO_WORD", rng=random.Random(3))
    assert dictionary.check_answer(q.key, "DEFINITION_TO_WORD", q.key)
    wrong = next(o for o in q.options if o != q.key)
    assert not dictionary.check_answer(q.key, "DEFINITION_TO_WORD", wrong)


# concurrency -----------------------------------------------------------------


def test_concurrent_operations_keep_index_consistent(tmp_path):
    d = SlangDictionary(term_path=str(tmp_path / "slang.txt"),
                        index_path=str(tmp_path / "def_index.pkl"),
                        history_path=str(tmp_path / "history.json"),
                        autosave=False)
    d.backup()
    errors = []

    def worker(n):
        try:
            for i in range(50):
                key = f"W{n}-{i % 7}"
                d.add(key, f"word {n} number {i}", AddOption.OVERWRITE)
                d.search_by_definition("number")
                if i % 5 == 0:
                    d.delete(key)
                if i % 17 == 0:
                    d.backup()
        except Exception as e:  # noqa: BLE001
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(6)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert d.store.index.is_consistent_with(d.store.terms)
    d.reset()
    assert d.store.index.is_consistent_with(d.store.terms)


# words the term file cannot hold -----------------------------------------------


@pytest.mark.parametrize("word", ["a`b", "two\nlines", "cr\rword"])
def test_add_rejects_unstorable_word(dictionary, word):
    assert dictionary.add(word, "something") is AddResult.FAILED
    assert word.strip() not in dictionary.store


@pytest.mark.parametrize("word", ["a`b", "two\nlines"])
def test_edit_rejects_unstorable_word(dictionary, word):
    assert not dictionary.edit("BRB", word, "be right back")
    assert "BRB" in dictionary.store


def test_rejected_word_does_not_block_later_saves(tmp_path):
    d = SlangDictionary(term_path=str(tmp_path / "slang.txt"),
                        index_path=str(tmp_path / "def_index.pkl"),
                        history_path=str(tmp_path / "history.json"))
    assert d.add("ok", "fine") is AddResult.ADDED
    assert d.add("a`b", "broken") is AddResult.FAILED
    assert d.add("later", "after the bad one") is AddResult.ADDED

    fresh = SlangDictionary(term_path=d.term_path, index_path=d.index_path,
                            history_path=d.history_path)
    fresh.load()
    assert sorted(fresh.store.keys()) == ["later", "ok"]


# loading damaged or unusual files ------------------------------------------------


def test_saved_text_loads_back_unchanged(dictionary):
    raw = "cafÃ© menu|bell\x07sound|“quoted” ﬁne"
    assert dictionary.add("Odd", raw) is AddResult.ADDED

    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    fresh.load()
    assert fresh.store.find_by_key("Odd").definitions == ["cafÃ© menu", "bell\x07sound", "“quoted” ﬁne"]


def test_clean_on_load_repairs_imported_file(tmp_path):
    term_path = tmp_path / "import.txt"
    term_path.write_text("OK`âœ” No problems\n", encoding="utf-8")
    d = SlangDictionary(term_path=str(term_path), index_path=str(tmp_path / "def_index.pkl"),
                        history_path=str(tmp_path / "history.json"), clean_on_load=True)
    d.load()
    assert d.store.find_by_key("OK").definitions == ["✔ No problems"]


@pytest.mark.parametrize("index_data", [{"laugh": 5}, {"laugh": "LOL"}, {3: ["LOL"]}])
def test_load_survives_malformed_index(dictionary, index_data):
    dictionary.save()
    with open(dictionary.index_path, "wb") as f:
        pickle.dump(index_data, f)

    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    assert fresh.load() == 6
    assert [t.key for t in fresh.search_by_definition("laugh")] == ["LOL"]
    assert fresh.store.index.is_consistent_with(fresh.store.terms)


@pytest.mark.parametrize("records", [
    [{"query": "x", "kind": "BY_WORD", "result_keys": 5}],
    [{"query": "x"}],
    {"not": "a list"},
])
def test_load_survives_malformed_history(dictionary, records):
    dictionary.save()
    with open(dictionary.history_path, "w", encoding="utf-8") as f:
        json.dump(records, f)

    fresh = SlangDictionary(term_path=dictionary.term_path, index_path=dictionary.index_path,
                            history_path=dictionary.history_path)
    assert fresh.load() == 6
    assert fresh.get_history() == ()
